"""
Seletores CSS da página de produto.
Cada campo é uma cascata ordenada de grupos: do markup atual (mais específico)
para o mais genérico. Um grupo pode conter vários seletores separados por vírgula.
"""

from dataclasses import dataclass, field


SelectorCascade = tuple[str, ...]


@dataclass(frozen=True)
class ProductPageSelectors:
    """Cascatas de seletores para extração via DOM."""

    # Preço
    sale_price: SelectorCascade = ()
    original_price: SelectorCascade = ()

    # Dados do produto
    title: SelectorCascade = ()
    main_images: SelectorCascade = ()
    generic_images: SelectorCascade = ()
    rating: SelectorCascade = ()
    reviews: SelectorCascade = ()
    orders: SelectorCascade = ()

    # Loja
    store_name: SelectorCascade = ()
    store_logo: SelectorCascade = ()

    # Atributos lidos das imagens, em ordem de preferência
    image_attributes: tuple[str, ...] = field(
        default=("src", "data-src", "data-lazy-src"),
    )


# =============================================================================
# PÁGINA DE PRODUTO ALIEXPRESS
# =============================================================================

ALIEXPRESS_SELECTORS = ProductPageSelectors(
    sale_price=(
        "[class*='price-default--current--']",
        "[class*='price--currentPriceText--']",
        "[class*='price--current--'] span",
        ".product-price-current .product-price-value, .product-price-current",
        ".uniform-banner-box-price",
    ),
    original_price=(
        "[class*='price-default--original--']",
        "[class*='price--originalText--']",
        ".product-price-original .product-price-value, .product-price-del",
        "[class*='price--original'] span, [class*='--del--']",
        "del, s, strike",
    ),
    title=(
        "h1[data-pl='product-title']",
        "[class*='title--wrap--'] h1",
        ".product-title-text",
        "h1",
    ),
    main_images=(
        "[class*='slider--img--'] img, [class*='magnifier--image--']",
        ".images-view-item img, .magnifier-image",
    ),
    generic_images=(
        "img[src*='/kf/'], img[data-src*='/kf/']",
    ),
    rating=(
        "[class*='reviewer--rating--'] strong",
        ".overview-rating-average",
        "[class*='rating--wrap'] strong",
    ),
    reviews=(
        "[class*='reviewer--reviews--']",
        ".product-reviewer-reviews",
    ),
    orders=(
        "[class*='reviewer--sold--']",
        ".product-reviewer-sold",
    ),
    store_name=(
        "[class*='store-detail--storeName--']",
        "[class*='store-info--name--'] a, [class*='store-info--name--']",
        ".shop-name a, .store-name a",
    ),
    store_logo=(
        "[class*='store-detail--storeLogo--'] img, [class*='store-info--logo--'] img",
        ".store-logo img",
    ),
)


# Palavras que indicam selo de economia/desconto e não um preço
DISCOUNT_WORDS: tuple[str, ...] = (
    "desconto",
    "economize",
    "economia",
    "poupe",
    "off",
    "discount",
    "save",
    "saving",
)

# Tamanho máximo de um nó de texto considerado na varredura da página
PRICE_SCAN_MAX_LENGTH = 40
