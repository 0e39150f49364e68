"""
Normalizadores dos resultados da API e do estado global da página.
Dois formatos de origem, mapeados separadamente para ProductDraft:

- formato atual: blocos por seção (PRICE, PRODUCT_TITLE, GLOBAL_DATA...)
- formato legado: módulos com duas gerações de nomes (priceModule/priceComponent...)
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from config.logging_config import LoggerMixin
from alimonitor.core.models import Price, ProductDraft
from alimonitor.core.types import CurrencyCode, DraftSource
from alimonitor.pipeline.price_parser import PriceParser


FieldPath = tuple[str, ...]


# =============================================================================
# HELPERS
# =============================================================================

def dig(data: Any, path: FieldPath) -> Any:
    """Percorre mapeamentos aninhados; None se algum nível faltar."""
    current = data
    for key in path:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def is_present(value: Any) -> bool:
    """Valor não nulo e não vazio."""
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, dict)):
        return bool(value)
    return True


def first_present(data: Any, *paths: FieldPath) -> Any:
    """Primeiro valor presente entre os caminhos candidatos, na ordem dada."""
    for path in paths:
        value = dig(data, path)
        if is_present(value):
            return value
    return None


def to_text(value: Any) -> Optional[str]:
    """Converte número/texto em string limpa."""
    if not is_present(value) or isinstance(value, (dict, list, bool)):
        return None
    return str(value).strip()


def to_int(value: Any) -> Optional[int]:
    """Converte contagens ("1.234", 1234, "1,2 mil") em inteiro quando possível."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, float):
        return int(value) if value >= 0 else None
    if isinstance(value, str):
        digits = "".join(c for c in value if c.isdigit())
        return int(digits) if digits else None
    return None


class _PriceCoercion:
    """Conversão de campos de preço heterogêneos em Price."""

    def __init__(self, parser: Optional[PriceParser] = None):
        self.parser = parser or PriceParser()

    def coerce_price(
        self,
        raw: Any,
        currency: Optional[CurrencyCode] = None,
    ) -> Optional[Price]:
        """
        Converte um campo de preço em Price.

        Aceita:
            - objeto {"value", "formatedAmount", "currency"} (ou só "cent")
            - número (22.64)
            - texto formatado ("R$ 22,64")

        Args:
            raw: Valor do campo
            currency: Moeda de contexto quando a origem não traz nenhuma
        """
        if raw is None or isinstance(raw, bool):
            return None

        if isinstance(raw, dict):
            return self._coerce_price_object(raw, currency)

        if isinstance(raw, (int, float)):
            value = self._to_decimal(raw)
            if value is None:
                return None
            return Price(value=value, formatted_amount=str(raw), currency=currency)

        if isinstance(raw, str):
            detected = self.parser.detect_currency(raw)
            return self.parser.parse_price(raw, detected or currency)

        return None

    def _coerce_price_object(
        self,
        raw: dict,
        currency: Optional[CurrencyCode],
    ) -> Optional[Price]:
        formatted = raw.get("formatedAmount") or raw.get("formattedAmount") or ""
        if not isinstance(formatted, str):
            formatted = str(formatted)

        value = self._to_decimal(raw.get("value"))

        # Centavos como inteiro: {"cent": 2264} -> 22.64
        if value is None:
            cent = raw.get("cent")
            if isinstance(cent, int) and not isinstance(cent, bool) and cent >= 0:
                value = Decimal(cent) / 100

        if value is None:
            value = self.parser.parse_amount(formatted)

        if value is None:
            return None

        explicit = CurrencyCode.parse(raw.get("currency") or raw.get("currencyCode"))
        resolved = explicit or self.parser.detect_currency(formatted) or currency

        return Price(
            value=value,
            formatted_amount=formatted if formatted else str(value),
            currency=resolved,
        )

    def _to_decimal(self, value: Any) -> Optional[Decimal]:
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            result = Decimal(str(value))
        elif isinstance(value, str):
            try:
                result = Decimal(value.strip())
            except InvalidOperation:
                result = self.parser.parse_amount(value)
        else:
            return None

        if result is None or not result.is_finite() or result < 0:
            return None
        return result

    def first_price(
        self,
        data: Any,
        paths: tuple[FieldPath, ...],
        currency: Optional[CurrencyCode] = None,
    ) -> Optional[Price]:
        """Primeiro candidato que resulta em um Price válido, respeitando a ordem."""
        for path in paths:
            price = self.coerce_price(dig(data, path), currency)
            if price is not None:
                return price
        return None


# =============================================================================
# FORMATO ATUAL (API mtop pdp)
# =============================================================================

CURRENT_SECTIONS: tuple[str, ...] = (
    "PRICE",
    "PRODUCT_TITLE",
    "HEADER_IMAGE_PC",
    "PC_RATING",
    "GLOBAL_DATA",
    "SHOP_CARD_PC",
)

PRICE_INFO_PATH: FieldPath = ("PRICE", "targetSkuPriceInfo")
GLOBAL_DATA_PATH: FieldPath = ("GLOBAL_DATA", "globalData")

# Precedência promocional: relâmpago > venda direta > venda formatada > atividade
CURRENT_SALE_PRICE_PATHS: tuple[FieldPath, ...] = (
    ("warmUpPrice",),
    ("salePrice",),
    ("salePriceString",),
    ("discountPrice", "minActivityAmount"),
)

CURRENT_ORIGINAL_PRICE_PATHS: tuple[FieldPath, ...] = (
    ("originalPrice",),
    ("originalPriceRange", "minAmount"),
)


class CurrentShapeNormalizer(_PriceCoercion, LoggerMixin):
    """Mapeia o formato atual (data.result com seções) para ProductDraft."""

    def normalize(self, payload: Any) -> Optional[ProductDraft]:
        """
        Normaliza um documento do formato atual.

        Args:
            payload: Documento decodificado (envelope da API ou o próprio result)

        Returns:
            ProductDraft ou None se o documento não for deste formato
        """
        result = self._resolve_result(payload)
        if result is None:
            return None

        price_info = dig(result, PRICE_INFO_PATH) or {}
        global_data = dig(result, GLOBAL_DATA_PATH) or {}

        currency_code = CurrencyCode.parse(dig(global_data, ("currencyCode",)))

        draft = ProductDraft(
            source=DraftSource.CURRENT_SHAPE,
            currency_code=currency_code,
        )

        draft.sale_price = self.first_price(
            price_info, CURRENT_SALE_PRICE_PATHS, currency_code,
        )
        draft.original_price = self.first_price(
            price_info, CURRENT_ORIGINAL_PRICE_PATHS, currency_code,
        )

        draft.title = to_text(first_present(
            result,
            ("PRODUCT_TITLE", "text"),
            ("GLOBAL_DATA", "globalData", "subject"),
        ))
        draft.add_images(dig(result, ("HEADER_IMAGE_PC", "imagePathList")))

        draft.rating = to_text(dig(result, ("PC_RATING", "rating")))
        draft.total_reviews = to_int(dig(result, ("PC_RATING", "totalValidNum")))
        draft.orders = to_text(dig(global_data, ("sales",)))

        draft.store_name = to_text(first_present(
            result,
            ("SHOP_CARD_PC", "storeName"),
            ("GLOBAL_DATA", "globalData", "storeName"),
        ))
        draft.store_logo = to_text(dig(result, ("SHOP_CARD_PC", "logo")))

        self.logger.debug(
            "Formato atual normalizado",
            title=(draft.title or "")[:50],
            sale_price=str(draft.sale_price.value) if draft.sale_price else None,
            images=len(draft.images),
        )

        return draft

    def _resolve_result(self, payload: Any) -> Optional[dict]:
        if not isinstance(payload, dict):
            return None

        result = dig(payload, ("data", "result"))
        if isinstance(result, dict):
            return result

        if any(section in payload for section in CURRENT_SECTIONS):
            return payload

        return None


# =============================================================================
# FORMATO LEGADO (runParams / módulos)
# =============================================================================

# Chaves de módulo das duas gerações de nomes
LEGACY_MODULE_KEYS: tuple[str, ...] = (
    "priceModule",
    "titleModule",
    "imageModule",
    "storeModule",
    "priceComponent",
    "productInfoComponent",
    "imageComponent",
    "sellerComponent",
)

# Candidatos por campo: primeira geração antes da segunda
LEGACY_FIELDS: dict[str, tuple[FieldPath, ...]] = {
    "title": (
        ("titleModule", "subject"),
        ("productInfoComponent", "subject"),
    ),
    "sale_price": (
        ("priceModule", "formatedActivityPrice"),
        ("priceModule", "minActivityAmount"),
        ("priceComponent", "discountPrice", "minActivityAmount"),
        ("priceComponent", "formatedActivityPrice"),
    ),
    "original_price": (
        ("priceModule", "formatedPrice"),
        ("priceModule", "minAmount"),
        ("priceComponent", "origPrice", "minAmount"),
        ("priceComponent", "formatedPrice"),
    ),
    "images": (
        ("imageModule", "imagePathList"),
        ("imageComponent", "imagePathList"),
    ),
    "rating": (
        ("titleModule", "feedbackRating", "averageStar"),
        ("feedbackComponent", "evarageStar"),
        ("feedbackComponent", "averageStar"),
    ),
    "total_reviews": (
        ("titleModule", "feedbackRating", "totalValidNum"),
        ("feedbackComponent", "totalValidNum"),
    ),
    "orders": (
        ("titleModule", "tradeCount"),
        ("tradeComponent", "formatTradeCount"),
    ),
    "store_name": (
        ("storeModule", "storeName"),
        ("sellerComponent", "storeName"),
    ),
    "store_logo": (
        ("storeModule", "storeLogo"),
        ("sellerComponent", "storeLogo"),
    ),
    "currency": (
        ("webEnv", "currency"),
        ("currencyComponent", "currencyCode"),
    ),
}


class LegacyShapeNormalizer(_PriceCoercion, LoggerMixin):
    """
    Mapeia o formato legado para ProductDraft.
    Este formato é fonte de preço: sem preço de venda nem original, retorna None.
    """

    def normalize(
        self,
        payload: Any,
        default_currency: Optional[CurrencyCode] = None,
    ) -> Optional[ProductDraft]:
        """
        Normaliza um documento do formato legado.

        Args:
            payload: Documento decodificado
            default_currency: Moeda de contexto para preços sem moeda explícita

        Returns:
            ProductDraft ou None se não for deste formato ou não tiver preço
        """
        root = self._resolve_root(payload)
        if root is None:
            return None

        currency_code = CurrencyCode.parse(first_present(root, *LEGACY_FIELDS["currency"]))
        sale_price, original_price = self._extract_prices(
            root, currency_code or default_currency,
        )

        if sale_price is None and original_price is None:
            self.logger.debug(
                "Formato legado sem preço",
                title=to_text(first_present(root, *LEGACY_FIELDS["title"])),
            )
            return None

        draft = ProductDraft(
            source=DraftSource.LEGACY_SHAPE,
            currency_code=currency_code,
            sale_price=sale_price,
            original_price=original_price,
        )

        draft.title = to_text(first_present(root, *LEGACY_FIELDS["title"]))
        draft.add_images(first_present(root, *LEGACY_FIELDS["images"]))
        draft.rating = to_text(first_present(root, *LEGACY_FIELDS["rating"]))
        draft.total_reviews = to_int(first_present(root, *LEGACY_FIELDS["total_reviews"]))
        draft.orders = to_text(first_present(root, *LEGACY_FIELDS["orders"]))
        draft.store_name = to_text(first_present(root, *LEGACY_FIELDS["store_name"]))
        draft.store_logo = to_text(first_present(root, *LEGACY_FIELDS["store_logo"]))

        return draft

    def extract_prices(
        self,
        payload: Any,
        default_currency: Optional[CurrencyCode] = None,
    ) -> tuple[Optional[Price], Optional[Price]]:
        """
        Lê apenas os preços (venda, original) de um documento legado.
        Usado como complemento pela extração via DOM.
        """
        root = self._resolve_root(payload)
        if root is None:
            return None, None

        currency_code = CurrencyCode.parse(first_present(root, *LEGACY_FIELDS["currency"]))
        return self._extract_prices(root, currency_code or default_currency)

    def _extract_prices(
        self,
        root: dict,
        currency: Optional[CurrencyCode],
    ) -> tuple[Optional[Price], Optional[Price]]:
        sale_price = self.first_price(root, LEGACY_FIELDS["sale_price"], currency)
        original_price = self.first_price(root, LEGACY_FIELDS["original_price"], currency)
        return sale_price, original_price

    def _resolve_root(self, payload: Any) -> Optional[dict]:
        candidates = (
            payload,
            dig(payload, ("data",)),
            dig(payload, ("data", "result")),
            dig(payload, ("result",)),
        )
        for candidate in candidates:
            if isinstance(candidate, dict) and any(
                key in candidate for key in LEGACY_MODULE_KEYS
            ):
                return candidate
        return None
