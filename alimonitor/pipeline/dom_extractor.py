"""
Extração de dados do produto diretamente do DOM renderizado.
Usa cascatas de seletores (do markup atual para o mais genérico) e, para o
preço, uma varredura de texto da página como último recurso.
"""

from typing import Any, Optional

from config.logging_config import LoggerMixin
from config.selectors import (
    ALIEXPRESS_SELECTORS,
    DISCOUNT_WORDS,
    PRICE_SCAN_MAX_LENGTH,
    ProductPageSelectors,
    SelectorCascade,
)
from alimonitor.core.constants import DIGITS_PATTERN, PRICE_TEXT_PATTERN
from alimonitor.core.models import Price, ProductDraft
from alimonitor.core.types import CurrencyCode, DraftSource
from alimonitor.pipeline.document import DomQuery
from alimonitor.pipeline.normalizers import LegacyShapeNormalizer, to_int
from alimonitor.pipeline.price_parser import PriceParser


class DomExtractor(LoggerMixin):
    """
    Extrator baseado em seletores CSS.
    O estado global legado, quando presente, complementa o preço.
    """

    def __init__(
        self,
        selectors: ProductPageSelectors = ALIEXPRESS_SELECTORS,
        parser: Optional[PriceParser] = None,
        legacy_normalizer: Optional[LegacyShapeNormalizer] = None,
    ):
        self.selectors = selectors
        self.parser = parser or PriceParser()
        self.legacy_normalizer = legacy_normalizer or LegacyShapeNormalizer(self.parser)

    def extract(
        self,
        dom: Optional[DomQuery],
        global_state: Optional[dict[str, Any]] = None,
        default_currency: Optional[CurrencyCode] = None,
    ) -> Optional[ProductDraft]:
        """
        Monta um rascunho a partir do DOM.

        Args:
            dom: Acesso de leitura à página
            global_state: Estado global legado (opcional)
            default_currency: Moeda de contexto

        Returns:
            ProductDraft ou None se a página não trouxe nada aproveitável
        """
        if dom is None:
            return None

        draft = ProductDraft(source=DraftSource.DOM)

        sale_text = self._first_text(dom, self.selectors.sale_price)
        if sale_text is None:
            sale_text = self._scan_price_text(dom)

        original_text = self._first_text(dom, self.selectors.original_price)

        draft.sale_price = self._parse_price(sale_text, default_currency)
        draft.original_price = self._parse_price(original_text, default_currency)

        draft.title = self._first_text(dom, self.selectors.title)

        for cascade in (self.selectors.main_images, self.selectors.generic_images):
            self._collect_images(dom, cascade, draft)

        draft.rating = self._first_number(dom, self.selectors.rating)
        draft.total_reviews = to_int(self._first_number(dom, self.selectors.reviews))
        draft.orders = self._first_number(dom, self.selectors.orders)

        draft.store_name = self._first_text(dom, self.selectors.store_name)
        logos = self._first_attributes(dom, self.selectors.store_logo, "src", "data-src")
        draft.store_logo = logos[0] if logos else None

        if draft.sale_price is None and global_state:
            self._supplement_from_global_state(draft, global_state, default_currency)

        if not (draft.has_price or draft.title or draft.images):
            return None

        self.logger.debug(
            "DOM extraído",
            title=(draft.title or "")[:50],
            sale_price=sale_text,
            original_price=original_text,
            images=len(draft.images),
        )

        return draft

    def _first_text(self, dom: DomQuery, cascade: SelectorCascade) -> Optional[str]:
        """Primeiro texto não vazio do primeiro grupo que casar."""
        for group in cascade:
            texts = dom.select_texts(group)
            if texts:
                return texts[0]
        return None

    def _first_attributes(
        self,
        dom: DomQuery,
        cascade: SelectorCascade,
        *attributes: str,
    ) -> list[str]:
        for group in cascade:
            values = dom.select_attributes(group, *attributes)
            if values:
                return values
        return []

    def _first_number(self, dom: DomQuery, cascade: SelectorCascade) -> Optional[str]:
        """Primeiro trecho numérico ("4.8", "1.000+") do primeiro grupo que casar."""
        text = self._first_text(dom, cascade)
        if text is None:
            return None
        match = DIGITS_PATTERN.search(text)
        return match.group(0) if match else None

    def _scan_price_text(self, dom: DomQuery) -> Optional[str]:
        """Varre nós de texto curtos atrás de "símbolo + dígitos", ignorando selos de economia."""
        for text in dom.text_nodes(PRICE_SCAN_MAX_LENGTH):
            lowered = text.lower()
            if any(word in lowered for word in DISCOUNT_WORDS):
                continue
            if PRICE_TEXT_PATTERN.search(text):
                self.logger.debug("Preço encontrado por varredura", text=text)
                return text
        return None

    def _parse_price(
        self,
        text: Optional[str],
        default_currency: Optional[CurrencyCode],
    ) -> Optional[Price]:
        if not text:
            return None
        currency = self.parser.detect_currency(text) or default_currency
        return self.parser.parse_price(text, currency)

    def _collect_images(
        self,
        dom: DomQuery,
        cascade: SelectorCascade,
        draft: ProductDraft,
    ) -> None:
        for group in cascade:
            for url in dom.select_attributes(group, *self.selectors.image_attributes):
                draft.add_image(url)

    def _supplement_from_global_state(
        self,
        draft: ProductDraft,
        global_state: dict[str, Any],
        default_currency: Optional[CurrencyCode],
    ) -> None:
        """
        Usa o objeto de preço legado da página quando o DOM não trouxe preço de venda.
        Sem preço de venda legado, o preço original legado ocupa o seu lugar.
        """
        sale_price, original_price = self.legacy_normalizer.extract_prices(
            global_state, default_currency,
        )
        if sale_price is None and original_price is None:
            return

        draft.sale_price = sale_price or original_price
        if draft.original_price is None:
            draft.original_price = original_price

        self.logger.debug(
            "Preço complementado pelo estado global",
            sale_price=str(draft.sale_price.value),
        )
