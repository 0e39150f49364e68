"""
Montagem do registro canônico de produto a partir de um rascunho aceito.
Transformação pura: sem rede, sem DOM.
"""

from typing import Optional, Union

from config.logging_config import LoggerMixin
from alimonitor.core.constants import FALLBACK_CURRENCY
from alimonitor.core.models import Price, Product, ProductDraft, StoreInfo
from alimonitor.core.types import CurrencyCode


class ProductAssembler(LoggerMixin):
    """Preenche padrões e resolve a moeda do produto final."""

    def __init__(self, fallback_currency: Union[CurrencyCode, str] = FALLBACK_CURRENCY):
        self.fallback_currency = CurrencyCode(fallback_currency)

    def assemble(
        self,
        draft: ProductDraft,
        default_currency: Optional[Union[CurrencyCode, str]] = None,
    ) -> Product:
        """
        Converte o rascunho no produto canônico.

        Args:
            draft: Rascunho aceito pelo orquestrador
            default_currency: Moeda de contexto do chamador (ex: storefront)

        Returns:
            Product imutável
        """
        currency = self.resolve_currency(draft, default_currency)

        product = Product(
            title=draft.title or "",
            images=tuple(draft.images),
            sale_price=self._with_currency(draft.sale_price, currency),
            original_price=self._with_currency(draft.original_price, currency),
            rating=draft.rating or "0",
            total_reviews=draft.total_reviews or 0,
            orders=draft.orders or "0",
            store_info=StoreInfo(
                name=draft.store_name or "",
                logo=draft.store_logo or "",
            ),
            currency_code=currency,
        )

        self.logger.debug(
            "Produto montado",
            source=draft.source.value,
            currency=currency.value,
            has_discount=product.has_discount,
        )

        return product

    def resolve_currency(
        self,
        draft: ProductDraft,
        default_currency: Optional[Union[CurrencyCode, str]] = None,
    ) -> CurrencyCode:
        """
        Precedência: moeda do preço de venda, do preço original, código explícito
        da origem, padrão do chamador e, por último, a moeda fixa de fallback.
        """
        for price in (draft.sale_price, draft.original_price):
            if price is not None and price.currency is not None:
                return price.currency

        if draft.currency_code is not None:
            return draft.currency_code

        if isinstance(default_currency, CurrencyCode):
            return default_currency

        return CurrencyCode.parse(default_currency) or self.fallback_currency

    def _with_currency(
        self,
        price: Optional[Price],
        currency: CurrencyCode,
    ) -> Optional[Price]:
        if price is None or price.currency is not None:
            return price
        return price.with_currency(currency)
