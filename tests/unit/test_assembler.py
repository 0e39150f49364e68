"""
Testes unitários para a montagem do produto canônico.
"""

from decimal import Decimal

import pytest

from alimonitor.core.models import Price, ProductDraft
from alimonitor.core.types import CurrencyCode, DraftSource
from alimonitor.pipeline.assembler import ProductAssembler


def make_price(value: str, currency=None) -> Price:
    return Price(value=Decimal(value), formatted_amount=value, currency=currency)


class TestProductAssembler:
    """Testes para ProductAssembler."""

    @pytest.fixture
    def assembler(self) -> ProductAssembler:
        return ProductAssembler()

    def test_padroes_para_campos_ausentes(self, assembler):
        draft = ProductDraft(source=DraftSource.DOM, sale_price=make_price("10"))

        product = assembler.assemble(draft)

        assert product.title == ""
        assert product.images == ()
        assert product.rating == "0"
        assert product.orders == "0"
        assert product.total_reviews == 0
        assert product.store_info.name == ""
        assert product.store_info.logo == ""
        assert product.original_price is None

    def test_copia_campos_do_rascunho(self, assembler):
        draft = ProductDraft(
            source=DraftSource.CURRENT_SHAPE,
            title="Fone",
            sale_price=make_price("22.64", CurrencyCode.BRL),
            rating="4.8",
            total_reviews=10,
            orders="100+",
            store_name="Loja",
            store_logo="https://ae01.alicdn.com/store/logo.png",
        )
        draft.add_image("https://ae01.alicdn.com/kf/S1a.jpg")

        product = assembler.assemble(draft)

        assert product.title == "Fone"
        assert product.images == ("https://ae01.alicdn.com/kf/S1a.jpg",)
        assert product.rating == "4.8"
        assert product.total_reviews == 10
        assert product.orders == "100+"
        assert product.store_info.name == "Loja"
        assert product.store_info.logo == "https://ae01.alicdn.com/store/logo.png"

    # TESTES: precedência de moeda

    def test_moeda_do_preco_de_venda_primeiro(self, assembler):
        draft = ProductDraft(
            source=DraftSource.CURRENT_SHAPE,
            sale_price=make_price("4.04", CurrencyCode.USD),
            original_price=make_price("20", CurrencyCode.EUR),
            currency_code=CurrencyCode.BRL,
        )

        product = assembler.assemble(draft, CurrencyCode.GBP)

        assert product.currency_code == CurrencyCode.USD

    def test_moeda_do_preco_original(self, assembler):
        draft = ProductDraft(
            source=DraftSource.LEGACY_SHAPE,
            sale_price=make_price("10"),
            original_price=make_price("20", CurrencyCode.EUR),
        )

        product = assembler.assemble(draft, CurrencyCode.GBP)

        assert product.currency_code == CurrencyCode.EUR
        assert product.sale_price.currency == CurrencyCode.EUR

    def test_codigo_explicito_da_origem(self, assembler):
        draft = ProductDraft(
            source=DraftSource.CURRENT_SHAPE,
            sale_price=make_price("10"),
            currency_code=CurrencyCode.MXN,
        )

        product = assembler.assemble(draft, CurrencyCode.GBP)

        assert product.currency_code == CurrencyCode.MXN

    def test_moeda_de_contexto(self, assembler):
        draft = ProductDraft(source=DraftSource.DOM, sale_price=make_price("10"))

        assert assembler.assemble(draft, "usd").currency_code == CurrencyCode.USD

    def test_moeda_de_fallback(self, assembler):
        draft = ProductDraft(source=DraftSource.DOM, sale_price=make_price("10"))

        product = assembler.assemble(draft)

        assert product.currency_code == CurrencyCode.BRL
        assert product.sale_price.currency == CurrencyCode.BRL

    def test_precos_sem_moeda_recebem_a_resolvida(self, assembler):
        draft = ProductDraft(
            source=DraftSource.DOM,
            sale_price=make_price("10"),
            original_price=make_price("20"),
        )

        product = assembler.assemble(draft, CurrencyCode.EUR)

        assert product.sale_price.currency == CurrencyCode.EUR
        assert product.original_price.currency == CurrencyCode.EUR
        assert product.sale_price.formatted_amount == "10"

    def test_rascunho_nao_e_alterado(self, assembler):
        price = make_price("10")
        draft = ProductDraft(source=DraftSource.DOM, sale_price=price)

        assembler.assemble(draft, CurrencyCode.EUR)

        assert draft.sale_price.currency is None

    def test_fallback_configuravel(self):
        assembler = ProductAssembler(fallback_currency="USD")
        draft = ProductDraft(source=DraftSource.DOM, sale_price=make_price("10"))

        assert assembler.assemble(draft).currency_code == CurrencyCode.USD
