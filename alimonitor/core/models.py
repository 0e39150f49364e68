"""
Modelos de dados Pydantic para o sistema.
Define preço, rascunho de extração, produto canônico e respostas capturadas.
"""

from decimal import Decimal
from typing import Any, Optional
from urllib.parse import urlsplit, urlunsplit

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel

from alimonitor.core.constants import IMAGE_RESIZE_SUFFIX
from alimonitor.core.types import Amount, CurrencyCode, DraftSource


def normalize_image_url(url: str) -> Optional[str]:
    """
    Normaliza URL de imagem para deduplicação.
    Retorna None para URLs que não podem ser interpretadas (ex: host IPv6 quebrado).

    Exemplos:
        "//ae01.alicdn.com/kf/S1.jpg_220x220.jpg" -> "https://ae01.alicdn.com/kf/S1.jpg"
        "https://ae01.alicdn.com/kf/S1.jpg?x=1"   -> "https://ae01.alicdn.com/kf/S1.jpg"
    """
    url = url.strip()
    if url.startswith("//"):
        url = f"https:{url}"

    try:
        parts = urlsplit(url)
    except ValueError:
        return None

    path = IMAGE_RESIZE_SUFFIX.sub(r"\1", parts.path)
    return urlunsplit((parts.scheme, parts.netloc, path, "", ""))


class Price(BaseModel):
    """
    Preço com moeda.
    Imutável; formatted_amount guarda o texto original para auditoria.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    value: Amount
    formatted_amount: str = Field(..., description="Texto original do preço")
    currency: Optional[CurrencyCode] = None

    @field_serializer("value", when_used="json")
    def serialize_value(self, value: Decimal) -> float:
        return float(value)

    def with_currency(self, currency: CurrencyCode) -> "Price":
        """Retorna cópia com a moeda informada."""
        return self.model_copy(update={"currency": currency})


class StoreInfo(BaseModel):
    """Informações da loja vendedora."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    name: str = ""
    logo: str = ""


class ProductDraft(BaseModel):
    """
    Acumulador mutável produzido por exatamente uma estratégia.
    Pode estar incompleto; a suficiência é decidida pelo orquestrador.
    """

    source: DraftSource

    title: Optional[str] = None
    sale_price: Optional[Price] = None
    original_price: Optional[Price] = None
    images: list[str] = Field(default_factory=list)

    rating: Optional[str] = None
    total_reviews: Optional[int] = None
    orders: Optional[str] = None

    store_name: Optional[str] = None
    store_logo: Optional[str] = None

    # Código de moeda explícito vindo da origem (ex: campo da API)
    currency_code: Optional[CurrencyCode] = None

    @property
    def has_price(self) -> bool:
        """Indica se algum preço foi determinado."""
        return self.sale_price is not None or self.original_price is not None

    def add_image(self, url: Any) -> bool:
        """
        Adiciona imagem se ainda não presente (pela forma normalizada).

        Returns:
            True se a imagem foi adicionada
        """
        if not url or not isinstance(url, str) or url.strip().startswith("data:"):
            return False

        normalized = normalize_image_url(url)
        if not normalized or normalized in self.images:
            return False

        self.images.append(normalized)
        return True

    def add_images(self, urls: Any) -> None:
        """Adiciona várias imagens mantendo a ordem de primeira ocorrência."""
        if not isinstance(urls, (list, tuple)):
            return
        for url in urls:
            self.add_image(url)


class Product(BaseModel):
    """
    Registro canônico de produto.
    Construído uma única vez por requisição a partir de um rascunho aceito.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    title: str = ""
    images: tuple[str, ...] = ()
    sale_price: Optional[Price] = None
    original_price: Optional[Price] = None
    rating: str = "0"
    total_reviews: int = Field(default=0, ge=0)
    orders: str = "0"
    store_info: StoreInfo = Field(default_factory=StoreInfo)
    currency_code: CurrencyCode

    @property
    def has_discount(self) -> bool:
        """Indica se o preço de venda é menor que o original."""
        if self.sale_price is None or self.original_price is None:
            return False
        return self.sale_price.value < self.original_price.value

    def to_response(self) -> dict[str, Any]:
        """Serializa com os nomes de campo do contrato de saída."""
        return self.model_dump(mode="json", by_alias=True)


class CapturedResponse(BaseModel):
    """Corpo de resposta de rede interceptado durante o carregamento."""

    model_config = ConfigDict(frozen=True)

    url: str
    body: str
