"""
ProductScraper: ponto de entrada de uma extração completa.
Coordena o navegador, o orquestrador de estratégias e a montagem do produto.
"""

import asyncio
from typing import Any, Callable, Optional, Union

from config.logging_config import LoggerMixin, request_context
from config.settings import Settings, get_settings
from alimonitor.core.exceptions import ValidationError
from alimonitor.core.models import Product
from alimonitor.core.types import CurrencyCode
from alimonitor.fetcher import PageFetcher
from alimonitor.pipeline.assembler import ProductAssembler
from alimonitor.pipeline.orchestrator import ExtractionOrchestrator


# Fábrica do colaborador de navegação (substituível em testes)
FetcherFactory = Callable[[Settings], Any]


class ProductScraper(LoggerMixin):
    """
    Serviço de extração de um produto por requisição.

    Responsabilidades:
    - Validar o ID do produto
    - Abrir a página pelo colaborador de navegação
    - Executar a cascata de estratégias
    - Montar o registro canônico
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        fetcher_factory: FetcherFactory = PageFetcher,
        orchestrator: Optional[ExtractionOrchestrator] = None,
        assembler: Optional[ProductAssembler] = None,
    ):
        self.settings = settings or get_settings()
        self.fetcher_factory = fetcher_factory
        self.orchestrator = orchestrator or ExtractionOrchestrator()
        self.assembler = assembler or ProductAssembler()

    async def scrape(
        self,
        product_id: Any,
        *,
        cancel_event: Optional[asyncio.Event] = None,
        default_currency: Optional[Union[CurrencyCode, str]] = None,
        timeout: Optional[float] = None,
    ) -> Product:
        """
        Extrai um produto pelo ID.

        Args:
            product_id: ID numérico do produto
            cancel_event: Sinal de cancelamento do chamador
            default_currency: Moeda de contexto (None = configuração)
            timeout: Prazo de espera pela captura (None = configuração)

        Returns:
            Product canônico

        Raises:
            ValidationError: Se o ID ou a moeda forem inválidos
            ExtractionExhaustedError: Se nenhuma estratégia produzir dados
            ExtractionCancelledError: Se o chamador cancelar
            FetchError: Se a página não puder ser carregada
        """
        product_id = self.validate_product_id(product_id)
        currency = self.resolve_default_currency(default_currency)
        capture_timeout = timeout if timeout is not None else self.settings.capture_timeout

        # product_id acompanha todos os logs desta requisição, inclusive os do orquestrador
        with request_context(product_id=product_id):
            log = self.log_operation("scrape")
            log.info("Iniciando extração", currency=currency.value, timeout=capture_timeout)

            async with self.fetcher_factory(self.settings) as fetcher:
                capture = await fetcher.open(product_id)
                result = await self.orchestrator.extract(
                    capture,
                    fetcher.snapshot,
                    timeout=capture_timeout,
                    default_currency=currency,
                    cancel_event=cancel_event,
                )

            product = self.assembler.assemble(result.draft, currency)

            log.info(
                "Produto extraído",
                stage=result.stage.value,
                title=product.title[:50],
                sale_price=str(product.sale_price.value) if product.sale_price else None,
                currency=product.currency_code.value,
            )

        return product

    def validate_product_id(self, product_id: Any) -> str:
        """Aceita apenas IDs numéricos; espaços nas pontas são ignorados."""
        text = str(product_id).strip() if product_id is not None else ""
        if not text or not text.isdigit():
            raise ValidationError(
                "ID do produto é obrigatório e deve ser numérico",
                field="product_id",
                value=product_id,
            )
        return text

    def resolve_default_currency(
        self,
        default_currency: Optional[Union[CurrencyCode, str]] = None,
    ) -> CurrencyCode:
        """Moeda de contexto: argumento explícito, senão a configuração."""
        if isinstance(default_currency, CurrencyCode):
            return default_currency

        raw = default_currency or self.settings.default_currency
        currency = CurrencyCode.parse(raw)
        if currency is None:
            raise ValidationError(
                "Moeda não suportada",
                field="currency",
                value=raw,
            )
        return currency
