"""
Configurações e fixtures compartilhadas para pytest.
"""

import copy
from typing import Any, Optional

import pytest
import structlog

from config.logging_config import setup_logging
from config.settings import Settings
from alimonitor.core.models import CapturedResponse
from alimonitor.pipeline import (
    ExtractionOrchestrator,
    PageSnapshot,
    PriceParser,
    ResponseCapture,
)

from fixtures.api_payloads import (
    API_URL,
    CURRENT_SHAPE_RESULT,
    LEGACY_COMPONENT_DATA,
    LEGACY_MODULE_DATA,
    api_envelope,
    jsonp,
)
from fixtures.html_samples import PRODUCT_PAGE_HTML


# CONFIGURAÇÃO DO LOGGING

@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    """Logs em stderr, só avisos, para não poluir a saída dos testes."""
    setup_logging(level="WARNING")


# FIXTURES DE CONFIGURAÇÃO

@pytest.fixture
def settings() -> Settings:
    """Configurações de teste (sem .env, prazos curtos)."""
    return Settings(
        _env_file=None,
        env="testing",
        capture_timeout=1,
        min_api_body_length=0,
    )


# FIXTURES DE COMPONENTES

@pytest.fixture
def parser() -> PriceParser:
    """Instância do parser de preços."""
    return PriceParser()


@pytest.fixture
def orchestrator() -> ExtractionOrchestrator:
    """Orquestrador com componentes padrão."""
    return ExtractionOrchestrator()


@pytest.fixture
def capture() -> ResponseCapture:
    """Captura sem limite de tamanho de corpo."""
    return ResponseCapture(min_body_length=0)


# FIXTURES DE PAYLOADS

@pytest.fixture
def current_result() -> dict[str, Any]:
    """Cópia do result no formato atual (pode ser alterada no teste)."""
    return copy.deepcopy(CURRENT_SHAPE_RESULT)


@pytest.fixture
def legacy_module_data() -> dict[str, Any]:
    return copy.deepcopy(LEGACY_MODULE_DATA)


@pytest.fixture
def legacy_component_data() -> dict[str, Any]:
    return copy.deepcopy(LEGACY_COMPONENT_DATA)


@pytest.fixture
def api_response() -> CapturedResponse:
    """Resposta JSONP da API com o result no formato atual."""
    return CapturedResponse(
        url=API_URL,
        body=jsonp(api_envelope(CURRENT_SHAPE_RESULT)),
    )


@pytest.fixture
def product_page() -> PageSnapshot:
    """Snapshot da página de produto completa."""
    return PageSnapshot.from_html(PRODUCT_PAGE_HTML)


# FAKE DO COLABORADOR DE NAVEGAÇÃO

class FakeFetcher:
    """
    Substitui o PageFetcher: entrega respostas e snapshot pré-definidos.
    """

    def __init__(
        self,
        settings: Settings,
        responses: Optional[list[tuple[str, str]]] = None,
        snapshot: Optional[PageSnapshot] = None,
        close_capture: bool = True,
    ):
        self.settings = settings
        self.responses = responses or []
        self._snapshot = snapshot or PageSnapshot()
        self.close_capture = close_capture
        self.opened: list[str] = []
        self.closed = False
        self.snapshot_calls = 0
        self.log_context: dict[str, Any] = {}

    async def __aenter__(self) -> "FakeFetcher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.closed = True

    async def open(self, product_id: str) -> ResponseCapture:
        self.opened.append(product_id)
        self.log_context = structlog.contextvars.get_contextvars()
        capture = ResponseCapture(
            url_markers=self.settings.api_url_markers,
            min_body_length=self.settings.min_api_body_length,
        )
        for url, body in self.responses:
            capture.add(url, body)
        if self.close_capture:
            capture.close()
        return capture

    async def snapshot(self) -> PageSnapshot:
        self.snapshot_calls += 1
        return self._snapshot


@pytest.fixture
def fake_fetcher_factory():
    """
    Fábrica de FakeFetcher; guarda a última instância criada em .last.
    """

    class Factory:
        def __init__(self):
            self.responses: list[tuple[str, str]] = []
            self.snapshot: Optional[PageSnapshot] = None
            self.close_capture = True
            self.last: Optional[FakeFetcher] = None

        def __call__(self, settings: Settings) -> FakeFetcher:
            self.last = FakeFetcher(
                settings,
                responses=self.responses,
                snapshot=self.snapshot,
                close_capture=self.close_capture,
            )
            return self.last

    return Factory()
