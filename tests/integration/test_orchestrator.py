"""
Testes de integração para o orquestrador de estratégias.
"""

import asyncio
from decimal import Decimal

import pytest

from alimonitor.core.exceptions import ExtractionCancelledError, ExtractionExhaustedError
from alimonitor.core.models import CapturedResponse
from alimonitor.core.types import (
    CurrencyCode,
    DraftSource,
    ExtractionStage,
    OrchestratorState,
)
from alimonitor.pipeline import (
    CurrentShapeNormalizer,
    ExtractionOrchestrator,
    PageSnapshot,
    ProductAssembler,
)

from fixtures.api_payloads import (
    API_URL,
    CURRENT_SHAPE_RESULT,
    CURRENT_SHAPE_TITLE_ONLY,
    LEGACY_MODULE_DATA,
    LEGACY_TITLE_ONLY,
    api_envelope,
    jsonp,
)
from fixtures.html_samples import (
    PRODUCT_PAGE_HTML,
    SCRIPT_PAGE_HTML,
    TITLE_ONLY_PAGE_HTML,
)


def response(body: str) -> CapturedResponse:
    return CapturedResponse(url=API_URL, body=body)


class TestCascade:
    """Ordem das estratégias e critério de suficiência."""

    def test_resultado_da_api_vence(self, orchestrator, api_response, product_page):
        result = orchestrator.run([api_response], product_page)

        assert result.stage == ExtractionStage.API_RESULTS
        assert result.draft.source == DraftSource.CURRENT_SHAPE
        assert result.draft.sale_price.value == Decimal("22.64")
        assert result.states == [
            OrchestratorState.TRYING_API_RESULTS,
            OrchestratorState.RESOLVED,
        ]

    def test_so_a_ultima_resposta_e_valida(self, orchestrator):
        """Respostas inválidas são puladas até a que normaliza."""
        responses = [
            response("não é json"),
            response('mtopjsonp1({"ret": ["FAIL_SYS_TOKEN_EXOIRED"]})'),
            response(jsonp(api_envelope(CURRENT_SHAPE_RESULT))),
        ]

        result = orchestrator.run(responses)

        assert result.stage == ExtractionStage.API_RESULTS
        assert result.draft.title == "Fone de Ouvido Bluetooth TWS"

    def test_primeira_suficiente_vence(self, orchestrator):
        responses = [
            response(jsonp({"data": LEGACY_MODULE_DATA})),
            response(jsonp(api_envelope(CURRENT_SHAPE_RESULT))),
        ]

        result = orchestrator.run(responses)

        assert result.draft.source == DraftSource.LEGACY_SHAPE
        assert result.draft.title == "Relógio Inteligente"

    def test_formato_atual_so_com_titulo_e_suficiente(self, orchestrator):
        result = orchestrator.run([response(jsonp(api_envelope(CURRENT_SHAPE_TITLE_ONLY)))])

        assert result.stage == ExtractionStage.API_RESULTS
        assert result.draft.title == "Produto sem preço"
        assert result.draft.has_price is False

    def test_formato_legado_so_com_titulo_nao_e_suficiente(self, orchestrator):
        snapshot = PageSnapshot.from_html(PRODUCT_PAGE_HTML)

        result = orchestrator.run([response(jsonp({"data": LEGACY_TITLE_ONLY}))], snapshot)

        assert result.stage == ExtractionStage.DOM

    def test_estado_global(self, orchestrator):
        snapshot = PageSnapshot.from_html(
            TITLE_ONLY_PAGE_HTML,
            global_state=dict(CURRENT_SHAPE_RESULT),
        )

        result = orchestrator.run([], snapshot)

        assert result.stage == ExtractionStage.GLOBAL_STATE
        assert result.draft.source == DraftSource.CURRENT_SHAPE

    def test_estado_global_legado(self, orchestrator):
        snapshot = PageSnapshot.from_html(TITLE_ONLY_PAGE_HTML, global_state=LEGACY_MODULE_DATA)

        result = orchestrator.run([], snapshot)

        assert result.stage == ExtractionStage.GLOBAL_STATE
        assert result.draft.source == DraftSource.LEGACY_SHAPE

    def test_dom(self, orchestrator, product_page):
        result = orchestrator.run([], product_page)

        assert result.stage == ExtractionStage.DOM
        assert result.draft.sale_price.value == Decimal("22.64")
        assert result.states == [
            OrchestratorState.TRYING_API_RESULTS,
            OrchestratorState.TRYING_GLOBAL_STATE,
            OrchestratorState.TRYING_DOM,
            OrchestratorState.RESOLVED,
        ]

    def test_scripts_como_ultimo_recurso(self, orchestrator):
        snapshot = PageSnapshot.from_html(SCRIPT_PAGE_HTML)

        result = orchestrator.run([], snapshot)

        assert result.stage == ExtractionStage.SCRIPTS
        assert result.draft.sale_price.value == Decimal("89.90")
        assert [a.accepted for a in result.attempts] == [False, False, False, True]

    def test_dom_so_com_titulo_esgota(self, orchestrator):
        """Sem captura, DOM só com título e sem estado global: falha única."""
        snapshot = PageSnapshot.from_html(TITLE_ONLY_PAGE_HTML)

        with pytest.raises(ExtractionExhaustedError) as exc_info:
            orchestrator.run([], snapshot)

        assert exc_info.value.stages == ["api_results", "global_state", "dom", "scripts"]

    def test_falha_unica_apesar_de_varios_erros(self, orchestrator):
        responses = [response("lixo"), response("cb(quebrado"), response("{}")]

        with pytest.raises(ExtractionExhaustedError) as exc_info:
            orchestrator.run(responses, PageSnapshot(scripts=["window.runParams = {x"]))

        assert "lixo" not in str(exc_info.value)
        assert exc_info.value.message.startswith("Não foi possível extrair os dados do produto")

    def test_imagem_invalida_nao_descarta_resposta(self, orchestrator, current_result):
        current_result["HEADER_IMAGE_PC"]["imagePathList"] = [
            "http://[broken/kf/a.jpg",
            "https://ae01.alicdn.com/kf/S1a.jpg",
        ]

        result = orchestrator.run([response(jsonp(api_envelope(current_result)))])

        assert result.stage == ExtractionStage.API_RESULTS
        assert result.draft.images == ["https://ae01.alicdn.com/kf/S1a.jpg"]

    def test_erro_em_uma_resposta_nao_interrompe_as_demais(self):
        """Exceção inesperada ao normalizar pula só aquela resposta."""

        class FlakyNormalizer(CurrentShapeNormalizer):
            def normalize(self, payload):
                if payload.get("quebrado"):
                    raise RuntimeError("falha inesperada")
                return super().normalize(payload)

        orchestrator = ExtractionOrchestrator(current_normalizer=FlakyNormalizer())
        responses = [
            response(jsonp({"quebrado": True})),
            response(jsonp(api_envelope(CURRENT_SHAPE_RESULT))),
        ]

        result = orchestrator.run(responses)

        assert result.stage == ExtractionStage.API_RESULTS
        assert result.draft.title == "Fone de Ouvido Bluetooth TWS"

    def test_dom_com_imagem_invalida(self, orchestrator):
        snapshot = PageSnapshot.from_html(
            "<span class='price-default--current--x'>R$ 22,64</span>"
            "<img src='http://[broken/kf/a.jpg'>"
        )

        result = orchestrator.run([], snapshot)

        assert result.stage == ExtractionStage.DOM
        assert result.draft.sale_price.value == Decimal("22.64")
        assert result.draft.images == []

    def test_sem_snapshot(self, orchestrator):
        with pytest.raises(ExtractionExhaustedError):
            orchestrator.run([])

    def test_cancelamento_antes_das_estrategias(self, orchestrator, api_response):
        cancel = asyncio.Event()
        cancel.set()

        with pytest.raises(ExtractionCancelledError):
            orchestrator.run([api_response], cancel_event=cancel)


class TestExtract:
    """Entrada assíncrona: espera da captura, snapshot e limpeza."""

    @pytest.mark.asyncio
    async def test_ponta_a_ponta_preco_relampago(self, orchestrator, capture):
        """Uma resposta JSONP com warmUpPrice 22.64 BRL gera o produto final."""
        capture.add(API_URL, jsonp(api_envelope(CURRENT_SHAPE_RESULT)))

        async def load_snapshot():
            return PageSnapshot()

        result = await orchestrator.extract(capture, load_snapshot, timeout=1)
        product = ProductAssembler().assemble(result.draft)

        assert product.sale_price.value == Decimal("22.64")
        assert product.currency_code == CurrencyCode.BRL
        assert product.to_response()["salePrice"]["value"] == 22.64

    @pytest.mark.asyncio
    async def test_timeout_equivale_a_captura_vazia(self, orchestrator, capture):
        """Prazo esgotado não é fatal: a cascata segue para o DOM."""
        capture.add(API_URL, jsonp({"data": LEGACY_MODULE_DATA}))

        async def load_snapshot():
            return PageSnapshot.from_html(PRODUCT_PAGE_HTML)

        result = await orchestrator.extract(capture, load_snapshot, timeout=0.05)

        assert result.stage == ExtractionStage.DOM
        assert len(capture) == 0

    @pytest.mark.asyncio
    async def test_captura_vazia_e_dom_so_com_titulo(self, orchestrator, capture):
        capture.close()

        async def load_snapshot():
            return PageSnapshot.from_html(TITLE_ONLY_PAGE_HTML)

        with pytest.raises(ExtractionExhaustedError):
            await orchestrator.extract(capture, load_snapshot, timeout=1)

    @pytest.mark.asyncio
    async def test_captura_limpa_apos_falha(self, orchestrator, capture):
        capture.add(API_URL, "lixo")
        capture.close()

        async def load_snapshot():
            return None

        with pytest.raises(ExtractionExhaustedError):
            await orchestrator.extract(capture, load_snapshot, timeout=1)

        assert capture.responses == []

    @pytest.mark.asyncio
    async def test_falha_no_snapshot_mantem_resposta_da_api(self, orchestrator, capture):
        capture.add(API_URL, jsonp(api_envelope(CURRENT_SHAPE_RESULT)))

        async def load_snapshot():
            raise RuntimeError("Execution context was destroyed")

        result = await orchestrator.extract(capture, load_snapshot, timeout=1)

        assert result.stage == ExtractionStage.API_RESULTS
        assert result.draft.sale_price.value == Decimal("22.64")

    @pytest.mark.asyncio
    async def test_falha_no_snapshot_sem_captura_esgota(self, orchestrator, capture):
        """O chamador vê só a falha única de extração, nunca o erro do colaborador."""
        capture.close()

        async def load_snapshot():
            raise RuntimeError("Execution context was destroyed")

        with pytest.raises(ExtractionExhaustedError):
            await orchestrator.extract(capture, load_snapshot, timeout=1)

    @pytest.mark.asyncio
    async def test_cancelamento_nao_le_snapshot(self, orchestrator, capture):
        cancel = asyncio.Event()
        cancel.set()
        calls = []

        async def load_snapshot():
            calls.append(True)
            return PageSnapshot()

        with pytest.raises(ExtractionCancelledError):
            await orchestrator.extract(capture, load_snapshot, timeout=1, cancel_event=cancel)

        assert calls == []

    @pytest.mark.asyncio
    async def test_moeda_de_contexto_chega_ao_normalizador_legado(self, orchestrator, capture):
        capture.add(API_URL, jsonp({"data": {"priceModule": {"formatedActivityPrice": "15,00"}}}))
        capture.close()

        async def load_snapshot():
            return PageSnapshot()

        result = await orchestrator.extract(
            capture,
            load_snapshot,
            timeout=1,
            default_currency=CurrencyCode.EUR,
        )

        assert result.draft.sale_price.currency == CurrencyCode.EUR
