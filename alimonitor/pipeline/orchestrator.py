"""
Orquestrador das estratégias de extração.
Executa as estratégias em ordem fixa e aceita o primeiro rascunho suficiente:

    AWAITING_CAPTURE -> API_RESULTS -> GLOBAL_STATE -> DOM -> SCRIPTS
    -> RESOLVED | FAILED
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, Sequence

from config.logging_config import LoggerMixin
from alimonitor.core.exceptions import (
    CollaboratorTimeoutError,
    ExtractionCancelledError,
    ExtractionExhaustedError,
    InsufficientDataError,
    ParseError,
)
from alimonitor.core.models import CapturedResponse, ProductDraft
from alimonitor.core.types import (
    CurrencyCode,
    DraftSource,
    ExtractionStage,
    OrchestratorState,
)
from alimonitor.pipeline.capture import ResponseCapture
from alimonitor.pipeline.document import PageSnapshot
from alimonitor.pipeline.dom_extractor import DomExtractor
from alimonitor.pipeline.jsonp import unwrap
from alimonitor.pipeline.normalizers import CurrentShapeNormalizer, LegacyShapeNormalizer
from alimonitor.pipeline.price_parser import PriceParser
from alimonitor.pipeline.script_extractor import ScriptJsonExtractor


# Ordem de prioridade das estratégias
STAGE_ORDER: tuple[ExtractionStage, ...] = (
    ExtractionStage.API_RESULTS,
    ExtractionStage.GLOBAL_STATE,
    ExtractionStage.DOM,
    ExtractionStage.SCRIPTS,
)

# Critério de suficiência por formato de origem.
# Formato legado só é aceito com preço; o normalizador já descarta o resto.
SUFFICIENCY: dict[DraftSource, Callable[[ProductDraft], bool]] = {
    DraftSource.CURRENT_SHAPE: lambda draft: draft.has_price or bool(draft.title),
    DraftSource.LEGACY_SHAPE: lambda draft: draft.has_price,
    DraftSource.DOM: lambda draft: draft.sale_price is not None,
}


def is_sufficient(draft: Optional[ProductDraft]) -> bool:
    """Aplica o critério de suficiência do formato de origem do rascunho."""
    if draft is None:
        return False
    return SUFFICIENCY[draft.source](draft)


@dataclass
class StageAttempt:
    """Registro diagnóstico de uma estratégia tentada."""

    stage: ExtractionStage
    accepted: bool
    reason: Optional[str] = None


@dataclass
class ExtractionResult:
    """
    Resultado de uma extração bem-sucedida.
    stage e attempts servem só para diagnóstico, não entram na saída canônica.
    """

    draft: ProductDraft
    stage: ExtractionStage
    attempts: list[StageAttempt] = field(default_factory=list)
    states: list[OrchestratorState] = field(default_factory=list)


SnapshotLoader = Callable[[], Awaitable[Optional[PageSnapshot]]]


class ExtractionOrchestrator(LoggerMixin):
    """
    Máquina de estados das estratégias de extração.
    Não guarda estado entre chamadas: cada extração tem suas próprias respostas e rascunhos.
    """

    def __init__(
        self,
        parser: Optional[PriceParser] = None,
        current_normalizer: Optional[CurrentShapeNormalizer] = None,
        legacy_normalizer: Optional[LegacyShapeNormalizer] = None,
        dom_extractor: Optional[DomExtractor] = None,
        script_extractor: Optional[ScriptJsonExtractor] = None,
    ):
        self.parser = parser or PriceParser()
        self.current_normalizer = current_normalizer or CurrentShapeNormalizer(self.parser)
        self.legacy_normalizer = legacy_normalizer or LegacyShapeNormalizer(self.parser)
        self.dom_extractor = dom_extractor or DomExtractor(
            parser=self.parser,
            legacy_normalizer=self.legacy_normalizer,
        )
        self.script_extractor = script_extractor or ScriptJsonExtractor(self.legacy_normalizer)

    # =========================================================================
    # ENTRADA ASSÍNCRONA
    # =========================================================================

    async def extract(
        self,
        capture: ResponseCapture,
        load_snapshot: SnapshotLoader,
        *,
        timeout: float,
        default_currency: Optional[CurrencyCode] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ExtractionResult:
        """
        Aguarda a captura, lê o snapshot da página e executa a cascata.

        Args:
            capture: Respostas de rede desta requisição
            load_snapshot: Callback do colaborador que lê a página renderizada
            timeout: Prazo de espera pela captura (segundos)
            default_currency: Moeda de contexto
            cancel_event: Sinal de cancelamento do chamador

        Returns:
            ExtractionResult com o rascunho aceito

        Raises:
            ExtractionExhaustedError: Se nenhuma estratégia produzir dados
            ExtractionCancelledError: Se o chamador cancelar
        """
        log = self.log_operation("extract")
        log.debug("Transição de estado", state=OrchestratorState.AWAITING_CAPTURE.value)

        try:
            self._check_cancelled(cancel_event)

            try:
                responses = await capture.wait(timeout)
            except CollaboratorTimeoutError as e:
                # Prazo esgotado equivale a nenhuma resposta capturada
                log.info(
                    "Captura sem resposta completa no prazo",
                    timeout=timeout,
                    captured=len(capture),
                    error=e.message,
                )
                responses = []

            self._check_cancelled(cancel_event)
            snapshot = await self._load_snapshot(load_snapshot, log)

            return self.run(
                responses,
                snapshot,
                default_currency=default_currency,
                cancel_event=cancel_event,
            )
        finally:
            capture.clear()

    async def _load_snapshot(self, load_snapshot: SnapshotLoader, log) -> PageSnapshot:
        """Falha na leitura da página não descarta as respostas já capturadas."""
        try:
            snapshot = await load_snapshot()
        except Exception as e:
            log.warning("Falha ao ler a página renderizada", error=str(e))
            return PageSnapshot()
        return snapshot or PageSnapshot()

    # =========================================================================
    # CASCATA SÍNCRONA
    # =========================================================================

    def run(
        self,
        responses: Sequence[CapturedResponse],
        snapshot: Optional[PageSnapshot] = None,
        *,
        default_currency: Optional[CurrencyCode] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ExtractionResult:
        """
        Executa as estratégias em ordem sobre o material já capturado.

        Args:
            responses: Respostas de rede candidatas, em ordem de chegada
            snapshot: Leitura da página renderizada (DOM, scripts, estado global)
            default_currency: Moeda de contexto
            cancel_event: Sinal de cancelamento verificado entre estratégias

        Returns:
            ExtractionResult com o primeiro rascunho suficiente

        Raises:
            ExtractionExhaustedError: Se todas as estratégias falharem
            ExtractionCancelledError: Se o chamador cancelar
        """
        snapshot = snapshot or PageSnapshot()
        log = self.log_operation("run", responses=len(responses))

        attempts: list[StageAttempt] = []
        states: list[OrchestratorState] = []

        for stage in STAGE_ORDER:
            self._check_cancelled(cancel_event)

            state = OrchestratorState.for_stage(stage)
            states.append(state)
            log.debug("Transição de estado", state=state.value)

            try:
                draft = self._attempt(stage, responses, snapshot, default_currency)
            except InsufficientDataError as e:
                attempts.append(StageAttempt(stage=stage, accepted=False, reason=e.message))
                log.info("Estratégia sem dados suficientes", stage=stage.value, reason=e.message)
                continue
            except Exception as e:
                attempts.append(StageAttempt(stage=stage, accepted=False, reason=str(e)))
                log.warning("Erro na estratégia", stage=stage.value, error=str(e))
                continue

            attempts.append(StageAttempt(stage=stage, accepted=True))
            states.append(OrchestratorState.RESOLVED)

            log.info(
                "Extração resolvida",
                stage=stage.value,
                source=draft.source.value,
                title=(draft.title or "")[:50],
                has_price=draft.has_price,
            )

            return ExtractionResult(
                draft=draft,
                stage=stage,
                attempts=attempts,
                states=states,
            )

        log.warning(
            "Nenhuma estratégia produziu dados",
            state=OrchestratorState.FAILED.value,
            stages=[stage.value for stage in STAGE_ORDER],
        )
        raise ExtractionExhaustedError(stages=[stage.value for stage in STAGE_ORDER])

    def _attempt(
        self,
        stage: ExtractionStage,
        responses: Sequence[CapturedResponse],
        snapshot: PageSnapshot,
        default_currency: Optional[CurrencyCode],
    ) -> ProductDraft:
        """Executa uma estratégia; retorna rascunho suficiente ou levanta InsufficientDataError."""
        if stage is ExtractionStage.API_RESULTS:
            draft = self._try_api_results(responses, default_currency)
        elif stage is ExtractionStage.GLOBAL_STATE:
            draft = self._try_mapping(snapshot.global_state, default_currency)
        elif stage is ExtractionStage.DOM:
            draft = self.dom_extractor.extract(
                snapshot.dom, snapshot.global_state, default_currency,
            )
        else:
            draft = self.script_extractor.extract(snapshot.scripts, default_currency)

        if not is_sufficient(draft):
            raise InsufficientDataError(
                "Nenhum rascunho suficiente" if draft is None
                else f"Rascunho {draft.source.value} insuficiente",
                stage=stage.value,
            )
        return draft

    def _try_api_results(
        self,
        responses: Sequence[CapturedResponse],
        default_currency: Optional[CurrencyCode],
    ) -> Optional[ProductDraft]:
        """Percorre todas as respostas; a primeira que produzir rascunho suficiente vence."""
        for index, response in enumerate(responses):
            try:
                payload = unwrap(response.body)
            except ParseError as e:
                self.logger.debug(
                    "Resposta ignorada",
                    index=index,
                    url=response.url[:120],
                    error=e.message,
                )
                continue

            try:
                draft = self._try_mapping(payload, default_currency)
            except Exception as e:
                # Uma resposta malformada não encerra a varredura das demais
                self.logger.warning(
                    "Erro ao normalizar resposta",
                    index=index,
                    url=response.url[:120],
                    error=str(e),
                )
                continue

            if draft is not None:
                return draft

        return None

    def _try_mapping(
        self,
        payload: Any,
        default_currency: Optional[CurrencyCode],
    ) -> Optional[ProductDraft]:
        """Formato atual primeiro, legado depois."""
        if not payload:
            return None

        draft = self.current_normalizer.normalize(payload)
        if is_sufficient(draft):
            return draft

        draft = self.legacy_normalizer.normalize(payload, default_currency)
        if is_sufficient(draft):
            return draft

        return None

    def _check_cancelled(self, cancel_event: Optional[asyncio.Event]) -> None:
        if cancel_event is not None and cancel_event.is_set():
            self.logger.info("Extração cancelada pelo chamador")
            raise ExtractionCancelledError()
