"""
Coleção de respostas de rede capturadas durante o carregamento de uma página.
Pertence a uma única requisição; nunca é compartilhada entre extrações.
"""

import asyncio
from typing import Optional, Sequence

from config.logging_config import LoggerMixin
from alimonitor.core.exceptions import CollaboratorTimeoutError, ParseError
from alimonitor.core.models import CapturedResponse
from alimonitor.pipeline.jsonp import has_result, unwrap


class ResponseCapture(LoggerMixin):
    """
    Acumula respostas candidatas da API interna, em ordem de chegada.

    Fica pronta assim que uma resposta traz data.result ou quando o
    colaborador encerra a captura (close).
    """

    def __init__(
        self,
        url_markers: Sequence[str] = ("mtop.aliexpress", "pdp"),
        min_body_length: int = 1000,
    ):
        self.url_markers = tuple(url_markers)
        self.min_body_length = min_body_length
        self._responses: list[CapturedResponse] = []
        self._ready = asyncio.Event()

    @property
    def responses(self) -> list[CapturedResponse]:
        """Cópia das respostas capturadas, em ordem de chegada."""
        return list(self._responses)

    @property
    def is_ready(self) -> bool:
        return self._ready.is_set()

    def accepts_url(self, url: str) -> bool:
        """URL candidata: contém todos os marcadores configurados."""
        return bool(url) and all(marker in url for marker in self.url_markers)

    def add(self, url: str, body: Optional[str]) -> bool:
        """
        Registra uma resposta se for candidata.

        Returns:
            True se a resposta foi guardada
        """
        if not body or not self.accepts_url(url):
            return False
        if len(body) < self.min_body_length:
            return False

        self._responses.append(CapturedResponse(url=url, body=body))

        try:
            complete = has_result(unwrap(body))
        except ParseError:
            complete = False

        self.logger.debug(
            "Resposta capturada",
            url=url[:120],
            size=len(body),
            complete=complete,
        )

        if complete:
            self._ready.set()

        return True

    def close(self) -> None:
        """Sinaliza que o colaborador não produzirá mais respostas."""
        self._ready.set()

    async def wait(self, timeout: float) -> list[CapturedResponse]:
        """
        Aguarda a captura ficar pronta.

        Args:
            timeout: Prazo em segundos

        Returns:
            Respostas capturadas até o momento

        Raises:
            CollaboratorTimeoutError: Se o prazo esgotar antes de ficar pronta
        """
        try:
            await asyncio.wait_for(self._ready.wait(), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise CollaboratorTimeoutError(timeout=timeout, cause=e) from e
        return self.responses

    def clear(self) -> None:
        """Descarta as respostas capturadas."""
        self._responses.clear()

    def __len__(self) -> int:
        return len(self._responses)
