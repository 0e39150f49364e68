"""
Extração de JSON embutido em scripts inline.
Localiza um objeto JSON logo após atribuições conhecidas (window.runParams...)
e encaminha o resultado para o normalizador do formato legado.
"""

import json
from typing import Iterable, Optional

from config.logging_config import LoggerMixin
from alimonitor.core.constants import SCRIPT_JSON_PATTERNS
from alimonitor.core.exceptions import ParseError
from alimonitor.core.models import ProductDraft
from alimonitor.core.types import CurrencyCode
from alimonitor.pipeline.normalizers import LegacyShapeNormalizer


class ScriptJsonExtractor(LoggerMixin):
    """Varre scripts em ordem; o primeiro par script/padrão que normalizar vence."""

    def __init__(self, legacy_normalizer: Optional[LegacyShapeNormalizer] = None):
        self.legacy_normalizer = legacy_normalizer or LegacyShapeNormalizer()
        self._decoder = json.JSONDecoder()

    def extract(
        self,
        scripts: Iterable[str],
        default_currency: Optional[CurrencyCode] = None,
    ) -> Optional[ProductDraft]:
        """
        Procura o primeiro rascunho válido nos scripts.

        Args:
            scripts: Texto dos scripts inline, em ordem de documento
            default_currency: Moeda de contexto para o normalizador legado

        Returns:
            ProductDraft ou None se nenhum script trouxer dados
        """
        for index, script in enumerate(scripts):
            if not script:
                continue

            for pattern in SCRIPT_JSON_PATTERNS:
                match = pattern.search(script)
                if not match:
                    continue

                try:
                    payload = self.decode_object(match.group(1))
                except ParseError as e:
                    self.logger.debug(
                        "JSON inválido em script",
                        script_index=index,
                        pattern=pattern.pattern[:40],
                        error=e.message,
                    )
                    continue

                draft = self.legacy_normalizer.normalize(payload, default_currency)
                if draft is not None:
                    self.logger.debug(
                        "Rascunho extraído de script",
                        script_index=index,
                        pattern=pattern.pattern[:40],
                    )
                    return draft

        return None

    def decode_object(self, text: str) -> dict:
        """
        Decodifica estritamente o primeiro objeto JSON do texto.
        O restante do script após o objeto é ignorado.
        """
        try:
            payload, _ = self._decoder.raw_decode(text)
        except json.JSONDecodeError as e:
            raise ParseError(
                "Objeto JSON inválido no script",
                raw_data=text,
                field="script",
                cause=e,
            ) from e

        if not isinstance(payload, dict):
            raise ParseError(
                "JSON do script não é um objeto",
                raw_data=text,
                field="script",
            )
        return payload
