"""
Tipos customizados e enumerações do sistema.
"""

from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional

from pydantic import Field, StringConstraints

from alimonitor.core.constants import CURRENCY_MARKERS


# ENUMERAÇÕES

class CurrencyCode(str, Enum):
    """Moedas suportadas."""

    BRL = "BRL"
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    MXN = "MXN"
    CLP = "CLP"
    COP = "COP"

    @classmethod
    def parse(cls, code: Optional[str]) -> Optional["CurrencyCode"]:
        """Converte um código explícito (ex: 'brl') para enum."""
        if not code or not isinstance(code, str):
            return None
        try:
            return cls(code.strip().upper())
        except ValueError:
            return None

    @classmethod
    def from_text(cls, text: Optional[str]) -> Optional["CurrencyCode"]:
        """
        Infere moeda a partir dos marcadores presentes no texto.
        '$' sozinho é ambíguo e não decide nada.
        """
        if not text:
            return None

        normalized = " ".join(text.split()).upper()

        for marker, code in CURRENCY_MARKERS:
            if marker in normalized:
                return cls(code)

        return None


class DraftSource(str, Enum):
    """Formato de origem de um rascunho de produto."""

    CURRENT_SHAPE = "current_shape"
    LEGACY_SHAPE = "legacy_shape"
    DOM = "dom"


class ExtractionStage(str, Enum):
    """Estratégias de extração, na ordem de prioridade."""

    API_RESULTS = "api_results"
    GLOBAL_STATE = "global_state"
    DOM = "dom"
    SCRIPTS = "scripts"


class OrchestratorState(str, Enum):
    """Estados do orquestrador de estratégias."""

    AWAITING_CAPTURE = "awaiting_capture"
    TRYING_API_RESULTS = "trying_api_results"
    TRYING_GLOBAL_STATE = "trying_global_state"
    TRYING_DOM = "trying_dom"
    TRYING_SCRIPTS = "trying_scripts"
    RESOLVED = "resolved"
    FAILED = "failed"

    @classmethod
    def for_stage(cls, stage: ExtractionStage) -> "OrchestratorState":
        """Estado correspondente a uma estratégia."""
        return cls(f"trying_{stage.value}")


# TIPOS ANOTADOS

# ID numérico do produto na loja
ProductID = Annotated[
    str,
    StringConstraints(
        pattern=r"^\d+$",
        strip_whitespace=True,
    ),
]

# Valor monetário (sempre não negativo)
Amount = Annotated[Decimal, Field(ge=0)]
