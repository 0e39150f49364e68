"""
Módulo core: modelos de dados, exceções, tipos e constantes.
"""

from alimonitor.core.models import (
    Price,
    StoreInfo,
    ProductDraft,
    Product,
    CapturedResponse,
)
from alimonitor.core.exceptions import (
    AlimonitorError,
    FetchError,
    NetworkError,
    CollaboratorTimeoutError,
    ParseError,
    InsufficientDataError,
    ExtractionExhaustedError,
    ExtractionCancelledError,
    ValidationError,
)
from alimonitor.core.types import (
    CurrencyCode,
    DraftSource,
    ExtractionStage,
    OrchestratorState,
    ProductID,
)
from alimonitor.core.constants import (
    FALLBACK_CURRENCY,
    SCRIPT_JSON_PATTERNS,
)

__all__ = [
    # Models
    "Price",
    "StoreInfo",
    "ProductDraft",
    "Product",
    "CapturedResponse",
    # Exceptions
    "AlimonitorError",
    "FetchError",
    "NetworkError",
    "CollaboratorTimeoutError",
    "ParseError",
    "InsufficientDataError",
    "ExtractionExhaustedError",
    "ExtractionCancelledError",
    "ValidationError",
    # Types
    "CurrencyCode",
    "DraftSource",
    "ExtractionStage",
    "OrchestratorState",
    "ProductID",
    # Constants
    "FALLBACK_CURRENCY",
    "SCRIPT_JSON_PATTERNS",
]
