"""
Hierarquia de exceções do sistema.
Todas as exceções herdam de AlimonitorError para facilitar tratamento.
"""

from typing import Any, Optional, Sequence


class AlimonitorError(Exception):
    """
    Exceção base do sistema.
    Todas as exceções customizadas herdam desta classe.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        base = self.message
        if self.details:
            base += f" | Details: {self.details}"
        if self.cause:
            base += f" | Caused by: {self.cause}"
        return base

    def to_dict(self) -> dict[str, Any]:
        """Serializa exceção para dicionário."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "cause": str(self.cause) if self.cause else None,
        }


# EXCEÇÕES DO COLABORADOR (NAVEGADOR)

class FetchError(AlimonitorError):
    """Erro genérico ao carregar a página do produto."""

    def __init__(
        self,
        message: str,
        *,
        product_id: Optional[str] = None,
        url: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if product_id:
            details["product_id"] = product_id
        if url:
            details["url"] = url
        super().__init__(message, details=details, **kwargs)
        self.product_id = product_id
        self.url = url


class NetworkError(FetchError):
    """Erro de rede (timeout, conexão recusada, status HTTP de erro)."""

    def __init__(
        self,
        message: str = "Erro de conexão com o servidor",
        *,
        status_code: Optional[int] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if status_code:
            details["status_code"] = status_code
        super().__init__(message, details=details, **kwargs)
        self.status_code = status_code


class CollaboratorTimeoutError(AlimonitorError):
    """Prazo de espera pelas respostas capturadas esgotado."""

    def __init__(
        self,
        message: str = "Tempo de espera pela captura esgotado",
        *,
        timeout: Optional[float] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if timeout is not None:
            details["timeout_seconds"] = timeout
        super().__init__(message, details=details, **kwargs)
        self.timeout = timeout


# EXCEÇÕES DE PARSING E EXTRAÇÃO

class ParseError(AlimonitorError):
    """Texto JSON/JSONP malformado ou irreconhecível."""

    def __init__(
        self,
        message: str,
        *,
        raw_data: Optional[str] = None,
        field: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if field:
            details["field"] = field
        if raw_data:
            # Limita tamanho para não poluir logs
            details["raw_data"] = raw_data[:200] if len(raw_data) > 200 else raw_data
        super().__init__(message, details=details, **kwargs)


class InsufficientDataError(AlimonitorError):
    """Rascunho produzido por uma estratégia não passou no critério de suficiência."""

    def __init__(
        self,
        message: str = "Dados insuficientes",
        *,
        stage: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if stage:
            details["stage"] = stage
        super().__init__(message, details=details, **kwargs)
        self.stage = stage


class ExtractionExhaustedError(AlimonitorError):
    """Nenhuma estratégia produziu dados. Única falha visível ao chamador."""

    def __init__(
        self,
        message: str = (
            "Não foi possível extrair os dados do produto. "
            "Pode ser bloqueio anti-bot."
        ),
        *,
        stages: Optional[Sequence[str]] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if stages:
            details["stages_tried"] = list(stages)
        super().__init__(message, details=details, **kwargs)
        self.stages = list(stages or [])


class ExtractionCancelledError(AlimonitorError):
    """Extração abandonada por cancelamento do chamador."""

    def __init__(self, message: str = "Extração cancelada", **kwargs):
        super().__init__(message, **kwargs)


# EXCEÇÕES DE VALIDAÇÃO

class ValidationError(AlimonitorError):
    """Erro de validação de dados de entrada."""

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if field:
            details["field"] = field
        if value is not None:
            details["invalid_value"] = str(value)
        super().__init__(message, details=details, **kwargs)
