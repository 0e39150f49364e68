"""
Configuração de logging estruturado usando structlog.
Logs vão para stderr: a saída padrão fica livre para o JSON da CLI.
"""

import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import structlog
from structlog.typing import Processor


LOG_FILE_NAME = "alimonitor.log"


def _level(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)


def _build_processors(json_format: bool) -> list[Processor]:
    """Cadeia de processadores: contexto da requisição, nível, timestamp e renderer."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer(ensure_ascii=False))
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=sys.stderr.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            )
        )
    return processors


def setup_logging(
    level: str = "INFO",
    log_path: Optional[Path] = None,
    json_format: bool = False,
) -> structlog.BoundLogger:
    """
    Configura structlog e o logging padrão.

    Args:
        level: Nível mínimo (DEBUG, INFO, WARNING, ERROR)
        log_path: Diretório opcional para o arquivo alimonitor.log
        json_format: JSON por linha (produção) em vez do console colorido

    Returns:
        Logger raiz já configurado
    """
    numeric_level = _level(level)

    structlog.configure(
        processors=_build_processors(json_format),
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    # Bibliotecas (playwright, asyncio) continuam no logging padrão
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=numeric_level)

    if log_path:
        log_path.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path / LOG_FILE_NAME, encoding="utf-8")
        file_handler.setLevel(numeric_level)
        logging.getLogger().addHandler(file_handler)

    return structlog.get_logger()


@contextmanager
def request_context(**context) -> Iterator[None]:
    """
    Vincula contexto (ex: product_id) a todos os logs emitidos dentro do bloco,
    inclusive os dos componentes chamados por ele.
    """
    with structlog.contextvars.bound_contextvars(**context):
        yield


def get_logger(name: str = "alimonitor", **context) -> structlog.BoundLogger:
    """Logger nomeado, com contexto opcional."""
    logger = structlog.get_logger(name)
    return logger.bind(**context) if context else logger


class LoggerMixin:
    """Mixin para adicionar logging a classes."""

    @property
    def logger(self) -> structlog.BoundLogger:
        """Logger com o nome da classe, criado no primeiro uso."""
        if not hasattr(self, "_logger"):
            self._logger = get_logger(self.__class__.__name__)
        return self._logger

    def log_operation(self, operation: str, **kwargs) -> structlog.BoundLogger:
        """Logger com a operação e o contexto informados."""
        return self.logger.bind(operation=operation, **kwargs)
