"""
Testes unitários para a configuração de logging.
"""

import structlog

from config.logging_config import LoggerMixin, request_context


class Component(LoggerMixin):
    pass


class TestRequestContext:
    """Testes para request_context."""

    def test_vincula_e_remove_contexto(self):
        with request_context(product_id="123"):
            assert structlog.contextvars.get_contextvars() == {"product_id": "123"}

        assert "product_id" not in structlog.contextvars.get_contextvars()

    def test_contexto_aninhado(self):
        with request_context(product_id="123"):
            with request_context(stage="dom"):
                assert structlog.contextvars.get_contextvars() == {
                    "product_id": "123",
                    "stage": "dom",
                }
            assert structlog.contextvars.get_contextvars() == {"product_id": "123"}


def test_logger_mixin_reutiliza_logger():
    component = Component()

    assert component.logger is component.logger
