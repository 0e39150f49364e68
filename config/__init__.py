"""
Módulo de configuração do sistema.
Exporta as configurações principais para uso em todo o projeto.
"""

from config.settings import Settings, get_settings
from config.selectors import ProductPageSelectors, ALIEXPRESS_SELECTORS
from config.logging_config import setup_logging

__all__ = [
    "Settings",
    "get_settings",
    "ProductPageSelectors",
    "ALIEXPRESS_SELECTORS",
    "setup_logging",
]
