"""
Configurações globais do sistema usando Pydantic Settings.
Carrega variáveis de ambiente e define valores padrão.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configurações principais do sistema."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Ambiente
    env: Literal["development", "production", "testing"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_json: bool = False
    log_path: Optional[Path] = None

    # Loja (storefront brasileiro, preços em BRL com promoções)
    base_url: str = "https://pt.aliexpress.com"
    item_path_template: str = "/item/{product_id}.html"
    accept_language: str = "pt-BR,pt;q=0.9,en;q=0.8"
    default_currency: str = Field(default="BRL", min_length=3, max_length=3)

    # Captura da API interna
    capture_timeout: float = Field(default=15.0, ge=1, le=60)
    api_url_markers: list[str] = Field(
        default_factory=lambda: ["mtop.aliexpress", "pdp"],
    )
    min_api_body_length: int = Field(default=1000, ge=0)

    # Timeouts do navegador
    navigation_timeout: int = Field(default=60000, ge=10000, le=180000)

    # Retries de navegação
    max_retries: int = Field(default=3, ge=1, le=10)
    retry_delay: int = Field(default=2, ge=1, le=30)

    # User Agent
    user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/120.0.0.0 Safari/537.36"
        )
    )

    # Playwright
    headless: bool = True
    browser_executable_path: Optional[str] = None

    @field_validator("default_currency", mode="after")
    @classmethod
    def upper_currency(cls, v: str) -> str:
        """Normaliza o código de moeda para maiúsculas."""
        return v.upper()

    @field_validator("log_path", mode="after")
    @classmethod
    def ensure_path_exists(cls, v: Optional[Path]) -> Optional[Path]:
        """Garante que o diretório de logs exista."""
        if v is not None:
            v.mkdir(parents=True, exist_ok=True)
        return v

    def get_item_url(self, product_id: str) -> str:
        """Monta a URL da página do produto."""
        path = self.item_path_template.format(product_id=product_id)
        return f"{self.base_url.rstrip('/')}{path}"


@lru_cache
def get_settings() -> Settings:
    """
    Retorna instância singleton das configurações.
    Usa cache para evitar recarregar .env múltiplas vezes.
    """
    return Settings()
