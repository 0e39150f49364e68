"""
Parser de preços em texto livre.
Converte strings como "R$ 1.234,56" ou "US $4.04" em valores Decimal.
A moeda não é decidida aqui: quem chama anexa a moeda pelo contexto.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from config.logging_config import LoggerMixin
from alimonitor.core.constants import (
    NON_PRICE_CHARS,
    PRICE_RANGE_SEPARATOR,
    PRICE_TEXT_PATTERN,
    THOUSANDS_DOT,
)
from alimonitor.core.models import Price
from alimonitor.core.types import CurrencyCode


class PriceParser(LoggerMixin):
    """
    Parser de preços com desambiguação de separador decimal.
    Texto sem número recuperável resulta em None, nunca em exceção.
    """

    def parse_amount(self, text: Any) -> Optional[Decimal]:
        """
        Extrai o valor numérico de um texto de preço.

        Args:
            text: Texto com preço (ex: "R$ 1.234,56", "US $4.04")

        Returns:
            Valor como Decimal ou None se não houver número
        """
        if not text or not isinstance(text, str):
            return None

        # Faixa de preço: usa o limite inferior
        candidate = PRICE_RANGE_SEPARATOR.split(text.strip(), maxsplit=1)[0]

        # Vários preços no mesmo texto ("R$ 22,64 R$ 45,29"): usa o primeiro
        matches = PRICE_TEXT_PATTERN.findall(candidate)
        if len(matches) > 1:
            self.logger.debug("Texto com vários preços", price_raw=text, used=matches[0])
            candidate = matches[0]

        cleaned = NON_PRICE_CHARS.sub("", candidate).rstrip(".,")
        if not any(c.isdigit() for c in cleaned):
            return None

        normalized = self._normalize_separators(cleaned)

        try:
            return Decimal(normalized)
        except InvalidOperation:
            self.logger.debug(
                "Falha ao converter preço",
                price_raw=text,
                normalized=normalized,
            )
            return None

    def parse_price(
        self,
        text: Any,
        currency: Optional[CurrencyCode] = None,
    ) -> Optional[Price]:
        """
        Converte texto em Price, preservando o texto original.

        Args:
            text: Texto com preço
            currency: Moeda anexada pelo chamador (opcional)

        Returns:
            Price ou None se não houver número recuperável
        """
        value = self.parse_amount(text)
        if value is None:
            return None

        return Price(
            value=value,
            formatted_amount=text,
            currency=currency,
        )

    def detect_currency(self, text: Optional[str]) -> Optional[CurrencyCode]:
        """Infere moeda pelos marcadores do texto (R$, US $, €...)."""
        return CurrencyCode.from_text(text)

    def _normalize_separators(self, price_str: str) -> str:
        """
        Normaliza separadores para o formato decimal com ponto.

        Exemplos:
            "1.234,56" -> "1234.56"
            "22,64"    -> "22.64"
            "1,234.56" -> "1234.56"
            "4.04"     -> "4.04" (já no formato correto)
        """
        if "," not in price_str:
            if price_str.count(".") > 1:
                return THOUSANDS_DOT.sub("", price_str)
            return price_str

        # Vírgula antes do último ponto: vírgula é separador de milhar
        if price_str.rfind(".") > price_str.rfind(","):
            return price_str.replace(",", "")

        # Vírgula decimal: remove pontos de milhar, última vírgula vira ponto
        price_str = THOUSANDS_DOT.sub("", price_str)
        integer, _, decimals = price_str.rpartition(",")
        integer = integer.replace(",", "").replace(".", "") or "0"
        return f"{integer}.{decimals}"


_default_parser = PriceParser()


def parse_price(
    text: Any,
    currency: Optional[CurrencyCode] = None,
) -> Optional[Price]:
    """Atalho para PriceParser().parse_price."""
    return _default_parser.parse_price(text, currency)
