"""
Constantes e padrões regex para extração e normalização.
"""

import re
from typing import Final

# =============================================================================
# MOEDAS
# =============================================================================

# Marcadores em ordem de verificação (mais específicos primeiro).
# Comparação feita sobre o texto em maiúsculas.
CURRENCY_MARKERS: Final[list[tuple[str, str]]] = [
    ("R$", "BRL"),
    ("US $", "USD"),
    ("US$", "USD"),
    ("MX$", "MXN"),
    ("CLP$", "CLP"),
    ("COL$", "COP"),
    ("€", "EUR"),
    ("£", "GBP"),
    ("BRL", "BRL"),
    ("USD", "USD"),
    ("EUR", "EUR"),
    ("GBP", "GBP"),
]

FALLBACK_CURRENCY: Final[str] = "BRL"


# =============================================================================
# PADRÕES DE PREÇO
# =============================================================================

# Tudo que não é dígito ou separador
NON_PRICE_CHARS: Final[re.Pattern] = re.compile(r"[^\d.,]")

# Separador de faixa de preço: "R$ 10,00 - 20,00"
PRICE_RANGE_SEPARATOR: Final[re.Pattern] = re.compile(r"\s+[-~–]\s+")

# Ponto de milhar: seguido de exatamente três dígitos antes do próximo separador ou fim
THOUSANDS_DOT: Final[re.Pattern] = re.compile(r"\.(?=\d{3}(?:[.,]|$))")

# Símbolo de moeda seguido de dígitos, em qualquer posição de um texto curto
PRICE_TEXT_PATTERN: Final[re.Pattern] = re.compile(
    r"(?:R\$|US\s?\$|MX\$|€|£|\$)\s*\d[\d.,]*",
    re.IGNORECASE,
)


# =============================================================================
# JSONP E JSON EMBUTIDO
# =============================================================================

# Envelope JSONP ancorado na string inteira: callback({...}) ou callback({...});
JSONP_PATTERN: Final[re.Pattern] = re.compile(
    r"^[\w$.]+\s*\(\s*([\s\S]+)\s*\)\s*;?$",
)

# Padrões que localizam um objeto JSON logo após uma atribuição/chave conhecida.
# O grupo capturado começa no '{'; o parsing estrito consome só o primeiro objeto.
SCRIPT_JSON_PATTERNS: Final[list[re.Pattern]] = [
    # window.runParams = { data: {...} }
    re.compile(r"window\.runParams\s*=\s*\{\s*data\s*:\s*(\{[\s\S]*)"),
    # window.runParams = {...}
    re.compile(r"window\.runParams\s*=\s*(\{[\s\S]*)"),
    # window.__INIT_DATA__ = {...}
    re.compile(r"window\.__INIT_DATA__\s*=\s*(\{[\s\S]*)"),
    # "data": {"priceModule": ...} embutido em outro objeto
    re.compile(
        r"\"data\"\s*:\s*(\{\s*\"(?:actionModule|priceModule|titleModule|"
        r"priceComponent|productInfoComponent)\"[\s\S]*)"
    ),
]


# =============================================================================
# IMAGENS
# =============================================================================

# Sufixos de redimensionamento do CDN: foto.jpg_220x220.jpg, foto.jpg_.webp
IMAGE_RESIZE_SUFFIX: Final[re.Pattern] = re.compile(
    r"(\.(?:jpe?g|png|webp|gif))_[^/]*$",
    re.IGNORECASE,
)


# =============================================================================
# DIGITOS
# =============================================================================

DIGITS_PATTERN: Final[re.Pattern] = re.compile(r"\d[\d.,]*\+?")
