"""
Desembrulhador de respostas JSONP/JSON.
A API interna responde tanto JSON puro quanto mtopjsonpN({...}).
"""

import json
from typing import Any

from alimonitor.core.constants import JSONP_PATTERN
from alimonitor.core.exceptions import ParseError


def unwrap(text: str) -> Any:
    """
    Remove o envelope de chamada de função (se houver) e faz parse do JSON.

    Args:
        text: Corpo da resposta (ex: 'mtopjsonp3({"data": ...})')

    Returns:
        Documento JSON decodificado

    Raises:
        ParseError: Se nem JSON puro nem JSONP forem reconhecidos
    """
    if not text or not isinstance(text, str):
        raise ParseError("Corpo vazio", field="body")

    trimmed = text.strip()

    match = JSONP_PATTERN.match(trimmed)
    payload = match.group(1) if match else trimmed

    try:
        return json.loads(payload)
    except json.JSONDecodeError as e:
        raise ParseError(
            "Corpo não é JSON nem JSONP válido",
            raw_data=trimmed,
            field="body",
            cause=e,
        ) from e


def has_result(payload: Any) -> bool:
    """Indica se o documento traz o bloco data.result da API de produto."""
    if not isinstance(payload, dict):
        return False
    data = payload.get("data")
    return isinstance(data, dict) and isinstance(data.get("result"), dict)
