"""
Acesso somente leitura à página renderizada.
O núcleo consulta a página por um protocolo síncrono; a implementação padrão
trabalha sobre o HTML renderizado já capturado pelo navegador.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

from bs4 import BeautifulSoup


class DomQuery(Protocol):
    """Consultas de leitura sobre a página renderizada."""

    def select_texts(self, selector: str) -> list[str]:
        """Textos (limpos) dos elementos que casam com o seletor."""
        ...

    def select_attributes(self, selector: str, *attributes: str) -> list[str]:
        """Primeiro atributo presente de cada elemento, na ordem de preferência."""
        ...

    def text_nodes(self, max_length: int) -> list[str]:
        """Nós de texto curtos da página inteira, em ordem de documento."""
        ...


class HtmlDocument:
    """Implementação de DomQuery sobre HTML usando BeautifulSoup."""

    def __init__(self, html: str):
        self.soup = BeautifulSoup(html or "", "html.parser")

    def select_texts(self, selector: str) -> list[str]:
        texts = []
        for element in self.soup.select(selector):
            text = " ".join(element.get_text(" ", strip=True).split())
            if text:
                texts.append(text)
        return texts

    def select_attributes(self, selector: str, *attributes: str) -> list[str]:
        values = []
        for element in self.soup.select(selector):
            for attribute in attributes:
                value = element.get(attribute)
                if isinstance(value, list):
                    value = " ".join(value)
                if value and value.strip():
                    values.append(value.strip())
                    break
        return values

    def text_nodes(self, max_length: int) -> list[str]:
        nodes = []
        for string in self.soup.find_all(string=True):
            if string.parent is not None and string.parent.name in ("script", "style"):
                continue
            text = " ".join(string.split())
            if text and len(text) <= max_length:
                nodes.append(text)
        return nodes

    def script_texts(self) -> list[str]:
        """Conteúdo dos scripts inline (sem src)."""
        return [
            script.string or script.get_text()
            for script in self.soup.find_all("script")
            if not script.get("src")
        ]


@dataclass
class PageSnapshot:
    """
    Material lido da página após o carregamento.

    Attributes:
        dom: Acesso de leitura ao DOM renderizado
        scripts: Texto de todos os scripts inline
        global_state: Estado global legado (window.runParams.data), se exposto
    """

    dom: Optional[DomQuery] = None
    scripts: list[str] = field(default_factory=list)
    global_state: Optional[dict[str, Any]] = None

    @classmethod
    def from_html(
        cls,
        html: str,
        scripts: Optional[list[str]] = None,
        global_state: Optional[dict[str, Any]] = None,
    ) -> "PageSnapshot":
        """
        Monta o snapshot a partir do HTML renderizado.
        Sem lista de scripts explícita, usa os scripts inline do próprio HTML.
        """
        document = HtmlDocument(html)
        return cls(
            dom=document,
            scripts=list(scripts) if scripts is not None else document.script_texts(),
            global_state=global_state if isinstance(global_state, dict) else None,
        )
