"""
Módulo de navegação: colaborador Playwright que carrega a página do produto.
"""

from alimonitor.fetcher.browser import PageFetcher

__all__ = [
    "PageFetcher",
]
