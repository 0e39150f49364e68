"""
Módulo de pipeline: parsing, normalização e orquestração das estratégias de extração.
"""

from alimonitor.pipeline.price_parser import PriceParser, parse_price
from alimonitor.pipeline.jsonp import unwrap
from alimonitor.pipeline.normalizers import CurrentShapeNormalizer, LegacyShapeNormalizer
from alimonitor.pipeline.document import DomQuery, HtmlDocument, PageSnapshot
from alimonitor.pipeline.dom_extractor import DomExtractor
from alimonitor.pipeline.script_extractor import ScriptJsonExtractor
from alimonitor.pipeline.capture import ResponseCapture
from alimonitor.pipeline.orchestrator import (
    ExtractionOrchestrator,
    ExtractionResult,
    StageAttempt,
)
from alimonitor.pipeline.assembler import ProductAssembler

__all__ = [
    "PriceParser",
    "parse_price",
    "unwrap",
    "CurrentShapeNormalizer",
    "LegacyShapeNormalizer",
    "DomQuery",
    "HtmlDocument",
    "PageSnapshot",
    "DomExtractor",
    "ScriptJsonExtractor",
    "ResponseCapture",
    "ExtractionOrchestrator",
    "ExtractionResult",
    "StageAttempt",
    "ProductAssembler",
]
