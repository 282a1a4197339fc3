"""API layer for larix.

Level 1: ``parse``, ``parse_trimmed`` and ``stringify``.
Level 2: ``XMLParser`` configured with a ``ParserConfig``.
Integration: adapters for ElementTree and lxml.
"""

from .parser import ParseResult, XMLParser, parse, parse_trimmed
from .adapters import (
    ADAPTERS,
    AdapterMetadata,
    ConversionResult,
    ElementTreeAdapter,
    IntegrationAdapter,
    LxmlAdapter,
    get_adapter,
)
from larix.tree import stringify

__all__ = [
    "ParseResult",
    "XMLParser",
    "parse",
    "parse_trimmed",
    "stringify",
    "ADAPTERS",
    "AdapterMetadata",
    "ConversionResult",
    "ElementTreeAdapter",
    "IntegrationAdapter",
    "LxmlAdapter",
    "get_adapter",
]
