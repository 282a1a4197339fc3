"""larix: a small document object model for XML-like markup.

Markup is tokenized, built into a tree of typed nodes that callers may
freely mutate, and serialized back to text.

Progressive API Disclosure:
- Level 1: Simple functions - parse(), parse_trimmed(), stringify()
- Level 2: Configured parser - XMLParser with ParserConfig
- Integration: ElementTree and lxml adapters in larix.api.adapters
"""

__version__ = "0.1.0"

from .api import ParseResult, XMLParser, parse, parse_trimmed
from .shared import (
    ConfigValidationError,
    DepthLimitExceeded,
    IllFormedError,
    LarixError,
    MalformedSyntaxError,
    MismatchedEndTag,
    MissingEndTag,
    NonDecodable,
    ParserConfig,
    SyntaxErrorKind,
    TokenizationConfig,
    TreeConfig,
    UnmatchedEndTag,
)
from .tree import (
    PI,
    CData,
    Comment,
    Decl,
    DocType,
    Element,
    Node,
    Text,
    new_element,
    stringify,
)

__all__ = [
    "__version__",

    # Level 1: simple functions
    "parse",
    "parse_trimmed",
    "stringify",

    # Level 2: configured parser
    "XMLParser",
    "ParseResult",
    "ParserConfig",
    "TokenizationConfig",
    "TreeConfig",

    # Node model
    "Node",
    "Element",
    "Text",
    "Comment",
    "DocType",
    "CData",
    "Decl",
    "PI",
    "new_element",

    # Errors
    "LarixError",
    "NonDecodable",
    "IllFormedError",
    "UnmatchedEndTag",
    "MismatchedEndTag",
    "MissingEndTag",
    "MalformedSyntaxError",
    "SyntaxErrorKind",
    "DepthLimitExceeded",
    "ConfigValidationError",
]
