"""Shared utilities for larix.

This package provides the exception hierarchy, configuration objects,
performance metrics and logging helpers used across all layers.
"""

from .errors import (
    DepthLimitExceeded,
    IllFormedError,
    LarixError,
    MalformedSyntaxError,
    MismatchedEndTag,
    MissingEndTag,
    NonDecodable,
    SyntaxErrorKind,
    UnmatchedEndTag,
)
from .config import (
    ConfigError,
    ConfigValidationError,
    ParserConfig,
    TokenizationConfig,
    TreeConfig,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)
from .result import PerformanceMetrics

__all__ = [
    "DepthLimitExceeded",
    "IllFormedError",
    "LarixError",
    "MalformedSyntaxError",
    "MismatchedEndTag",
    "MissingEndTag",
    "NonDecodable",
    "SyntaxErrorKind",
    "UnmatchedEndTag",
    "ConfigError",
    "ConfigValidationError",
    "ParserConfig",
    "TokenizationConfig",
    "TreeConfig",
    "CorrelationLogger",
    "get_logger",
    "PerformanceMetrics",
]
