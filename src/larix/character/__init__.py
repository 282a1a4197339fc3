"""Character layer: input normalization and UTF-8 decoding."""

from .encoding import (
    UTF8_BOM,
    InputType,
    NormalizedInput,
    decode,
    normalize_input,
)

__all__ = [
    "UTF8_BOM",
    "InputType",
    "NormalizedInput",
    "decode",
    "normalize_input",
]
