"""Tokenization layer for larix.

Key Components:
    XMLTokenizer: Splits UTF-8 markup into tokens
    Token: A single token with raw name or payload and position
    TokenType: Enumeration of all token types
    TokenPosition: Line, column and byte offset of a token
    TokenizationResult: Ordered token list with statistics
"""

from .tokenizer import (
    TAG_TOKEN_TYPES,
    XML_WHITESPACE,
    Token,
    TokenizationResult,
    TokenPosition,
    TokenType,
    XMLTokenizer,
)

__all__ = [
    "TAG_TOKEN_TYPES",
    "XML_WHITESPACE",
    "Token",
    "TokenizationResult",
    "TokenPosition",
    "TokenType",
    "XMLTokenizer",
]
