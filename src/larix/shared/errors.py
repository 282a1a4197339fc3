"""Exception hierarchy for larix.

Every recoverable failure of a parse is a ``LarixError``. Structural
problems in the token stream are ``IllFormedError`` subclasses that carry
the tag names involved, lexical problems are ``MalformedSyntaxError`` and
undecodable bytes surface as ``NonDecodable``.
"""

from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from larix.tokenization.tokenizer import TokenPosition


class LarixError(Exception):
    """Base class for all errors raised while parsing markup."""


class NonDecodable(LarixError):
    """A name, attribute value or payload is not valid UTF-8."""

    def __init__(self, cause: UnicodeDecodeError) -> None:
        super().__init__(f"Non-decodable content: {cause}")
        self.cause = cause


class IllFormedError(LarixError):
    """Base class for tag structure errors found while building the tree."""

    def __init__(
        self, message: str, position: Optional["TokenPosition"] = None
    ) -> None:
        super().__init__(message)
        self.position = position


class UnmatchedEndTag(IllFormedError):
    """Closing tag with no open element at its scope."""

    def __init__(self, name: str, position: Optional["TokenPosition"] = None) -> None:
        super().__init__(f"Close tag </{name}> does not match any open tag", position)
        self.name = name


class MismatchedEndTag(IllFormedError):
    """Closing tag whose name differs from the innermost open element."""

    def __init__(
        self,
        expected: str,
        found: str,
        position: Optional["TokenPosition"] = None,
    ) -> None:
        super().__init__(
            f"Expected close tag </{expected}>, found </{found}>", position
        )
        self.expected = expected
        self.found = found


class MissingEndTag(IllFormedError):
    """Element still open when the token stream ends."""

    def __init__(self, name: str, position: Optional["TokenPosition"] = None) -> None:
        super().__init__(f"Start tag <{name}> is never closed", position)
        self.name = name


class SyntaxErrorKind(Enum):
    """Lexical error categories reported by the tokenizer."""

    UNCLOSED_TAG = "unclosed tag"
    UNCLOSED_COMMENT = "unclosed comment"
    UNCLOSED_CDATA = "unclosed CDATA section"
    UNCLOSED_DOCTYPE = "unclosed DOCTYPE declaration"
    UNCLOSED_PI_OR_XML_DECL = "unclosed processing instruction or XML declaration"
    INVALID_BANG_MARKUP = "invalid markup after '<!'"
    EMPTY_DOCTYPE = "empty DOCTYPE declaration"
    INVALID_TAG_NAME = "missing or invalid tag name"
    INVALID_ATTRIBUTE_NAME = "missing attribute name"
    EXPECTED_EQ = "expected '=' after attribute name"
    UNQUOTED_VALUE = "attribute value must be quoted"


class MalformedSyntaxError(LarixError):
    """Markup that the tokenizer cannot split into tokens."""

    def __init__(self, kind: SyntaxErrorKind, position: "TokenPosition") -> None:
        super().__init__(
            f"Syntax error: {kind.value} at line {position.line}, "
            f"column {position.column}"
        )
        self.kind = kind
        self.position = position


class DepthLimitExceeded(LarixError):
    """Element nesting is deeper than the configured maximum."""

    def __init__(
        self, max_depth: int, position: Optional["TokenPosition"] = None
    ) -> None:
        super().__init__(f"Element nesting exceeds maximum depth of {max_depth}")
        self.max_depth = max_depth
        self.position = position
