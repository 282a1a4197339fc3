"""Byte-level XML tokenization.

This module splits UTF-8 markup into the flat token stream consumed by the
tree builder: start, end and empty tags, text runs, comments, CDATA
sections, DOCTYPE declarations, XML declarations and processing
instructions. Names and payloads are kept as raw bytes; decoding them is
the tree builder's job so that invalid UTF-8 aborts the build with
``NonDecodable``.
"""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, Iterator, List, Optional, Tuple

from larix.character import InputType, normalize_input
from larix.shared.errors import MalformedSyntaxError, SyntaxErrorKind
from larix.shared.logging import get_logger

XML_WHITESPACE = b" \t\r\n"

_WHITESPACE_BYTES = frozenset(XML_WHITESPACE)
_ATTR_NAME_TERMINATORS = frozenset(XML_WHITESPACE + b"=")
_QUOTES = frozenset(b"\"'")
_LT = ord("<")
_GT = ord(">")
_EQ = ord("=")

_COMMENT_OPEN = b"<!--"
_COMMENT_CLOSE = b"-->"
_CDATA_OPEN = b"<![CDATA["
_CDATA_CLOSE = b"]]>"
_DOCTYPE_KEYWORD = b"DOCTYPE"
_PI_CLOSE = b"?>"
_XML_DECL_TARGET = b"xml"


class TokenType(Enum):
    """Token types produced by the tokenizer."""

    START = auto()      # <name attr="v">
    END = auto()        # </name>
    EMPTY = auto()      # <name attr="v"/>
    TEXT = auto()       # Character data between markup
    COMMENT = auto()    # <!-- ... -->
    CDATA = auto()      # <![CDATA[ ... ]]>
    DOCTYPE = auto()    # <!DOCTYPE ...>
    DECL = auto()       # <?xml ...?>
    PI = auto()         # <?target ...?>


TAG_TOKEN_TYPES = frozenset({TokenType.START, TokenType.END, TokenType.EMPTY})


@dataclass
class TokenPosition:
    """Position of a token in the input.

    ``line`` and ``column`` are 1-based, ``offset`` is the 0-based byte offset.
    Columns count bytes from the start of the line.
    """

    line: int
    column: int
    offset: int

    def __post_init__(self) -> None:
        """Validate position values."""
        if self.line < 1:
            raise ValueError("Line number must be >= 1")
        if self.column < 1:
            raise ValueError("Column number must be >= 1")
        if self.offset < 0:
            raise ValueError("Offset must be >= 0")


@dataclass
class Token:
    """A single lexical token.

    ``value`` holds the raw tag name for tag tokens and the raw payload,
    without delimiters, for every other type. ``attributes`` lists the raw
    ``(key, value)`` pairs of START and EMPTY tokens in source order.
    """

    type: TokenType
    value: bytes
    position: TokenPosition
    attributes: List[Tuple[bytes, bytes]] = field(default_factory=list)

    @property
    def is_tag(self) -> bool:
        """Check if this token is a start, end or empty tag."""
        return self.type in TAG_TOKEN_TYPES


@dataclass
class TokenizationResult:
    """Complete ordered token list with processing statistics."""

    tokens: List[Token]
    character_count: int = 0
    processing_time: float = 0.0

    @property
    def token_count(self) -> int:
        """Get the total number of tokens."""
        return len(self.tokens)

    @property
    def type_distribution(self) -> Dict[str, int]:
        """Count tokens per type name."""
        distribution: Dict[str, int] = {}
        for token in self.tokens:
            distribution[token.type.name] = distribution.get(token.type.name, 0) + 1
        return distribution


class _PositionTracker:
    """Incremental offset to line/column translation."""

    def __init__(self, data: bytes) -> None:
        self._data = data
        self._offset = 0
        self._line = 1
        self._line_start = 0

    def position(self, offset: int) -> TokenPosition:
        if offset < self._offset:
            self._offset, self._line, self._line_start = 0, 1, 0

        newlines = self._data.count(b"\n", self._offset, offset)
        if newlines:
            self._line += newlines
            self._line_start = self._data.rfind(b"\n", self._offset, offset) + 1
        self._offset = offset

        return TokenPosition(
            line=self._line,
            column=offset - self._line_start + 1,
            offset=offset,
        )


def _skip_whitespace(data: bytes, index: int) -> int:
    length = len(data)
    while index < length and data[index] in _WHITESPACE_BYTES:
        index += 1
    return index


def _is_xml_declaration(payload: bytes) -> bool:
    if not payload.startswith(_XML_DECL_TARGET):
        return False
    target_end = len(_XML_DECL_TARGET)
    return len(payload) == target_end or payload[target_end] in _WHITESPACE_BYTES


class XMLTokenizer:
    """Tokenizer for well-formed-or-rejected XML-like markup.

    The tokenizer does not check tag balance; that belongs to the tree
    builder. It only rejects input it cannot split into tokens, raising
    ``MalformedSyntaxError``.
    """

    def __init__(
        self,
        trim_text: bool = False,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the tokenizer.

        Args:
            trim_text: Strip whitespace around text runs and drop runs that
                end up empty
            correlation_id: Optional correlation ID for tracking requests
        """
        self.trim_text = trim_text
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "xml_tokenizer")

    def tokenize(self, data: InputType) -> TokenizationResult:
        """Tokenize a complete document.

        Args:
            data: Markup as text or UTF-8 bytes

        Returns:
            TokenizationResult holding every token in document order

        Raises:
            MalformedSyntaxError: If the markup cannot be split into tokens
        """
        start_time = time.time()
        normalized = normalize_input(data)

        self.logger.debug(
            "Starting tokenization",
            extra={
                "byte_count": len(normalized.data),
                "trim_text": self.trim_text,
                "had_bom": normalized.had_bom,
            }
        )

        tokens = list(self.iter_tokens(normalized.data))
        processing_time = time.time() - start_time

        self.logger.debug(
            "Tokenization completed",
            extra={
                "token_count": len(tokens),
                "processing_time_ms": processing_time * 1000,
            }
        )

        return TokenizationResult(
            tokens=tokens,
            character_count=normalized.character_count,
            processing_time=processing_time,
        )

    def iter_tokens(self, data: bytes) -> Iterator[Token]:
        """Lazily yield tokens from UTF-8 bytes in document order."""
        tracker = _PositionTracker(data)
        length = len(data)
        pos = 0

        while pos < length:
            markup_start = data.find(b"<", pos)
            if markup_start == -1:
                markup_start = length

            if markup_start > pos:
                token = self._text_token(data[pos:markup_start], pos, tracker)
                if token is not None:
                    yield token
                pos = markup_start
                continue

            token, pos = self._read_markup(data, pos, tracker)
            yield token

    def _text_token(
        self, raw: bytes, offset: int, tracker: _PositionTracker
    ) -> Optional[Token]:
        if self.trim_text:
            stripped = raw.lstrip(XML_WHITESPACE)
            offset += len(raw) - len(stripped)
            raw = stripped.rstrip(XML_WHITESPACE)
            if not raw:
                return None

        return Token(TokenType.TEXT, raw, tracker.position(offset))

    def _read_markup(
        self, data: bytes, start: int, tracker: _PositionTracker
    ) -> Tuple[Token, int]:
        marker = data[start + 1:start + 2]
        if marker == b"!":
            return self._read_bang_markup(data, start, tracker)
        if marker == b"?":
            return self._read_processing_instruction(data, start, tracker)
        if marker == b"/":
            return self._read_end_tag(data, start, tracker)
        return self._read_start_tag(data, start, tracker)

    def _read_bang_markup(
        self, data: bytes, start: int, tracker: _PositionTracker
    ) -> Tuple[Token, int]:
        if data.startswith(_COMMENT_OPEN, start):
            payload_start = start + len(_COMMENT_OPEN)
            end = data.find(_COMMENT_CLOSE, payload_start)
            if end == -1:
                raise self._syntax_error(SyntaxErrorKind.UNCLOSED_COMMENT, start, tracker)
            token = Token(TokenType.COMMENT, data[payload_start:end], tracker.position(start))
            return token, end + len(_COMMENT_CLOSE)

        if data.startswith(_CDATA_OPEN, start):
            payload_start = start + len(_CDATA_OPEN)
            end = data.find(_CDATA_CLOSE, payload_start)
            if end == -1:
                raise self._syntax_error(SyntaxErrorKind.UNCLOSED_CDATA, start, tracker)
            token = Token(TokenType.CDATA, data[payload_start:end], tracker.position(start))
            return token, end + len(_CDATA_CLOSE)

        keyword_end = start + 2 + len(_DOCTYPE_KEYWORD)
        if data[start + 2:keyword_end].upper() == _DOCTYPE_KEYWORD:
            end = self._find_doctype_end(data, keyword_end)
            if end == -1:
                raise self._syntax_error(SyntaxErrorKind.UNCLOSED_DOCTYPE, start, tracker)
            payload = data[keyword_end:end].lstrip(XML_WHITESPACE)
            if not payload:
                raise self._syntax_error(SyntaxErrorKind.EMPTY_DOCTYPE, start, tracker)
            return Token(TokenType.DOCTYPE, payload, tracker.position(start)), end + 1

        raise self._syntax_error(SyntaxErrorKind.INVALID_BANG_MARKUP, start, tracker)

    def _read_processing_instruction(
        self, data: bytes, start: int, tracker: _PositionTracker
    ) -> Tuple[Token, int]:
        payload_start = start + 2
        end = data.find(_PI_CLOSE, payload_start)
        if end == -1:
            raise self._syntax_error(
                SyntaxErrorKind.UNCLOSED_PI_OR_XML_DECL, start, tracker
            )

        payload = data[payload_start:end]
        token_type = TokenType.DECL if _is_xml_declaration(payload) else TokenType.PI
        return Token(token_type, payload, tracker.position(start)), end + len(_PI_CLOSE)

    def _read_end_tag(
        self, data: bytes, start: int, tracker: _PositionTracker
    ) -> Tuple[Token, int]:
        end = data.find(b">", start + 2)
        if end == -1:
            raise self._syntax_error(SyntaxErrorKind.UNCLOSED_TAG, start, tracker)

        name = data[start + 2:end].rstrip(XML_WHITESPACE)
        if not name:
            raise self._syntax_error(SyntaxErrorKind.INVALID_TAG_NAME, start, tracker)

        return Token(TokenType.END, name, tracker.position(start)), end + 1

    def _read_start_tag(
        self, data: bytes, start: int, tracker: _PositionTracker
    ) -> Tuple[Token, int]:
        end = self._find_tag_end(data, start + 1)
        if end == -1:
            raise self._syntax_error(SyntaxErrorKind.UNCLOSED_TAG, start, tracker)

        content = data[start + 1:end]
        token_type = TokenType.START
        if content.endswith(b"/"):
            token_type = TokenType.EMPTY
            content = content[:-1]

        name_end = 0
        while name_end < len(content) and content[name_end] not in _WHITESPACE_BYTES:
            name_end += 1
        name = content[:name_end]
        if not name:
            raise self._syntax_error(SyntaxErrorKind.INVALID_TAG_NAME, start, tracker)

        attributes = self._parse_attributes(content, name_end, start, tracker)
        return Token(token_type, name, tracker.position(start), attributes), end + 1

    def _parse_attributes(
        self,
        content: bytes,
        index: int,
        tag_start: int,
        tracker: _PositionTracker,
    ) -> List[Tuple[bytes, bytes]]:
        attributes: List[Tuple[bytes, bytes]] = []
        length = len(content)

        while True:
            index = _skip_whitespace(content, index)
            if index >= length:
                return attributes

            key_start = index
            while index < length and content[index] not in _ATTR_NAME_TERMINATORS:
                index += 1
            key = content[key_start:index]
            if not key:
                raise self._syntax_error(
                    SyntaxErrorKind.INVALID_ATTRIBUTE_NAME, tag_start, tracker
                )

            index = _skip_whitespace(content, index)
            if index >= length or content[index] != _EQ:
                raise self._syntax_error(SyntaxErrorKind.EXPECTED_EQ, tag_start, tracker)

            index = _skip_whitespace(content, index + 1)
            if index >= length or content[index] not in _QUOTES:
                raise self._syntax_error(SyntaxErrorKind.UNQUOTED_VALUE, tag_start, tracker)

            value_end = content.find(content[index:index + 1], index + 1)
            if value_end == -1:
                raise self._syntax_error(SyntaxErrorKind.UNQUOTED_VALUE, tag_start, tracker)

            attributes.append((key, content[index + 1:value_end]))
            index = value_end + 1

    @staticmethod
    def _find_tag_end(data: bytes, pos: int) -> int:
        """Find the ``>`` closing a tag, skipping quoted attribute values."""
        candidate = data.find(b">", pos)
        if candidate == -1:
            return -1
        segment = data[pos:candidate]
        if b'"' not in segment and b"'" not in segment:
            return candidate

        quote: Optional[int] = None
        for index in range(pos, len(data)):
            byte = data[index]
            if quote is not None:
                if byte == quote:
                    quote = None
            elif byte in _QUOTES:
                quote = byte
            elif byte == _GT:
                return index
        return -1

    @staticmethod
    def _find_doctype_end(data: bytes, pos: int) -> int:
        """Find the ``>`` closing a DOCTYPE, balancing an internal subset."""
        depth = 1
        for index in range(pos, len(data)):
            byte = data[index]
            if byte == _LT:
                depth += 1
            elif byte == _GT:
                depth -= 1
                if depth == 0:
                    return index
        return -1

    def _syntax_error(
        self, kind: SyntaxErrorKind, offset: int, tracker: _PositionTracker
    ) -> MalformedSyntaxError:
        error = MalformedSyntaxError(kind, tracker.position(offset))
        self.logger.debug(
            "Tokenization failed",
            extra={"error_kind": kind.name, "offset": offset}
        )
        return error
