"""Tests for XML tokenization."""

from typing import List

import pytest

from larix.shared.errors import MalformedSyntaxError, SyntaxErrorKind
from larix.tokenization import (
    Token,
    TokenizationResult,
    TokenPosition,
    TokenType,
    XMLTokenizer,
)


def _tokens(markup: str, trim_text: bool = False) -> List[Token]:
    return XMLTokenizer(trim_text=trim_text).tokenize(markup).tokens


def _types(markup: str, trim_text: bool = False) -> List[TokenType]:
    return [token.type for token in _tokens(markup, trim_text)]


class TestTokenPosition:
    """Tests for TokenPosition class."""

    def test_token_position_creation(self) -> None:
        """Test TokenPosition creation with valid values."""
        pos = TokenPosition(line=5, column=10, offset=50)
        assert pos.line == 5
        assert pos.column == 10
        assert pos.offset == 50

    def test_token_position_validation(self) -> None:
        """Test TokenPosition validation for invalid values."""
        with pytest.raises(ValueError, match="Line number must be >= 1"):
            TokenPosition(line=0, column=1, offset=0)

        with pytest.raises(ValueError, match="Column number must be >= 1"):
            TokenPosition(line=1, column=0, offset=0)

        with pytest.raises(ValueError, match="Offset must be >= 0"):
            TokenPosition(line=1, column=1, offset=-1)


class TestTokenTypes:
    """Tests for recognition of each markup construct."""

    def test_plain_text(self) -> None:
        """Test that text without markup is a single TEXT token."""
        tokens = _tokens("abc")

        assert len(tokens) == 1
        assert tokens[0].type is TokenType.TEXT
        assert tokens[0].value == b"abc"
        assert tokens[0].position == TokenPosition(1, 1, 0)

    def test_start_and_end_tags(self) -> None:
        """Test start and end tag names."""
        tokens = _tokens("<a></a >")

        assert [t.type for t in tokens] == [TokenType.START, TokenType.END]
        assert tokens[0].value == b"a"
        assert tokens[1].value == b"a"
        assert tokens[0].is_tag and tokens[1].is_tag

    @pytest.mark.parametrize("markup", ["<a/>", "<a />", "<a\n/>"])
    def test_empty_tag(self, markup: str) -> None:
        """Test self-closing tag variants."""
        tokens = _tokens(markup)

        assert len(tokens) == 1
        assert tokens[0].type is TokenType.EMPTY
        assert tokens[0].value == b"a"
        assert tokens[0].attributes == []

    def test_attributes_in_source_order(self) -> None:
        """Test raw attribute pairs with both quote styles."""
        token = _tokens("<xyz tree=\"oak\" material = 'wood'>")[0]

        assert token.type is TokenType.START
        assert token.attributes == [(b"tree", b"oak"), (b"material", b"wood")]

    def test_attribute_values_are_raw(self) -> None:
        """Test that entity references are not expanded."""
        token = _tokens('<a title="x &amp; y"/>')[0]

        assert token.attributes == [(b"title", b"x &amp; y")]

    def test_gt_inside_quoted_value(self) -> None:
        """Test that '>' inside a quoted value does not end the tag."""
        tokens = _tokens('<a expr="1 > 0" other=\'/>\'>body</a>')

        assert [t.type for t in tokens] == [TokenType.START, TokenType.TEXT, TokenType.END]
        assert tokens[0].attributes == [(b"expr", b"1 > 0"), (b"other", b"/>")]

    def test_duplicate_attributes_are_all_reported(self) -> None:
        """Test that the tokenizer keeps repeated keys for the builder to resolve."""
        token = _tokens('<a k="1" k="2"/>')[0]

        assert token.attributes == [(b"k", b"1"), (b"k", b"2")]

    def test_comment(self) -> None:
        """Test comment payload keeps surrounding spaces."""
        token = _tokens("<!-- abcxyz -->")[0]

        assert token.type is TokenType.COMMENT
        assert token.value == b" abcxyz "

    def test_cdata(self) -> None:
        """Test CDATA payload is taken verbatim."""
        token = _tokens("<![CDATA[a <b> & c]]>")[0]

        assert token.type is TokenType.CDATA
        assert token.value == b"a <b> & c"

    def test_doctype(self) -> None:
        """Test multi-line DOCTYPE payload without the keyword."""
        markup = (
            '<!DOCTYPE html\n'
            '     PUBLIC "-//W3C//DTD XHTML 1.0 Strict//EN"\n'
            '     "http://www.w3.org/TR/xhtml1/DTD/xhtml1-strict.dtd">'
        )
        token = _tokens(markup)[0]

        assert token.type is TokenType.DOCTYPE
        assert token.value == markup[len("<!DOCTYPE "):-1].encode()

    def test_doctype_keyword_is_case_insensitive(self) -> None:
        """Test lowercase DOCTYPE keyword."""
        token = _tokens("<!doctype html>")[0]

        assert token.type is TokenType.DOCTYPE
        assert token.value == b"html"

    def test_doctype_with_internal_subset(self) -> None:
        """Test that nested declarations in an internal subset are balanced."""
        tokens = _tokens("<!DOCTYPE note [<!ELEMENT note (#PCDATA)>]><note/>")

        assert [t.type for t in tokens] == [TokenType.DOCTYPE, TokenType.EMPTY]
        assert tokens[0].value == b"note [<!ELEMENT note (#PCDATA)>]"

    def test_xml_declaration(self) -> None:
        """Test that the xml target produces a DECL token."""
        token = _tokens('<?xml version="1.0" encoding="UTF-8" standalone="no"?>')[0]

        assert token.type is TokenType.DECL
        assert token.value == b'xml version="1.0" encoding="UTF-8" standalone="no"'

    def test_processing_instruction(self) -> None:
        """Test that other targets produce PI tokens with trailing space kept."""
        token = _tokens('<?notxml something="else" ?>')[0]

        assert token.type is TokenType.PI
        assert token.value == b'notxml something="else" '

    def test_xml_prefixed_target_is_pi(self) -> None:
        """Test that targets merely starting with 'xml' are not declarations."""
        token = _tokens('<?xml-stylesheet href="style.css"?>')[0]

        assert token.type is TokenType.PI


class TestTextHandling:
    """Tests for untrimmed and trimmed text runs."""

    def test_whitespace_text_is_kept_untrimmed(self) -> None:
        """Test that whitespace-only runs are tokens by default."""
        tokens = _tokens("<a> </a>")

        assert [t.type for t in tokens] == [TokenType.START, TokenType.TEXT, TokenType.END]
        assert tokens[1].value == b" "

    def test_trimmed_text(self) -> None:
        """Test that trimming strips both ends of text runs."""
        tokens = _tokens("<a>  x y \n</a>", trim_text=True)

        assert tokens[1].type is TokenType.TEXT
        assert tokens[1].value == b"x y"
        assert tokens[1].position.offset == 5

    def test_trimmed_whitespace_only_text_is_dropped(self) -> None:
        """Test that runs that end up empty are not emitted."""
        assert _types("<a>\n\t </a>", trim_text=True) == [TokenType.START, TokenType.END]

    def test_text_around_markup(self) -> None:
        """Test text before, between and after elements."""
        tokens = _tokens("x<a/>y")

        assert [(t.type, t.value) for t in tokens] == [
            (TokenType.TEXT, b"x"),
            (TokenType.EMPTY, b"a"),
            (TokenType.TEXT, b"y"),
        ]


class TestPositions:
    """Tests for line and column tracking."""

    def test_positions_across_lines(self) -> None:
        """Test that tokens on later lines get correct columns."""
        tokens = _tokens("<a>\n  <b/>\n</a>")

        empty = tokens[2]
        assert empty.type is TokenType.EMPTY
        assert empty.position == TokenPosition(line=2, column=3, offset=6)
        assert tokens[-1].position == TokenPosition(line=3, column=1, offset=11)

    def test_offsets_count_bytes(self) -> None:
        """Test that offsets are byte offsets into the UTF-8 input."""
        tokens = _tokens("é<a/>")

        assert tokens[1].position.offset == 2
        assert tokens[1].position.column == 3


class TestSyntaxErrors:
    """Tests for markup the tokenizer rejects."""

    @pytest.mark.parametrize("markup, kind", [
        ("<a", SyntaxErrorKind.UNCLOSED_TAG),
        ("<a x='1>", SyntaxErrorKind.UNCLOSED_TAG),
        ("</a", SyntaxErrorKind.UNCLOSED_TAG),
        ("<!-- never closed", SyntaxErrorKind.UNCLOSED_COMMENT),
        ("<![CDATA[never closed", SyntaxErrorKind.UNCLOSED_CDATA),
        ("<!DOCTYPE html", SyntaxErrorKind.UNCLOSED_DOCTYPE),
        ("<!DOCTYPE>", SyntaxErrorKind.EMPTY_DOCTYPE),
        ("<?xml version='1.0'", SyntaxErrorKind.UNCLOSED_PI_OR_XML_DECL),
        ("<!ELEMENT a>", SyntaxErrorKind.INVALID_BANG_MARKUP),
        ("< a>", SyntaxErrorKind.INVALID_TAG_NAME),
        ("<>", SyntaxErrorKind.INVALID_TAG_NAME),
        ("</>", SyntaxErrorKind.INVALID_TAG_NAME),
        ("<a x>", SyntaxErrorKind.EXPECTED_EQ),
        ("<a x y='1'>", SyntaxErrorKind.EXPECTED_EQ),
        ("<a x=1>", SyntaxErrorKind.UNQUOTED_VALUE),
        ("<a ='1'>", SyntaxErrorKind.INVALID_ATTRIBUTE_NAME),
    ])
    def test_malformed_markup(self, markup: str, kind: SyntaxErrorKind) -> None:
        """Test each category of lexical error."""
        with pytest.raises(MalformedSyntaxError) as exc_info:
            XMLTokenizer().tokenize(markup)

        assert exc_info.value.kind is kind

    def test_error_position(self) -> None:
        """Test that errors point at the start of the offending construct."""
        with pytest.raises(MalformedSyntaxError) as exc_info:
            XMLTokenizer().tokenize("<r>\n<a x>")

        assert exc_info.value.position == TokenPosition(line=2, column=1, offset=4)


class TestXMLTokenizer:
    """Tests for the tokenizer entry points."""

    def test_tokenize_returns_result(self) -> None:
        """Test TokenizationResult statistics."""
        result = XMLTokenizer().tokenize("<a>x<b/></a>")

        assert isinstance(result, TokenizationResult)
        assert result.token_count == 4
        assert result.character_count == 12
        assert result.processing_time >= 0.0
        assert result.type_distribution == {"START": 1, "TEXT": 1, "EMPTY": 1, "END": 1}

    def test_tokenize_accepts_bytes_with_bom(self) -> None:
        """Test that byte input with a byte order mark is tokenized."""
        tokens = XMLTokenizer().tokenize(b"\xef\xbb\xbf<a/>").tokens

        assert tokens[0].type is TokenType.EMPTY
        assert tokens[0].position.offset == 0

    def test_invalid_utf8_is_passed_through_raw(self) -> None:
        """Test that the tokenizer does not decode payloads."""
        tokens = XMLTokenizer().tokenize(b"<a>\xff</a>").tokens

        assert tokens[1].value == b"\xff"

    def test_iter_tokens_is_lazy(self) -> None:
        """Test that tokens before a syntax error are still produced."""
        iterator = XMLTokenizer().iter_tokens(b"<a>text<!-- broken")

        assert next(iterator).type is TokenType.START
        assert next(iterator).type is TokenType.TEXT
        with pytest.raises(MalformedSyntaxError):
            next(iterator)

    def test_empty_input(self) -> None:
        """Test that empty input yields no tokens."""
        assert XMLTokenizer().tokenize("").tokens == []
