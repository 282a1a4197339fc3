"""Tree building from token streams.

The builder walks the flat token list once, left to right, keeping an
explicit stack of open elements. A start tag pushes a frame, an end tag
pops the innermost frame and checks that the names agree, and every other
token becomes a node in the innermost open frame (or at the top level).
Nesting depth is therefore bounded by ``max_depth`` rather than by the
interpreter's recursion limit.

Any error abandons the whole build; no partial tree is returned.
"""

import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Union

from larix.character import decode
from larix.shared.config import DEFAULT_MAX_TREE_DEPTH
from larix.shared.errors import (
    DepthLimitExceeded,
    LarixError,
    MismatchedEndTag,
    MissingEndTag,
    UnmatchedEndTag,
)
from larix.shared.logging import get_logger
from larix.tokenization import Token, TokenizationResult, TokenPosition, TokenType
from larix.tree.nodes import (
    PI,
    CData,
    Comment,
    Decl,
    DocType,
    Element,
    Node,
    Text,
)

_PAYLOAD_NODES: Dict[TokenType, Callable[[str], Node]] = {
    TokenType.TEXT: Text,
    TokenType.COMMENT: Comment,
    TokenType.CDATA: CData,
    TokenType.DOCTYPE: DocType,
    TokenType.DECL: Decl,
    TokenType.PI: PI,
}


@dataclass
class _OpenElement:
    """Start tag waiting for its end tag."""

    name: str
    attributes: Dict[str, str]
    position: TokenPosition
    children: List[Node] = field(default_factory=list)


def _decode_attributes(token: Token) -> Dict[str, str]:
    attributes: Dict[str, str] = {}
    for raw_key, raw_value in token.attributes:
        # Repeated keys: the last occurrence wins
        attributes[decode(raw_key)] = decode(raw_value)
    return attributes


class XMLTreeBuilder:
    """Builds an ordered list of top-level nodes from tokens.

    A builder instance can be reused; statistics describe the last build.
    """

    def __init__(
        self,
        max_depth: Optional[int] = DEFAULT_MAX_TREE_DEPTH,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize tree builder.

        Args:
            max_depth: Maximum element nesting depth, or None for no limit
            correlation_id: Optional correlation ID for request tracking
        """
        if max_depth is not None and max_depth <= 0:
            raise ValueError("max_depth must be > 0 or None")

        self.max_depth = max_depth
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "xml_tree_builder")

        self.elements_created = 0
        self.max_depth_reached = 0
        self.processing_time_ms = 0.0

    def build(self, tokens: Union[TokenizationResult, Sequence[Token]]) -> List[Node]:
        """Build the node tree for a complete token stream.

        Args:
            tokens: Either a TokenizationResult or a sequence of tokens

        Returns:
            Top-level nodes in document order

        Raises:
            UnmatchedEndTag: An end tag has no open element
            MismatchedEndTag: An end tag closes a differently named element
            MissingEndTag: An element is still open when the tokens run out
            DepthLimitExceeded: Elements nest deeper than ``max_depth``
            NonDecodable: A name, attribute or payload is not valid UTF-8
        """
        token_list = tokens.tokens if isinstance(tokens, TokenizationResult) else tokens
        start_time = time.time()
        self.elements_created = 0
        self.max_depth_reached = 0

        self.logger.debug(
            "Starting tree building",
            extra={"token_count": len(token_list), "max_depth": self.max_depth}
        )

        try:
            nodes = self._build_nodes(token_list)
        except LarixError as e:
            self.logger.debug(
                "Tree building failed",
                extra={"error_type": type(e).__name__, "error": str(e)}
            )
            raise
        finally:
            self.processing_time_ms = (time.time() - start_time) * 1000

        self.logger.debug(
            "Tree building completed",
            extra={
                "top_level_nodes": len(nodes),
                "element_count": self.elements_created,
                "max_depth": self.max_depth_reached,
                "processing_time_ms": self.processing_time_ms,
            }
        )
        return nodes

    def _build_nodes(self, tokens: Sequence[Token]) -> List[Node]:
        top_level: List[Node] = []
        stack: List[_OpenElement] = []

        for token in tokens:
            siblings = stack[-1].children if stack else top_level

            if token.type is TokenType.START:
                self._check_depth(len(stack) + 1, token)
                stack.append(_OpenElement(
                    name=decode(token.value),
                    attributes=_decode_attributes(token),
                    position=token.position,
                ))

            elif token.type is TokenType.END:
                name = decode(token.value)
                if not stack:
                    raise UnmatchedEndTag(name, token.position)

                opened = stack.pop()
                if opened.name != name:
                    raise MismatchedEndTag(opened.name, name, token.position)

                parent = stack[-1].children if stack else top_level
                parent.append(Element(
                    name=opened.name,
                    attributes=opened.attributes,
                    children=opened.children,
                    self_closing=False,
                ))
                self.elements_created += 1

            elif token.type is TokenType.EMPTY:
                self._check_depth(len(stack) + 1, token)
                siblings.append(Element(
                    name=decode(token.value),
                    attributes=_decode_attributes(token),
                    children=[],
                    self_closing=True,
                ))
                self.elements_created += 1

            else:
                siblings.append(_PAYLOAD_NODES[token.type](decode(token.value)))

        if stack:
            innermost = stack[-1]
            raise MissingEndTag(innermost.name, innermost.position)

        return top_level

    def _check_depth(self, depth: int, token: Token) -> None:
        if self.max_depth is not None and depth > self.max_depth:
            raise DepthLimitExceeded(self.max_depth, token.position)
        self.max_depth_reached = max(self.max_depth_reached, depth)
