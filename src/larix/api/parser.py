"""Parser API for larix.

Level 1 is the module functions ``parse``, ``parse_trimmed`` and
``stringify``. Level 2 is ``XMLParser``, which takes a ``ParserConfig`` and
can return a ``ParseResult`` with performance metrics alongside the nodes.

Parsing is all-or-nothing: the first error found in the single left to
right pass is raised and no partial tree is returned.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from larix.character import InputType
from larix.shared import (
    LarixError,
    ParserConfig,
    PerformanceMetrics,
    get_logger,
)
from larix.tokenization import XMLTokenizer
from larix.tree import Element, Node, XMLTreeBuilder, stringify

MS_PER_SECOND = 1000

_DEFAULT_CONFIG = ParserConfig.default()
_TRIMMED_CONFIG = ParserConfig.trimmed()


@dataclass
class ParseResult:
    """Nodes of a successful parse with processing metrics."""

    nodes: List[Node] = field(default_factory=list)
    performance: PerformanceMetrics = field(default_factory=PerformanceMetrics)
    correlation_id: Optional[str] = None
    config_name: Optional[str] = None

    @property
    def element_count(self) -> int:
        """Get total number of elements in the tree."""
        return self.performance.elements_created

    @property
    def root(self) -> Optional[Element]:
        """First top-level element, if any."""
        for node in self.nodes:
            if isinstance(node, Element):
                return node
        return None

    @property
    def processing_time_ms(self) -> float:
        """Get processing time in milliseconds."""
        return self.performance.processing_time_ms

    def stringify(self) -> str:
        """Render the parsed nodes back to markup."""
        return stringify(self.nodes)

    def summary(self) -> Dict[str, Any]:
        """Get summary statistics for the parse."""
        return {
            "top_level_nodes": len(self.nodes),
            "element_count": self.element_count,
            "max_depth": self.performance.max_depth,
            "tokens_generated": self.performance.tokens_generated,
            "characters_processed": self.performance.characters_processed,
            "processing_time_ms": self.performance.processing_time_ms,
            "correlation_id": self.correlation_id,
            "config_name": self.config_name,
        }


class XMLParser:
    """Configured parser combining the tokenizer and the tree builder.

    Examples:
        >>> parser = XMLParser(ParserConfig.trimmed())
        >>> parser.parse("<a> hi </a>")
        [Element(name='a', attributes={}, children=[Text(content='hi')], self_closing=False)]
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize parser.

        Args:
            config: Parser configuration, defaults to ``ParserConfig()``
            correlation_id: Optional correlation ID; falls back to the one
                in ``config``
        """
        self.config = config or ParserConfig()
        self.correlation_id = correlation_id or self.config.correlation_id
        self.logger = get_logger(__name__, self.correlation_id, "xml_parser")

    def parse(self, data: InputType) -> List[Node]:
        """Parse markup into a list of top-level nodes."""
        return self.parse_document(data).nodes

    def parse_document(self, data: InputType) -> ParseResult:
        """Parse markup and report processing metrics.

        Args:
            data: Markup as text or UTF-8 bytes

        Returns:
            ParseResult with the top-level nodes and metrics

        Raises:
            LarixError: Any tokenization, decoding or structure error
        """
        start_time = time.time()
        tokenizer = XMLTokenizer(
            trim_text=self.config.tokenization.trim_text,
            correlation_id=self.correlation_id,
        )
        builder = XMLTreeBuilder(
            max_depth=self.config.tree.max_tree_depth,
            correlation_id=self.correlation_id,
        )

        try:
            tokenization = tokenizer.tokenize(data)
            nodes = builder.build(tokenization)
        except LarixError as e:
            self.logger.warning(
                "Parse failed",
                extra={
                    "error_type": type(e).__name__,
                    "error": str(e),
                    "processing_time_ms": (time.time() - start_time) * MS_PER_SECOND,
                }
            )
            raise

        performance = PerformanceMetrics(
            processing_time_ms=(time.time() - start_time) * MS_PER_SECOND,
            characters_processed=tokenization.character_count,
            tokens_generated=tokenization.token_count,
            elements_created=builder.elements_created,
            max_depth=builder.max_depth_reached,
        )

        self.logger.info(
            "Parse completed",
            extra={
                "top_level_nodes": len(nodes),
                "element_count": performance.elements_created,
                "token_count": performance.tokens_generated,
                "processing_time_ms": performance.processing_time_ms,
            }
        )

        return ParseResult(
            nodes=nodes,
            performance=performance,
            correlation_id=self.correlation_id,
            config_name=self.config.name,
        )


def parse(data: InputType, correlation_id: Optional[str] = None) -> List[Node]:
    """Parse markup, keeping text runs exactly as written.

    Examples:
        >>> parse("abc")
        [Text(content='abc')]
        >>> parse("<a />")[0].self_closing
        True
    """
    return XMLParser(_DEFAULT_CONFIG, correlation_id).parse(data)


def parse_trimmed(data: InputType, correlation_id: Optional[str] = None) -> List[Node]:
    """Parse markup, trimming whitespace around text runs.

    Text runs that consist only of whitespace are dropped.
    """
    return XMLParser(_TRIMMED_CONFIG, correlation_id).parse(data)
