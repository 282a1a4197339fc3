"""Integration adapters for ElementTree and lxml.

Adapters convert a larix node list into the element tree of another XML
library and back. Conversions return a ``ConversionResult`` instead of
raising, so callers can inspect warnings about constructs the target
library cannot represent.
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Type

from larix.api.parser import parse
from larix.shared import LarixError, get_logger
from larix.tree import PI, CData, Comment, Decl, DocType, Element, Node, Text


@dataclass
class AdapterMetadata:
    """Metadata about an integration adapter."""

    name: str
    target_library: str
    description: str


@dataclass
class ConversionResult:
    """Result of a conversion operation."""

    success: bool
    converted_data: Any
    original_data: Any
    conversion_time_ms: float
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


class IntegrationAdapter(ABC):
    """Abstract base class for all integration adapters.

    Subclasses supply the target module through ``_etree`` and may override
    the hooks for node kinds the target handles differently.
    """

    def __init__(self, correlation_id: Optional[str] = None) -> None:
        """Initialize the integration adapter.

        Args:
            correlation_id: Optional correlation ID for request tracking
        """
        self.correlation_id = correlation_id
        self._logger = get_logger(__name__, correlation_id, self.__class__.__name__)

    @property
    @abstractmethod
    def metadata(self) -> AdapterMetadata:
        """Get adapter metadata."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the target library can be imported."""

    @abstractmethod
    def _etree(self) -> Any:
        """Import and return the target's etree module."""

    def to_target(self, nodes: Sequence[Node]) -> ConversionResult:
        """Convert a node list with a single root element to a target element.

        Top-level nodes other than the root element are dropped with a
        warning, except for whitespace-only text.
        """
        start_time = time.time()
        warnings: List[str] = []

        roots = [node for node in nodes if isinstance(node, Element)]
        if len(roots) != 1:
            return self._create_error_result(
                f"Expected exactly one top-level element, found {len(roots)}",
                nodes,
                start_time,
            )

        for node in nodes:
            if isinstance(node, Element):
                continue
            if isinstance(node, Text) and not node.content.strip():
                continue
            warnings.append(f"Dropped top-level {node.node_type} node")

        try:
            etree = self._etree()
            converted = self._convert_element(roots[0], etree, warnings)
        except (ImportError, ValueError, TypeError) as e:
            return self._create_error_result(
                f"Failed to convert to {self.metadata.target_library}: {e}",
                nodes,
                start_time,
            )

        return self._create_success_result(converted, nodes, start_time, warnings)

    def from_target(self, target_data: Any) -> ConversionResult:
        """Convert a target element back into a larix node list."""
        start_time = time.time()
        if not hasattr(target_data, "tag"):
            return self._create_error_result(
                f"Target data is not a valid {self.metadata.target_library} element",
                target_data,
                start_time,
            )

        try:
            etree = self._etree()
            xml_string = etree.tostring(target_data, encoding="unicode")
            nodes = parse(xml_string, self.correlation_id)
        except (ImportError, LarixError, ValueError, TypeError) as e:
            return self._create_error_result(
                f"Failed to convert from {self.metadata.target_library}: {e}",
                target_data,
                start_time,
            )

        return self._create_success_result(nodes, target_data, start_time, [])

    def _convert_element(self, element: Element, etree: Any, warnings: List[str]) -> Any:
        target = etree.Element(element.name, dict(element.attributes))
        last: Optional[Any] = None

        for child in element.children:
            if isinstance(child, Element):
                last = self._convert_element(child, etree, warnings)
                target.append(last)
            elif isinstance(child, Text):
                self._append_text(target, last, child.content)
            elif isinstance(child, CData):
                self._append_cdata(target, last, child, element, etree, warnings)
            elif isinstance(child, Comment):
                last = etree.Comment(child.content)
                target.append(last)
            elif isinstance(child, PI):
                pi_target, _, pi_text = child.content.strip().partition(" ")
                if not pi_target:
                    warnings.append(f"Dropped empty processing instruction in <{element.name}>")
                    continue
                last = etree.ProcessingInstruction(pi_target, pi_text.strip() or None)
                target.append(last)
            elif isinstance(child, (Decl, DocType)):
                warnings.append(f"Dropped {child.node_type} node inside <{element.name}>")

        return target

    def _append_cdata(
        self,
        target: Any,
        last: Optional[Any],
        child: CData,
        element: Element,
        etree: Any,
        warnings: List[str],
    ) -> None:
        warnings.append(f"CDATA section in <{element.name}> converted to text")
        self._append_text(target, last, child.content)

    @staticmethod
    def _append_text(target: Any, last: Optional[Any], text: str) -> None:
        if last is None:
            target.text = (target.text or "") + text
        else:
            last.tail = (last.tail or "") + text

    def _create_success_result(
        self,
        converted: Any,
        original: Any,
        start_time: float,
        warnings: List[str],
    ) -> ConversionResult:
        conversion_time = (time.time() - start_time) * 1000
        for warning in warnings:
            self._logger.warning(warning)
        return ConversionResult(
            success=True,
            converted_data=converted,
            original_data=original,
            conversion_time_ms=conversion_time,
            warnings=warnings,
        )

    def _create_error_result(
        self, message: str, original: Any, start_time: float
    ) -> ConversionResult:
        self._logger.warning(
            "Conversion failed",
            extra={"adapter": self.metadata.name, "error": message}
        )
        return ConversionResult(
            success=False,
            converted_data=None,
            original_data=original,
            conversion_time_ms=(time.time() - start_time) * 1000,
            errors=[message],
        )


class ElementTreeAdapter(IntegrationAdapter):
    """Adapter for bidirectional conversion with xml.etree.ElementTree."""

    @property
    def metadata(self) -> AdapterMetadata:
        """Get adapter metadata."""
        return AdapterMetadata(
            name="elementtree",
            target_library="xml.etree.ElementTree",
            description="Bidirectional conversion between larix nodes and ElementTree",
        )

    def is_available(self) -> bool:
        """ElementTree ships with the standard library."""
        return True

    def _etree(self) -> Any:
        import xml.etree.ElementTree as ET

        return ET


class LxmlAdapter(IntegrationAdapter):
    """Adapter for bidirectional conversion with lxml.etree.

    A CDATA section that is an element's only content is kept as an
    ``lxml.etree.CDATA`` block; lxml cannot mix CDATA with other text.
    """

    @property
    def metadata(self) -> AdapterMetadata:
        """Get adapter metadata."""
        return AdapterMetadata(
            name="lxml",
            target_library="lxml",
            description="Bidirectional conversion between larix nodes and lxml.etree",
        )

    def is_available(self) -> bool:
        """Check if lxml is available."""
        try:
            import lxml.etree  # noqa: F401
        except ImportError:
            return False
        return True

    def _etree(self) -> Any:
        import lxml.etree as ET

        return ET

    def _append_cdata(
        self,
        target: Any,
        last: Optional[Any],
        child: CData,
        element: Element,
        etree: Any,
        warnings: List[str],
    ) -> None:
        if len(element.children) == 1:
            target.text = etree.CDATA(child.content)
            return
        super()._append_cdata(target, last, child, element, etree, warnings)


ADAPTERS: Dict[str, Type[IntegrationAdapter]] = {
    "elementtree": ElementTreeAdapter,
    "lxml": LxmlAdapter,
}


def get_adapter(name: str, correlation_id: Optional[str] = None) -> IntegrationAdapter:
    """Instantiate a registered adapter by name.

    Raises:
        KeyError: If no adapter is registered under ``name``
        ImportError: If the adapter's target library is not installed
    """
    try:
        adapter_class = ADAPTERS[name]
    except KeyError:
        raise KeyError(
            f"Unknown adapter '{name}', available: {sorted(ADAPTERS)}"
        ) from None

    adapter = adapter_class(correlation_id)
    if not adapter.is_available():
        raise ImportError(f"Adapter '{name}' requires {adapter.metadata.target_library}")
    return adapter
