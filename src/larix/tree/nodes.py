"""Node model for larix document trees.

A document is an ordered list of nodes. ``Element`` nodes own their
children; every other node type wraps the raw decoded payload of one
markup construct without its delimiters. Nodes hold no reference to their
parent, so a subtree can be moved or dropped like any other Python value.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import Any, Callable, ClassVar, Dict, List, Optional, Tuple


class Node(ABC):
    """Base class for all tree nodes."""

    node_type: ClassVar[str] = "node"

    def __str__(self) -> str:
        # Imported here to avoid a circular import with the serializer
        from larix.tree.serializer import render

        return render(self)

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        """Convert node to dictionary representation."""


@dataclass
class _PayloadNode(Node):
    content: str

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.node_type, "content": self.content}


class Text(_PayloadNode):
    """Character data between tags, kept verbatim (entities unexpanded)."""

    node_type = "text"


class Comment(_PayloadNode):
    """Comment ``<!--content-->``."""

    node_type = "comment"


class DocType(_PayloadNode):
    """Document type declaration ``<!DOCTYPE content>``."""

    node_type = "doctype"


class CData(_PayloadNode):
    """Unescaped character data ``<![CDATA[content]]>``."""

    node_type = "cdata"


class Decl(_PayloadNode):
    """XML declaration ``<?xml ...?>``; ``content`` starts with ``xml``."""

    node_type = "decl"


class PI(_PayloadNode):
    """Processing instruction ``<?content?>``."""

    node_type = "pi"


NodePredicate = Callable[[Node], bool]


@dataclass(eq=False, repr=False)
class Element(Node):
    """Element ``<name attr="value">...</name>`` or ``<name attr="value" />``.

    ``attributes`` is a plain dict: keys are unique and a repeated key
    replaces the earlier value. Its iteration order, and therefore the
    order attributes are serialized in, is not part of the contract.

    A self-closing element built by the parser never has children. Callers
    may still add some; the serializer then falls back to a start/end pair.

    Equality, ``repr``, ``to_dict`` and the traversal methods walk the
    subtree with an explicit stack, so they work at any nesting depth the
    tree builder accepts.
    """

    node_type: ClassVar[str] = "element"

    name: str
    attributes: Dict[str, str] = field(default_factory=dict)
    children: List[Node] = field(default_factory=list)
    self_closing: bool = False

    def __post_init__(self) -> None:
        """Validate element values."""
        if not self.name:
            raise ValueError("Element name cannot be empty")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Element):
            return NotImplemented

        pending: List[Tuple[Element, Element]] = [(self, other)]
        while pending:
            left, right = pending.pop()
            if (
                left.name != right.name
                or left.self_closing != right.self_closing
                or left.attributes != right.attributes
                or len(left.children) != len(right.children)
            ):
                return False
            for left_child, right_child in zip(left.children, right.children):
                if isinstance(left_child, Element) and isinstance(right_child, Element):
                    pending.append((left_child, right_child))
                elif left_child != right_child:
                    return False
        return True

    def __repr__(self) -> str:
        parts: List[str] = []
        pending: List[Any] = [self]
        while pending:
            item = pending.pop()
            if isinstance(item, str):
                parts.append(item)
            elif isinstance(item, Element):
                parts.append(
                    f"{type(item).__qualname__}(name={item.name!r}, "
                    f"attributes={item.attributes!r}, children=["
                )
                pending.append(f"], self_closing={item.self_closing!r})")
                for index in range(len(item.children) - 1, -1, -1):
                    pending.append(item.children[index])
                    if index:
                        pending.append(", ")
            else:
                parts.append(repr(item))
        return "".join(parts)

    @property
    def is_empty(self) -> bool:
        """Check if element has no children."""
        return not self.children

    def child_elements(self) -> List["Element"]:
        """Direct children that are elements, in document order."""
        return [child for child in self.children if isinstance(child, Element)]

    def find_descendants(self, predicate: NodePredicate) -> List[Node]:
        """Find all descendants matching ``predicate``.

        Results are ordered level-first: the matching direct children come
        before the matches inside each child element, and those follow in
        child order. For ``<e><a/><b><a/></b></e>`` the outer ``a`` is
        reported before the nested one.
        """
        matches: List[Node] = []
        pending: List[Element] = [self]
        while pending:
            element = pending.pop()
            matches.extend(child for child in element.children if predicate(child))
            pending.extend(reversed(element.child_elements()))
        return matches

    def text_content(self) -> str:
        """Concatenate all text in the subtree, depth first.

        Only ``Text`` nodes contribute; comments, CDATA sections and the
        other payload nodes are skipped.
        """
        parts = []
        pending: List[Node] = list(reversed(self.children))
        while pending:
            node = pending.pop()
            if isinstance(node, Text):
                parts.append(node.content)
            elif isinstance(node, Element):
                pending.extend(reversed(node.children))
        return "".join(parts)

    def descendants_at_depth(self, depth: int) -> List[Node]:
        """Collect nodes exactly ``depth`` levels below this element.

        Depth 1 is the direct children, of any node type. Deeper levels are
        reached through child elements only.

        Raises:
            ValueError: If ``depth`` is below 1
        """
        if depth < 1:
            raise ValueError("Depth must be above zero.")

        level: List[Element] = [self]
        for _ in range(depth - 1):
            level = [child for element in level for child in element.child_elements()]
            if not level:
                return []
        return [child for element in level for child in element.children]

    def find_child(self, name: str) -> Optional["Element"]:
        """Find first direct child element with matching name."""
        for child in self.child_elements():
            if child.name == name:
                return child
        return None

    def find_children(self, name: str) -> List["Element"]:
        """Find all direct child elements with matching name."""
        return [child for child in self.child_elements() if child.name == name]

    def find_all(self, name: str) -> List["Element"]:
        """Find all descendant elements with matching name."""
        return self.find_descendants(
            lambda node: isinstance(node, Element) and node.name == name
        )  # type: ignore[return-value]

    def get_attribute(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get attribute value with optional default."""
        return self.attributes.get(name, default)

    def set_attribute(self, name: str, value: str) -> None:
        """Set attribute value, replacing any existing one."""
        if not isinstance(name, str) or not isinstance(value, str):
            raise TypeError("Attribute name and value must be strings")
        self.attributes[name] = value

    def has_attribute(self, name: str) -> bool:
        """Check if element has specific attribute."""
        return name in self.attributes

    def to_self_closing(self) -> "Element":
        """Return a self-closing copy of this element.

        Raises:
            ValueError: If the element has children
        """
        if self.children:
            raise ValueError(
                f"Element <{self.name}> has {len(self.children)} children "
                "and cannot be self-closing"
            )
        return replace(self, attributes=dict(self.attributes), children=[], self_closing=True)

    def to_dict(self) -> Dict[str, Any]:
        """Convert element to dictionary representation."""
        result = self._shallow_dict()
        pending = [(self, result)]
        while pending:
            element, data = pending.pop()
            for child in element.children:
                if isinstance(child, Element):
                    child_data = child._shallow_dict()
                    pending.append((child, child_data))
                else:
                    child_data = child.to_dict()
                data["children"].append(child_data)
        return result

    def _shallow_dict(self) -> Dict[str, Any]:
        return {
            "type": self.node_type,
            "name": self.name,
            "attributes": dict(self.attributes),
            "self_closing": self.self_closing,
            "children": [],
        }


def new_element(name: str) -> Element:
    """Create an element with no attributes or children."""
    return Element(name)
