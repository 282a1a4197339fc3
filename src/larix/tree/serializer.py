"""Serialization of node lists back to markup text.

Payloads are written verbatim; no escaping is applied because the parser
never unescapes. Attributes are written in the dict's iteration order, so
output is equal in content, not necessarily byte for byte, to the source
of elements with several attributes.
"""

from typing import Dict, Iterable, List, Tuple, Type, Union

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

_DELIMITERS: Dict[Type[Node], Tuple[str, str]] = {
    Text: ("", ""),
    Comment: ("<!--", "-->"),
    CData: ("<![CDATA[", "]]>"),
    DocType: ("<!DOCTYPE ", ">"),
    Decl: ("<?", "?>"),
    PI: ("<?", "?>"),
}


def stringify(nodes: Iterable[Node]) -> str:
    """Render a list of nodes as markup.

    Equivalent to concatenating ``str(node)`` for each node. Elements are
    expanded with an explicit stack, so nesting depth is not limited by the
    interpreter's recursion limit.
    """
    parts: List[str] = []
    # Pending items are nodes still to render or end tags to emit
    pending: List[Union[Node, str]] = list(reversed(list(nodes)))
    while pending:
        item = pending.pop()
        if isinstance(item, str):
            parts.append(item)
        elif isinstance(item, Element):
            pending.extend(_open_element(item, parts))
        else:
            parts.append(_render_payload(item))
    return "".join(parts)


def render(node: Node) -> str:
    """Render a single node as markup."""
    return stringify([node])


def _open_element(element: Element, parts: List[str]) -> List[Union[Node, str]]:
    """Write the start tag and return what remains, in stack order."""
    attributes = "".join(
        f' {key}="{value}"' for key, value in element.attributes.items()
    )

    if element.self_closing and not element.children:
        parts.append(f"<{element.name}{attributes} />")
        return []

    parts.append(f"<{element.name}{attributes}>")
    return [f"</{element.name}>", *reversed(element.children)]


def _render_payload(node: Node) -> str:
    for node_class in type(node).__mro__:
        if node_class in _DELIMITERS:
            prefix, suffix = _DELIMITERS[node_class]
            return f"{prefix}{node.content}{suffix}"  # type: ignore[attr-defined]

    raise TypeError(f"Cannot serialize {type(node).__name__}")
