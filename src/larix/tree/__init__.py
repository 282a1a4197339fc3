"""Tree layer for larix.

Key Components:
    Node, Element, Text, Comment, DocType, CData, Decl, PI: the node model
    XMLTreeBuilder: Turns a token stream into a list of top-level nodes
    stringify: Renders nodes back to markup
"""

from .nodes import (
    PI,
    CData,
    Comment,
    Decl,
    DocType,
    Element,
    Node,
    NodePredicate,
    Text,
    new_element,
)
from .builder import XMLTreeBuilder
from .serializer import render, stringify

__all__ = [
    "PI",
    "CData",
    "Comment",
    "Decl",
    "DocType",
    "Element",
    "Node",
    "NodePredicate",
    "Text",
    "new_element",
    "XMLTreeBuilder",
    "render",
    "stringify",
]
