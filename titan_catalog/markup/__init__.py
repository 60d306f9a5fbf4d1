"""Markup parsing and tree queries for catalog documents."""

from .parser import DOCUMENT_NODE, Node, decode_entities, parse, parse_attributes
from .query import child_text, children_in, find_all, find_named, first_child, iter_nodes

__all__ = [
    "DOCUMENT_NODE",
    "Node",
    "decode_entities",
    "parse",
    "parse_attributes",
    "child_text",
    "children_in",
    "find_all",
    "find_named",
    "first_child",
    "iter_nodes",
]
