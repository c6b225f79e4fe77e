"""Utility functions for Go syntax tree traversal."""

from tree_sitter import Node

_DEFAULT_ENCODING = "utf-8"


def get_node_text(node: Node, source: bytes) -> str:
    """Get the text content of a syntax node.

    Args:
        node: Tree-sitter node with start_byte and end_byte attributes
        source: Original source bytes the node was parsed from

    Returns:
        Text content of the node

    """
    return source[node.start_byte : node.end_byte].decode(_DEFAULT_ENCODING)


def find_child_by_type(node: Node, child_type: str) -> Node | None:
    """Find the first direct child of a specific type.

    Args:
        node: Parent node to search in
        child_type: Type of child node to find

    Returns:
        First matching child node or None

    """
    for child in node.children:
        if child.type == child_type:
            return child
    return None


def find_children_by_type(node: Node, child_type: str) -> list[Node]:
    """Find all direct children of a specific type.

    Args:
        node: Parent node to search in
        child_type: Type of children to find

    Returns:
        List of matching child nodes

    """
    return [child for child in node.children if child.type == child_type]


def unquote(literal: str) -> str:
    """Strip the quotes from a Go interpreted or raw string literal."""
    if len(literal) >= 2 and literal[0] == literal[-1] and literal[0] in "\"`":
        return literal[1:-1]
    return literal

