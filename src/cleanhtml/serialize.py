"""HTML serialization utilities for cleanhtml DOM nodes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .constants import RAWTEXT_ELEMENTS, VOID_ELEMENTS
from .node import NodeType

if TYPE_CHECKING:
    from .node import Node


def _escape_text(text: str | None) -> str:
    if not text:
        return ""
    return str(text).replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _choose_attr_quote(value: str) -> str:
    if '"' in value and "'" not in value:
        return "'"
    return '"'


def _escape_attr_value(value: str, quote_char: str) -> str:
    value = value.replace("&", "&amp;")
    if quote_char == '"':
        return value.replace('"', "&quot;")
    return value.replace("'", "&#39;")


def serialize_start_tag(name: str, attrs: dict[str, str | None] | None) -> str:
    parts: list[str] = ["<", name]
    for key, value in (attrs or {}).items():
        if value is None:
            parts.extend([" ", key])
            continue
        value_str = str(value)
        quote = _choose_attr_quote(value_str)
        parts.extend([" ", key, "=", quote, _escape_attr_value(value_str, quote), quote])
    parts.append(">")
    return "".join(parts)


def serialize_end_tag(name: str) -> str:
    return f"</{name}>"


def to_html(node: Node) -> str:
    """Serialize `node` and its descendants without any reformatting."""
    parts: list[str] = []
    # Mixed stack of nodes still to visit and literal end tags.
    stack: list[Node | str] = [node]
    while stack:
        item = stack.pop()
        if isinstance(item, str):
            parts.append(item)
            continue

        node_type = item.node_type
        if node_type is NodeType.TEXT:
            parent = item.parent
            if (
                parent is not None
                and parent.node_type is NodeType.ELEMENT
                and parent.name in RAWTEXT_ELEMENTS
                and not parent.namespace
            ):
                parts.append(item.data)
            else:
                parts.append(_escape_text(item.data))
        elif node_type is NodeType.DATA:
            parts.append(item.data)
        elif node_type is NodeType.COMMENT:
            parts.append(f"<!--{item.data or ''}-->")
        elif node_type is NodeType.DOCTYPE:
            name = item.data.name if item.data is not None and item.data.name else "html"
            parts.append(f"<!DOCTYPE {name}>")
        elif node_type is NodeType.PROCESSING_INSTRUCTION:
            parts.append(f"<?{item.data or ''}>")
        elif node_type is NodeType.ELEMENT:
            parts.append(serialize_start_tag(item.name, item.attrs))
            if item.name in VOID_ELEMENTS and not item.namespace:
                continue
            stack.append(serialize_end_tag(item.name))
            stack.extend(reversed(item.children))
        else:
            stack.extend(reversed(item.children or ()))
    return "".join(parts)


def to_test_format(node: Node, indent: int = 0) -> str:
    """Convert node to html5lib test format string.

    Uses '| ' prefixes and two-space indentation per level; attributes are
    listed sorted under their element.
    """
    lines: list[str] = []
    stack: list[tuple[Node, int]] = [(node, indent)]
    while stack:
        item, depth = stack.pop()
        node_type = item.node_type
        if node_type in (NodeType.DOCUMENT, NodeType.FRAGMENT):
            # Containers print nothing; their children take their place.
            stack.extend((child, depth) for child in reversed(item.children or ()))
            continue

        pad = " " * depth
        if node_type is NodeType.COMMENT:
            lines.append(f"| {pad}<!-- {item.data or ''} -->")
        elif node_type is NodeType.DOCTYPE:
            lines.append(f"| <!DOCTYPE {item.data.name or ''}>")
        elif node_type is NodeType.PROCESSING_INSTRUCTION:
            lines.append(f"| {pad}<?{item.data or ''}>")
        elif node_type in (NodeType.TEXT, NodeType.DATA):
            lines.append(f'| {pad}"{item.data or ""}"')
        else:
            name = f"{item.namespace} {item.name}" if item.namespace else item.name
            lines.append(f"| {pad}<{name}>")
            lines.extend(f'| {pad}  {key}="{value or ""}"' for key, value in sorted(item.attrs.items()))
            stack.extend((child, depth + 2) for child in reversed(item.children))
    return "\n".join(lines)
