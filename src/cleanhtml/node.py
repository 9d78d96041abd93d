"""DOM node types produced by the parser and built by the cleaner."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from .tokens import Doctype


class NodeType(enum.IntEnum):
    ELEMENT = 0
    TEXT = 1
    DATA = 2
    COMMENT = 3
    DOCTYPE = 4
    PROCESSING_INSTRUCTION = 5
    DOCUMENT = 6
    FRAGMENT = 7


_SIMPLE_NODE_TYPES = {
    "#comment": NodeType.COMMENT,
    "!doctype": NodeType.DOCTYPE,
    "#pi": NodeType.PROCESSING_INSTRUCTION,
    "#document": NodeType.DOCUMENT,
    "#document-fragment": NodeType.FRAGMENT,
}

_INVALID_TAG_CHARS = frozenset("\t\n\f\r />\x00")


def validate_tag_name(name: str) -> str:
    """Return `name` if it is usable as an element tag name, else raise ValueError."""
    if not isinstance(name, str) or not name:
        msg = f"Invalid tag name {name!r}: tag names must be non-empty strings"
        raise ValueError(msg)
    for ch in name:
        if ch in _INVALID_TAG_CHARS:
            msg = f"Invalid tag name {name!r}: contains {ch!r}"
            raise ValueError(msg)
    return name


@dataclass(frozen=True, slots=True)
class Attribute:
    """A name/value pair belonging to one element."""

    name: str
    value: str | None = ""
    owner: ElementNode | None = field(default=None, compare=False, repr=False)


class SimpleDomNode:
    """Opaque and container nodes: comments, doctypes, fragments."""

    __slots__ = ("children", "data", "name", "node_type", "parent")

    def __init__(self, name: str, data: str | Doctype | None = None) -> None:
        if name not in _SIMPLE_NODE_TYPES:
            msg = f"Unknown simple node name {name!r}"
            raise ValueError(msg)
        self.name = name
        self.node_type = _SIMPLE_NODE_TYPES[name]
        self.parent: SimpleDomNode | None = None
        self.data = data
        if self.node_type in (NodeType.DOCUMENT, NodeType.FRAGMENT):
            self.children: list[Node] | None = []
        else:
            self.children = None

    def append_child(self, node: Node) -> None:
        if self.children is None:
            msg = f"{self.name} nodes cannot have children"
            raise ValueError(msg)
        if node.parent is not None:
            node.parent.remove_child(node)
        self.children.append(node)
        node.parent = self

    def insert_children(self, index: int, nodes: Iterable[Node]) -> None:
        if self.children is None:
            msg = f"{self.name} nodes cannot have children"
            raise ValueError(msg)
        for offset, node in enumerate(list(nodes)):
            if node.parent is not None:
                node.parent.remove_child(node)
            self.children.insert(index + offset, node)
            node.parent = self

    def remove_child(self, node: Node) -> None:
        if self.children and node in self.children:
            self.children.remove(node)
            node.parent = None

    def __repr__(self) -> str:
        if self.children is None:
            return f"<{self.__class__.__name__} {self.name} {self.data!r}>"
        return f"<{self.__class__.__name__} {self.name} children={len(self.children)}>"


class ElementNode(SimpleDomNode):
    __slots__ = ("attrs", "namespace")

    def __init__(self, name: str, attrs: dict[str, str | None] | None = None, namespace: str | None = None) -> None:
        self.name = validate_tag_name(name)
        self.node_type = NodeType.ELEMENT
        self.parent = None
        self.data = None
        self.namespace = namespace
        self.children = []
        self.attrs: dict[str, str | None] = dict(attrs) if attrs else {}

    def iter_attributes(self) -> Iterator[Attribute]:
        for name, value in self.attrs.items():
            yield Attribute(name, value, self)

    def __repr__(self) -> str:
        return f"<ElementNode {self.name} attrs={len(self.attrs)} children={len(self.children or ())}>"


class TextNode:
    __slots__ = ("data", "name", "node_type", "parent")

    def __init__(self, data: str) -> None:
        self.data = data
        self.parent: SimpleDomNode | None = None
        self.name = "#text"
        self.node_type = NodeType.TEXT

    @property
    def children(self) -> None:
        return None

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.data[:30]!r}>"


class DataNode(TextNode):
    """Raw payload (script or style body) that is never reinterpreted as markup."""

    __slots__ = ()

    def __init__(self, data: str) -> None:
        super().__init__(data)
        self.name = "#data"
        self.node_type = NodeType.DATA


Node = SimpleDomNode | TextNode


class Document(SimpleDomNode):
    """A `#document` root with an `html > (head, body)` region."""

    __slots__ = ("base_uri",)

    def __init__(self, base_uri: str = "") -> None:
        super().__init__("#document")
        self.base_uri = base_uri

    @classmethod
    def create_shell(cls, base_uri: str = "") -> Document:
        doc = cls(base_uri)
        html = ElementNode("html")
        doc.append_child(html)
        html.append_child(ElementNode("head"))
        html.append_child(ElementNode("body"))
        return doc

    @property
    def html(self) -> ElementNode | None:
        for child in self.children or ():
            if child.node_type is NodeType.ELEMENT and child.name == "html":
                return child  # type: ignore[return-value]
        return None

    def _html_child(self, name: str) -> ElementNode | None:
        html = self.html
        if html is None:
            return None
        for child in html.children or ():
            if child.node_type is NodeType.ELEMENT and child.name == name:
                return child  # type: ignore[return-value]
        return None

    @property
    def head(self) -> ElementNode | None:
        return self._html_child("head")

    @property
    def body(self) -> ElementNode | None:
        # Frameset documents have no body.
        return self._html_child("body")
