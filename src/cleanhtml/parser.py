"""Parse markup with html5lib and convert the result into cleanhtml nodes.

html5lib builds an `xml.dom.minidom` tree; the conversion below walks it with
an explicit stack so hostile nesting depth cannot exhaust the interpreter's
recursion limit.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from xml.dom import Node as DomNode

import html5lib
from html5lib.constants import E

from .constants import DATA_ELEMENTS, NAMESPACE_PREFIXES
from .node import DataNode, Document, ElementNode, NodeType, SimpleDomNode, TextNode
from .tokens import Doctype, ParseError

if TYPE_CHECKING:
    from .node import Node
    from .tokens import ParseErrorList


def _new_parser() -> html5lib.HTMLParser:
    return html5lib.HTMLParser(tree=html5lib.getTreeBuilder("dom"), namespaceHTMLElements=False)


def _collect_errors(parser: html5lib.HTMLParser, errors: ParseErrorList | None) -> None:
    if errors is None:
        return
    for position, code, datavars in parser.errors:
        if not errors.can_add_error():
            break
        line, column = position
        message = E.get(code, code)
        if datavars:
            message = message % datavars
        errors.add(ParseError(code, line=line, column=column, message=message))


def _append_text(target: SimpleDomNode, data: str) -> None:
    as_data = target.node_type is NodeType.ELEMENT and target.name in DATA_ELEMENTS and not target.namespace
    children = target.children
    if children:
        last = children[-1]
        if last.node_type is (NodeType.DATA if as_data else NodeType.TEXT):
            last.data += data
            return
    target.append_child(DataNode(data) if as_data else TextNode(data))


def _convert_children(dom_root: DomNode, root: SimpleDomNode) -> None:
    stack = [(dom_root, root)]
    while stack:
        dom_parent, target = stack.pop()
        for dom_node in dom_parent.childNodes:
            node_type = dom_node.nodeType
            if node_type in (DomNode.TEXT_NODE, DomNode.CDATA_SECTION_NODE):
                _append_text(target, dom_node.data)
            elif node_type == DomNode.ELEMENT_NODE:
                namespace = NAMESPACE_PREFIXES.get(dom_node.namespaceURI) if dom_node.namespaceURI else None
                element = ElementNode(dom_node.tagName, dict(dom_node.attributes.items()), namespace)
                target.append_child(element)
                stack.append((dom_node, element))
            elif node_type == DomNode.COMMENT_NODE:
                target.append_child(SimpleDomNode("#comment", dom_node.data))
            elif node_type == DomNode.DOCUMENT_TYPE_NODE:
                doctype = Doctype(dom_node.name, dom_node.publicId, dom_node.systemId)
                target.append_child(SimpleDomNode("!doctype", doctype))
            elif node_type == DomNode.PROCESSING_INSTRUCTION_NODE:
                target.append_child(SimpleDomNode("#pi", f"{dom_node.target} {dom_node.data}".strip()))


def parse(html: str, base_uri: str = "", errors: ParseErrorList | None = None) -> Document:
    """Parse a full HTML document.

    Parse errors are appended to `errors` (up to its bound) when given.
    """
    parser = _new_parser()
    dom = parser.parse(html or "")
    document = Document(base_uri)
    _convert_children(dom, document)
    _collect_errors(parser, errors)
    return document


def parse_fragment(
    html: str,
    context: str | ElementNode = "body",
    errors: ParseErrorList | None = None,
) -> list[Node]:
    """Parse `html` as the contents of a `context` element.

    Returns the top-level nodes, detached from any parent.
    """
    container = context.name if isinstance(context, ElementNode) else context
    parser = _new_parser()
    fragment = parser.parseFragment(html or "", container=container)
    holder = SimpleDomNode("#document-fragment")
    _convert_children(fragment, holder)
    _collect_errors(parser, errors)

    nodes = list(holder.children or ())
    for node in nodes:
        holder.remove_child(node)
    return nodes


def parse_body_fragment(html: str, base_uri: str = "", errors: ParseErrorList | None = None) -> Document:
    """Parse a body fragment into the body of an otherwise empty document shell."""
    document = Document.create_shell(base_uri)
    body = document.body
    body.insert_children(0, parse_fragment(html, body, errors))
    return document
