"""Policy-driven cleaning of untrusted HTML trees.

The cleaner never edits its input. It walks the dirty tree and builds a new
tree next to it, copying only what the policy allows:

- Allowed elements are recreated with their allowed attributes, then the
  policy's enforced attributes are set on top.
- Disallowed elements are unwrapped: the element is dropped and its children
  are attached to the nearest kept ancestor.
- Text is always copied. Raw data (script/style bodies) is copied only when
  its own parent element is allowed.
- Comments, doctypes and processing instructions are always dropped.

Everything dropped is recorded in a `CleaningResult`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .node import DataNode, Document, ElementNode, NodeType, TextNode
from .parser import parse_body_fragment, parse_fragment
from .serialize import to_html
from .tokens import ParseErrorList

if TYPE_CHECKING:
    from collections.abc import Callable

    from .node import Attribute, Node
    from .sanitize import PolicyOracle

    ReportCallback = Callable[..., None]

logger = logging.getLogger(__name__)


class CleaningResult:
    """What one cleaning pass produced and what it threw away.

    `removed_nodes` lists source nodes with no counterpart in the output.
    `removed_attributes` lists attributes dropped from elements that were
    kept. Both are in discovery order.
    """

    __slots__ = ("_removed_attributes", "_removed_nodes", "document", "root")

    def __init__(self, root: ElementNode, document: Document | None = None) -> None:
        self.root = root
        self.document = document
        self._removed_nodes: list[Node] = []
        self._removed_attributes: list[Attribute] = []

    @property
    def removed_nodes(self) -> tuple[Node, ...]:
        return tuple(self._removed_nodes)

    @property
    def removed_attributes(self) -> tuple[Attribute, ...]:
        return tuple(self._removed_attributes)

    @property
    def discarded_count(self) -> int:
        return len(self._removed_nodes) + len(self._removed_attributes)

    @property
    def is_clean(self) -> bool:
        """True if nothing had to be removed."""
        return self.discarded_count == 0

    def __repr__(self) -> str:
        return (
            f"CleaningResult(removed_nodes={len(self._removed_nodes)}, "
            f"removed_attributes={len(self._removed_attributes)})"
        )


class SanitizingTraversal:
    """Copy the policy-approved parts of a source subtree under a destination element.

    The walk is depth-first in document order. Each stack entry pairs a
    source node with the output element its copy goes under, so the cursor
    only moves down when a kept element is entered and is restored simply by
    popping back to an entry that was pushed with an outer cursor.
    """

    __slots__ = ("debug_enabled", "policy", "report")

    def __init__(self, policy: PolicyOracle, *, report: ReportCallback | None = None, debug: bool = False) -> None:
        if policy is None:
            msg = "policy must not be None"
            raise ValueError(msg)
        self.policy = policy
        self.report = report
        self.debug_enabled = bool(debug)

    def debug(self, message: str) -> None:
        if self.debug_enabled:
            logger.debug(message)

    def _discard_node(self, node: Node, result: CleaningResult) -> None:
        result._removed_nodes.append(node)
        if self.report is not None or self.debug_enabled:
            msg = f"Removed {node.name} node"
            self.debug(msg)
            if self.report is not None:
                self.report(msg, node=node)

    def _discard_attribute(self, attribute: Attribute, result: CleaningResult) -> None:
        result._removed_attributes.append(attribute)
        if self.report is not None or self.debug_enabled:
            msg = f"Removed attribute {attribute.name!r} from <{attribute.owner.name}>"
            self.debug(msg)
            if self.report is not None:
                self.report(msg, node=attribute.owner)

    def _create_safe_element(self, source: ElementNode, result: CleaningResult) -> ElementNode:
        tag = source.name
        attrs: dict[str, str | None] = {}
        for attribute in source.iter_attributes():
            if self.policy.is_safe_attribute(tag, source, attribute):
                attrs[attribute.name] = attribute.value
            else:
                self._discard_attribute(attribute, result)

        # Enforced attributes go last so nothing in the source can suppress them.
        for attribute in self.policy.enforced_attributes(tag):
            attrs[attribute.name] = attribute.value

        return ElementNode(tag, attrs, source.namespace)

    def copy_safe_nodes(self, source: ElementNode, dest: ElementNode) -> CleaningResult:
        """Copy the children of `source` into `dest`, filtered through the policy.

        `source` itself is a container: it is never copied and never counted
        as removed.
        """
        if source is None or dest is None:
            msg = "source and dest elements must not be None"
            raise ValueError(msg)

        policy = self.policy
        result = CleaningResult(dest)
        stack: list[tuple[Node, ElementNode]] = [(child, dest) for child in reversed(source.children or ())]
        while stack:
            node, cursor = stack.pop()
            node_type = node.node_type
            if node_type is NodeType.ELEMENT:
                if policy.is_safe_tag(node.name):
                    copy = self._create_safe_element(node, result)
                    cursor.append_child(copy)
                    cursor = copy
                else:
                    self._discard_node(node, result)
                stack.extend((child, cursor) for child in reversed(node.children))
            elif node_type is NodeType.TEXT:
                cursor.append_child(TextNode(node.data))
            elif node_type is NodeType.DATA:
                # The data's own parent decides, not the output position after unwrapping.
                parent = node.parent
                if parent is not None and parent.node_type is NodeType.ELEMENT and policy.is_safe_tag(parent.name):
                    cursor.append_child(DataNode(node.data))
                else:
                    self._discard_node(node, result)
            else:
                self._discard_node(node, result)
        return result


class Cleaner:
    """Cleans documents and body fragments against a policy.

    Only the `body` of a dirty document is used. A document with content in
    its `head` is never valid, since that content would be silently lost.
    """

    __slots__ = ("policy", "traversal")

    def __init__(self, policy: PolicyOracle, *, report: ReportCallback | None = None, debug: bool = False) -> None:
        if policy is None:
            msg = "policy must not be None"
            raise ValueError(msg)
        self.policy = policy
        self.traversal = SanitizingTraversal(policy, report=report, debug=debug)

    def clean(self, dirty_document: Document) -> CleaningResult:
        """Return a new document containing only the allowed parts of `dirty_document`'s body."""
        if dirty_document is None:
            msg = "dirty_document must not be None"
            raise ValueError(msg)

        clean_document = Document.create_shell(dirty_document.base_uri)
        dirty_body = dirty_document.body
        if dirty_body is not None:
            result = self.traversal.copy_safe_nodes(dirty_body, clean_document.body)
        else:
            # Frameset documents have no body; the clean document gets an empty one.
            result = CleaningResult(clean_document.body)
        result.document = clean_document
        return result

    def is_valid(self, dirty_document: Document) -> bool:
        if dirty_document is None:
            msg = "dirty_document must not be None"
            raise ValueError(msg)

        clean_document = Document.create_shell(dirty_document.base_uri)
        dirty_body = dirty_document.body
        if dirty_body is not None:
            discarded = self.traversal.copy_safe_nodes(dirty_body, clean_document.body).discarded_count
        else:
            discarded = 0
        head = dirty_document.head
        return discarded == 0 and (head is None or not head.children)

    def is_valid_body_html(self, body_html: str) -> bool:
        """True if `body_html` parses without errors and needs no cleaning."""
        clean_document = Document.create_shell("")
        dirty_document = Document.create_shell("")
        errors = ParseErrorList.tracking(1)
        dirty_body = dirty_document.body
        dirty_body.insert_children(0, parse_fragment(body_html, dirty_body, errors))
        result = self.traversal.copy_safe_nodes(dirty_body, clean_document.body)
        return result.is_clean and not errors

    def check_for_parse_errors(self, html: str, max_errors: int = 1) -> ParseErrorList:
        errors = ParseErrorList.tracking(max_errors)
        parse_fragment(html, "body", errors)
        return errors


def clean_html(body_html: str, policy: PolicyOracle, base_uri: str = "") -> str:
    """Parse `body_html` as a body fragment and return the cleaned body's inner HTML."""
    result = Cleaner(policy).clean(parse_body_fragment(body_html, base_uri))
    return "".join(to_html(child) for child in result.root.children)


def is_valid_html(body_html: str, policy: PolicyOracle) -> bool:
    return Cleaner(policy).is_valid_body_html(body_html)
