from .cleaner import Cleaner, CleaningResult, SanitizingTraversal, clean_html, is_valid_html
from .node import Attribute, DataNode, Document, ElementNode, NodeType, SimpleDomNode, TextNode
from .parser import parse, parse_body_fragment, parse_fragment
from .sanitize import PolicyOracle, SanitizationPolicy, UrlRule
from .serialize import to_html, to_test_format
from .tokens import ParseError, ParseErrorList

__all__ = [
    "Attribute",
    "Cleaner",
    "CleaningResult",
    "DataNode",
    "Document",
    "ElementNode",
    "NodeType",
    "ParseError",
    "ParseErrorList",
    "PolicyOracle",
    "SanitizationPolicy",
    "SanitizingTraversal",
    "SimpleDomNode",
    "TextNode",
    "UrlRule",
    "clean_html",
    "is_valid_html",
    "parse",
    "parse_body_fragment",
    "parse_fragment",
    "to_html",
    "to_test_format",
]
