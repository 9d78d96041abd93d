"""Tests for the html5lib parser adapter."""

import unittest

from cleanhtml import NodeType, ParseError, ParseErrorList, parse, parse_body_fragment, parse_fragment, to_test_format


class TestParseDocument(unittest.TestCase):
    def test_document_regions(self):
        doc = parse("<!DOCTYPE html><html><head><title>t</title></head><body><p>x</p></body></html>")
        assert doc.children[0].node_type is NodeType.DOCTYPE
        assert doc.children[0].data.name == "html"
        assert [c.name for c in doc.head.children] == ["title"]
        assert [c.name for c in doc.body.children] == ["p"]

    def test_implied_structure(self):
        doc = parse("<p>x")
        assert doc.html is not None
        assert doc.head.children == []
        assert to_test_format(doc.body) == '| <body>\n|   <p>\n|     "x"'

    def test_base_uri_is_kept(self):
        assert parse("", base_uri="https://example.com/").base_uri == "https://example.com/"

    def test_frameset_document_has_no_body(self):
        doc = parse("<frameset></frameset>")
        assert doc.body is None
        assert doc.head is not None

    def test_errors_are_collected_when_requested(self):
        errors = ParseErrorList.tracking(10)
        parse("<p>x</p>", errors=errors)
        assert len(errors) > 0
        assert all(isinstance(e, ParseError) for e in errors)
        assert errors[0].line == 1
        assert isinstance(errors[0].column, int)


class TestParseFragment(unittest.TestCase):
    def test_nodes_are_detached(self):
        nodes = parse_fragment("<b>a</b>text<!--c-->")
        assert [n.node_type for n in nodes] == [NodeType.ELEMENT, NodeType.TEXT, NodeType.COMMENT]
        assert all(n.parent is None for n in nodes)

    def test_script_and_style_bodies_are_data(self):
        nodes = parse_fragment("<script>if (a < b) {}</script><style>p{}</style><textarea>t</textarea>")
        script, style, textarea = nodes
        assert script.children[0].node_type is NodeType.DATA
        assert script.children[0].data == "if (a < b) {}"
        assert style.children[0].node_type is NodeType.DATA
        assert textarea.children[0].node_type is NodeType.TEXT

    def test_adjacent_text_is_merged(self):
        nodes = parse_fragment("a&amp;b&lt;c")
        assert len(nodes) == 1
        assert nodes[0].data == "a&b<c"

    def test_attributes(self):
        (div,) = parse_fragment('<div ID="a" data-x="1" hidden>x</div>')
        assert div.attrs == {"id": "a", "data-x": "1", "hidden": ""}

    def test_foreign_namespaces(self):
        (svg, math) = parse_fragment("<svg><foreignObject></foreignObject></svg><math><mi>x</mi></math>")
        assert svg.namespace == "svg"
        assert svg.children[0].name == "foreignObject"
        assert math.namespace == "math"
        assert math.children[0].namespace == "math"

    def test_bogus_comment_from_processing_instruction(self):
        (node,) = parse_fragment("<?xml version='1.0'?>")
        assert node.node_type is NodeType.COMMENT

    def test_errors_are_bounded(self):
        errors = ParseErrorList.tracking(1)
        parse_fragment("</div></span></p>", errors=errors)
        assert len(errors) == 1
        assert errors[0].code
        assert errors[0].message

        errors = ParseErrorList.tracking(10)
        parse_fragment("</div></span></p>", errors=errors)
        assert 1 < len(errors) <= 10

    def test_no_tracking(self):
        errors = ParseErrorList.no_tracking()
        parse_fragment("<b>x", errors=errors)
        assert errors == []

    def test_context_changes_parsing(self):
        nodes = parse_fragment("<td>x</td>", context="tr")
        assert [n.name for n in nodes] == ["td"]
        nodes = parse_fragment("<td>x</td>", context="body")
        assert [n.name for n in nodes] == ["#text"]


class TestParseBodyFragment(unittest.TestCase):
    def test_fragment_lands_in_body(self):
        doc = parse_body_fragment("<p>one</p><p>two</p>")
        assert doc.head.children == []
        assert [c.name for c in doc.body.children] == ["p", "p"]
        assert all(c.parent is doc.body for c in doc.body.children)

    def test_head_only_tags_stay_in_body(self):
        doc = parse_body_fragment("<meta charset='utf-8'><b>x</b>")
        assert doc.head.children == []
        assert [c.name for c in doc.body.children] == ["meta", "b"]


class TestParseErrorList(unittest.TestCase):
    def test_bound(self):
        errors = ParseErrorList.tracking(2)
        assert errors.add(ParseError("a"))
        assert errors.add(ParseError("b"))
        assert not errors.can_add_error()
        assert not errors.add(ParseError("c"))
        assert [e.code for e in errors] == ["a", "b"]

    def test_parse_error_str(self):
        assert str(ParseError("eof", line=1, column=4)) == "(1,4): eof"
        assert str(ParseError("eof", line=1, column=4, message="Unexpected EOF")) == "(1,4): eof - Unexpected EOF"
        assert str(ParseError("eof")) == "eof"
        assert repr(ParseError("eof", line=2, column=1)) == "ParseError('eof', line=2, column=1)"
        assert ParseError("eof", 1, 2) == ParseError("eof", 1, 2, message="other")


if __name__ == "__main__":
    unittest.main()
