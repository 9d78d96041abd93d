from __future__ import annotations

import unittest

from cleanhtml.node import DataNode, Document, ElementNode, SimpleDomNode, TextNode
from cleanhtml.serialize import serialize_start_tag, to_html, to_test_format
from cleanhtml.tokens import Doctype


class TestToHtml(unittest.TestCase):
    def test_text_is_escaped(self) -> None:
        p = ElementNode("p")
        p.append_child(TextNode("1 < 2 & 3 > 2"))
        assert to_html(p) == "<p>1 &lt; 2 &amp; 3 &gt; 2</p>"

    def test_data_is_verbatim(self) -> None:
        script = ElementNode("script")
        script.append_child(DataNode("if (a < b && c) {}"))
        assert to_html(script) == "<script>if (a < b && c) {}</script>"

    def test_text_in_rawtext_element_is_verbatim(self) -> None:
        xmp = ElementNode("xmp")
        xmp.append_child(TextNode("<b>"))
        assert to_html(xmp) == "<xmp><b></xmp>"

    def test_text_in_foreign_rawtext_name_is_escaped(self) -> None:
        svg = ElementNode("svg", namespace="svg")
        style = ElementNode("style", namespace="svg")
        style.append_child(TextNode("<img src=x onerror=alert(1)>"))
        svg.append_child(style)
        assert to_html(svg) == "<svg><style>&lt;img src=x onerror=alert(1)&gt;</style></svg>"

    def test_attributes(self) -> None:
        assert serialize_start_tag("a", {"href": "/x?a=1&b=2", "title": 'say "hi"'}) == (
            '<a href="/x?a=1&amp;b=2" title=\'say "hi"\'>'
        )
        assert serialize_start_tag("input", {"disabled": None, "value": ""}) == '<input disabled value="">'
        assert serialize_start_tag("p", {"title": "it's \"x\""}) == '<p title="it\'s &quot;x&quot;">'

    def test_void_elements_have_no_end_tag(self) -> None:
        p = ElementNode("p")
        p.append_child(ElementNode("br"))
        p.append_child(ElementNode("img", {"src": "/a.png"}))
        assert to_html(p) == '<p><br><img src="/a.png"></p>'

    def test_opaque_nodes(self) -> None:
        doc = Document()
        doc.append_child(SimpleDomNode("!doctype", Doctype("html")))
        doc.append_child(SimpleDomNode("#comment", " c "))
        doc.append_child(SimpleDomNode("#pi", "xml version"))
        assert to_html(doc) == "<!DOCTYPE html><!-- c --><?xml version>"

    def test_deep_tree(self) -> None:
        root = ElementNode("div")
        cursor = root
        for _ in range(3000):
            child = ElementNode("b")
            cursor.append_child(child)
            cursor = child
        html = to_html(root)
        assert html.startswith("<div><b><b>")
        assert html.endswith("</b></b></div>")


class TestToTestFormat(unittest.TestCase):
    def test_elements_text_and_attributes(self) -> None:
        doc = Document.create_shell()
        p = ElementNode("p", {"title": "t", "class": "c"})
        p.append_child(TextNode("x"))
        p.append_child(SimpleDomNode("#comment", "note"))
        doc.body.append_child(p)
        svg = ElementNode("svg", namespace="svg")
        doc.body.append_child(svg)
        assert to_test_format(doc) == "\n".join(
            [
                "| <html>",
                "|   <head>",
                "|   <body>",
                "|     <p>",
                '|       class="c"',
                '|       title="t"',
                '|       "x"',
                "|       <!-- note -->",
                "|     <svg svg>",
            ]
        )

    def test_deep_tree(self) -> None:
        root = ElementNode("div")
        cursor = root
        for _ in range(1500):
            child = ElementNode("b")
            cursor.append_child(child)
            cursor = child
        cursor.append_child(TextNode("x"))
        lines = to_test_format(root).split("\n")
        assert len(lines) == 1502
        assert lines[1] == "|   <b>"
        assert lines[-1] == "| " + " " * 3002 + '"x"'

    def test_nested_fragment_is_transparent(self) -> None:
        fragment = SimpleDomNode("#document-fragment")
        fragment.append_child(ElementNode("b"))
        fragment.append_child(TextNode("t"))
        assert to_test_format(fragment) == '| <b>\n| "t"'


if __name__ == "__main__":
    unittest.main()
