"""HTML element constants shared by the parser adapter and the serializer.

References:
    - https://html.spec.whatwg.org/multipage/syntax.html#void-elements
    - https://html.spec.whatwg.org/multipage/syntax.html#raw-text-elements
"""

VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "basefont",
        "bgsound",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "keygen",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)

# Elements whose text content is kept as a DataNode rather than a TextNode.
DATA_ELEMENTS = frozenset({"script", "style"})

# Elements whose text is serialized without entity escaping.
RAWTEXT_ELEMENTS = frozenset(
    {
        "style",
        "script",
        "xmp",
        "iframe",
        "noembed",
        "noframes",
        "plaintext",
    }
)

NAMESPACE_PREFIXES = {
    "http://www.w3.org/1999/xhtml": None,
    "http://www.w3.org/2000/svg": "svg",
    "http://www.w3.org/1998/Math/MathML": "math",
}
