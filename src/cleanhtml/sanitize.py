"""Sanitization policy API.

The cleaner never decides on its own what is safe. It asks a policy oracle
three questions per node: is this tag allowed, is this attribute allowed on
this element, and which attributes must always be set on this tag.

`SanitizationPolicy` is an allow-list implementation of that contract. It is
immutable, so one instance can be shared by any number of concurrent
cleaners. No presets are shipped; callers describe what they expect.
"""

from __future__ import annotations

import re
from collections.abc import Collection, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable
from urllib.parse import urlsplit

from .node import Attribute

if TYPE_CHECKING:
    from .node import ElementNode


@runtime_checkable
class PolicyOracle(Protocol):
    def is_safe_tag(self, tag: str) -> bool: ...

    def is_safe_attribute(self, tag: str, element: ElementNode, attribute: Attribute) -> bool: ...

    def enforced_attributes(self, tag: str) -> Collection[Attribute]: ...


_SCHEME_RE = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.\-]*):")

# Browsers drop these anywhere in a URL before resolving it.
_URL_STRIP_RE = re.compile(r"[\t\n\r]")


def _normalize_url(value: str) -> str:
    value = _URL_STRIP_RE.sub("", value)
    return value.strip("\x00\x01\x02\x03\x04\x05\x06\x07\x08\x0b\x0c\x0e\x0f\x10\x11\x12\x13\x14\x15\x16\x17\x18\x19\x1a\x1b\x1c\x1d\x1e\x1f ")


@dataclass(frozen=True, slots=True)
class UrlRule:
    """Rule for a single URL-valued attribute (e.g. a[href], img[src])."""

    # Allow relative URLs (including /path, ./path, ../path, ?query).
    allow_relative: bool = True

    # Allow same-document fragments (#foo). Typically safe.
    allow_fragment: bool = True

    # Allow protocol-relative URLs (//example.com). Default False because they
    # are surprising and effectively network URLs.
    allow_protocol_relative: bool = False

    # Allow absolute URLs with these schemes (lowercase), e.g. {"https"}.
    # If empty, all absolute URLs with a scheme are disallowed.
    allowed_schemes: Collection[str] = field(default_factory=set)

    # If provided, absolute URLs are allowed only if the parsed host is in this
    # allowlist.
    allowed_hosts: Collection[str] | None = None

    def __post_init__(self) -> None:
        # Accept lists/tuples from user code, normalize for internal use.
        object.__setattr__(self, "allowed_schemes", {str(s).lower() for s in self.allowed_schemes})
        if self.allowed_hosts is not None:
            object.__setattr__(self, "allowed_hosts", {str(h).lower() for h in self.allowed_hosts})

    def _host_allowed(self, url: str) -> bool:
        if self.allowed_hosts is None:
            return True
        try:
            host = urlsplit(url).hostname
        except ValueError:
            return False
        return host is not None and host in self.allowed_hosts

    def allows(self, value: str | None) -> bool:
        url = _normalize_url(value or "")
        if url.startswith("#"):
            return self.allow_fragment
        if url.startswith(("//", "\\\\", "/\\", "\\/")):
            return self.allow_protocol_relative and self._host_allowed("//" + url[2:])
        match = _SCHEME_RE.match(url)
        if match is None:
            return self.allow_relative
        if match.group(1).lower() not in self.allowed_schemes:
            return False
        return self._host_allowed(url)


@dataclass(frozen=True, slots=True)
class SanitizationPolicy:
    """An allow-list driven policy for sanitizing a parsed DOM.

    - Tags not in `allowed_tags` are disallowed.
    - Attributes not in `allowed_attributes[tag]` (or `allowed_attributes["*"]`)
      are disallowed.
    - Allowed attributes with a `url_rules[(tag, attr)]` (or
      `url_rules[("*", attr)]`) entry must also satisfy that rule.
    - `enforced_attrs[tag]` is set on every kept element with that tag,
      replacing any value the source had. A source attribute that already
      has exactly the enforced value counts as allowed.

    Tag and attribute names are compared ASCII-lowercase.
    """

    allowed_tags: Collection[str]
    allowed_attributes: Mapping[str, Collection[str]] = field(default_factory=dict)
    url_rules: Mapping[tuple[str, str], UrlRule] = field(default_factory=dict)
    enforced_attrs: Mapping[str, Mapping[str, str]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Normalize to lowercase sets/dicts so lookups are plain membership checks.
        object.__setattr__(self, "allowed_tags", frozenset(str(t).lower() for t in self.allowed_tags))

        normalized_attrs: dict[str, frozenset[str]] = {}
        for tag, attrs in self.allowed_attributes.items():
            if isinstance(attrs, str):
                msg = f"allowed_attributes[{tag!r}] must be a collection of names, not a string"
                raise TypeError(msg)
            normalized_attrs[str(tag).lower()] = frozenset(str(a).lower() for a in attrs)
        object.__setattr__(self, "allowed_attributes", normalized_attrs)

        normalized_rules: dict[tuple[str, str], UrlRule] = {}
        for (tag, attr), rule in self.url_rules.items():
            if not isinstance(rule, UrlRule):
                msg = f"url_rules[{(tag, attr)!r}] must be a UrlRule"
                raise TypeError(msg)
            normalized_rules[(str(tag).lower(), str(attr).lower())] = rule
        object.__setattr__(self, "url_rules", normalized_rules)

        normalized_enforced: dict[str, tuple[Attribute, ...]] = {}
        for tag, attrs in self.enforced_attrs.items():
            normalized_enforced[str(tag).lower()] = tuple(
                Attribute(str(name).lower(), str(value)) for name, value in attrs.items()
            )
        object.__setattr__(self, "enforced_attrs", normalized_enforced)

    def is_safe_tag(self, tag: str) -> bool:
        return tag.lower() in self.allowed_tags

    def is_safe_attribute(self, tag: str, element: ElementNode, attribute: Attribute) -> bool:
        """Check one attribute of `element`.

        `element` is the source element; this policy only looks at names and
        values, but subclasses may use it for contextual rules.
        """
        tag = tag.lower()
        name = attribute.name.lower()
        if name not in self.allowed_attributes.get(tag, ()) and name not in self.allowed_attributes.get("*", ()):
            # An attribute already carrying its enforced value is kept, so
            # cleaning a cleaned tree finds nothing to remove.
            return any(
                enforced.name == name and enforced.value == attribute.value for enforced in self.enforced_attributes(tag)
            )

        rule = self.url_rules.get((tag, name)) or self.url_rules.get(("*", name))
        if rule is None:
            return True
        return rule.allows(attribute.value)

    def enforced_attributes(self, tag: str) -> tuple[Attribute, ...]:
        return self.enforced_attrs.get(tag.lower(), ())
