"""Heading anchors and the in-page contents list.

Every heading from ``min_level`` to ``<h6>`` gets an id, ``tabindex="-1"``
and a self-link, and is indexed into a nested ``<ol>`` contents list. Three
marker classes tune individual headings::

    <h2 class="nolink">   id, no self-link
    <h2 class="nomenu">   not in the contents list
    <h2 class="noid">     left untouched (implied by nolink + nomenu)

"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from folio.config import HeadingConfig

NAV_HEADING_TAG = "<nav-heading></nav-heading>"

_HEADING_RE = re.compile(r"<h([1-6])(\s[^>]*)?>(.*?)</h\1>", re.IGNORECASE | re.DOTALL)
_ID_ATTR_RE = re.compile(r"""\bid\s*=\s*["']([^"']*)["']""", re.IGNORECASE)
_CLASS_ATTR_RE = re.compile(r"""\bclass\s*=\s*["']([^"']*)["']""", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]*>")
_PUNCTUATION_RE = re.compile(r"[^\w\s]")
_WHITESPACE_RE = re.compile(r"\s+")
_EMPTY_RE = re.compile(r"<li></li>|<ol></ol>")


@dataclass(frozen=True, slots=True)
class HeadingResult:
    """Output of :func:`add_heading_anchors`.

    Attributes:
        content: HTML with anchored headings.
        nav_heading: Contents list markup, ``""`` when there are no entries.

    """

    content: str
    nav_heading: str


def heading_id(text: str) -> str:
    """Derive an anchor id from heading HTML."""
    plain = html.unescape(_TAG_RE.sub("", text))
    ident = _WHITESPACE_RE.sub("-", _PUNCTUATION_RE.sub("", plain).strip()).lower()
    if not ident[:1].isalpha():
        ident = "a-" + ident
    return ident


def add_heading_anchors(content: str, options: HeadingConfig) -> HeadingResult:
    """Anchor the headings in ``content`` and build its contents list."""
    if not options.enabled:
        return HeadingResult(content=content, nav_heading="")

    used: set[str] = set()
    for match in _HEADING_RE.finditer(content):
        existing = _ID_ATTR_RE.search(match.group(2) or "")
        if existing:
            used.add(existing.group(1))

    entries: list[tuple[int, str]] = []

    def anchor(match: re.Match[str]) -> str:
        level = int(match.group(1))
        if level < options.min_level:
            return match.group(0)

        attrs = match.group(2) or ""
        inner = match.group(3)
        class_attr = _CLASS_ATTR_RE.search(attrs)
        classes = set(class_attr.group(1).split()) if class_attr else set()
        nolink = options.nolink in classes
        nomenu = options.nomenu in classes
        noid = options.noid in classes or (nolink and nomenu)

        existing = _ID_ATTR_RE.search(attrs)
        if existing:
            ident = existing.group(1)
        elif noid:
            ident = ""
        else:
            ident = _unique(heading_id(inner), used)
            attrs += f' id="{ident}"'

        title = _TAG_RE.sub("", inner).strip()
        entries.append((level, "" if nomenu or not ident else f'<a href="#{ident}">{title}</a>'))

        if not ident:
            return match.group(0)
        if "tabindex" not in attrs:
            attrs += ' tabindex="-1"'
        if not nolink:
            inner += (
                f' <a href="#{ident}" class="{options.link_class}">'
                f"{options.link_content}</a>"
            )
        return f"<h{level}{attrs}>{inner}</h{level}>"

    content = _HEADING_RE.sub(anchor, content)
    listing = _contents_list(entries, options.min_level)
    nav = f'<nav class="{options.nav_class}">{listing}</nav>' if listing else ""
    return HeadingResult(content=content, nav_heading=nav)


def _unique(ident: str, used: set[str]) -> str:
    candidate = ident
    n = 1
    while candidate in used:
        n += 1
        candidate = f"{ident}-{n}"
    used.add(candidate)
    return candidate


def _contents_list(entries: list[tuple[int, str]], min_level: int) -> str:
    """Nested ``<ol>`` markup with empty items and lists pruned."""
    parts: list[str] = []
    current = min_level - 1
    for level, entry in entries:
        if level > current:
            while current < level:
                parts.append("<ol>")
                current += 1
                if current < level:
                    parts.append("<li>")
            parts.append(f"<li>{entry}")
        else:
            while current > level:
                parts.append("</li></ol>")
                current -= 1
            parts.append(f"</li><li>{entry}")
    while current >= min_level:
        parts.append("</li></ol>")
        current -= 1

    listing = "".join(parts)
    while True:
        pruned = _EMPTY_RE.sub("", listing)
        if pruned == listing:
            return listing
        listing = pruned
