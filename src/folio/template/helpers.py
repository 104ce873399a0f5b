"""Helper registry available to every template expression.

The registry is the only set of callables an expression can reach besides
``include`` and whitelisted methods on built-in values.
"""

from __future__ import annotations

import html
from collections.abc import Iterable
from datetime import date, datetime
from types import MappingProxyType
from typing import Any

from folio.content.slug import normalize, proper_case


def escape(value: Any) -> str:
    """HTML-escape a value (``None`` becomes an empty string)."""
    if value is None:
        return ""
    return html.escape(str(value))


def date_format(value: date | datetime | None, fmt: str = "%Y-%m-%d") -> str:
    """Format a date with ``strftime``; ``None`` becomes an empty string."""
    if value is None:
        return ""
    return value.strftime(fmt)


def menu(nodes: Iterable[Any] | None, current: str | None = None, css_class: str = "menu") -> str:
    """Render a navigation tree as nested ``<ul>`` markup.

    The item whose link equals ``current`` gets ``class="active"``, and its
    ancestors get ``class="open"``.
    """

    def render(items: Iterable[Any], top: bool) -> tuple[str, bool]:
        parts: list[str] = []
        has_current = False
        for node in items:
            child_html, child_current = render(node.children, top=False)
            active = current is not None and node.link == current
            has_current = has_current or active or child_current
            attr = ' class="active"' if active else ' class="open"' if child_current else ""
            parts.append(
                f'<li{attr}><a href="{escape(node.link)}">{escape(node.title)}</a>'
                f"{child_html}</li>"
            )
        if not parts:
            return "", False
        open_tag = f'<ul class="{escape(css_class)}">' if top else "<ul>"
        return open_tag + "".join(parts) + "</ul>", has_current

    return render(nodes or (), top=True)[0]


HELPERS = MappingProxyType({
    "abs": abs,
    "all": all,
    "any": any,
    "bool": bool,
    "dict": dict,
    "enumerate": enumerate,
    "float": float,
    "int": int,
    "len": len,
    "list": list,
    "max": max,
    "min": min,
    "range": range,
    "reversed": lambda seq: list(reversed(seq)),
    "round": round,
    "set": set,
    "sorted": sorted,
    "str": str,
    "sum": sum,
    "tuple": tuple,
    "zip": zip,
    "escape": escape,
    "date_format": date_format,
    "proper_case": proper_case,
    "normalize": normalize,
    "menu": menu,
})
