"""Output minification.

:func:`minify_simple` only normalizes whitespace and runs on every HTML and
XML output. :func:`minify_full` hands HTML to ``htmlmin`` when minification
is enabled; it is an optional dependency (``pip install folio[minify]``).
"""

from __future__ import annotations

import re
from typing import Any

from folio._errors import ConfigError

_ODD_SPACES = re.compile(r"[\u0085\u00a0\u1680\u180e\u2028\u2029\u202f\u205f\u3000]+")
_EN_SPACES = re.compile(r"[\u2000-\u200a]+")
_TRAILING = re.compile(r"\s*?\n")
_BLANK_RUN = re.compile(r"\n\s*?\n\s*?\n")
_INDENT = re.compile(r"\n\s+<")
_XML_COMMENT = re.compile(r"<!--.*?-->", re.DOTALL)


def minify_simple(text: str, *, xml: bool = False) -> str:
    """Strip trailing spaces, blank lines and tag indentation.

    XML output also loses its comments.
    """
    text = _ODD_SPACES.sub(" ", text or "")
    text = _EN_SPACES.sub(" ", text)
    text = text.replace("\u2424", "\n")
    text = _TRAILING.sub("\n", text).strip()
    if xml:
        text = _XML_COMMENT.sub("", text)

    while True:
        previous = text
        text = _BLANK_RUN.sub("\n\n", text)
        text = text.replace("\n\n", "\n")
        text = _INDENT.sub("\n<", text)
        if text == previous:
            return text


def minify_full(html: str, options: dict[str, Any]) -> str:
    """Minify HTML with ``htmlmin``.

    Raises:
        ConfigError: If htmlmin is not installed.

    """
    try:
        import htmlmin
    except ImportError as exc:
        msg = "minify is enabled but htmlmin is not installed: pip install 'folio[minify]'"
        raise ConfigError(msg) from exc
    return htmlmin.minify(html, **options)
