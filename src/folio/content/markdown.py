"""Markdown to HTML conversion that preserves template expressions.

A markdown parser would mangle ``${…}`` spans (underscores become emphasis,
quotes get escaped), so expressions are lifted out before parsing and put
back afterwards:

1. The text is scanned; every expression is replaced by an indexed
   alphanumeric placeholder that markdown leaves alone. Each call draws a
   fresh random marker so author text cannot collide with a placeholder.
2. The joined text is rendered by patitas.
3. Placeholders inside a code element are restored as escaped text so the
   expression is shown, not evaluated. Doubled-brace expressions
   (``${{ … }}``) lose one brace level and stay live in every context.
4. Code elements are highlighted with pygments and the characters that
   could start an expression are entity-escaped.
"""

from __future__ import annotations

import html
import re
import secrets
from collections.abc import Callable
from typing import TYPE_CHECKING

from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import TextLexer, get_lexer_by_name
from pygments.util import ClassNotFound

from folio.template.scanner import is_doubled, scan, undouble

if TYPE_CHECKING:
    from folio.config import MarkdownConfig

_CODE_RE = re.compile(r"(<pre[^>]*>\s*)?<code([^>]*)>(.*?)</code>", re.DOTALL)
_LANGUAGE_RE = re.compile(r"\blanguage-([\w+#.-]+)")
_NAV_PARAGRAPH_RE = re.compile(r"<p>\s*(<nav-heading></nav-heading>)\s*</p>")

# Characters that could start or escape an expression in a later pass.
_CODE_ESCAPES = str.maketrans({"`": "&#96;", "\\": "&#92;", "$": "&#36;", "!": "&#33;"})


def _patitas_renderer(plugins: tuple[str, ...]) -> Callable[[str], str]:
    from patitas import Markdown

    return Markdown(plugins=list(plugins))


class MarkdownConverter:
    """Converts markdown bodies to HTML without disturbing expressions.

    Args:
        options: Markdown and highlighting options.
        renderer: Markdown-to-HTML callable (defaults to patitas'
            ``Markdown`` with the configured plugins).

    """

    def __init__(
        self,
        options: MarkdownConfig,
        renderer: Callable[[str], str] | None = None,
    ) -> None:
        self._options = options
        self._render = renderer or _patitas_renderer(options.plugins)
        self._formatter = HtmlFormatter(nowrap=True)

    def to_html(self, text: str) -> str:
        """Render markdown ``text`` to HTML."""
        scanned = scan(text)
        expressions = scanned.expressions
        marker = f"FOLIO{secrets.token_hex(6).upper()}X"
        placeholder = re.compile(rf"{marker}(\d+)X")

        parts: list[str] = []
        for i, segment in enumerate(scanned.segments):
            parts.append(segment)
            if i < len(expressions):
                parts.append(f"{marker}{i}X")
        rendered = self._render("".join(parts))

        if expressions:
            rendered = _restore_code_expressions(rendered, expressions, placeholder)
        rendered = _CODE_RE.sub(self._code_element, rendered)
        if expressions:
            rendered = placeholder.sub(lambda m: _live(expressions[int(m.group(1))]), rendered)

        return _NAV_PARAGRAPH_RE.sub(r"\1", rendered)

    def _code_element(self, match: re.Match[str]) -> str:
        pre, attrs, body = match.group(1), match.group(2), match.group(3)
        options = self._options

        if options.highlight and (pre or options.highlight_inline_code):
            language = _LANGUAGE_RE.search(attrs)
            body = self._highlight(
                body, language.group(1) if language else options.default_language,
            )
            if pre is None:
                body = body.rstrip("\n")

        return f"{pre or ''}<code{attrs}>{body.translate(_CODE_ESCAPES)}</code>"

    def _highlight(self, body: str, language: str) -> str:
        try:
            lexer = get_lexer_by_name(language, stripnl=False, ensurenl=False)
        except ClassNotFound:
            lexer = TextLexer(stripnl=False, ensurenl=False)
        return highlight(html.unescape(body), lexer, self._formatter)


def _restore_code_expressions(
    rendered: str, expressions: tuple[str, ...], placeholder: re.Pattern[str],
) -> str:
    """Swap placeholders inside code elements for the escaped expression text."""

    def restore(match: re.Match[str]) -> str:
        expression = expressions[int(match.group(1))]
        if is_doubled(expression) or not _in_code(rendered, match.start()):
            return match.group(0)
        return html.escape(expression, quote=False)

    return placeholder.sub(restore, rendered)


def _in_code(rendered: str, pos: int) -> bool:
    """True when ``pos`` lies inside an open ``<code>`` element."""
    return rendered.rfind("<code", 0, pos) > rendered.rfind("</code>", 0, pos)


def _live(expression: str) -> str:
    return undouble(expression) if is_doubled(expression) else expression
