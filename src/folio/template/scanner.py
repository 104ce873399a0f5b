"""Expression scanner — locates ``${…}`` and ``!{…}`` spans in free text.

Spans open with a two-character marker followed by ``{`` and close on the
matching ``}``. Brace depth is tracked, and quoted literals (single, double
and back-tick) suppress brace and marker interpretation, with backslash
escapes honoured inside them.

The scanner never raises: an unterminated span stops the scan and the rest of
the input becomes trailing text.
"""

from __future__ import annotations

from dataclasses import dataclass

IMMEDIATE = "$"
DEFERRED = "!"
MARKERS = (IMMEDIATE, DEFERRED)

_QUOTES = frozenset("'\"`")


@dataclass(frozen=True, slots=True)
class ScanResult:
    """Alternating text segments and expression spans.

    ``segments`` always has exactly one more entry than ``expressions``;
    :meth:`join` interleaves them back into the original text.

    Attributes:
        segments: Literal text between expressions.
        expressions: Raw expression spans, markers and braces included.

    """

    segments: tuple[str, ...]
    expressions: tuple[str, ...]

    def join(self) -> str:
        """Reassemble the scanned text."""
        parts: list[str] = []
        for i, segment in enumerate(self.segments):
            parts.append(segment)
            if i < len(self.expressions):
                parts.append(self.expressions[i])
        return "".join(parts)


def find_expression(
    text: str,
    start: int = 0,
    markers: tuple[str, ...] = MARKERS,
) -> tuple[int, int] | None:
    """Find the next complete expression span at or after ``start``.

    Returns ``(begin, end)`` such that ``text[begin:end]`` is the whole span
    including marker and closing brace, or *None* when there is no further
    terminated span.

    """
    pos = start
    length = len(text)
    while True:
        begin = _next_marker(text, pos, markers)
        if begin < 0:
            return None

        depth = 1
        quote = ""
        i = begin + 2
        while i < length:
            ch = text[i]
            if quote:
                if ch == "\\":
                    i += 2
                    continue
                if ch == quote:
                    quote = ""
            elif ch in _QUOTES:
                quote = ch
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return begin, i + 1
            i += 1

        # Unterminated span: no later marker can close either.
        return None


def scan(
    text: str,
    start: int = 0,
    markers: tuple[str, ...] = MARKERS,
) -> ScanResult:
    """Split ``text`` into literal segments and expression spans.

    Scanning begins at ``start``; anything before it is part of the first
    segment.

    Example::

        >>> scan("a ${ x } b").expressions
        ('${ x }',)

    """
    segments: list[str] = []
    expressions: list[str] = []
    last = 0
    pos = start
    while True:
        span = find_expression(text, pos, markers)
        if span is None:
            break
        begin, end = span
        segments.append(text[last:begin])
        expressions.append(text[begin:end])
        last = pos = end
    segments.append(text[last:])
    return ScanResult(segments=tuple(segments), expressions=tuple(expressions))


def is_doubled(expression: str) -> bool:
    """True for the doubled-brace form ``${{ … }}`` / ``!{{ … }}``."""
    return (
        len(expression) >= 6
        and expression[1:3] == "{{"
        and expression.endswith("}}")
    )


def undouble(expression: str) -> str:
    """Strip one nesting level from a doubled-brace expression."""
    if not is_doubled(expression):
        return expression
    return expression[0] + expression[2:-1]


def _next_marker(text: str, pos: int, markers: tuple[str, ...]) -> int:
    """Index of the next ``<marker>{`` pair at or after ``pos``, or -1."""
    best = -1
    for marker in markers:
        idx = text.find(marker + "{", pos)
        if idx >= 0 and (best < 0 or idx < best):
            best = idx
    return best
