"""Front-matter extraction.

Front matter is a block of ``key: value`` lines between two delimiter lines at
the very start of a file::

    ---
    title: Hello
    tags: a, b
    draft:
    ---
    Body text.

Values are kept as trimmed strings; a key with no value stores ``True``.
Anything after the second delimiter is the body.
"""

from __future__ import annotations

import re

_KEY_LINE = re.compile(r"^([a-z0-9_-]+):(.*)$", re.IGNORECASE)


def extract_front_matter(text: str, delimiter: str = "---") -> tuple[str, str]:
    """Split text into ``(front_matter, content)``.

    The text is trimmed first. Without a leading delimiter and a second
    delimiter occurrence the front matter is empty and the whole text is
    content.
    """
    text = text.strip()
    if not delimiter or not text.startswith(delimiter):
        return "", text
    end = text.find(delimiter, len(delimiter))
    if end < 0:
        return "", text
    return text[len(delimiter):end].strip(), text[end + len(delimiter):].strip()


def parse_front_matter(front_matter: str) -> dict[str, str | bool]:
    """Parse ``key: value`` lines into a dict; other lines are ignored."""
    values: dict[str, str | bool] = {}
    for line in front_matter.splitlines():
        match = _KEY_LINE.match(line)
        if match is None:
            continue
        value = match.group(2).strip()
        values[match.group(1)] = value or True
    return values
