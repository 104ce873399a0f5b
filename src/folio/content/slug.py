"""Slug, link and text normalization helpers.

A slug is the output-relative path of a record. Page-like sources
(markdown and HTML) become directory-style paths ending in the index
filename so that every page is served from a clean URL::

    >>> slugify("post/article.md")
    'post/article/index.html'
    >>> slugify("about/index.md")
    'about/index.html'
    >>> slugify("robots.txt")
    'robots.txt'

"""

from __future__ import annotations

import re
from pathlib import PurePosixPath

from folio._errors import PathTraversalError
from folio._types import Slug, SlugReplace

PAGE_EXTENSIONS = frozenset({".md", ".html", ".htm"})

_UNSAFE = re.compile(r"[#!$^~\s]")
_NON_WORD = re.compile(r"[^\w]+")
_SEPARATORS = re.compile(r"[-_\s]+")


def slugify(
    filename: str,
    index_filename: str = "index.html",
    replace: SlugReplace = (),
) -> Slug:
    """Derive the output slug for a content filename.

    Args:
        filename: Source path relative to the content directory.
        index_filename: Filename page-like slugs end in.
        replace: Ordered ``(pattern, replacement)`` regex rewrites applied
            after the page-like rewrite.

    """
    slug = _UNSAFE.sub("", filename.replace("\\", "/")).lstrip("/")
    index_stem = PurePosixPath(index_filename).stem

    path = PurePosixPath(slug)
    if path.suffix.lower() in PAGE_EXTENSIONS:
        parent = path.parent
        target = parent if path.stem == index_stem else parent / path.stem
        slug = str(target / index_filename)

    for pattern, replacement in replace:
        slug = re.sub(pattern, replacement, slug)

    tail = f"{index_stem}/{index_filename}"
    if slug == tail or slug.endswith("/" + tail):
        slug = slug[: -len(tail)] + index_filename

    return slug


def link_for(slug: Slug, base_path: str = "/", index_filename: str = "index.html") -> str:
    """URL for a slug: ``base_path`` + slug without the trailing index filename."""
    if slug == index_filename:
        slug = ""
    elif slug.endswith("/" + index_filename):
        slug = slug[: -len(index_filename)]
    return base_path.rstrip("/") + "/" + slug


def directory_of(slug: Slug) -> str:
    """First path segment of a slug, ``""`` for root-level slugs."""
    head, sep, _ = slug.partition("/")
    return head if sep else ""


def check_relative(name: str) -> str:
    """Reject absolute names and names with ``..`` segments.

    Raises:
        PathTraversalError: If ``name`` could escape its root directory.

    """
    normalized = name.replace("\\", "/")
    if normalized.startswith("/") or ".." in normalized.split("/"):
        msg = f"{name!r} resolves outside its root directory"
        raise PathTraversalError(msg)
    return normalized


def normalize(value: object) -> str:
    """Lowercase, dash-joined form of a string (used for tag refs)."""
    return _NON_WORD.sub("-", str(value).strip().lower()).strip("-")


def proper_case(value: object) -> str:
    """Title-case a slug segment: ``"post-archive"`` -> ``"Post Archive"``."""
    words = _SEPARATORS.split(str(value).strip())
    return " ".join(w[:1].upper() + w[1:] for w in words if w)
