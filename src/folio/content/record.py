"""Content records — one per source file.

A :class:`ContentRecord` carries everything templates can read about a page:
its slug and link, front-matter values, type flags, tags, the converted body
and (on listing pages) pagination. Front-matter keys without a dedicated
field live in ``meta`` and read like attributes; unknown keys read as
``None``.
"""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Any

from folio.content.frontmatter import extract_front_matter, parse_front_matter
from folio.content.slug import (
    check_relative,
    directory_of,
    link_for,
    normalize,
    slugify,
)

if TYPE_CHECKING:
    from folio.config import FolioConfig
    from folio.content.markdown import MarkdownConverter
    from folio.observability.collector import StackCollector

DEFAULT_PRIORITY = 0.1

_TYPE_FLAGS = {
    "html": "is_html",
    "htm": "is_html",
    "xml": "is_xml",
    "css": "is_css",
    "js": "is_js",
    "mjs": "is_js",
    "json": "is_json",
    "txt": "is_text",
}

_TAG_RE = re.compile(r"<[^>]*>")
_WORD_RE = re.compile(r"\w+")
_SPACES_RE = re.compile(r"\s+")


@dataclass(frozen=True, slots=True)
class Tag:
    """A tag attached to a record.

    Attributes:
        tag: Display name as written in front matter.
        ref: Normalized grouping key (lowercase, dash-joined).
        link: URL of the tag's listing page, or *None* without tag pages.
        slug: Output slug of the tag's listing page, or *None*.

    """

    tag: str
    ref: str
    link: str | None = None
    slug: str | None = None


@dataclass(frozen=True, slots=True)
class Pagination:
    """Page state of a generated listing record.

    Attributes:
        page: Records listed on this page.
        page_total: Number of listing pages in the group.
        page_current: 0-based index of this page.
        page_current1: 1-based index of this page.
        subpage_from1: 1-based position of the first listed record.
        subpage_to1: 1-based position of the last listed record.
        href_back: Link to the previous page, or *None* on the first.
        href_next: Link to the next page, or *None* on the last.
        href: Links to every page of the group.
        child_page_total: Number of records in the whole group.

    """

    page: tuple[ContentRecord, ...]
    page_total: int
    page_current: int
    page_current1: int
    subpage_from1: int
    subpage_to1: int
    href_back: str | None
    href_next: str | None
    href: tuple[str, ...]
    child_page_total: int


@dataclass(eq=False)
class ContentRecord:
    """Per-file data record exposed to templates as ``data``.

    Records are mutable: aggregation attaches pagination and sibling links,
    rendering stores ``content_rendered``, ``nav_heading`` and ``hash``.
    Identity equality keeps records usable in sets and as dict keys.
    """

    filename: str
    slug: str
    link: str
    directory: str
    title: str | None = None
    description: str | None = None
    template: str | None = None
    date: datetime | None = None
    priority: float = DEFAULT_PRIORITY
    publish: bool = True
    index: str | bool = False
    menu: str | bool | None = None
    tag: str | None = None
    tags: tuple[Tag, ...] = ()
    filetype: str = ""
    is_html: bool = False
    is_xml: bool = False
    is_md: bool = False
    is_css: bool = False
    is_js: bool = False
    is_json: bool = False
    is_text: bool = False
    word_count: int = 0
    content: str = ""
    content_rendered: str = ""
    nav_heading: str = ""
    render_priority: int = 0
    pagination: Pagination | None = None
    postback: ContentRecord | None = None
    postnext: ContentRecord | None = None
    hash: str | None = None
    synthetic: bool = False
    meta: dict[str, Any] = field(default_factory=dict, repr=False)

    def __getattr__(self, name: str) -> Any:
        # Only reached for names that are not fields: front-matter extras.
        if name.startswith("_"):
            raise AttributeError(name)
        return self.__dict__.get("meta", {}).get(name)


def type_flags(slug: str, filename: str) -> dict[str, Any]:
    """Extension-derived type flags for a record."""
    filetype = PurePosixPath(slug).suffix.lstrip(".").lower()
    flags: dict[str, Any] = {"filetype": filetype, "is_md": filename.lower().endswith(".md")}
    flag = _TYPE_FLAGS.get(filetype)
    if flag is not None:
        flags[flag] = True
    return flags


def word_count(content: str) -> int:
    """Count alphanumeric words in HTML with tags stripped."""
    return len(_WORD_RE.findall(_TAG_RE.sub(" ", content)))


def parse_date(value: object) -> datetime | None:
    """Parse an ISO 8601 date; aware timestamps become local naive time.

    Raises:
        ValueError: If the value is not a valid ISO 8601 date.

    """
    if value is None or value is True:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).strip())
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


class RecordBuilder:
    """Builds :class:`ContentRecord` objects from raw source files.

    Args:
        config: Build configuration.
        converter: Markdown converter for ``.md`` bodies.
        collector: Optional event collector for warnings.

    """

    def __init__(
        self,
        config: FolioConfig,
        converter: MarkdownConverter | None = None,
        collector: StackCollector | None = None,
    ) -> None:
        self._config = config
        if converter is None:
            from folio.content.markdown import MarkdownConverter

            converter = MarkdownConverter(config.markdown)
        self._converter = converter
        self._collector = collector

    def build(self, filename: str, text: str) -> ContentRecord:
        """Build the record for ``filename`` from its raw ``text``.

        Raises:
            PathTraversalError: If the filename or an explicit slug would
                resolve outside its root directory.

        """
        config = self._config
        filename = check_relative(filename)
        front_matter, body = extract_front_matter(text, config.front_matter_delimiter)
        meta: dict[str, Any] = {
            key.replace("-", "_"): value
            for key, value in parse_front_matter(front_matter).items()
        }

        explicit_slug = meta.pop("slug", None)
        if isinstance(explicit_slug, str):
            slug = check_relative(explicit_slug.lstrip("/"))
            if not slug or slug.endswith("/"):
                slug += config.index_filename
        else:
            slug = slugify(filename, config.index_filename, config.slug_replace)
        check_relative(slug)

        flags = type_flags(slug, filename)
        is_html = flags.get("is_html", False)

        content = self._converter.to_html(body) if flags["is_md"] else body
        index = _flag_or_text(meta.pop("index", None))
        if index is None:
            index = config.index_frequency if is_html else False

        template = meta.pop("template", None)
        if not isinstance(template, str):
            template = config.default_template if is_html else None

        return ContentRecord(
            filename=filename,
            slug=slug,
            link=link_for(slug, config.base_path, config.index_filename),
            directory=directory_of(slug),
            title=_text(meta.pop("title", None)),
            description=_text(meta.pop("description", None)),
            template=template,
            date=self._date(meta.pop("date", None), filename),
            priority=_priority(meta.pop("priority", None)),
            publish=self._publish(meta.pop("publish", None)),
            index=index,
            menu=_flag_or_text(meta.pop("menu", None)),
            tags=self.tags(meta.pop("tags", None)),
            word_count=word_count(content) if is_html and index else 0,
            content=content,
            render_priority=1 if "content_rendered" in body else 0,
            meta=meta,
            **flags,
        )

    def tags(self, value: object) -> tuple[Tag, ...]:
        """Split a comma-separated tag string into de-duplicated tags."""
        if not isinstance(value, str):
            return ()
        config = self._config
        settings = config.tag_pages
        seen: set[str] = set()
        tags: list[Tag] = []
        for raw in value.split(","):
            name = _SPACES_RE.sub(" ", raw.strip())
            ref = normalize(name)
            if not ref or ref in seen:
                continue
            seen.add(ref)
            if settings.enabled:
                slug = "/".join(p for p in (settings.root_dir.strip("/"), ref) if p)
                slug = f"{slug}/{config.index_filename}"
                tags.append(Tag(
                    tag=name,
                    ref=ref,
                    link=link_for(slug, config.base_path, config.index_filename),
                    slug=slug,
                ))
            else:
                tags.append(Tag(tag=name, ref=ref))
        return tuple(tags)

    def _publish(self, value: object) -> bool:
        if self._config.dev_mode or value is None or value is True:
            return True
        text = str(value).strip().lower()
        if text in ("draft", "false"):
            return False
        try:
            when = parse_date(text)
        except ValueError:
            return True
        return when is None or when <= datetime.now()

    def _date(self, value: object, filename: str) -> datetime | None:
        try:
            return parse_date(value)
        except ValueError:
            self._warn(filename, f"invalid date {value!r} ignored")
            return None

    def _warn(self, filename: str, message: str) -> None:
        print(f"  Content warning: {filename}: {message}", file=sys.stderr)
        if self._collector is not None:
            self._collector.record_warning(filename, message)


def _text(value: object) -> str | None:
    return value if isinstance(value, str) else None


def _flag_or_text(value: object) -> str | bool | None:
    """``"false"`` -> False, other strings kept, empty values -> None."""
    if not isinstance(value, str):
        return None
    return False if value.strip().lower() == "false" else value


def _priority(value: object) -> float:
    try:
        return float(value) if isinstance(value, str) else DEFAULT_PRIORITY
    except ValueError:
        return DEFAULT_PRIORITY
