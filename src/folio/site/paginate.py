"""Record ordering and listing-page pagination."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from folio.content.record import ContentRecord, Pagination
from folio.content.slug import directory_of, link_for

if TYPE_CHECKING:
    from datetime import datetime

    from folio.config import FolioConfig, PageListConfig


def _order(a: Any, b: Any) -> int:
    """Three-way comparison with missing values treated as ``0``."""
    left = 0 if a is None else a
    right = 0 if b is None else b
    try:
        return (left > right) - (left < right)
    except TypeError:
        if a is None or b is None:
            return (a is not None) - (b is not None)
        return (str(a) > str(b)) - (str(a) < str(b))


def compare_records(sort_by: str, sort_order: int = 1) -> Callable[[Any, Any], int]:
    """Comparator ordering by ``sort_by`` then by date, newest first.

    Use with :func:`functools.cmp_to_key`; ``sort_order`` is ``1`` for
    ascending and ``-1`` for descending.
    """

    def compare(a: Any, b: Any) -> int:
        result = _order(getattr(a, sort_by, None), getattr(b, sort_by, None)) * sort_order
        if result == 0 and sort_by != "date":
            result = -_order(getattr(a, "date", None), getattr(b, "date", None))
        return result

    return compare


def chunk(items: Sequence[Any], size: int = 1) -> list[list[Any]]:
    """Split ``items`` into lists of ``size`` (the last may be short).

    A non-positive ``size`` yields no chunks.
    """
    if size <= 0:
        return []
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


def page_path(root_dir: str, key: str, page: int) -> str:
    """Output directory of listing page ``page`` (no number for page 0)."""
    parts = (root_dir.strip("/"), key.strip("/"), str(page) if page else "")
    return "/".join(p for p in parts if p)


def paginate(
    group: Sequence[ContentRecord],
    key: str,
    *,
    title: str,
    settings: PageListConfig,
    config: FolioConfig,
    existing: Mapping[str, ContentRecord],
    now: datetime,
    tag: str | None = None,
) -> list[ContentRecord]:
    """Create or augment one listing record per chunk of ``group``.

    A record already at a page's slug is augmented in place. Pages without
    one copy the page-0 record when it exists, otherwise a synthetic record
    is created.

    Returns:
        Listing records that were not in ``existing``.

    """
    pages = chunk(group, config.page_list_items)
    total = len(pages)
    base = config.base_path.rstrip("/")
    hrefs = tuple(f"{base}/{page_path(settings.root_dir, key, n)}/" for n in range(total))
    first = existing.get(_page_slug(settings.root_dir, key, 0, config))

    created: list[ContentRecord] = []
    for n, items in enumerate(pages):
        pagination = Pagination(
            page=tuple(items),
            page_total=total,
            page_current=n,
            page_current1=n + 1,
            subpage_from1=n * config.page_list_items + 1,
            subpage_to1=min(len(group), (n + 1) * config.page_list_items),
            href_back=hrefs[n - 1] if n > 0 else None,
            href_next=hrefs[n + 1] if n + 1 < total else None,
            href=hrefs,
            child_page_total=len(group),
        )
        slug = _page_slug(settings.root_dir, key, n, config)

        record = existing.get(slug)
        if record is not None:
            record.pagination = pagination
            continue

        if first is not None:
            record = replace(
                first,
                slug=slug,
                link=link_for(slug, config.base_path, config.index_filename),
                directory=directory_of(slug),
                pagination=pagination,
                postback=None,
                postnext=None,
                hash=None,
                synthetic=True,
            )
        else:
            record = ContentRecord(
                filename="",
                slug=slug,
                link=link_for(slug, config.base_path, config.index_filename),
                directory=directory_of(slug),
                title=title,
                template=settings.template or config.default_template,
                date=now,
                index=config.index_frequency,
                tag=tag,
                filetype="html",
                is_html=True,
                pagination=pagination,
                synthetic=True,
            )
        created.append(record)
    return created


def _page_slug(root_dir: str, key: str, page: int, config: FolioConfig) -> str:
    path = page_path(root_dir, key, page)
    return f"{path}/{config.index_filename}" if path else config.index_filename
