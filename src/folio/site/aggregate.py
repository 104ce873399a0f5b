"""Site aggregate — the ``tacs`` object templates see.

Rebuilt from scratch at the start of every render: records are grouped by
directory and tag, sorted, linked to their siblings and paginated, and the
navigation tree is derived from their slugs.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
from functools import cmp_to_key
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from folio.content.slug import proper_case
from folio.site.nav import NavNode, build_nav
from folio.site.paginate import compare_records, paginate

if TYPE_CHECKING:
    from folio.config import FolioConfig
    from folio.content.record import ContentRecord


@dataclass(frozen=True, slots=True)
class TagSummary:
    """One tag with the number of published records using it."""

    tag: str
    ref: str
    link: str | None
    slug: str | None
    count: int


@dataclass(frozen=True, slots=True)
class SiteAggregate:
    """Read-only site-wide view of every record.

    Attributes:
        all: Slug -> record, generated listing pages included.
        dir: Directory -> sorted published records.
        tag: Tag ref -> sorted published records.
        tag_list: Tag summaries, most used first.
        nav: Navigation tree.
        config: User-defined ``site`` values.
        root: URL root.
        now: Render timestamp.
        records: Every record to render, source records first, then
            generated listing pages (duplicates kept).

    """

    all: Mapping[str, ContentRecord]
    dir: Mapping[str, tuple[ContentRecord, ...]]
    tag: Mapping[str, tuple[ContentRecord, ...]]
    tag_list: tuple[TagSummary, ...]
    nav: tuple[NavNode, ...]
    config: Mapping[str, Any]
    root: str
    now: datetime
    records: tuple[ContentRecord, ...] = ()


def aggregate(
    records: Iterable[ContentRecord],
    config: FolioConfig,
    now: datetime | None = None,
) -> SiteAggregate:
    """Group, sort, link and paginate ``records``."""
    now = now or datetime.now()
    records = list(records)
    for record in records:
        record.pagination = None
        record.postback = None
        record.postnext = None

    dirs: dict[str, list[ContentRecord]] = {}
    tags: dict[str, list[ContentRecord]] = {}
    tag_info: dict[str, Any] = {}
    for record in records:
        if not record.publish:
            continue
        if record.directory and record.slug != f"{record.directory}/{config.index_filename}":
            dirs.setdefault(record.directory, []).append(record)
        for tag in record.tags:
            tags.setdefault(tag.ref, []).append(record)
            tag_info.setdefault(tag.ref, tag)

    dir_key = cmp_to_key(compare_records(config.dir_pages.sort_by, config.dir_pages.sort_order))
    tag_key = cmp_to_key(compare_records(config.tag_pages.sort_by, config.tag_pages.sort_order))
    sorted_dirs = {name: tuple(sorted(group, key=dir_key)) for name, group in dirs.items()}
    sorted_tags = {ref: tuple(sorted(group, key=tag_key)) for ref, group in tags.items()}

    for group in sorted_dirs.values():
        for i, record in enumerate(group):
            record.postback = group[i - 1] if i > 0 else None
            record.postnext = group[i + 1] if i + 1 < len(group) else None

    existing = {record.slug: record for record in records}
    generated: list[ContentRecord] = []
    if config.dir_pages.enabled:
        for name, group in sorted_dirs.items():
            generated += paginate(
                group, name,
                title=proper_case(name),
                settings=config.dir_pages,
                config=config,
                existing=existing,
                now=now,
            )
    if config.tag_pages.enabled:
        for ref, group in sorted_tags.items():
            name = tag_info[ref].tag
            generated += paginate(
                group, ref,
                title=name,
                settings=config.tag_pages,
                config=config,
                existing=existing,
                now=now,
                tag=name,
            )

    tag_list = sorted(
        (
            TagSummary(
                tag=tag_info[ref].tag,
                ref=ref,
                link=tag_info[ref].link,
                slug=tag_info[ref].slug,
                count=len(group),
            )
            for ref, group in sorted_tags.items()
        ),
        key=lambda t: (-t.count, t.tag.lower()),
    )

    everything = {**existing, **{record.slug: record for record in generated}}
    return SiteAggregate(
        all=MappingProxyType(everything),
        dir=MappingProxyType(sorted_dirs),
        tag=MappingProxyType(sorted_tags),
        tag_list=tuple(tag_list),
        nav=build_nav(records, config),
        config=MappingProxyType(dict(config.site)),
        root=config.base_path,
        now=now,
        records=tuple(records) + tuple(generated),
    )
