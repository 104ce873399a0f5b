"""Navigation tree derived from page slugs.

``post/first/index.html`` and ``post/second/index.html`` produce one ``post``
node with two children. Directories without an index page take the title of
their segment and the link of their first child.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from functools import cmp_to_key
from typing import TYPE_CHECKING

from folio.content.record import DEFAULT_PRIORITY, ContentRecord
from folio.content.slug import proper_case
from folio.site.paginate import compare_records

if TYPE_CHECKING:
    from folio.config import FolioConfig


@dataclass(frozen=True, slots=True)
class NavNode:
    """One navigation entry.

    Attributes:
        segment: Slug path segment this node stands for.
        title: Menu title.
        link: Target URL (*None* for empty directories).
        priority: Sort priority.
        date: Sort date.
        record: The page this node links to, if any.
        children: Sorted child nodes.

    """

    segment: str
    title: str
    link: str | None
    priority: float = DEFAULT_PRIORITY
    date: datetime | None = None
    record: ContentRecord | None = None
    children: tuple[NavNode, ...] = ()


@dataclass
class _Branch:
    record: ContentRecord | None = None
    children: dict[str, _Branch] = field(default_factory=dict)


def build_nav(records: Iterable[ContentRecord], config: FolioConfig) -> tuple[NavNode, ...]:
    """Build the sorted navigation tree from published HTML records.

    Records with ``menu: false`` and generated listing pages are left out,
    as is the site's root index page.
    """
    root = _Branch()
    for record in records:
        if not (record.publish and record.is_html) or record.synthetic or record.menu is False:
            continue
        segments = record.slug.split("/")
        if segments[-1] == config.index_filename:
            segments.pop()
        if not segments:
            continue
        branch = root
        for segment in segments:
            branch = branch.children.setdefault(segment, _Branch())
        branch.record = record

    return _to_nodes(root.children, config, top="")


def _to_nodes(children: dict[str, _Branch], config: FolioConfig, top: str) -> tuple[NavNode, ...]:
    sort_by, sort_order = config.nav_sort_for(top)
    nodes: list[NavNode] = []
    for segment, branch in children.items():
        kids = _to_nodes(branch.children, config, top or segment)
        record = branch.record
        if record is not None:
            title = record.menu if isinstance(record.menu, str) else record.title
            nodes.append(NavNode(
                segment=segment,
                title=title or proper_case(segment),
                link=record.link,
                priority=record.priority,
                date=record.date,
                record=record,
                children=kids,
            ))
        else:
            adopted = kids[0] if kids else None
            nodes.append(NavNode(
                segment=segment,
                title=proper_case(segment),
                link=adopted.link if adopted else None,
                record=adopted.record if adopted else None,
                children=kids,
            ))
    nodes.sort(key=cmp_to_key(compare_records(sort_by, sort_order)))
    return tuple(nodes)
