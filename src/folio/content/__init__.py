"""Content layer — source files as content records.

Handles front matter, slugs, markdown conversion, heading anchors and
file watching for the rebuild loop.
"""

from folio.content.headings import HeadingResult, add_heading_anchors
from folio.content.markdown import MarkdownConverter
from folio.content.record import ContentRecord, Pagination, RecordBuilder, Tag
from folio.content.watcher import ChangeEvent, ContentWatcher

__all__ = [
    "ChangeEvent",
    "ContentRecord",
    "ContentWatcher",
    "HeadingResult",
    "MarkdownConverter",
    "Pagination",
    "RecordBuilder",
    "Tag",
    "add_heading_anchors",
]
