"""Build event model.

Defines the event types recorded while a site builds: per-record ingestion,
render warnings, written files and per-build stage timings.

All events are frozen dataclasses with:
- ``timestamp_ns``: Monotonic nanosecond timestamp
- Descriptive fields for the specific event type

Thread Safety:
    All events are frozen (immutable) and safe to share across threads.

"""

import time
from dataclasses import dataclass
from typing import Literal


# ---------------------------------------------------------------------------
# Content events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RecordBuilt:
    """A content file was turned into a record.

    Attributes:
        path: Content filename relative to the content directory.
        slug: Output slug assigned to the record.
        publish: Whether the record will be written.
        build_ms: Time spent building the record in milliseconds.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    path: str
    slug: str
    publish: bool
    build_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class RenderWarning:
    """A recoverable problem surfaced during ingestion or rendering.

    Attributes:
        path: File or template the warning concerns.
        message: Human-readable description.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    path: str
    message: str
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Output events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FileWritten:
    """An output file was written (or copied for pass-through).

    Attributes:
        kind: Rendered record or pass-through copy.
        slug: Output-relative path.
        size_bytes: Bytes written.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    kind: Literal["render", "pass_through"]
    slug: str
    size_bytes: int
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class BuildProfile:
    """Per-stage timing for one build or rebuild.

    Attributes:
        trigger: ``"build"`` or the changed paths of a rebuild.
        files_written: Number of output files written.
        content_ms: Time reading and building content records.
        templates_ms: Time reading templates.
        render_ms: Time aggregating and rendering records.
        write_ms: Time writing changed files.
        pass_through_ms: Time copying pass-through directories.
        total_ms: Wall-clock time for the whole build.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    trigger: str
    files_written: int
    content_ms: float
    templates_ms: float
    render_ms: float
    write_ms: float
    pass_through_ms: float
    total_ms: float
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

type StackEvent = RecordBuilt | RenderWarning | FileWritten | BuildProfile


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()
