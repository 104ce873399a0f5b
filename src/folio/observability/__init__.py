"""Build observability — structured events for every build.

Records what happened during a build:
- **Content**: records built from source files, recoverable warnings
- **Output**: files written or copied
- **Profiling**: per-stage timing of each build and rebuild

All events are frozen dataclasses with nanosecond timestamps, safe for
concurrent production from the file-reading worker threads.

Quick Start:
    >>> from folio.observability import StackCollector, EventLog
    >>> log = EventLog()
    >>> collector = StackCollector(log)
    >>> # Pass collector to Builder(config, collector=collector)
    >>> # and inspect log.warnings() afterwards

"""

from folio.observability.collector import StackCollector
from folio.observability.events import (
    BuildProfile,
    FileWritten,
    RecordBuilt,
    RenderWarning,
    StackEvent,
    now_ns,
)
from folio.observability.log import EventLog
from folio.observability.profiler import BuildProfiler

__all__ = [
    "BuildProfile",
    "BuildProfiler",
    "EventLog",
    "FileWritten",
    "RecordBuilt",
    "RenderWarning",
    "StackCollector",
    "StackEvent",
    "now_ns",
]
