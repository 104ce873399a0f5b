"""Build layer — rendering, writing and the debounced rebuild loop."""

from folio.pipeline.builder import Builder, RenderResult
from folio.pipeline.hooks import HookSet
from folio.pipeline.scheduler import RebuildScheduler, SchedulerState

__all__ = [
    "Builder",
    "HookSet",
    "RebuildScheduler",
    "RenderResult",
    "SchedulerState",
]
