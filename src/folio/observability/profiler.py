"""Build profiler — per-stage timing for builds and rebuilds.

Records how long each build stage takes, emits a ``BuildProfile`` event to
the ``EventLog`` and prints the metrics summary shown after every build.

Thread Safety:
    The profiler is used from the single build control flow.
    Aggregate queries are protected by the underlying ``EventLog`` lock.

"""

from __future__ import annotations

import sys
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

from folio.observability.events import BuildProfile, now_ns

if TYPE_CHECKING:
    from collections.abc import Iterator

    from folio.observability.log import EventLog

STAGES = ("content", "templates", "render", "write", "pass_through")


@dataclass(slots=True)
class _Timer:
    """Accumulates timing for a named build stage."""

    name: str
    _start: float = 0.0
    elapsed_ms: float = 0.0

    def start(self) -> None:
        self._start = time.perf_counter()

    def stop(self) -> None:
        if self._start > 0:
            self.elapsed_ms += (time.perf_counter() - self._start) * 1000
            self._start = 0.0


class BuildProfiler:
    """Records per-stage timing for a single build.

    Usage::

        profiler = BuildProfiler(event_log)

        profiler.begin("build")
        with profiler.stage("content"):
            ...  # read content
        with profiler.stage("render"):
            ...  # render records
        profiler.finish(files_written=12)

    After ``finish()``, a ``BuildProfile`` event is appended to the log and
    the metrics summary is printed to stderr.

    """

    __slots__ = ("_log", "_t0", "_timers", "_trigger", "_verbose")

    def __init__(self, log: EventLog, *, verbose: bool = True) -> None:
        self._log = log
        self._verbose = verbose
        self._trigger = ""
        self._t0 = 0.0
        self._timers = {name: _Timer(name=name) for name in STAGES}

    def begin(self, trigger: str) -> None:
        """Start profiling a new build."""
        self._trigger = trigger
        self._t0 = time.perf_counter()
        for timer in self._timers.values():
            timer.elapsed_ms = 0.0

    def start(self, stage: str) -> None:
        """Start timing a named stage."""
        timer = self._timers.get(stage)
        if timer is not None:
            timer.start()

    def stop(self, stage: str) -> None:
        """Stop timing a named stage."""
        timer = self._timers.get(stage)
        if timer is not None:
            timer.stop()

    @contextmanager
    def stage(self, stage: str) -> Iterator[None]:
        """Time the enclosed block as ``stage``."""
        self.start(stage)
        try:
            yield
        finally:
            self.stop(stage)

    def finish(self, *, files_written: int = 0) -> BuildProfile:
        """Finish profiling and emit the ``BuildProfile`` event.

        Returns the profile for testing / inspection.

        """
        total_ms = (time.perf_counter() - self._t0) * 1000 if self._t0 > 0 else 0.0
        timers = self._timers

        profile = BuildProfile(
            trigger=self._trigger,
            files_written=files_written,
            content_ms=timers["content"].elapsed_ms,
            templates_ms=timers["templates"].elapsed_ms,
            render_ms=timers["render"].elapsed_ms,
            write_ms=timers["write"].elapsed_ms,
            pass_through_ms=timers["pass_through"].elapsed_ms,
            total_ms=total_ms,
            timestamp_ns=now_ns(),
        )

        self._log.append(profile)

        if self._verbose:
            print_metrics(profile)

        return profile


def print_metrics(p: BuildProfile) -> None:
    """Print the build metrics table to stderr.

    Nothing is printed when no file was written.

    """
    if not p.files_written:
        return
    rows = (
        ("files output", str(p.files_written)),
        (p.trigger if p.trigger == "build" else "rebuild", f"{p.total_ms:.0f}ms"),
        ("content", f"{p.content_ms:.0f}ms"),
        ("templates", f"{p.templates_ms:.0f}ms"),
        ("render", f"{p.render_ms:.0f}ms"),
        ("write", f"{p.write_ms:.0f}ms"),
        ("pass-through", f"{p.pass_through_ms:.0f}ms"),
    )
    for label, value in rows:
        print(f"{label:>15}:{value:>7}", file=sys.stderr)


def compute_aggregate_stats(
    log: EventLog,
    *,
    limit: int = 100,
) -> dict:
    """Compute aggregate latency statistics from recent ``BuildProfile`` events.

    Returns a dict with p50, p95, p99, and per-stage averages.

    """
    profiles = log.query(event_type=BuildProfile, limit=limit)
    if not profiles:
        return {"count": 0}

    totals = sorted(p.total_ms for p in profiles)
    count = len(totals)

    def percentile(data: list[float], pct: float) -> float:
        idx = int(len(data) * pct / 100)
        return data[min(idx, len(data) - 1)]

    return {
        "count": count,
        "total_ms": {
            "p50": round(percentile(totals, 50), 1),
            "p95": round(percentile(totals, 95), 1),
            "p99": round(percentile(totals, 99), 1),
            "min": round(totals[0], 1),
            "max": round(totals[-1], 1),
        },
        "avg_by_stage_ms": {
            stage: round(sum(getattr(p, f"{stage}_ms") for p in profiles) / count, 1)
            for stage in STAGES
        },
    }
