"""Stack collector — the single entry point for recording build events.

Components receive an optional collector and call its ``record_*`` methods;
events land in the shared :class:`EventLog`.

Thread Safety:
    The collector delegates to ``EventLog`` which is internally locked.
    Safe for use from the file-reading worker threads.

"""

from __future__ import annotations

from typing import Any

from folio.observability.events import (
    BuildProfile,
    FileWritten,
    RecordBuilt,
    RenderWarning,
    now_ns,
)
from folio.observability.log import EventLog


class StackCollector:
    """Unified event collector for a build.

    Args:
        log: The EventLog to store events in.

    """

    __slots__ = ("_log",)

    def __init__(self, log: EventLog | None = None) -> None:
        self._log = log if log is not None else EventLog()

    @property
    def log(self) -> EventLog:
        """The underlying event log."""
        return self._log

    def record(self, event: Any) -> None:
        """Record an already-constructed event."""
        self._log.append(event)

    # ----- Content events -----

    def record_record(
        self,
        path: str,
        slug: str,
        *,
        publish: bool = True,
        build_ms: float = 0.0,
    ) -> None:
        """Record a content record build."""
        self._log.append(
            RecordBuilt(
                path=path,
                slug=slug,
                publish=publish,
                build_ms=build_ms,
                timestamp_ns=now_ns(),
            )
        )

    def record_warning(self, path: str, message: str) -> None:
        """Record a recoverable warning."""
        self._log.append(
            RenderWarning(path=path, message=message, timestamp_ns=now_ns())
        )

    # ----- Output events -----

    def record_write(
        self,
        slug: str,
        *,
        size_bytes: int = 0,
        kind: str = "render",
    ) -> None:
        """Record a written output file."""
        self._log.append(
            FileWritten(
                kind=kind,  # type: ignore[arg-type]
                slug=slug,
                size_bytes=size_bytes,
                timestamp_ns=now_ns(),
            )
        )

    # ----- Build profiling -----

    def record_build_profile(
        self,
        trigger: str,
        *,
        files_written: int = 0,
        content_ms: float = 0.0,
        templates_ms: float = 0.0,
        render_ms: float = 0.0,
        write_ms: float = 0.0,
        pass_through_ms: float = 0.0,
        total_ms: float = 0.0,
    ) -> None:
        """Record a build profiling event."""
        self._log.append(
            BuildProfile(
                trigger=trigger,
                files_written=files_written,
                content_ms=content_ms,
                templates_ms=templates_ms,
                render_ms=render_ms,
                write_ms=write_ms,
                pass_through_ms=pass_through_ms,
                total_ms=total_ms,
                timestamp_ns=now_ns(),
            )
        )
