"""Rebuild scheduler — debounced, non-overlapping rebuilds.

File changes arrive faster than a site renders, so the scheduler collects
changed paths and runs one rebuild per quiet period::

    IDLE ──notify──▶ (debounce) ──expire──▶ RENDERING ──done──▶ IDLE
                                              │   ▲
                                 expire mid-render   done, paths pending
                                              ▼   │
                                              QUEUED

Renders never overlap. A timer that expires mid-render marks the scheduler
queued; when that render finishes, the paths collected meanwhile are
rebuilt straight away since their quiet period has already passed.
"""

from __future__ import annotations

import asyncio
import enum
import sys
from collections.abc import Awaitable, Callable
from typing import Any, Protocol


class SchedulerState(enum.Enum):
    """Rebuild scheduler state."""

    IDLE = "idle"
    RENDERING = "rendering"
    QUEUED = "queued"


class Timer(Protocol):
    """Restartable one-shot timer."""

    def start(self, delay: float, callback: Callable[[], None]) -> None:
        """(Re)start the timer; a pending callback is cancelled first."""
        ...

    def cancel(self) -> None:
        """Cancel a pending callback, if any."""
        ...


class AsyncioTimer:
    """Timer backed by ``loop.call_later`` on the running event loop."""

    __slots__ = ("_handle",)

    def __init__(self) -> None:
        self._handle: asyncio.TimerHandle | None = None

    def start(self, delay: float, callback: Callable[[], None]) -> None:
        self.cancel()
        self._handle = asyncio.get_running_loop().call_later(delay, callback)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


class RebuildScheduler:
    """Coalesces file changes into debounced rebuilds.

    Args:
        rebuild: Coroutine function called with the set of changed paths.
        debounce_ms: Quiet period before a rebuild starts.
        timer: Timer implementation (``AsyncioTimer`` by default).

    """

    def __init__(
        self,
        rebuild: Callable[[set[str]], Awaitable[Any]],
        *,
        debounce_ms: int = 200,
        timer: Timer | None = None,
    ) -> None:
        self._rebuild = rebuild
        self._delay = debounce_ms / 1000
        self._timer = timer if timer is not None else AsyncioTimer()
        self._pending: set[str] = set()
        self._state = SchedulerState.IDLE
        self._task: asyncio.Task[None] | None = None

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def pending(self) -> frozenset[str]:
        """Paths waiting for the next rebuild."""
        return frozenset(self._pending)

    def notify(self, path: str) -> None:
        """Record a changed path and (re)start the debounce timer."""
        self._pending.add(path)
        self._timer.start(self._delay, self._expire)

    def _expire(self) -> None:
        if self._state is not SchedulerState.IDLE:
            self._state = SchedulerState.QUEUED
            self._timer.start(self._delay, self._expire)
            return
        if not self._pending:
            return

        paths, self._pending = self._pending, set()
        self._state = SchedulerState.RENDERING
        self._task = asyncio.ensure_future(self._run(paths))

    async def _run(self, paths: set[str]) -> None:
        try:
            await self._rebuild(paths)
        except Exception as exc:
            print(f"  Rebuild failed: {exc}", file=sys.stderr)
        finally:
            queued = self._state is SchedulerState.QUEUED
            self._state = SchedulerState.IDLE
            if queued and self._pending:
                self._timer.cancel()
                self._expire()

    async def wait_idle(self) -> None:
        """Wait for in-flight rebuilds, including any queued behind them, to finish."""
        while self._task is not None and not self._task.done():
            await self._task

    def close(self) -> None:
        """Cancel the pending timer; an in-flight rebuild runs to completion."""
        self._timer.cancel()
        self._pending.clear()
