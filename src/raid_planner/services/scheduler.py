"""Deadline scheduler driving raid sessions to resolution.

One loop serves every session. Armed ticks sit in a min-heap keyed by their
due time; released handles are dropped lazily when they reach the top.
"""

import asyncio
import contextlib
import heapq
import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from raid_planner.adapters.telegram_display import RaidDisplay
from raid_planner.domain.errors import DisplayGone
from raid_planner.domain.sessions import (
    DisplayRef,
    SessionState,
    SessionStatus,
    TickHandle,
    TickPhase,
)
from raid_planner.services.notifications import NotificationDispatcher
from raid_planner.services.rendering import (
    no_controls,
    raid_controls,
    render,
    render_insufficient,
)
from raid_planner.services.session_store import SessionStore

_logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class DeadlineScheduler:
    """Re-renders pending raids every period and resolves them at the deadline."""

    store: SessionStore
    display: RaidDisplay
    dispatcher: NotificationDispatcher
    tick_period: timedelta = timedelta(seconds=60)
    roster_capacity: int = 3
    display_capacity_label: int = 6
    clock: Callable[[], datetime] = utc_now
    _heap: list[tuple[datetime, int, TickHandle]] = field(
        default_factory=list, init=False, repr=False
    )
    _sequence: itertools.count = field(
        default_factory=itertools.count, init=False, repr=False
    )
    _wakeup: asyncio.Event | None = field(default=None, init=False, repr=False)
    _task: asyncio.Task | None = field(default=None, init=False, repr=False)

    def schedule(self, session: SessionState) -> TickHandle:
        """Arm the session's recurring tick, first due one period from now."""
        handle = TickHandle(
            session_id=session.id,
            period=self.tick_period,
            next_tick_at=self.clock() + self.tick_period,
        )
        session.timer_handle = handle
        self._push(handle)
        return handle

    def next_due(self) -> datetime | None:
        """Due time of the earliest live tick, if any."""
        while self._heap and self._heap[0][2].released:
            heapq.heappop(self._heap)
        return self._heap[0][0] if self._heap else None

    async def run_due(self) -> list[DisplayRef]:
        """Run every tick that is due now and return the sessions ticked."""
        now = self.clock()
        due: list[TickHandle] = []
        while self._heap and self._heap[0][0] <= now:
            _, _, handle = heapq.heappop(self._heap)
            if not handle.released:
                due.append(handle)
        if not due:
            return []

        results = await asyncio.gather(
            *(self.tick(handle) for handle in due), return_exceptions=True
        )
        for handle, result in zip(due, results, strict=True):
            if isinstance(result, BaseException):
                _logger.error(
                    "Raid tick failed: raid=%s error=%r", handle.session_id, result
                )
            if not handle.released:
                self._rearm(handle, now)
        return [handle.session_id for handle in due]

    async def tick(self, handle: TickHandle) -> None:
        """Evaluate one session: refresh its display or resolve it."""
        session = self.store.get(handle.session_id)
        if session is None or session.timer_handle is not handle:
            handle.release()
            return

        async with session.lock:
            if not session.is_pending or handle.released:
                handle.release()
                return
            now = self.clock()
            if now >= session.deadline:
                await self._resolve(session, handle)
                return
            text = render(
                session.activity_name,
                session.deadline,
                session.participants,
                now,
                display_capacity_label=self.display_capacity_label,
                display_names=session.display_names,
            )
            try:
                await self.display.edit_display(session.id, text, raid_controls())
            except DisplayGone:
                _logger.warning("Raid display is gone, dropping raid=%s", session.id)
                self.terminate(session)

    def terminate(self, session: SessionState) -> None:
        """End a session without notifications and forget it."""
        if session.is_pending:
            session.status = SessionStatus.CANCELLED
        session.release_timer()
        self.store.remove(session.id)

    async def run(self) -> None:
        """Scheduler loop; sleeps until the next tick or a new schedule."""
        self._wakeup = asyncio.Event()
        while True:
            await self.run_due()
            due_at = self.next_due()
            timeout = None
            if due_at is not None:
                timeout = max((due_at - self.clock()).total_seconds(), 0)
            self._wakeup.clear()
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(self._wakeup.wait(), timeout=timeout)

    def start(self) -> None:
        """Start the loop task on the running event loop."""
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run(), name="raid-scheduler")

    async def stop(self) -> None:
        """Stop the loop task."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _resolve(self, session: SessionState, handle: TickHandle) -> None:
        handle.phase = TickPhase.RESOLVING
        launched = len(session.participants) >= self.roster_capacity
        if launched:
            session.status = SessionStatus.LAUNCHED
            text = render(
                session.activity_name,
                session.deadline,
                session.participants,
                self.clock(),
                display_capacity_label=self.display_capacity_label,
                display_names=session.display_names,
            )
        else:
            session.status = SessionStatus.CANCELLED
            text = render_insufficient(
                session.activity_name,
                len(session.participants),
                self.display_capacity_label,
            )
        session.release_timer()
        _logger.info(
            "Raid resolved: raid=%s status=%s participants=%s",
            session.id,
            session.status,
            len(session.participants),
        )

        try:
            try:
                await self.display.edit_display(session.id, text, no_controls())
            except DisplayGone:
                _logger.warning("Resolved raid display is gone: raid=%s", session.id)
            except Exception:
                _logger.exception("Failed to update resolved raid=%s", session.id)
            if launched:
                await self.dispatcher.send(session)
        finally:
            self.store.remove(session.id)

    def _rearm(self, handle: TickHandle, now: datetime) -> None:
        next_tick_at = handle.next_tick_at + handle.period
        if next_tick_at <= now:
            next_tick_at = now + handle.period
        handle.next_tick_at = next_tick_at
        self._push(handle)

    def _push(self, handle: TickHandle) -> None:
        heapq.heappush(
            self._heap, (handle.next_tick_at, next(self._sequence), handle)
        )
        if self._wakeup is not None:
            self._wakeup.set()
