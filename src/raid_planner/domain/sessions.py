"""Domain models for raid sessions."""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import StrEnum


@dataclass(frozen=True, order=True)
class DisplayRef:
    """Location of a raid's display message; doubles as the session id."""

    chat_id: int
    message_id: int


class SessionStatus(StrEnum):
    """Lifecycle status of a raid session."""

    PENDING = "PENDING"
    LAUNCHED = "LAUNCHED"
    CANCELLED = "CANCELLED"


class TickPhase(StrEnum):
    """Scheduler phase of a session's timer."""

    PENDING = "PENDING"
    RESOLVING = "RESOLVING"
    DONE = "DONE"


@dataclass(eq=False)
class TickHandle:
    """Recurring tick owned by exactly one session."""

    session_id: DisplayRef
    period: timedelta
    next_tick_at: datetime
    phase: TickPhase = TickPhase.PENDING

    @property
    def released(self) -> bool:
        return self.phase is TickPhase.DONE

    def release(self) -> bool:
        """Stop future ticks; return False if already released."""
        if self.released:
            return False
        self.phase = TickPhase.DONE
        return True


@dataclass(eq=False)
class SessionState:
    """In-memory state of one active raid."""

    id: DisplayRef
    activity_name: str
    deadline: datetime
    organizer_id: int
    participants: list[int] = field(default_factory=list)
    display_names: dict[int, str] = field(default_factory=dict)
    status: SessionStatus = SessionStatus.PENDING
    timer_handle: TickHandle | None = None
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    @property
    def is_pending(self) -> bool:
        return self.status is SessionStatus.PENDING

    def release_timer(self) -> bool:
        """Release the tick handle, if any; safe to call repeatedly."""
        handle = self.timer_handle
        self.timer_handle = None
        if handle is None:
            return False
        return handle.release()
