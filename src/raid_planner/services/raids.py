"""Request-level raid operations used by the webhook."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from raid_planner.adapters.telegram_display import RaidDisplay
from raid_planner.domain.errors import (
    DisplayGone,
    DuplicateOrganizerActive,
    InvalidInput,
)
from raid_planner.domain.sessions import DisplayRef, SessionState
from raid_planner.services.activities import RAID_ACTIVITIES, suggest_activities
from raid_planner.services.rendering import (
    no_controls,
    raid_controls,
    render,
    render_duplicate_withdrawn,
)
from raid_planner.services.roster import RosterManager
from raid_planner.services.scheduler import DeadlineScheduler, utc_now
from raid_planner.services.session_store import SessionStore

_logger = logging.getLogger(__name__)

MAX_MINUTES = 59


@dataclass
class RaidService:
    """Create raids and route roster changes to the right session."""

    store: SessionStore
    roster: RosterManager
    scheduler: DeadlineScheduler
    display: RaidDisplay
    display_capacity_label: int = 6
    max_hours: int = 23
    activities: tuple[str, ...] = RAID_ACTIVITIES
    clock: Callable[[], datetime] = utc_now

    async def create_raid(  # noqa: PLR0913
        self,
        chat_id: int,
        organizer_id: int,
        activity_name: str,
        hours: int,
        minutes: int,
    ) -> SessionState:
        """Post the raid display, store the session and arm its timer."""
        activity_name = activity_name.strip()
        if not activity_name:
            raise InvalidInput("Activity name is required.")
        if not 0 <= hours <= self.max_hours or not 0 <= minutes <= MAX_MINUTES:
            raise InvalidInput("Invalid hours/minutes values.")
        if self.store.find_pending_by_organizer(organizer_id) is not None:
            raise DuplicateOrganizerActive(organizer_id)

        now = self.clock()
        deadline = now + timedelta(hours=hours, minutes=minutes)
        text = render(
            activity_name,
            deadline,
            [],
            now,
            display_capacity_label=self.display_capacity_label,
        )
        ref = await self.display.create_display(chat_id, text, raid_controls())
        try:
            session = self.store.create(ref, activity_name, deadline, organizer_id)
        except DuplicateOrganizerActive:
            await self._withdraw_display(ref, activity_name)
            raise
        self.scheduler.schedule(session)
        _logger.info(
            "Raid created: raid=%s organizer=%s deadline=%s",
            ref,
            organizer_id,
            deadline.isoformat(),
        )
        return session

    async def join(
        self, session_id: DisplayRef, user_id: int, display_name: str | None = None
    ) -> SessionState | None:
        """Add the user to the roster and refresh the display."""
        session = self.store.get(session_id)
        if session is None:
            return None
        async with session.lock:
            if not session.is_pending:
                return None
            if self.roster.join(session, user_id, display_name):
                await self._refresh(session)
        return session

    async def leave(self, session_id: DisplayRef, user_id: int) -> SessionState | None:
        """Remove the user from the roster and refresh the display."""
        session = self.store.get(session_id)
        if session is None:
            return None
        async with session.lock:
            if not session.is_pending:
                return None
            if self.roster.leave(session, user_id):
                await self._refresh(session)
        return session

    async def cancel(self, session_id: DisplayRef, requester_id: int) -> bool:
        """Cancel a raid for its organizer; raises Unauthorized otherwise."""
        session = self.store.get(session_id)
        if session is None:
            return False
        async with session.lock:
            try:
                cancelled = await self.roster.cancel(session, requester_id)
            finally:
                if not session.is_pending:
                    self.store.remove(session.id)
            if cancelled:
                _logger.info("Raid cancelled by organizer: raid=%s", session.id)
        return cancelled

    def suggest(self, query: str) -> list[str]:
        """Autocomplete activity names."""
        return suggest_activities(query, self.activities)

    async def _refresh(self, session: SessionState) -> None:
        text = render(
            session.activity_name,
            session.deadline,
            session.participants,
            self.clock(),
            display_capacity_label=self.display_capacity_label,
            display_names=session.display_names,
        )
        try:
            await self.display.edit_display(session.id, text, raid_controls())
        except DisplayGone:
            _logger.warning("Raid display is gone, dropping raid=%s", session.id)
            self.scheduler.terminate(session)

    async def _withdraw_display(self, ref: DisplayRef, activity_name: str) -> None:
        try:
            await self.display.edit_display(
                ref, render_duplicate_withdrawn(activity_name), no_controls()
            )
        except DisplayGone:
            _logger.warning("Withdrawn raid display is gone: raid=%s", ref)
        except Exception:
            _logger.exception("Failed to withdraw duplicate raid display=%s", ref)
