"""Roster rules for a single raid session."""

import logging
from dataclasses import dataclass

from raid_planner.adapters.telegram_display import RaidDisplay
from raid_planner.domain.errors import DisplayGone, Unauthorized
from raid_planner.domain.sessions import SessionState, SessionStatus
from raid_planner.services.rendering import no_controls, render_cancelled_by_organizer

_logger = logging.getLogger(__name__)


@dataclass
class RosterManager:
    """Join, leave and cancel rules.

    Joins and leaves that change nothing (already joined, roster full, not
    joined) are silent no-ops and return False. Callers hold ``session.lock``.
    """

    display: RaidDisplay
    capacity: int = 3

    def join(
        self, session: SessionState, user_id: int, display_name: str | None = None
    ) -> bool:
        """Add a participant if there is room."""
        if not session.is_pending or user_id in session.participants:
            return False
        if len(session.participants) >= self.capacity:
            return False
        session.participants.append(user_id)
        if display_name:
            session.display_names[user_id] = display_name
        return True

    def leave(self, session: SessionState, user_id: int) -> bool:
        """Remove a participant if present."""
        if user_id not in session.participants:
            return False
        session.participants.remove(user_id)
        session.display_names.pop(user_id, None)
        return True

    async def cancel(self, session: SessionState, requester_id: int) -> bool:
        """Cancel on behalf of the organizer; False if already resolved."""
        if requester_id != session.organizer_id:
            raise Unauthorized(requester_id)
        if not session.is_pending:
            return False
        session.status = SessionStatus.CANCELLED
        session.release_timer()
        try:
            await self.display.edit_display(
                session.id,
                render_cancelled_by_organizer(session.activity_name),
                no_controls(),
            )
        except DisplayGone:
            _logger.warning("Cancelled raid display is gone: raid=%s", session.id)
        except Exception:
            _logger.exception("Failed to update cancelled raid=%s", session.id)
        return True
