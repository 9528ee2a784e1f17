"""Start notifications for launched raids."""

import asyncio
import logging
from dataclasses import dataclass, field

from raid_planner.adapters.telegram_directory import UserDirectory
from raid_planner.adapters.telegram_display import RaidDisplay
from raid_planner.domain.sessions import SessionState
from raid_planner.services.rendering import (
    render_direct_start,
    render_launch_announcement,
)

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationOutcome:
    """Result of one direct notification."""

    user_id: int
    delivered: bool
    error: str | None = None


@dataclass
class DispatchReport:
    """Outcomes of a launch fan-out."""

    broadcast_delivered: bool
    outcomes: list[NotificationOutcome] = field(default_factory=list)

    @property
    def failed(self) -> list[NotificationOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.delivered]


@dataclass
class NotificationDispatcher:
    """Fan out start messages; failures are logged, never raised or retried."""

    display: RaidDisplay
    directory: UserDirectory

    async def send(self, session: SessionState) -> DispatchReport:
        """Announce the start in the chat and message every recipient."""
        recipients = list(session.participants)
        if session.organizer_id not in recipients:
            recipients.append(session.organizer_id)

        direct_text = render_direct_start(session.activity_name)
        results = await asyncio.gather(
            self._broadcast(session),
            *(self._notify(user_id, direct_text) for user_id in recipients),
            return_exceptions=True,
        )
        broadcast, *direct = results

        outcomes = []
        for user_id, result in zip(recipients, direct, strict=True):
            if isinstance(result, BaseException):
                _logger.warning(
                    "Start notification failed: raid=%s user=%s error=%s",
                    session.id,
                    user_id,
                    result,
                )
                outcomes.append(
                    NotificationOutcome(
                        user_id=user_id, delivered=False, error=str(result)
                    )
                )
            else:
                outcomes.append(NotificationOutcome(user_id=user_id, delivered=True))

        broadcast_delivered = not isinstance(broadcast, BaseException)
        if not broadcast_delivered:
            _logger.warning(
                "Start announcement failed: raid=%s error=%s", session.id, broadcast
            )
        report = DispatchReport(
            broadcast_delivered=broadcast_delivered, outcomes=outcomes
        )
        _logger.info(
            "Raid start notifications sent: raid=%s delivered=%s failed=%s",
            session.id,
            len(outcomes) - len(report.failed),
            len(report.failed),
        )
        return report

    async def _broadcast(self, session: SessionState) -> None:
        text = render_launch_announcement(
            session.activity_name, session.participants, session.display_names
        )
        await self.display.send_channel_message(session.id.chat_id, text)

    async def _notify(self, user_id: int, text: str) -> None:
        handle = await self.directory.resolve_user(user_id)
        await handle.send_direct(text)
