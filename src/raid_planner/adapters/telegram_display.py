"""Raid display surface backed by Telegram messages."""

from dataclasses import dataclass
from typing import Protocol

from raid_planner.adapters.telegram_client import TelegramApiError, TelegramClient
from raid_planner.domain.errors import DisplayGone
from raid_planner.domain.sessions import DisplayRef

PARSE_MODE = "HTML"

_GONE_MARKERS = (
    "message to edit not found",
    "message can't be edited",
    "chat not found",
    "bot was kicked",
)
_NOT_MODIFIED_MARKER = "message is not modified"


class RaidDisplay(Protocol):
    """Surface that shows and updates raid status messages."""

    async def create_display(
        self, chat_id: int, text: str, controls: dict | None
    ) -> DisplayRef:
        """Post a new status message and return where it lives."""

    async def edit_display(
        self, ref: DisplayRef, text: str, controls: dict | None
    ) -> None:
        """Replace a status message; raise DisplayGone if it no longer exists."""

    async def send_channel_message(self, chat_id: int, text: str) -> None:
        """Post a plain message to the chat."""


@dataclass
class TelegramRaidDisplay(RaidDisplay):
    """Raid display using bot messages with inline keyboards."""

    telegram_client: TelegramClient

    async def create_display(
        self, chat_id: int, text: str, controls: dict | None
    ) -> DisplayRef:
        """Send the status message and return its reference."""
        message_id = await self.telegram_client.send_message(
            chat_id=chat_id,
            text=text,
            reply_markup=controls,
            parse_mode=PARSE_MODE,
        )
        return DisplayRef(chat_id=chat_id, message_id=message_id)

    async def edit_display(
        self, ref: DisplayRef, text: str, controls: dict | None
    ) -> None:
        """Edit the status message in place."""
        try:
            await self.telegram_client.edit_message_text(
                chat_id=ref.chat_id,
                message_id=ref.message_id,
                text=text,
                reply_markup=controls,
                parse_mode=PARSE_MODE,
            )
        except TelegramApiError as exc:
            description = exc.description.lower()
            if _NOT_MODIFIED_MARKER in description:
                return
            if any(marker in description for marker in _GONE_MARKERS):
                raise DisplayGone(exc.description) from exc
            raise

    async def send_channel_message(self, chat_id: int, text: str) -> None:
        """Send a message to the raid's chat."""
        await self.telegram_client.send_message(
            chat_id=chat_id, text=text, parse_mode=PARSE_MODE
        )
