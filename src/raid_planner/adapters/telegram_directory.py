"""User lookup and direct messaging through Telegram."""

from dataclasses import dataclass
from typing import Protocol

from raid_planner.adapters.telegram_client import TelegramApiError, TelegramClient
from raid_planner.adapters.telegram_display import PARSE_MODE
from raid_planner.domain.errors import NotificationDeliveryFailed, UserUnresolvable


class UserHandle(Protocol):
    """A resolved user that can receive direct messages."""

    user_id: int

    async def send_direct(self, text: str) -> None:
        """Send a private message to the user."""


class UserDirectory(Protocol):
    """Resolves user ids to handles."""

    async def resolve_user(self, user_id: int) -> UserHandle:
        """Return a handle for the user or raise UserUnresolvable."""


@dataclass
class TelegramUserHandle:
    """Private chat with a Telegram user."""

    user_id: int
    telegram_client: TelegramClient

    async def send_direct(self, text: str) -> None:
        """Send a private message to the user."""
        try:
            await self.telegram_client.send_message(
                chat_id=self.user_id, text=text, parse_mode=PARSE_MODE
            )
        except TelegramApiError as exc:
            raise NotificationDeliveryFailed(self.user_id, exc.description) from exc


@dataclass
class TelegramUserDirectory(UserDirectory):
    """Resolve users via getChat; bots only see users who started them."""

    telegram_client: TelegramClient

    async def resolve_user(self, user_id: int) -> TelegramUserHandle:
        """Look up the private chat for a user id."""
        try:
            await self.telegram_client.get_chat(user_id)
        except TelegramApiError as exc:
            raise UserUnresolvable(user_id) from exc
        return TelegramUserHandle(user_id=user_id, telegram_client=self.telegram_client)
