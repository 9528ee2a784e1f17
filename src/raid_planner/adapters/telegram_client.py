"""Telegram API client adapter."""

from dataclasses import dataclass
from typing import Protocol

import httpx

DEFAULT_API_BASE_URL = "https://api.telegram.org"


class TelegramApiError(Exception):
    """Telegram rejected a Bot API call."""

    def __init__(self, method: str, status_code: int, description: str) -> None:
        self.method = method
        self.status_code = status_code
        self.description = description
        super().__init__(f"{method} failed ({status_code}): {description}")


class TelegramClient(Protocol):
    """Interface for Telegram API interactions."""

    async def send_message(
        self,
        chat_id: int,
        text: str,
        reply_markup: dict | None = None,
        parse_mode: str | None = None,
    ) -> int:
        """Send a text message to a Telegram chat and return its message id."""

    async def edit_message_text(
        self,
        chat_id: int,
        message_id: int,
        text: str,
        reply_markup: dict | None = None,
        parse_mode: str | None = None,
    ) -> None:
        """Replace the text of a message sent by the bot."""

    async def get_chat(self, chat_id: int) -> dict[str, object]:
        """Return chat information for a user or group id."""

    async def answer_callback_query(
        self, callback_query_id: str, text: str | None = None
    ) -> None:
        """Answer a Telegram callback query."""

    async def answer_inline_query(
        self, inline_query_id: str, results: list[dict[str, object]]
    ) -> None:
        """Answer an inline query with result articles."""

    async def set_my_commands(self, commands: list[dict[str, str]]) -> None:
        """Set the bot command list."""


@dataclass
class HttpxTelegramClient:
    """Telegram client implemented with httpx."""

    bot_token: str
    http_client: httpx.AsyncClient
    base_url: str = DEFAULT_API_BASE_URL
    timeout_seconds: float = 10

    @classmethod
    def create(
        cls, bot_token: str, base_url: str = DEFAULT_API_BASE_URL
    ) -> "HttpxTelegramClient":
        """Create a Telegram client with a managed httpx session."""
        return cls(
            bot_token=bot_token, http_client=httpx.AsyncClient(), base_url=base_url
        )

    async def send_message(
        self,
        chat_id: int,
        text: str,
        reply_markup: dict | None = None,
        parse_mode: str | None = None,
    ) -> int:
        """Send a message using Telegram's sendMessage API."""
        payload: dict[str, object] = {"chat_id": chat_id, "text": text}
        if reply_markup is not None:
            payload["reply_markup"] = reply_markup
        if parse_mode is not None:
            payload["parse_mode"] = parse_mode
        result = await self._call("sendMessage", payload)
        return int(result["message_id"])

    async def edit_message_text(
        self,
        chat_id: int,
        message_id: int,
        text: str,
        reply_markup: dict | None = None,
        parse_mode: str | None = None,
    ) -> None:
        """Edit a message using Telegram's editMessageText API."""
        payload: dict[str, object] = {
            "chat_id": chat_id,
            "message_id": message_id,
            "text": text,
        }
        if reply_markup is not None:
            payload["reply_markup"] = reply_markup
        if parse_mode is not None:
            payload["parse_mode"] = parse_mode
        await self._call("editMessageText", payload)

    async def get_chat(self, chat_id: int) -> dict[str, object]:
        """Fetch chat details using Telegram's getChat API."""
        result = await self._call("getChat", {"chat_id": chat_id})
        return result if isinstance(result, dict) else {}

    async def answer_callback_query(
        self, callback_query_id: str, text: str | None = None
    ) -> None:
        """Answer a callback query using Telegram's API."""
        payload: dict[str, object] = {"callback_query_id": callback_query_id}
        if text is not None:
            payload["text"] = text
        await self._call("answerCallbackQuery", payload)

    async def answer_inline_query(
        self, inline_query_id: str, results: list[dict[str, object]]
    ) -> None:
        """Answer an inline query using Telegram's API."""
        payload: dict[str, object] = {
            "inline_query_id": inline_query_id,
            "results": results,
            "cache_time": 60,
        }
        await self._call("answerInlineQuery", payload)

    async def set_my_commands(self, commands: list[dict[str, str]]) -> None:
        """Set the bot command list."""
        await self._call("setMyCommands", {"commands": commands})

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()

    async def _call(self, method: str, payload: dict[str, object]) -> object:
        url = f"{self.base_url}/bot{self.bot_token}/{method}"
        response = await self.http_client.post(
            url, json=payload, timeout=self.timeout_seconds
        )
        try:
            body = response.json()
        except ValueError:
            response.raise_for_status()
            raise TelegramApiError(
                method, response.status_code, "non-JSON response"
            ) from None
        if not body.get("ok"):
            raise TelegramApiError(
                method,
                int(body.get("error_code", response.status_code)),
                str(body.get("description", "")),
            )
        return body.get("result")
