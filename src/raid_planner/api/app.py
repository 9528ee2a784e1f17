"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from raid_planner.api.telegram_models import (
    TelegramCallbackQuery,
    TelegramInlineQuery,
    TelegramMessage,
    TelegramUpdate,
)
from raid_planner.app_logging import configure_logging
from raid_planner.config import parse_allowed_user_ids
from raid_planner.containers import AppContainer
from raid_planner.domain.errors import (
    DuplicateOrganizerActive,
    InvalidInput,
    Unauthorized,
)
from raid_planner.domain.sessions import DisplayRef
from raid_planner.services.commands import HELP_TEXT, parse_command, parse_raid_args
from raid_planner.services.rendering import (
    CALLBACK_PREFIX,
    CANCEL_ACTION,
    JOIN_ACTION,
    LEAVE_ACTION,
)
from raid_planner.telegram_commands import telegram_commands

logger = logging.getLogger(__name__)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    allowed_user_ids = parse_allowed_user_ids(
        container.settings.telegram_allowed_user_ids
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state_container: AppContainer = app.state.container
        try:
            await state_container.telegram_client.set_my_commands(telegram_commands())
        except Exception:
            logger.exception("Failed to sync Telegram bot commands")
        state_container.scheduler.start()
        yield
        await state_container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/raids")
    async def list_raids(request: Request) -> dict[str, object]:
        """Return the raids that are still pending."""
        state_container: AppContainer = request.app.state.container
        return {
            "raids": [
                {
                    "chat_id": session.id.chat_id,
                    "message_id": session.id.message_id,
                    "activity": session.activity_name,
                    "deadline": session.deadline.isoformat(),
                    "organizer_id": session.organizer_id,
                    "participants": list(session.participants),
                }
                for session in state_container.session_store.list_sessions()
            ]
        }

    @app.post("/telegram/webhook")
    async def telegram_webhook(
        update: TelegramUpdate, request: Request
    ) -> dict[str, str]:
        """Handle Telegram webhook updates."""
        state_container: AppContainer = request.app.state.container
        user_id = _extract_user_id(update)
        if user_id is not None and not _is_user_allowed(user_id, allowed_user_ids):
            if update.callback_query:
                await state_container.telegram_client.answer_callback_query(
                    update.callback_query.id,
                    text="Not authorized.",
                )
            elif update.inline_query:
                await state_container.telegram_client.answer_inline_query(
                    update.inline_query.id, []
                )
            elif update.message:
                await state_container.telegram_client.send_message(
                    chat_id=update.message.chat.id,
                    text="This bot is private.",
                )
            return {"status": "ok"}

        if update.inline_query:
            await _handle_inline_query(state_container, update.inline_query)
        elif update.callback_query:
            await _handle_callback(state_container, update.callback_query)
        elif update.message and update.message.text:
            await _handle_message(state_container, update.message)
        return {"status": "ok"}

    return app


async def _handle_message(container: AppContainer, message: TelegramMessage) -> None:
    command = parse_command(message.text or "")
    if command is None or message.from_user is None:
        return
    chat_id = message.chat.id

    if command.name in {"start", "help"}:
        await container.telegram_client.send_message(chat_id=chat_id, text=HELP_TEXT)
        return

    if command.name == "activities":
        matches = container.raid_service.suggest(command.args)
        await container.telegram_client.send_message(
            chat_id=chat_id, text=_format_activities(matches)
        )
        return

    if command.name != "raid":
        return

    try:
        raid_request = parse_raid_args(command.args)
        await container.raid_service.create_raid(
            chat_id=chat_id,
            organizer_id=message.from_user.id,
            activity_name=raid_request.activity_name,
            hours=raid_request.hours,
            minutes=raid_request.minutes,
        )
    except DuplicateOrganizerActive:
        await container.telegram_client.send_message(
            chat_id=chat_id,
            text=(
                "You already have an active raid. "
                "Cancel it before creating a new one."
            ),
        )
    except InvalidInput as exc:
        await container.telegram_client.send_message(chat_id=chat_id, text=str(exc))
    except Exception as exc:
        logger.exception("Failed to create raid", extra={"chat_id": chat_id})
        await container.telegram_client.send_message(
            chat_id=chat_id,
            text=_format_error(
                container, exc, "Sorry, I couldn't create the raid. Please try again."
            ),
        )


async def _handle_callback(
    container: AppContainer, callback: TelegramCallbackQuery
) -> None:
    action = _parse_raid_callback(callback.data)
    if action is None or callback.message is None:
        await container.telegram_client.answer_callback_query(callback.id)
        return

    ref = DisplayRef(
        chat_id=callback.message.chat.id, message_id=callback.message.message_id
    )
    user = callback.from_user
    reply: str | None = None
    try:
        if action == JOIN_ACTION:
            await container.raid_service.join(ref, user.id, user.first_name)
        elif action == LEAVE_ACTION:
            await container.raid_service.leave(ref, user.id)
        elif action == CANCEL_ACTION:
            if await container.raid_service.cancel(ref, user.id):
                reply = "You cancelled the raid."
    except Unauthorized:
        reply = "Only the organizer can cancel this raid."
    except Exception:
        logger.exception(
            "Failed to handle raid callback",
            extra={"raid": str(ref), "action": action},
        )
    await container.telegram_client.answer_callback_query(callback.id, text=reply)


async def _handle_inline_query(
    container: AppContainer, inline_query: TelegramInlineQuery
) -> None:
    matches = container.raid_service.suggest(inline_query.query)
    results: list[dict[str, object]] = [
        {
            "type": "article",
            "id": str(index),
            "title": name,
            "description": f"/raid <hours> <minutes> {name}",
            "input_message_content": {"message_text": name},
        }
        for index, name in enumerate(matches)
    ]
    await container.telegram_client.answer_inline_query(inline_query.id, results)


def _extract_user_id(update: TelegramUpdate) -> int | None:
    """Extract Telegram user id from update, if present."""
    if update.callback_query:
        return update.callback_query.from_user.id
    if update.inline_query:
        return update.inline_query.from_user.id
    if update.message and update.message.from_user:
        return update.message.from_user.id
    return None


def _is_user_allowed(user_id: int, allowed: set[int] | None) -> bool:
    """Return true when the user is allowed to interact with the bot."""
    return allowed is None or user_id in allowed


def _parse_raid_callback(data: str | None) -> str | None:
    """Parse callback data in the format raid:<action>."""
    if not data or not data.startswith(CALLBACK_PREFIX):
        return None
    action = data.removeprefix(CALLBACK_PREFIX)
    if action not in {JOIN_ACTION, LEAVE_ACTION, CANCEL_ACTION}:
        return None
    return action


def _format_activities(matches: list[str]) -> str:
    if not matches:
        return "No known activities match that search."
    lines = ["Known activities:"]
    lines.extend(f"- {name}" for name in matches)
    return "\n".join(lines)


def _format_error(container: AppContainer, exc: Exception, fallback: str) -> str:
    """Return a user-facing error message with local debug info."""
    if container.settings.environment == "local":
        detail = f"{type(exc).__name__}: {exc}".strip()
        if detail:
            return f"{fallback} (debug: {detail})"
    return fallback
