"""Pydantic models for Telegram webhook payloads."""

from pydantic import BaseModel, Field


class TelegramUser(BaseModel):
    """Sender of a message, callback or inline query."""

    id: int
    is_bot: bool | None = None
    first_name: str | None = None


class TelegramChat(BaseModel):
    """Chat a raid display lives in."""

    id: int
    type: str
    title: str | None = None


class TelegramMessage(BaseModel):
    """Incoming command message or the raid display behind a callback."""

    message_id: int
    date: int
    chat: TelegramChat
    from_user: TelegramUser | None = Field(default=None, alias="from")
    text: str | None = None


class TelegramCallbackQuery(BaseModel):
    """Press of a raid keyboard button."""

    id: str
    from_user: TelegramUser = Field(alias="from")
    message: TelegramMessage | None = None
    data: str | None = None


class TelegramInlineQuery(BaseModel):
    """Telegram inline query payload."""

    id: str
    from_user: TelegramUser = Field(alias="from")
    query: str = ""
    offset: str = ""


class TelegramUpdate(BaseModel):
    """Webhook update; only the fields the bot routes on are modelled."""

    update_id: int
    message: TelegramMessage | None = None
    callback_query: TelegramCallbackQuery | None = None
    inline_query: TelegramInlineQuery | None = None
