"""Telegram bot command configuration."""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class TelegramCommand:
    """Declarative bot command definition."""

    command: str
    description: str


class BotCommand(Enum):
    """Enum of bot commands (single source of truth)."""

    RAID = TelegramCommand("raid", "Create a raid: /raid <hours> <minutes> <activity>")
    ACTIVITIES = TelegramCommand("activities", "Search known raids and dungeons")
    HELP = TelegramCommand("help", "How raid planning works")


def telegram_commands() -> list[dict[str, str]]:
    """Return commands formatted for Telegram API."""
    return [
        {"command": entry.value.command, "description": entry.value.description}
        for entry in BotCommand
    ]
