"""Parsing and replies for the bot's text commands."""

from dataclasses import dataclass

from raid_planner.domain.errors import InvalidInput

RAID_ARG_COUNT = 3

RAID_USAGE = (
    "Usage: /raid <hours> <minutes> <activity>\n"
    "Example: /raid 1 30 Last Wish"
)

HELP_TEXT = (
    "Plan a raid and gather a team before it starts.\n"
    f"{RAID_USAGE}\n"
    "Press Join or Leave on the raid message to change the roster. "
    "Only the organizer can cancel.\n"
    "Use /activities <text> or type @bot <text> to search known activities."
)


@dataclass(frozen=True)
class BotCommandRequest:
    """A slash command and its raw argument text."""

    name: str
    args: str


@dataclass(frozen=True)
class CreateRaidRequest:
    """Parsed arguments of the /raid command."""

    activity_name: str
    hours: int
    minutes: int


def parse_command(text: str) -> BotCommandRequest | None:
    """Split '/name@bot args' into a command request."""
    stripped = text.strip()
    if not stripped.startswith("/"):
        return None
    head, _, args = stripped.partition(" ")
    name = head[1:].split("@", maxsplit=1)[0].lower()
    if not name:
        return None
    return BotCommandRequest(name=name, args=args.strip())


def parse_raid_args(args: str) -> CreateRaidRequest:
    """Parse '<hours> <minutes> <activity>' or raise InvalidInput."""
    parts = args.split(maxsplit=2)
    if len(parts) < RAID_ARG_COUNT:
        raise InvalidInput(RAID_USAGE)
    raw_hours, raw_minutes, activity = parts
    try:
        hours = int(raw_hours)
        minutes = int(raw_minutes)
    except ValueError:
        raise InvalidInput(RAID_USAGE) from None
    return CreateRaidRequest(
        activity_name=activity.strip(), hours=hours, minutes=minutes
    )
