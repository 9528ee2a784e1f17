"""Status text for raid displays.

Everything here is pure: output depends only on the arguments. Text is
Telegram HTML, so anything user supplied goes through ``html.escape``.
"""

import html
from collections.abc import Mapping, Sequence
from datetime import datetime

CALLBACK_PREFIX = "raid:"
JOIN_ACTION = "join"
LEAVE_ACTION = "leave"
CANCEL_ACTION = "cancel"


def render(  # noqa: PLR0913
    activity_name: str,
    deadline: datetime,
    participants: Sequence[int],
    now: datetime,
    *,
    display_capacity_label: int,
    display_names: Mapping[int, str] | None = None,
) -> str:
    """Render the pending status of a raid."""
    remaining = minutes_remaining(deadline, now)
    if remaining == 0:
        status = "The activity has started!"
    else:
        status = f"Starts in {format_duration(remaining)}."

    lines = [f"<b>{html.escape(activity_name)}</b>", status]
    if participants:
        lines.append(
            f"Participants ({len(participants)}/{display_capacity_label}):"
        )
        names = display_names or {}
        lines.extend(
            f"{position}. {mention(user_id, names.get(user_id))}"
            for position, user_id in enumerate(participants, start=1)
        )
    else:
        lines.append("No participants yet.")
    return "\n".join(lines)


def minutes_remaining(deadline: datetime, now: datetime) -> int:
    """Whole minutes until the deadline, floored and never negative."""
    seconds = (deadline - now).total_seconds()
    if seconds <= 0:
        return 0
    return int(seconds // 60)


def format_duration(total_minutes: int) -> str:
    """Format minutes as 'H hours and M minutes', omitting zero units."""
    hours, minutes = divmod(total_minutes, 60)
    parts = []
    if hours > 0:
        parts.append(_plural(hours, "hour"))
    if minutes > 0:
        parts.append(_plural(minutes, "minute"))
    return " and ".join(parts)


def render_insufficient(
    activity_name: str, participant_count: int, display_capacity_label: int
) -> str:
    """Final text for a raid that reached its deadline short of players."""
    return (
        f"<b>{html.escape(activity_name)}</b>\n\n"
        "<b>Cancelled:</b> the raid was cancelled for lack of participants "
        f"({participant_count}/{display_capacity_label})."
    )


def render_cancelled_by_organizer(activity_name: str) -> str:
    """Final text for a raid cancelled by its organizer."""
    return (
        f"<b>{html.escape(activity_name)}</b>\n\n"
        "The raid has been cancelled by the organizer."
    )


def render_duplicate_withdrawn(activity_name: str) -> str:
    """Final text for a display posted while its organizer already had a raid."""
    return (
        f"<b>{html.escape(activity_name)}</b>\n\n"
        "Not created: a raid for this organizer is already active."
    )


def render_launch_announcement(
    activity_name: str,
    participants: Sequence[int],
    display_names: Mapping[int, str] | None = None,
) -> str:
    """Channel message announcing the start, mentioning every participant."""
    names = display_names or {}
    mentions = " ".join(
        mention(user_id, names.get(user_id)) for user_id in participants
    )
    return f"The raid <b>{html.escape(activity_name)}</b> has started! {mentions}"


def render_direct_start(activity_name: str) -> str:
    """Direct message sent to each participant when the raid starts."""
    return f"The raid <b>{html.escape(activity_name)}</b> has started!"


def mention(user_id: int, name: str | None = None) -> str:
    """HTML mention of a Telegram user by id."""
    label = html.escape(name) if name else str(user_id)
    return f'<a href="tg://user?id={user_id}">{label}</a>'


def raid_controls() -> dict:
    """Inline keyboard with the join, leave and cancel buttons."""
    return {
        "inline_keyboard": [
            [
                {"text": "Join", "callback_data": CALLBACK_PREFIX + JOIN_ACTION},
                {"text": "Leave", "callback_data": CALLBACK_PREFIX + LEAVE_ACTION},
                {"text": "Cancel", "callback_data": CALLBACK_PREFIX + CANCEL_ACTION},
            ]
        ]
    }


def no_controls() -> dict:
    """Empty inline keyboard; removes the buttons from a message."""
    return {"inline_keyboard": []}


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"
