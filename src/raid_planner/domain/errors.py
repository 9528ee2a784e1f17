"""Errors raised by raid operations."""


class RaidError(Exception):
    """Base class for raid errors local to one session or request."""


class InvalidInput(RaidError):
    """Request fields are missing or out of range."""


class DuplicateOrganizerActive(RaidError):
    """The organizer already has a pending raid."""

    def __init__(self, organizer_id: int) -> None:
        self.organizer_id = organizer_id
        super().__init__(f"Organizer {organizer_id} already has a pending raid")


class Unauthorized(RaidError):
    """Only the organizer may perform this action."""

    def __init__(self, user_id: int) -> None:
        self.user_id = user_id
        super().__init__(f"User {user_id} is not the raid organizer")


class DisplayGone(RaidError):
    """The raid's display message no longer exists."""


class UserUnresolvable(RaidError):
    """A user id could not be resolved to a reachable chat."""

    def __init__(self, user_id: int) -> None:
        self.user_id = user_id
        super().__init__(f"User {user_id} cannot be resolved")


class NotificationDeliveryFailed(RaidError):
    """A direct notification could not be delivered."""

    def __init__(self, user_id: int, reason: str) -> None:
        self.user_id = user_id
        self.reason = reason
        super().__init__(f"Notification to {user_id} failed: {reason}")
