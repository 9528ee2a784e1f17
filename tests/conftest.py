"""Shared test fixtures."""

import itertools
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import pytest

from raid_planner.adapters.telegram_client import TelegramApiError, TelegramClient
from raid_planner.adapters.telegram_directory import (
    TelegramUserDirectory,
    UserDirectory,
)
from raid_planner.adapters.telegram_display import RaidDisplay, TelegramRaidDisplay
from raid_planner.config import Settings
from raid_planner.containers import AppContainer
from raid_planner.domain.errors import (
    DisplayGone,
    NotificationDeliveryFailed,
    UserUnresolvable,
)
from raid_planner.domain.sessions import DisplayRef
from raid_planner.services.notifications import NotificationDispatcher
from raid_planner.services.raids import RaidService
from raid_planner.services.roster import RosterManager
from raid_planner.services.scheduler import DeadlineScheduler
from raid_planner.services.session_store import SessionStore

START = datetime(2026, 1, 10, 18, 0, tzinfo=UTC)


@dataclass
class FakeClock:
    """Manually advanced clock."""

    now: datetime = START

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@dataclass
class FakeTelegramClient(TelegramClient):
    """Fake Telegram client that records calls."""

    messages: list[tuple[int, str]] = field(default_factory=list)
    markups: list[dict | None] = field(default_factory=list)
    edits: list[tuple[int, int, str, dict | None]] = field(default_factory=list)
    callbacks: list[tuple[str, str | None]] = field(default_factory=list)
    inline_answers: list[tuple[str, list[dict[str, object]]]] = field(
        default_factory=list
    )
    commands: list[dict[str, str]] | None = None
    deleted_messages: set[tuple[int, int]] = field(default_factory=set)
    unknown_chats: set[int] = field(default_factory=set)
    blocked_chats: set[int] = field(default_factory=set)
    _message_ids: itertools.count = field(
        default_factory=lambda: itertools.count(100)
    )

    async def send_message(
        self,
        chat_id: int,
        text: str,
        reply_markup: dict | None = None,
        parse_mode: str | None = None,
    ) -> int:
        if chat_id in self.blocked_chats:
            raise TelegramApiError(
                "sendMessage", 403, "Forbidden: bot was blocked by the user"
            )
        self.messages.append((chat_id, text))
        self.markups.append(reply_markup)
        return next(self._message_ids)

    async def edit_message_text(
        self,
        chat_id: int,
        message_id: int,
        text: str,
        reply_markup: dict | None = None,
        parse_mode: str | None = None,
    ) -> None:
        if (chat_id, message_id) in self.deleted_messages:
            raise TelegramApiError(
                "editMessageText", 400, "Bad Request: message to edit not found"
            )
        self.edits.append((chat_id, message_id, text, reply_markup))

    async def get_chat(self, chat_id: int) -> dict[str, object]:
        if chat_id in self.unknown_chats:
            raise TelegramApiError("getChat", 400, "Bad Request: chat not found")
        return {"id": chat_id, "type": "private"}

    async def answer_callback_query(
        self, callback_query_id: str, text: str | None = None
    ) -> None:
        self.callbacks.append((callback_query_id, text))

    async def answer_inline_query(
        self, inline_query_id: str, results: list[dict[str, object]]
    ) -> None:
        self.inline_answers.append((inline_query_id, results))

    async def set_my_commands(self, commands: list[dict[str, str]]) -> None:
        self.commands = commands


@dataclass
class FakeRaidDisplay(RaidDisplay):
    """In-memory display surface."""

    created: list[tuple[int, str, dict | None]] = field(default_factory=list)
    edits: list[tuple[DisplayRef, str, dict | None]] = field(default_factory=list)
    channel_messages: list[tuple[int, str]] = field(default_factory=list)
    gone: set[DisplayRef] = field(default_factory=set)
    fail_channel: bool = False
    fail_edit: bool = False
    _message_ids: itertools.count = field(default_factory=lambda: itertools.count(1))

    async def create_display(
        self, chat_id: int, text: str, controls: dict | None
    ) -> DisplayRef:
        self.created.append((chat_id, text, controls))
        return DisplayRef(chat_id=chat_id, message_id=next(self._message_ids))

    async def edit_display(
        self, ref: DisplayRef, text: str, controls: dict | None
    ) -> None:
        if ref in self.gone:
            raise DisplayGone(str(ref))
        if self.fail_edit:
            raise TelegramApiError(
                "editMessageText", 429, "Too Many Requests: retry after 5"
            )
        self.edits.append((ref, text, controls))

    async def send_channel_message(self, chat_id: int, text: str) -> None:
        if self.fail_channel:
            raise RuntimeError("channel unavailable")
        self.channel_messages.append((chat_id, text))

    def last_text(self, ref: DisplayRef) -> str | None:
        texts = [text for edited, text, _ in self.edits if edited == ref]
        return texts[-1] if texts else None


@dataclass
class FakeUserHandle:
    """Records direct messages for one user."""

    user_id: int
    directory: "FakeUserDirectory"

    async def send_direct(self, text: str) -> None:
        if self.user_id in self.directory.failing:
            raise NotificationDeliveryFailed(self.user_id, "blocked")
        self.directory.sent.append((self.user_id, text))


@dataclass
class FakeUserDirectory(UserDirectory):
    """User directory with configurable failures."""

    sent: list[tuple[int, str]] = field(default_factory=list)
    unresolvable: set[int] = field(default_factory=set)
    failing: set[int] = field(default_factory=set)

    async def resolve_user(self, user_id: int) -> FakeUserHandle:
        if user_id in self.unresolvable:
            raise UserUnresolvable(user_id)
        return FakeUserHandle(user_id=user_id, directory=self)


@dataclass
class RaidHarness:
    """Real services wired to fake I/O."""

    clock: FakeClock
    display: FakeRaidDisplay
    directory: FakeUserDirectory
    store: SessionStore
    dispatcher: NotificationDispatcher
    scheduler: DeadlineScheduler
    roster: RosterManager
    service: RaidService


def build_harness(
    roster_capacity: int = 3, display_capacity_label: int = 6
) -> RaidHarness:
    clock = FakeClock()
    display = FakeRaidDisplay()
    directory = FakeUserDirectory()
    store = SessionStore()
    dispatcher = NotificationDispatcher(display=display, directory=directory)
    scheduler = DeadlineScheduler(
        store=store,
        display=display,
        dispatcher=dispatcher,
        tick_period=timedelta(seconds=60),
        roster_capacity=roster_capacity,
        display_capacity_label=display_capacity_label,
        clock=clock,
    )
    roster = RosterManager(display=display, capacity=roster_capacity)
    service = RaidService(
        store=store,
        roster=roster,
        scheduler=scheduler,
        display=display,
        display_capacity_label=display_capacity_label,
        clock=clock,
    )
    return RaidHarness(
        clock=clock,
        display=display,
        directory=directory,
        store=store,
        dispatcher=dispatcher,
        scheduler=scheduler,
        roster=roster,
        service=service,
    )


@pytest.fixture
def harness() -> RaidHarness:
    return build_harness()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        telegram_bot_token="test-token",
        telegram_allowed_user_ids=None,
        environment="test",
    )


@pytest.fixture
def telegram_client() -> FakeTelegramClient:
    return FakeTelegramClient()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def container(
    settings: Settings, telegram_client: FakeTelegramClient, clock: FakeClock
) -> AppContainer:
    display = TelegramRaidDisplay(telegram_client)
    directory = TelegramUserDirectory(telegram_client)
    store = SessionStore()
    dispatcher = NotificationDispatcher(display=display, directory=directory)
    scheduler = DeadlineScheduler(
        store=store,
        display=display,
        dispatcher=dispatcher,
        tick_period=timedelta(seconds=settings.tick_period_seconds),
        roster_capacity=settings.roster_capacity,
        display_capacity_label=settings.display_capacity_label,
        clock=clock,
    )
    raid_service = RaidService(
        store=store,
        roster=RosterManager(display=display, capacity=settings.roster_capacity),
        scheduler=scheduler,
        display=display,
        display_capacity_label=settings.display_capacity_label,
        max_hours=settings.max_hours,
        clock=clock,
    )

    async def close_resources() -> None:
        await scheduler.stop()

    return AppContainer(
        settings=settings,
        telegram_client=telegram_client,
        session_store=store,
        scheduler=scheduler,
        raid_service=raid_service,
        close_resources=close_resources,
    )
