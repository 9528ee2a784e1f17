"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import timedelta

from raid_planner.adapters.telegram_client import HttpxTelegramClient, TelegramClient
from raid_planner.adapters.telegram_directory import TelegramUserDirectory
from raid_planner.adapters.telegram_display import TelegramRaidDisplay
from raid_planner.config import Settings
from raid_planner.services.notifications import NotificationDispatcher
from raid_planner.services.raids import RaidService
from raid_planner.services.roster import RosterManager
from raid_planner.services.scheduler import DeadlineScheduler
from raid_planner.services.session_store import SessionStore


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    telegram_client: TelegramClient
    session_store: SessionStore
    scheduler: DeadlineScheduler
    raid_service: RaidService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    telegram_client = HttpxTelegramClient.create(
        resolved_settings.telegram_bot_token,
        base_url=resolved_settings.telegram_api_base_url,
    )
    display = TelegramRaidDisplay(telegram_client)
    directory = TelegramUserDirectory(telegram_client)
    session_store = SessionStore()
    dispatcher = NotificationDispatcher(display=display, directory=directory)
    scheduler = DeadlineScheduler(
        store=session_store,
        display=display,
        dispatcher=dispatcher,
        tick_period=timedelta(seconds=resolved_settings.tick_period_seconds),
        roster_capacity=resolved_settings.roster_capacity,
        display_capacity_label=resolved_settings.display_capacity_label,
    )
    roster = RosterManager(display=display, capacity=resolved_settings.roster_capacity)
    raid_service = RaidService(
        store=session_store,
        roster=roster,
        scheduler=scheduler,
        display=display,
        display_capacity_label=resolved_settings.display_capacity_label,
        max_hours=resolved_settings.max_hours,
    )

    async def close_resources() -> None:
        await scheduler.stop()
        await telegram_client.close()

    return AppContainer(
        settings=resolved_settings,
        telegram_client=telegram_client,
        session_store=session_store,
        scheduler=scheduler,
        raid_service=raid_service,
        close_resources=close_resources,
    )
