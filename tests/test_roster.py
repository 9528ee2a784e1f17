"""Tests for roster rules."""

import asyncio
from datetime import timedelta

import pytest

from raid_planner.domain.errors import Unauthorized
from raid_planner.domain.sessions import (
    DisplayRef,
    SessionStatus,
    TickHandle,
    TickPhase,
)
from raid_planner.services.roster import RosterManager
from raid_planner.services.session_store import SessionStore
from tests.conftest import START, FakeRaidDisplay


def _session(store: SessionStore | None = None):
    store = store or SessionStore()
    return store.create(DisplayRef(1, 10), "Last Wish", START, organizer_id=7)


def test_join_appends_in_order_without_duplicates() -> None:
    roster = RosterManager(display=FakeRaidDisplay(), capacity=3)
    session = _session()

    assert roster.join(session, 1)
    assert roster.join(session, 2)
    assert not roster.join(session, 1)

    assert session.participants == [1, 2]


def test_join_full_roster_is_noop() -> None:
    roster = RosterManager(display=FakeRaidDisplay(), capacity=3)
    session = _session()
    for user_id in (1, 2, 3):
        roster.join(session, user_id)

    assert not roster.join(session, 4)
    assert session.participants == [1, 2, 3]


def test_join_ignored_when_not_pending() -> None:
    roster = RosterManager(display=FakeRaidDisplay(), capacity=3)
    session = _session()
    session.status = SessionStatus.LAUNCHED

    assert not roster.join(session, 1)
    assert session.participants == []


def test_join_records_display_name_and_leave_drops_it() -> None:
    roster = RosterManager(display=FakeRaidDisplay(), capacity=3)
    session = _session()

    roster.join(session, 1, "Ana")
    assert session.display_names == {1: "Ana"}

    assert roster.leave(session, 1)
    assert session.participants == []
    assert session.display_names == {}


def test_leave_absent_user_is_noop() -> None:
    roster = RosterManager(display=FakeRaidDisplay(), capacity=3)
    session = _session()
    roster.join(session, 1)

    assert not roster.leave(session, 2)
    assert session.participants == [1]


def test_cancel_by_non_organizer_is_rejected() -> None:
    display = FakeRaidDisplay()
    roster = RosterManager(display=display, capacity=3)
    session = _session()

    with pytest.raises(Unauthorized):
        asyncio.run(roster.cancel(session, requester_id=99))

    assert session.status is SessionStatus.PENDING
    assert display.edits == []


def test_cancel_by_organizer_releases_timer_once() -> None:
    display = FakeRaidDisplay()
    roster = RosterManager(display=display, capacity=3)
    session = _session()
    handle = TickHandle(session.id, timedelta(seconds=60), START)
    session.timer_handle = handle

    assert asyncio.run(roster.cancel(session, requester_id=7))
    assert not asyncio.run(roster.cancel(session, requester_id=7))

    assert session.status is SessionStatus.CANCELLED
    assert session.timer_handle is None
    assert handle.phase is TickPhase.DONE
    assert not handle.release()
    assert len(display.edits) == 1
    ref, text, controls = display.edits[0]
    assert ref == session.id
    assert "cancelled by the organizer" in text
    assert controls == {"inline_keyboard": []}


def test_cancel_survives_missing_display() -> None:
    display = FakeRaidDisplay()
    roster = RosterManager(display=display, capacity=3)
    session = _session()
    display.gone.add(session.id)

    assert asyncio.run(roster.cancel(session, requester_id=7))
    assert session.status is SessionStatus.CANCELLED


def test_cancel_survives_failing_display_edit() -> None:
    display = FakeRaidDisplay(fail_edit=True)
    roster = RosterManager(display=display, capacity=3)
    session = _session()

    assert asyncio.run(roster.cancel(session, requester_id=7))
    assert session.status is SessionStatus.CANCELLED
    assert session.timer_handle is None
    assert display.edits == []
