from datetime import datetime, timedelta, timezone

import pytest

from cogs.pomodoro.errors import PlatformCallFailed
from cogs.pomodoro.models import SessionSettings
from cogs.pomodoro.registry import SessionRegistry
from cogs.pomodoro.session import PomodoroSession


class FakeClock:
    def __init__(self, start=None):
        self.now = start or datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)


class FakeIO:
    """In-memory stand-in for DiscordSessionIO that records every call."""

    def __init__(self, members=()):
        self.members = set(members)
        self.connected = set(members)

        self.fail_mute = set()
        self.fail_unmute = set()
        self.fail_send = False
        self.fail_edit = False
        # Discord answers 40032 when editing voice state of someone not in voice
        self.reject_disconnected = False

        self.mute_calls = []
        self.server_muted = set()
        self.statuses = []
        self.edits = []
        self.notices = []
        self.completions = []
        self._next_message_id = 1000

    # roster helpers for tests
    def join(self, member_id):
        self.members.add(member_id)
        self.connected.add(member_id)

    def leave(self, member_id):
        self.members.discard(member_id)
        self.connected.discard(member_id)

    def unmute_calls(self, member_id=None):
        return [m for m, muted in self.mute_calls if not muted and (member_id is None or m == member_id)]

    # collaborator contract
    async def current_members(self):
        return set(self.members)

    def is_member_connected(self, member_id):
        return member_id in self.connected

    async def set_member_muted(self, member_id, muted):
        self.mute_calls.append((member_id, muted))
        if self.reject_disconnected and member_id not in self.connected:
            raise PlatformCallFailed(f"member {member_id} is not connected to voice")
        failing = self.fail_mute if muted else self.fail_unmute
        if member_id in failing:
            raise PlatformCallFailed(f"member {member_id} refused")
        if muted:
            self.server_muted.add(member_id)
        else:
            self.server_muted.discard(member_id)

    async def send_status(self, snapshot):
        if self.fail_send:
            raise PlatformCallFailed("send failed")
        self.statuses.append(snapshot)
        self._next_message_id += 1
        return self._next_message_id

    async def edit_status(self, message_id, snapshot):
        if self.fail_edit:
            raise PlatformCallFailed("edit failed")
        self.edits.append((message_id, snapshot))

    async def send_notice(self, text):
        self.notices.append(text)

    async def send_completion(self, snapshot):
        self.completions.append(snapshot)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def io():
    return FakeIO(members={1, 2, 3})


@pytest.fixture
def registry():
    return SessionRegistry()


@pytest.fixture
def make_session(clock, io, registry):
    """Build and register a session (not started). Defaults: 60s focus, 60s break, 1 cycle."""

    def _make(
        *,
        channel_id=555,
        focus=60.0,
        brk=60.0,
        cycles=1,
        session_io=None,
        session_clock=None,
        refresh_seconds=3600.0,
        register=True,
    ):
        settings = SessionSettings(focus_seconds=focus, break_seconds=brk, total_cycles=cycles)
        session = PomodoroSession(
            channel_id,
            "Study Room",
            settings,
            session_io or io,
            registry,
            clock=session_clock or clock,
            refresh_seconds=refresh_seconds,
            owner_id=42,
        )
        if register:
            registry.register(channel_id, session)
        return session

    return _make
