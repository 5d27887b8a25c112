from unittest.mock import AsyncMock, MagicMock

import pytest

from cogs.pomodoro.errors import SessionNotFound
from cogs.pomodoro.models import ControlAction, ControlRef, LifecycleState
from cogs.pomodoro.router import (
    ControlRouter,
    MembershipChange,
    MembershipRouter,
    VoiceMembershipEvent,
)


def _session_mock():
    session = MagicMock()
    session.handle_member_join = AsyncMock(return_value=True)
    session.handle_member_leave = AsyncMock(return_value=True)
    session.release_pending = AsyncMock(return_value=True)
    session.mutes.is_pending.return_value = False
    return session


@pytest.mark.parametrize(
    "before, after, kind",
    [
        (None, 1, MembershipChange.JOIN),
        (1, None, MembershipChange.LEAVE),
        (1, 2, MembershipChange.MOVE),
        (1, 1, MembershipChange.NONE),
        (None, None, MembershipChange.NONE),
    ],
)
def test_event_kind(before, after, kind):
    event = VoiceMembershipEvent(member_id=5, before_channel_id=before, after_channel_id=after)
    assert event.kind is kind


@pytest.mark.asyncio
async def test_join_goes_to_owning_session_only(registry):
    owned = _session_mock()
    registry.register(1, owned)
    router = MembershipRouter(registry)

    await router.dispatch(VoiceMembershipEvent(5, None, 1))
    await router.dispatch(VoiceMembershipEvent(6, None, 2))

    owned.handle_member_join.assert_awaited_once_with(5)
    owned.handle_member_leave.assert_not_awaited()


@pytest.mark.asyncio
async def test_move_is_leave_then_join(registry):
    old, new = _session_mock(), _session_mock()
    registry.register(1, old)
    registry.register(2, new)
    router = MembershipRouter(registry)

    await router.dispatch(VoiceMembershipEvent(5, 1, 2))

    old.handle_member_leave.assert_awaited_once_with(5)
    new.handle_member_join.assert_awaited_once_with(5)
    old.handle_member_join.assert_not_awaited()


@pytest.mark.asyncio
async def test_move_into_channel_without_session(registry):
    old = _session_mock()
    registry.register(1, old)
    router = MembershipRouter(registry)

    await router.dispatch(VoiceMembershipEvent(5, 1, 3))

    old.handle_member_leave.assert_awaited_once_with(5)


@pytest.mark.asyncio
async def test_bots_and_same_channel_updates_are_ignored(registry):
    owned = _session_mock()
    registry.register(1, owned)
    router = MembershipRouter(registry)

    await router.dispatch(VoiceMembershipEvent(5, None, 1, is_bot=True))
    await router.dispatch(VoiceMembershipEvent(5, 1, 1))

    owned.handle_member_join.assert_not_awaited()
    owned.handle_member_leave.assert_not_awaited()


@pytest.mark.asyncio
async def test_join_focus_leave_then_rejoin_during_break(make_session, io, registry):
    session = make_session(cycles=2)
    await session.start()
    router = MembershipRouter(registry)

    io.join(7)
    await router.dispatch(VoiceMembershipEvent(7, None, 555))
    assert 7 in io.server_muted

    io.leave(7)
    await router.dispatch(VoiceMembershipEvent(7, 555, None))
    assert 7 not in io.server_muted

    await session.on_phase_timer_fire()  # -> break
    io.join(7)
    await router.dispatch(VoiceMembershipEvent(7, None, 555))
    assert 7 not in io.server_muted
    assert 7 not in session.muted_members

    await session.stop()


@pytest.mark.asyncio
async def test_control_router_dispatches_actions(make_session, registry):
    session = make_session()
    await session.start()
    router = ControlRouter(registry)

    paused = await router.dispatch(ControlRef(ControlAction.PAUSE, 555))
    again = await router.dispatch(ControlRef(ControlAction.PAUSE, 555))
    resumed = await router.dispatch(ControlRef(ControlAction.RESUME, 555))
    stopped = await router.dispatch(ControlRef(ControlAction.STOP, 555))

    assert (paused.ok, again.ok, resumed.ok, stopped.ok) == (True, False, True, True)
    assert session.lifecycle is LifecycleState.STOPPED


@pytest.mark.asyncio
async def test_control_router_raises_for_unknown_channel(registry):
    router = ControlRouter(registry)

    with pytest.raises(SessionNotFound):
        await router.dispatch(ControlRef(ControlAction.STOP, 404))


@pytest.mark.asyncio
async def test_owed_unmute_is_settled_when_member_returns_after_session_ends(make_session, io, registry):
    io.reject_disconnected = True
    session = make_session()
    await session.start()
    router = MembershipRouter(registry)

    io.leave(3)
    await router.dispatch(VoiceMembershipEvent(3, 555, None))
    await session.stop()
    assert 3 in io.server_muted
    assert registry.has_parked(3)

    io.join(3)
    await router.dispatch(VoiceMembershipEvent(3, None, 777))

    assert 3 not in io.server_muted
    assert not registry.has_parked(3)


@pytest.mark.asyncio
async def test_owed_unmute_is_settled_when_member_joins_another_channel(make_session, io, registry):
    io.reject_disconnected = True
    session = make_session(cycles=2)
    await session.start()
    router = MembershipRouter(registry)

    io.leave(3)
    await router.dispatch(VoiceMembershipEvent(3, 555, None))
    await session.on_phase_timer_fire()  # -> break

    io.join(3)
    await router.dispatch(VoiceMembershipEvent(3, None, 777))

    assert 3 not in io.server_muted
    assert not session.mutes.is_pending(3)

    await session.stop()
