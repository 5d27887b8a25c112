import pytest

from cogs.pomodoro.models import ControlAction, ControlRef, LifecycleState
from cogs.pomodoro.presenter import (
    ControlOutcome,
    build_status_snapshot,
    control_reply,
    format_remaining,
)


@pytest.mark.parametrize(
    "seconds, expected",
    [
        (125.0, "2:05"),
        (59.0, "0:59"),
        (59.9, "0:59"),
        (0.0, "0:00"),
        (-3.5, "0:00"),
        (3600.0, "60:00"),
    ],
)
def test_format_remaining(seconds, expected):
    assert format_remaining(seconds) == expected


def test_running_focus_snapshot(make_session, clock):
    session = make_session(focus=1500.0, brk=300.0, cycles=4)
    clock.advance(30)

    snap = build_status_snapshot(session, clock())

    assert snap.phase_label == "Focus time"
    assert snap.emoji == "🍅"
    assert snap.cycle_text == "Cycle 1/4"
    assert snap.remaining_text == "24:30"
    assert snap.state_text == "▶️ Running"
    assert snap.channel_name == "Study Room"
    assert snap.settings_text == "Focus: 25 min / Break: 5 min"
    assert snap.ends_at is not None

    actions = [c.ref.action for c in snap.controls]
    assert actions == [ControlAction.PAUSE, ControlAction.STOP]
    assert snap.controls[0].ref == ControlRef(ControlAction.PAUSE, 555)


def test_paused_snapshot_offers_resume(make_session, clock):
    session = make_session()
    session.lifecycle = LifecycleState.PAUSED
    session.paused_at = clock()

    snap = session.snapshot()

    assert snap.state_text == "⏸️ Paused"
    assert snap.controls[0].label == "Resume"
    assert snap.controls[0].ref.action is ControlAction.RESUME
    assert snap.ends_at is None


def test_overdue_remaining_displays_zero(make_session, clock):
    session = make_session(focus=60.0)
    clock.advance(75)

    assert session.snapshot().remaining_text == "0:00"


@pytest.mark.parametrize("state", [LifecycleState.COMPLETED, LifecycleState.STOPPED])
def test_terminal_snapshot_has_no_controls(make_session, state):
    session = make_session()
    session.lifecycle = state

    snap = session.snapshot()

    assert snap.controls == ()
    assert snap.remaining_text == "0:00"


def test_control_reply_texts():
    assert control_reply(ControlOutcome(ControlAction.PAUSE, True)) == "⏸️ Pomodoro timer paused."
    assert control_reply(ControlOutcome(ControlAction.PAUSE, False)) == "❌ The timer is already paused."
    assert control_reply(ControlOutcome(ControlAction.RESUME, False)) == "❌ The timer is already running."
    assert control_reply(ControlOutcome(ControlAction.STOP, True)) == "⏹️ Pomodoro session stopped."
