from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Optional, Tuple

from .models import ControlAction, ControlRef, LifecycleState, Phase


FOCUS_COLOR = 0xFF6B6B
BREAK_COLOR = 0x00FF00
COMPLETED_COLOR = 0x00FF00
STOPPED_COLOR = 0x95A5A6

PHASE_STYLE = {
    Phase.FOCUS: ("Focus time", "🍅", FOCUS_COLOR),
    Phase.BREAK: ("Break time", "☕", BREAK_COLOR),
}

STATE_TEXT = {
    LifecycleState.RUNNING: "▶️ Running",
    LifecycleState.PAUSED: "⏸️ Paused",
    LifecycleState.COMPLETED: "🎉 Completed",
    LifecycleState.STOPPED: "⏹️ Stopped",
}


@dataclass(frozen=True)
class ControlButton:
    ref: ControlRef
    label: str
    emoji: str
    style: str  # "primary" | "danger"


@dataclass(frozen=True)
class StatusSnapshot:
    title: str
    phase_label: str
    emoji: str
    color: int
    cycle_text: str
    total_cycles: int
    remaining_text: str
    state_text: str
    channel_name: str
    settings_text: str
    ends_at: Optional[datetime]
    controls: Tuple[ControlButton, ...]

    @property
    def description(self) -> str:
        return f"**{self.phase_label}** - {self.cycle_text}"


@dataclass(frozen=True)
class ControlOutcome:
    action: ControlAction
    ok: bool


def format_remaining(seconds: float) -> str:
    """`m:ss`, floored, never negative."""
    total = max(0, int(math.floor(seconds)))
    return f"{total // 60}:{total % 60:02d}"


def _controls_for(channel_id: int, state: LifecycleState) -> Tuple[ControlButton, ...]:
    if state.is_terminal:
        return ()

    if state is LifecycleState.PAUSED:
        toggle = ControlButton(ControlRef(ControlAction.RESUME, channel_id), "Resume", "▶️", "primary")
    else:
        toggle = ControlButton(ControlRef(ControlAction.PAUSE, channel_id), "Pause", "⏸️", "primary")
    stop = ControlButton(ControlRef(ControlAction.STOP, channel_id), "Stop", "⏹️", "danger")
    return (toggle, stop)


def build_status_snapshot(session: Any, now: Optional[datetime] = None) -> StatusSnapshot:
    """Derive everything the status message shows from a session. No I/O."""
    state: LifecycleState = session.lifecycle
    phase_label, emoji, color = PHASE_STYLE[session.phase]

    if state is LifecycleState.COMPLETED:
        color = COMPLETED_COLOR
    elif state is LifecycleState.STOPPED:
        color = STOPPED_COLOR

    if state.is_terminal:
        remaining = 0.0
    else:
        remaining = session.remaining_seconds(now)

    ends_at: Optional[datetime] = None
    if state is LifecycleState.RUNNING and now is not None:
        ends_at = now + timedelta(seconds=max(0.0, remaining))

    settings = session.settings
    return StatusSnapshot(
        title=f"{emoji} Pomodoro Timer",
        phase_label=phase_label,
        emoji=emoji,
        color=color,
        cycle_text=f"Cycle {session.current_cycle}/{settings.total_cycles}",
        total_cycles=settings.total_cycles,
        remaining_text=format_remaining(remaining),
        state_text=STATE_TEXT[state],
        channel_name=str(session.channel_name),
        settings_text=f"Focus: {settings.focus_minutes} min / Break: {settings.break_minutes} min",
        ends_at=ends_at,
        controls=_controls_for(int(session.channel_id), state),
    )


CONTROL_REPLIES = {
    (ControlAction.PAUSE, True): "⏸️ Pomodoro timer paused.",
    (ControlAction.PAUSE, False): "❌ The timer is already paused.",
    (ControlAction.RESUME, True): "▶️ Pomodoro timer resumed.",
    (ControlAction.RESUME, False): "❌ The timer is already running.",
    (ControlAction.STOP, True): "⏹️ Pomodoro session stopped.",
    (ControlAction.STOP, False): "❌ This session has already ended.",
}


def control_reply(outcome: ControlOutcome) -> str:
    return CONTROL_REPLIES.get((outcome.action, outcome.ok), "❌ Unknown action.")


def focus_notice(cycle: int, minutes: int) -> str:
    return f"🍅 Cycle {cycle} focus time has started! ({minutes} min)"


def break_notice(cycle: int, minutes: int) -> str:
    return f"☕ Cycle {cycle} break time has started! ({minutes} min)"
