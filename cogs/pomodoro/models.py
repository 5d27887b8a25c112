from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


CUSTOM_ID_PREFIX = "pomodoro"


class Phase(Enum):
    FOCUS = "focus"
    BREAK = "break"


class LifecycleState(Enum):
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"
    STOPPED = "stopped"

    @property
    def is_terminal(self) -> bool:
        return self in (LifecycleState.COMPLETED, LifecycleState.STOPPED)


class ControlAction(Enum):
    PAUSE = "pause"
    RESUME = "resume"
    STOP = "stop"


@dataclass(frozen=True)
class ControlRef:
    """A button reference: which action, on which voice channel's session."""

    action: ControlAction
    channel_id: int

    @property
    def custom_id(self) -> str:
        return f"{CUSTOM_ID_PREFIX}:{self.action.value}:{self.channel_id}"

    @classmethod
    def parse(cls, custom_id: str) -> Optional["ControlRef"]:
        """Inverse of `custom_id`; returns None for anything that isn't ours."""
        parts = (custom_id or "").split(":")
        if len(parts) != 3 or parts[0] != CUSTOM_ID_PREFIX:
            return None
        try:
            action = ControlAction(parts[1])
        except ValueError:
            return None
        if not parts[2].isdigit():
            return None
        return cls(action=action, channel_id=int(parts[2]))


@dataclass(frozen=True)
class SessionSettings:
    focus_seconds: float
    break_seconds: float
    total_cycles: int

    def __post_init__(self) -> None:
        if self.focus_seconds <= 0 or self.break_seconds <= 0:
            raise ValueError("Phase durations must be positive.")
        if self.total_cycles < 1:
            raise ValueError("A session needs at least one cycle.")

    @property
    def focus_minutes(self) -> int:
        return int(round(self.focus_seconds / 60.0))

    @property
    def break_minutes(self) -> int:
        return int(round(self.break_seconds / 60.0))

    @classmethod
    def from_minutes(
        cls,
        focus_minutes: Optional[int],
        break_minutes: Optional[int],
        cycles: Optional[int],
        *,
        cfg: Any,
    ) -> "SessionSettings":
        """Build settings from (optional) command options, filling defaults from cfg
        and clamping to cfg's bounds."""
        focus = _bounded(focus_minutes, cfg.focus_minutes, cfg.max_focus_minutes)
        brk = _bounded(break_minutes, cfg.break_minutes, cfg.max_break_minutes)
        total = _bounded(cycles, cfg.cycles, cfg.max_cycles)
        return cls(focus_seconds=focus * 60.0, break_seconds=brk * 60.0, total_cycles=total)


def _bounded(value: Optional[int], default: int, upper: int) -> int:
    if value is None:
        value = default
    return max(1, min(int(value), int(upper)))
