# cogs/pomodoro/__init__.py
"""Pomodoro submodule - session core and Discord glue for PomodoroCog."""

from .errors import (
    PomodoroError,
    AlreadyActive,
    NoTargetChannel,
    EmptyChannel,
    SessionNotFound,
    PlatformCallFailed,
)
from .helpers import now_utc, ts, elapsed_seconds, non_bot_members
from .models import (
    Phase,
    LifecycleState,
    ControlAction,
    ControlRef,
    SessionSettings,
)
from .mute import MuteCoordinator
from .presenter import (
    StatusSnapshot,
    ControlButton,
    ControlOutcome,
    build_status_snapshot,
    format_remaining,
    control_reply,
)
from .registry import SessionRegistry
from .router import (
    MembershipChange,
    VoiceMembershipEvent,
    MembershipRouter,
    ControlRouter,
)
from .session import PomodoroSession
from .validation import resolve_target_channel, ensure_can_start
from .views import PomodoroControlView
from .discord_io import DiscordSessionIO

__all__ = [
    # Errors
    "PomodoroError",
    "AlreadyActive",
    "NoTargetChannel",
    "EmptyChannel",
    "SessionNotFound",
    "PlatformCallFailed",
    # Helpers
    "now_utc",
    "ts",
    "elapsed_seconds",
    "non_bot_members",
    # Models
    "Phase",
    "LifecycleState",
    "ControlAction",
    "ControlRef",
    "SessionSettings",
    # Core
    "MuteCoordinator",
    "SessionRegistry",
    "PomodoroSession",
    # Presenter
    "StatusSnapshot",
    "ControlButton",
    "ControlOutcome",
    "build_status_snapshot",
    "format_remaining",
    "control_reply",
    # Routing
    "MembershipChange",
    "VoiceMembershipEvent",
    "MembershipRouter",
    "ControlRouter",
    # Validation
    "resolve_target_channel",
    "ensure_can_start",
    # Discord
    "PomodoroControlView",
    "DiscordSessionIO",
]
