# cogs/pomodoro/helpers.py
"""Pure utility functions for the pomodoro cog."""

from datetime import datetime, timezone
from typing import Iterable, List


# ---------------- time helpers ----------------

def now_utc() -> datetime:
    """Get current time in UTC."""
    return datetime.now(timezone.utc)


def ts(dt: datetime) -> int:
    """Convert datetime to Unix timestamp (seconds)."""
    return int(dt.timestamp())


def elapsed_seconds(start: datetime, end: datetime) -> float:
    """Seconds from start to end, never negative (clock may step backwards)."""
    return max(0.0, (end - start).total_seconds())


# ---------------- member helpers ----------------

def non_bot_members(members: Iterable) -> List:
    """Filter out bot accounts from a voice channel's member list."""
    return [m for m in members if not getattr(m, "bot", False)]
