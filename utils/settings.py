# utils/settings.py
import os
from dataclasses import dataclass


def env_int(name: str, default: int = 0) -> int:
    try:
        return int((os.getenv(name) or "").strip())
    except Exception:
        return default

def env_float(name: str, default: float = 0.0) -> float:
    try:
        return float((os.getenv(name) or "").strip())
    except Exception:
        return default

def env_bool(name: str, default: bool = False) -> bool:
    raw = (os.getenv(name) or "").strip().lower()
    if raw in ("1", "true", "yes", "y", "on"):
        return True
    if raw in ("0", "false", "no", "n", "off"):
        return False
    return default


@dataclass(frozen=True)
class PomodoroConfig:
    guild_id: int
    log_channel_id: int

    # defaults when the command leaves an option out (minutes / count)
    focus_minutes: int
    break_minutes: int
    cycles: int

    # upper bounds for the slash-command options
    max_focus_minutes: int
    max_break_minutes: int
    max_cycles: int

    refresh_seconds: float

    health_enabled: bool
    health_host: str
    health_port: int

def load_pomodoro_config() -> PomodoroConfig:
    max_focus = max(1, env_int("POMODORO_MAX_FOCUS_MINUTES", 120))
    max_break = max(1, env_int("POMODORO_MAX_BREAK_MINUTES", 60))
    max_cycles = max(1, env_int("POMODORO_MAX_CYCLES", 10))

    return PomodoroConfig(
        guild_id=env_int("GUILD_ID", 0),
        log_channel_id=env_int("POMODORO_LOG_CHANNEL_ID", 0),

        focus_minutes=min(max_focus, max(1, env_int("POMODORO_FOCUS_MINUTES", 25))),
        break_minutes=min(max_break, max(1, env_int("POMODORO_BREAK_MINUTES", 5))),
        cycles=min(max_cycles, max(1, env_int("POMODORO_CYCLES", 4))),

        max_focus_minutes=max_focus,
        max_break_minutes=max_break,
        max_cycles=max_cycles,

        refresh_seconds=max(1.0, env_float("POMODORO_REFRESH_SECONDS", 10.0)),

        health_enabled=env_bool("HEALTH_ENABLED", True),
        health_host=(os.getenv("HEALTH_HOST") or "0.0.0.0").strip(),
        health_port=env_int("PORT", 8080),
    )


POMODORO = load_pomodoro_config()
