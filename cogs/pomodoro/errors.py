# cogs/pomodoro/errors.py
"""Errors raised by the pomodoro core.

Every error carries a short user-facing message so the cog can relay it as an
ephemeral reply without extra mapping.
"""

from typing import Optional


class PomodoroError(RuntimeError):
    default_message = "Something went wrong with the pomodoro timer."

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)


class AlreadyActive(PomodoroError):
    default_message = "A pomodoro session is already running in this voice channel."


class NoTargetChannel(PomodoroError):
    default_message = "Join a voice channel first, or pick one with the `channel` option."


class EmptyChannel(PomodoroError):
    default_message = "There is nobody in that voice channel."


class SessionNotFound(PomodoroError):
    default_message = "Session not found."


class PlatformCallFailed(PomodoroError):
    default_message = "A Discord call failed."
