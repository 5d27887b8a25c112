"""Checks run by /pomodoro before any session state is created."""

from __future__ import annotations

from typing import Any, Optional, TypeVar

from .errors import AlreadyActive, EmptyChannel, NoTargetChannel

ChannelT = TypeVar("ChannelT")


def resolve_target_channel(
    requested: Optional[ChannelT],
    issuer_channel: Optional[ChannelT],
) -> ChannelT:
    """Explicit channel option wins, otherwise the issuer's current voice channel."""
    if requested is not None:
        return requested
    if issuer_channel is not None:
        return issuer_channel
    raise NoTargetChannel()


def ensure_can_start(registry: Any, channel_id: int, member_count: int) -> None:
    if registry.lookup(channel_id) is not None:
        raise AlreadyActive()
    if member_count <= 0:
        raise EmptyChannel()
