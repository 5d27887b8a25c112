from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from utils.logger import log_sync

from .errors import SessionNotFound
from .models import ControlAction, ControlRef
from .presenter import ControlOutcome


class MembershipChange(Enum):
    JOIN = "join"
    LEAVE = "leave"
    MOVE = "move"
    NONE = "none"


@dataclass(frozen=True)
class VoiceMembershipEvent:
    """One member's voice channel before/after a voice state update."""

    member_id: int
    before_channel_id: Optional[int]
    after_channel_id: Optional[int]
    is_bot: bool = False

    @property
    def kind(self) -> MembershipChange:
        before, after = self.before_channel_id, self.after_channel_id
        if before is None and after is not None:
            return MembershipChange.JOIN
        if before is not None and after is None:
            return MembershipChange.LEAVE
        if before is not None and after is not None and before != after:
            return MembershipChange.MOVE
        # same channel (mute/deafen/stream toggles) or nothing at all
        return MembershipChange.NONE


class MembershipRouter:
    """Feeds voice join/leave/move events to the sessions owning those channels."""

    def __init__(self, registry: Any) -> None:
        self.registry = registry

    async def dispatch(self, event: VoiceMembershipEvent) -> None:
        if event.is_bot:
            return

        kind = event.kind
        if kind is MembershipChange.NONE:
            return

        if kind in (MembershipChange.LEAVE, MembershipChange.MOVE):
            old = self.registry.lookup(event.before_channel_id)
            if old is not None:
                await old.handle_member_leave(event.member_id)

        if kind in (MembershipChange.JOIN, MembershipChange.MOVE):
            new = self.registry.lookup(event.after_channel_id)

            # back in voice: settle unmutes owed by other (or finished) sessions
            for session in self.registry.active_sessions():
                if session is not new and session.mutes.is_pending(event.member_id):
                    await session.release_pending(event.member_id)
            await self.registry.release_parked(event.member_id)

            if new is not None:
                await new.handle_member_join(event.member_id)


class ControlRouter:
    """Routes a parsed button reference to the owning session."""

    def __init__(self, registry: Any) -> None:
        self.registry = registry

    async def dispatch(self, ref: ControlRef) -> ControlOutcome:
        session = self.registry.lookup(ref.channel_id)
        if session is None:
            raise SessionNotFound()

        if ref.action is ControlAction.PAUSE:
            ok = await session.pause()
        elif ref.action is ControlAction.RESUME:
            ok = await session.resume()
        else:
            ok = await session.stop()

        log_sync(f"[pomodoro/controls] {ref.action.value} on channel {ref.channel_id} -> ok={ok}")
        return ControlOutcome(action=ref.action, ok=ok)
