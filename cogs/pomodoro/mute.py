from __future__ import annotations

from typing import Any, FrozenSet, Iterable, Set

from utils.logger import log_warn

from .errors import PlatformCallFailed


class MuteCoordinator:
    """Applies and reverts server mutes for one session.

    Only members muted through this object are ever unmuted by it, so people
    muted by a moderator (or by another session) are left alone.
    `io` must provide `set_member_muted(member_id, muted)` and
    `is_member_connected(member_id)`.

    Discord refuses to unmute someone who is not in voice, so members that
    could not be unmuted are kept in `pending` until they show up again.
    """

    def __init__(self, io: Any, *, label: str = "") -> None:
        self.io = io
        self.label = label
        self._muted: Set[int] = set()
        self._pending: Set[int] = set()

    @property
    def muted(self) -> FrozenSet[int]:
        return frozenset(self._muted)

    @property
    def pending(self) -> FrozenSet[int]:
        """Members we muted but still owe an unmute."""
        return frozenset(self._pending)

    def is_tracked(self, member_id: int) -> bool:
        return int(member_id) in self._muted

    def is_pending(self, member_id: int) -> bool:
        return int(member_id) in self._pending

    async def mute_one(self, member_id: int) -> bool:
        mid = int(member_id)
        try:
            await self.io.set_member_muted(mid, True)
        except PlatformCallFailed as e:
            log_warn(f"[pomodoro/mute] {self.label}: failed to mute member {mid}: {e}")
            return False
        self._muted.add(mid)
        self._pending.discard(mid)
        return True

    async def unmute_one(self, member_id: int) -> bool:
        mid = int(member_id)
        if mid not in self._muted:
            return False
        try:
            await self.io.set_member_muted(mid, False)
        except PlatformCallFailed as e:
            log_warn(f"[pomodoro/mute] {self.label}: failed to unmute member {mid}: {e}")
            return False
        self._muted.discard(mid)
        return True

    async def release_pending(self, member_id: int) -> bool:
        """Retry the owed unmute for a member who is back in voice."""
        mid = int(member_id)
        if mid not in self._pending:
            return False
        try:
            await self.io.set_member_muted(mid, False)
        except PlatformCallFailed as e:
            log_warn(f"[pomodoro/mute] {self.label}: still cannot unmute member {mid}: {e}")
            return False
        self._pending.discard(mid)
        return True

    async def mute_all(self, roster: Iterable[int]) -> int:
        """Mute everyone in roster; one member's failure never stops the rest."""
        done = 0
        for mid in sorted({int(m) for m in roster}):
            if await self.mute_one(mid):
                done += 1
        return done

    async def unmute_all(self) -> int:
        """Unmute every tracked member that is still connected, then forget them all.

        Members that are gone or whose unmute failed move to `pending`; the
        muted set itself is always empty afterwards.
        """
        for mid in sorted(self._pending - self._muted):
            if self.io.is_member_connected(mid):
                await self.release_pending(mid)

        done = 0
        for mid in sorted(self._muted):
            if self.io.is_member_connected(mid) and await self.unmute_one(mid):
                done += 1
            else:
                self._pending.add(mid)
        self._muted.clear()
        return done
