from __future__ import annotations

from typing import Any, Dict, List, Optional

from utils.logger import log_error

from .errors import AlreadyActive


class SessionRegistry:
    """In-memory session registry keyed by voice channel id.

    Storage plus the one-session-per-channel rule, and the unmutes that
    finished sessions still owe.
    Owned by the process entry point and handed to whoever needs it.
    """

    def __init__(self) -> None:
        self._sessions: Dict[int, Any] = {}
        # member id -> MuteCoordinator of a finished session that still owes an unmute
        self._parked: Dict[int, Any] = {}

    def register(self, channel_id: int, session: Any) -> None:
        cid = int(channel_id)
        if cid in self._sessions:
            raise AlreadyActive()
        self._sessions[cid] = session

    def lookup(self, channel_id: Optional[int]) -> Optional[Any]:
        if channel_id is None:
            return None
        return self._sessions.get(int(channel_id))

    def deregister(self, channel_id: int, session: Any = None) -> Optional[Any]:
        """Remove the channel's session. With `session`, only remove that exact one."""
        cid = int(channel_id)
        current = self._sessions.get(cid)
        if current is None:
            return None
        if session is not None and current is not session:
            return None
        return self._sessions.pop(cid)

    def park_pending(self, mutes: Any) -> None:
        """Keep a finished session's owed unmutes around until those members return."""
        for member_id in mutes.pending:
            self._parked[int(member_id)] = mutes

    def has_parked(self, member_id: int) -> bool:
        return int(member_id) in self._parked

    async def release_parked(self, member_id: int) -> bool:
        mutes = self._parked.pop(int(member_id), None)
        if mutes is None:
            return False
        if await mutes.release_pending(member_id):
            return True
        if mutes.is_pending(member_id):
            self._parked[int(member_id)] = mutes
        return False

    def active_sessions(self) -> List[Any]:
        return list(self._sessions.values())

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, channel_id: object) -> bool:
        try:
            return int(channel_id) in self._sessions  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return False

    async def stop_all(self) -> int:
        """Stop every session (shutdown path). Returns how many were stopped."""
        stopped = 0
        for session in self.active_sessions():
            try:
                if await session.stop():
                    stopped += 1
            except Exception as e:
                log_error(
                    f"[shutdown] Failed to stop session for channel "
                    f"{getattr(session, 'channel_id', '?')}: {type(e).__name__}: {e}"
                )
        return stopped
