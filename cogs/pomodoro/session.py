# cogs/pomodoro/session.py
from __future__ import annotations

import asyncio
from datetime import datetime, timedelta
from typing import Any, Callable, FrozenSet, Optional, Set

from utils.logger import log_error, log_ok, log_sync, log_warn

from .errors import PlatformCallFailed
from .helpers import elapsed_seconds, now_utc
from .models import LifecycleState, Phase, SessionSettings
from .mute import MuteCoordinator
from .presenter import StatusSnapshot, break_notice, build_status_snapshot, focus_notice


class PomodoroSession:
    """
    Focus/break cycles for one voice channel.

    - Focus phases mute everyone in the channel, break phases unmute them.
    - Break -> Focus bumps the cycle; after the last break the session completes.
    - Pause cancels the pending phase switch; resume shifts the phase start
      forward by the paused duration and reschedules.
    - Completed/Stopped are terminal: tasks cancelled, members unmuted,
      channel released in the registry.

    `io` is the Discord side (see DiscordSessionIO); every call on it may raise
    PlatformCallFailed, which is logged here and never propagated.
    """

    def __init__(
        self,
        channel_id: int,
        channel_name: str,
        settings: SessionSettings,
        io: Any,
        registry: Any,
        *,
        clock: Callable[[], datetime] = now_utc,
        refresh_seconds: float = 10.0,
        owner_id: Optional[int] = None,
    ) -> None:
        self.channel_id = int(channel_id)
        self.channel_name = channel_name
        self.settings = settings
        self.io = io
        self.registry = registry
        self.clock = clock
        self.refresh_seconds = float(refresh_seconds)
        self.owner_id = owner_id

        self.phase: Phase = Phase.FOCUS
        self.current_cycle: int = 1
        self.lifecycle: LifecycleState = LifecycleState.RUNNING

        self.phase_started_at: datetime = clock()
        self.remaining_at_phase_start: float = float(settings.focus_seconds)
        self.paused_at: Optional[datetime] = None

        self.status_message_id: Optional[int] = None
        self.mutes = MuteCoordinator(io, label=f"{channel_name} ({self.channel_id})")

        self._lock = asyncio.Lock()
        self._phase_task: Optional[asyncio.Task] = None
        self._refresh_task: Optional[asyncio.Task] = None
        self._closed = asyncio.Event()
        self._started = False

    def __repr__(self) -> str:
        return (
            f"<PomodoroSession channel={self.channel_id} phase={self.phase.value} "
            f"cycle={self.current_cycle}/{self.settings.total_cycles} state={self.lifecycle.value}>"
        )

    # ---------- read helpers ----------

    @property
    def total_cycles(self) -> int:
        return self.settings.total_cycles

    @property
    def is_terminal(self) -> bool:
        return self.lifecycle.is_terminal

    @property
    def is_paused(self) -> bool:
        return self.lifecycle is LifecycleState.PAUSED

    @property
    def muted_members(self) -> FrozenSet[int]:
        return self.mutes.muted

    def remaining_seconds(self, now: Optional[datetime] = None) -> float:
        """Seconds left in the current phase; frozen while paused. May go negative
        between the deadline and the phase switch actually running."""
        if self.lifecycle is LifecycleState.PAUSED and self.paused_at is not None:
            ref = self.paused_at
        else:
            ref = now or self.clock()
        return self.remaining_at_phase_start - elapsed_seconds(self.phase_started_at, ref)

    def snapshot(self, now: Optional[datetime] = None) -> StatusSnapshot:
        return build_status_snapshot(self, now or self.clock())

    async def wait_closed(self) -> None:
        await self._closed.wait()

    # ---------- lifecycle ----------

    async def start(self) -> None:
        async with self._lock:
            if self._started or self.is_terminal:
                return
            self._started = True

            await self.mutes.mute_all(await self._roster())

            self.phase_started_at = self.clock()
            self.remaining_at_phase_start = float(self.settings.focus_seconds)
            await self._post_status()

            self._schedule_phase_switch(self.remaining_at_phase_start)
            self._refresh_task = asyncio.create_task(self._refresh_loop())

        log_ok(
            f"[pomodoro] Started {self!r}: focus={self.settings.focus_minutes}m, "
            f"break={self.settings.break_minutes}m, muted={len(self.mutes.muted)}"
        )

    async def on_phase_timer_fire(self) -> None:
        """The current phase's countdown has elapsed."""
        async with self._lock:
            if self.lifecycle is not LifecycleState.RUNNING:
                return
            self._cancel_phase_timer()
            await self._switch_phase()

    async def pause(self) -> bool:
        async with self._lock:
            if self.lifecycle is not LifecycleState.RUNNING:
                return False

            self._cancel_phase_timer()
            self.paused_at = self.clock()
            self.lifecycle = LifecycleState.PAUSED
            await self._refresh_status()

        log_sync(f"[pomodoro] Paused {self!r}, remaining={self.remaining_seconds():.1f}s")
        return True

    async def resume(self) -> bool:
        async with self._lock:
            if self.lifecycle is not LifecycleState.PAUSED or self.paused_at is None:
                return False

            now = self.clock()
            self.phase_started_at += timedelta(seconds=elapsed_seconds(self.paused_at, now))
            self.paused_at = None
            self.lifecycle = LifecycleState.RUNNING

            self._schedule_phase_switch(self.remaining_seconds(now))
            await self._refresh_status()

        log_sync(f"[pomodoro] Resumed {self!r}, remaining={self.remaining_seconds():.1f}s")
        return True

    async def stop(self) -> bool:
        async with self._lock:
            if self.is_terminal:
                return False
            await self._finish(LifecycleState.STOPPED)
        return True

    async def refresh_status(self) -> None:
        await self._refresh_status()

    # ---------- membership ----------

    async def handle_member_join(self, member_id: int) -> bool:
        """Someone entered this channel. Returns True if their mute state changed."""
        async with self._lock:
            if not self.is_terminal and self.phase is Phase.FOCUS:
                return await self.mutes.mute_one(member_id)
            return await self.mutes.release_pending(member_id)

    async def release_pending(self, member_id: int) -> bool:
        """A member we still owe an unmute is back in voice somewhere."""
        async with self._lock:
            return await self.mutes.release_pending(member_id)

    async def handle_member_leave(self, member_id: int) -> bool:
        async with self._lock:
            if self.is_terminal or not self.mutes.is_tracked(member_id):
                return False
            return await self.mutes.unmute_one(member_id)

    # ---------- internals (call with the lock held) ----------

    async def _switch_phase(self) -> None:
        if self.phase is Phase.BREAK:
            next_cycle = self.current_cycle + 1
            if next_cycle > self.settings.total_cycles:
                await self._finish(LifecycleState.COMPLETED)
                return

            self.current_cycle = next_cycle
            self.phase = Phase.FOCUS
            await self.mutes.mute_all(await self._roster())
            self.remaining_at_phase_start = float(self.settings.focus_seconds)
            await self._notice(focus_notice(self.current_cycle, self.settings.focus_minutes))
        else:
            self.phase = Phase.BREAK
            await self.mutes.unmute_all()
            self.remaining_at_phase_start = float(self.settings.break_seconds)
            await self._notice(break_notice(self.current_cycle, self.settings.break_minutes))

        self.phase_started_at = self.clock()
        await self._refresh_status()
        self._schedule_phase_switch(self.remaining_at_phase_start)

        log_sync(f"[pomodoro] Phase switch -> {self!r}")

    async def _finish(self, state: LifecycleState) -> None:
        self.lifecycle = state
        self.paused_at = None
        self._cancel_tasks()

        await self.mutes.unmute_all()

        if state is LifecycleState.COMPLETED:
            try:
                await self.io.send_completion(self.snapshot())
            except PlatformCallFailed as e:
                log_warn(f"[pomodoro] Failed to send completion notice for {self.channel_name}: {e}")

        await self._refresh_status()
        self.registry.park_pending(self.mutes)
        self.registry.deregister(self.channel_id, self)
        self._closed.set()

        log_ok(f"[pomodoro] Session ended: {self!r}")

    async def _roster(self) -> Set[int]:
        try:
            return set(await self.io.current_members())
        except PlatformCallFailed as e:
            log_warn(f"[pomodoro] Could not read members of {self.channel_name}: {e}")
            return set()

    async def _notice(self, text: str) -> None:
        try:
            await self.io.send_notice(text)
        except PlatformCallFailed as e:
            log_warn(f"[pomodoro] Failed to send notice in {self.channel_name}: {e}")

    async def _post_status(self) -> None:
        try:
            self.status_message_id = await self.io.send_status(self.snapshot())
        except PlatformCallFailed as e:
            log_warn(f"[pomodoro] Failed to post status for {self.channel_name}: {e}")

    async def _refresh_status(self) -> None:
        if self.status_message_id is None:
            return
        try:
            await self.io.edit_status(self.status_message_id, self.snapshot())
        except PlatformCallFailed as e:
            log_warn(f"[pomodoro] Failed to update status message for {self.channel_name}: {e}")

    # ---------- scheduling ----------

    def _schedule_phase_switch(self, delay_sec: float) -> None:
        self._cancel_phase_timer()
        self._phase_task = asyncio.create_task(self._phase_countdown(max(0.0, delay_sec)))

    def _cancel_phase_timer(self) -> None:
        task, self._phase_task = self._phase_task, None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    def _cancel_tasks(self) -> None:
        self._cancel_phase_timer()
        task, self._refresh_task = self._refresh_task, None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    async def _phase_countdown(self, delay_sec: float) -> None:
        await asyncio.sleep(delay_sec)
        async with self._lock:
            # lost a race with pause/resume/stop: a newer countdown (or none) owns the phase
            if self._phase_task is not asyncio.current_task():
                return
            if self.lifecycle is not LifecycleState.RUNNING:
                return
            self._phase_task = None
            try:
                await self._switch_phase()
            except Exception as e:
                log_error(f"[pomodoro] Phase switch failed for {self!r}: {type(e).__name__}: {e}")
                # nothing reschedules after a failed switch
                if not self._closed.is_set():
                    await self._finish(LifecycleState.STOPPED)

    async def _refresh_loop(self) -> None:
        while not self.is_terminal:
            await asyncio.sleep(self.refresh_seconds)
            async with self._lock:
                if self.lifecycle is not LifecycleState.RUNNING:
                    continue
                if self.remaining_seconds() <= 0:
                    continue
                await self._refresh_status()
