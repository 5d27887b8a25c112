from __future__ import annotations

from typing import Any, Optional, Set

import discord

from .embeds import build_completion_embed, build_status_embed
from .errors import PlatformCallFailed
from .helpers import non_bot_members
from .presenter import StatusSnapshot
from .views import PomodoroControlView


class DiscordSessionIO:
    """Everything a PomodoroSession needs from Discord, for one voice channel.

    Each method turns discord.py errors into PlatformCallFailed so the session
    can log them and keep going.
    """

    def __init__(
        self,
        cog: Any,
        guild: discord.Guild,
        voice_channel: discord.VoiceChannel,
        text_channel: discord.abc.Messageable,
    ) -> None:
        self.cog = cog
        self.guild = guild
        self.voice_channel = voice_channel
        self.text_channel = text_channel

    # ---------- members ----------

    async def current_members(self) -> Set[int]:
        ch = self.guild.get_channel(self.voice_channel.id) or self.voice_channel
        if not isinstance(ch, (discord.VoiceChannel, discord.StageChannel)):
            raise PlatformCallFailed(f"voice channel {self.voice_channel.id} is gone")
        return {m.id for m in non_bot_members(ch.members)}

    def is_member_connected(self, member_id: int) -> bool:
        member = self.guild.get_member(int(member_id))
        return bool(member and member.voice and member.voice.channel)

    async def _resolve_member(self, member_id: int) -> Optional[discord.Member]:
        member = self.guild.get_member(int(member_id))
        if member is not None:
            return member
        try:
            return await self.guild.fetch_member(int(member_id))
        except discord.HTTPException:
            return None

    async def set_member_muted(self, member_id: int, muted: bool) -> None:
        member = await self._resolve_member(member_id)
        if member is None:
            raise PlatformCallFailed(f"member {member_id} not found")
        try:
            await member.edit(mute=muted, reason="Pomodoro focus time" if muted else "Pomodoro break time")
        except discord.HTTPException as e:
            raise PlatformCallFailed(f"{type(e).__name__}: {e}") from e

    # ---------- messages ----------

    async def send_status(self, snapshot: StatusSnapshot) -> int:
        try:
            msg = await self.text_channel.send(
                embed=build_status_embed(snapshot),
                view=PomodoroControlView(self.cog, snapshot),
            )
        except discord.HTTPException as e:
            raise PlatformCallFailed(f"{type(e).__name__}: {e}") from e
        return msg.id

    async def edit_status(self, message_id: int, snapshot: StatusSnapshot) -> None:
        view = PomodoroControlView(self.cog, snapshot) if snapshot.controls else None
        try:
            msg = await self.text_channel.fetch_message(int(message_id))
            await msg.edit(embed=build_status_embed(snapshot), view=view)
        except discord.HTTPException as e:
            raise PlatformCallFailed(f"{type(e).__name__}: {e}") from e

    async def send_notice(self, text: str) -> None:
        try:
            await self.text_channel.send(text)
        except discord.HTTPException as e:
            raise PlatformCallFailed(f"{type(e).__name__}: {e}") from e

    async def send_completion(self, snapshot: StatusSnapshot) -> None:
        try:
            await self.text_channel.send(embed=build_completion_embed(snapshot))
        except discord.HTTPException as e:
            raise PlatformCallFailed(f"{type(e).__name__}: {e}") from e
