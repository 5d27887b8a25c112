# cogs/pomodoro_cog.py
import asyncio
import contextlib
from typing import Optional

import discord
from discord.ext import commands
from discord import Option

from cogs.pomodoro import (
    ControlRef,
    ControlRouter,
    DiscordSessionIO,
    MembershipRouter,
    PomodoroError,
    PomodoroSession,
    SessionNotFound,
    SessionRegistry,
    SessionSettings,
    VoiceMembershipEvent,
    control_reply,
    ensure_can_start,
    non_bot_members,
    resolve_target_channel,
)
from utils.interactions import safe_ctx_respond, safe_i_send
from utils.logger import get_logger
from utils.settings import POMODORO


GUILD_ID = POMODORO.guild_id


class PomodoroCog(commands.Cog):
    """
    Group pomodoro timers over voice channels.

    - /pomodoro [channel] [focus_time] [break_time] [cycles] → start a session
    - status message buttons → pause / resume / stop
    - voice joins/leaves/moves → mute or unmute people as the phase requires

    Constraints:
    - One session per voice channel.
    - Only members this bot muted are ever unmuted by it.
    """

    def __init__(self, bot: commands.Bot, registry: SessionRegistry, cfg=POMODORO):
        self.bot = bot
        self.cfg = cfg
        self.registry = registry
        self.log = get_logger(bot, cfg)

        self.membership = MembershipRouter(registry)
        self.controls = ControlRouter(registry)

        print(
            "[PomodoroCog init] "
            f"focus={cfg.focus_minutes}m, break={cfg.break_minutes}m, cycles={cfg.cycles}, "
            f"refresh={cfg.refresh_seconds}s"
        )

    def cog_unload(self):
        if len(self.registry):
            asyncio.ensure_future(self.registry.stop_all())

    # ---------- slash command ----------

    @commands.slash_command(
        name="pomodoro",
        description="Start a pomodoro timer that mutes a voice channel during focus time.",
        guild_ids=[GUILD_ID] if GUILD_ID else None,
    )
    async def pomodoro(
        self,
        ctx: discord.ApplicationContext,
        channel: Optional[discord.VoiceChannel] = Option(
            discord.VoiceChannel,
            "Voice channel to run the timer in (defaults to yours).",
            required=False,
            default=None,
        ),
        focus_time: Optional[int] = Option(
            int,
            f"Focus time in minutes (default: {POMODORO.focus_minutes}).",
            required=False,
            default=None,
            min_value=1,
            max_value=POMODORO.max_focus_minutes,
        ),
        break_time: Optional[int] = Option(
            int,
            f"Break time in minutes (default: {POMODORO.break_minutes}).",
            required=False,
            default=None,
            min_value=1,
            max_value=POMODORO.max_break_minutes,
        ),
        cycles: Optional[int] = Option(
            int,
            f"Number of cycles (default: {POMODORO.cycles}).",
            required=False,
            default=None,
            min_value=1,
            max_value=POMODORO.max_cycles,
        ),
    ):
        if ctx.guild is None:
            await safe_ctx_respond(ctx, "This command can only be used in a server.")
            return

        member = ctx.author if isinstance(ctx.author, discord.Member) else None
        issuer_vc: Optional[discord.VoiceChannel] = None
        if member and member.voice and isinstance(member.voice.channel, discord.VoiceChannel):
            issuer_vc = member.voice.channel

        try:
            voice_channel = resolve_target_channel(channel, issuer_vc)
            ensure_can_start(self.registry, voice_channel.id, len(non_bot_members(voice_channel.members)))
            settings = SessionSettings.from_minutes(focus_time, break_time, cycles, cfg=self.cfg)
        except PomodoroError as e:
            await safe_ctx_respond(ctx, f"❌ {e}")
            return

        io = DiscordSessionIO(self, ctx.guild, voice_channel, ctx.channel)
        session = PomodoroSession(
            voice_channel.id,
            voice_channel.name,
            settings,
            io,
            self.registry,
            refresh_seconds=self.cfg.refresh_seconds,
            owner_id=ctx.author.id,
        )

        try:
            self.registry.register(voice_channel.id, session)
        except PomodoroError as e:
            await safe_ctx_respond(ctx, f"❌ {e}")
            return

        custom = []
        if focus_time:
            custom.append(f"focus: {settings.focus_minutes} min")
        if break_time:
            custom.append(f"break: {settings.break_minutes} min")
        if cycles:
            custom.append(f"cycles: {settings.total_cycles}")
        custom_text = f"\nSettings: {', '.join(custom)}" if custom else ""

        await safe_ctx_respond(
            ctx,
            f"🍅 Starting a pomodoro session in **{voice_channel.name}**!{custom_text}",
        )
        await self.log.info(
            f"[pomodoro] {ctx.author} started a session in {voice_channel.name} ({voice_channel.id}): "
            f"{settings.focus_minutes}/{settings.break_minutes} min x{settings.total_cycles}"
        )

        try:
            await session.start()
        except Exception as e:
            await self.log.error(
                f"[pomodoro] Failed to start session in {voice_channel.name} ({voice_channel.id}): "
                f"{type(e).__name__}: {e}"
            )
            with contextlib.suppress(Exception):
                await session.stop()
            self.registry.deregister(voice_channel.id, session)

    # ---------- buttons ----------

    async def handle_control(self, interaction: discord.Interaction, ref: Optional[ControlRef]) -> None:
        if ref is None:
            await safe_i_send(interaction, "❌ Unknown action.")
            return

        try:
            outcome = await self.controls.dispatch(ref)
        except SessionNotFound as e:
            await safe_i_send(interaction, f"❌ {e}")
            return

        await safe_i_send(interaction, control_reply(outcome))

        if outcome.ok:
            await self.log.info(
                f"[pomodoro/controls] {interaction.user} used {ref.action.value} on channel {ref.channel_id}",
                send=False,
            )

    # ---------- voice membership ----------

    @commands.Cog.listener()
    async def on_voice_state_update(
        self,
        member: discord.Member,
        before: discord.VoiceState,
        after: discord.VoiceState,
    ):
        guild = member.guild
        if guild is None or (GUILD_ID and guild.id != GUILD_ID):
            return

        event = VoiceMembershipEvent(
            member_id=member.id,
            before_channel_id=before.channel.id if before.channel else None,
            after_channel_id=after.channel.id if after.channel else None,
            is_bot=member.bot,
        )
        await self.membership.dispatch(event)
