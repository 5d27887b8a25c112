"""Shared helpers for safely replying to Discord interactions.

Try the interaction first; if its token already expired (10062) fall back to
a plain channel message mentioning the user, so a laggy event loop never turns
into an unhandled exception.

Supports:
- discord.ApplicationContext (slash commands)
- discord.Interaction (button clicks)
"""

from __future__ import annotations

import contextlib
from typing import Optional

import discord

from utils.logger import log_warn


async def safe_ctx_respond(ctx: discord.ApplicationContext, content: str, *, ephemeral: bool = True):
    """ctx.respond, but if the interaction expired, fall back to channel.send."""
    try:
        return await ctx.respond(content, ephemeral=ephemeral)
    except discord.NotFound:
        log_warn(f"[pomodoro] /{getattr(ctx.command, 'name', '?')} interaction expired; replying in channel")
        if ctx.channel:
            with contextlib.suppress(discord.HTTPException):
                return await ctx.channel.send(f"{ctx.author.mention} {content}")


async def safe_i_send(
    interaction: discord.Interaction,
    content: Optional[str] = None,
    *,
    ephemeral: bool = True,
):
    """Reply to a component interaction; fall back to the channel on 10062."""
    try:
        if interaction.response.is_done():
            return await interaction.followup.send(content, ephemeral=ephemeral)
        return await interaction.response.send_message(content, ephemeral=ephemeral)
    except discord.NotFound:
        ch = interaction.channel
        if ch:
            with contextlib.suppress(discord.HTTPException):
                msg = f"{interaction.user.mention} {content or ''}".strip()
                return await ch.send(msg)
    except discord.HTTPException as e:
        log_warn(f"[pomodoro/controls] Failed to reply to button click: {type(e).__name__}: {e}")
