from __future__ import annotations

import discord

from .helpers import now_utc, ts
from .presenter import COMPLETED_COLOR, StatusSnapshot


def build_status_embed(snapshot: StatusSnapshot) -> discord.Embed:
    embed = discord.Embed(
        title=snapshot.title,
        description=snapshot.description,
        color=snapshot.color,
        timestamp=now_utc(),
    )
    embed.add_field(name="Time left", value=snapshot.remaining_text, inline=True)
    embed.add_field(name="Status", value=snapshot.state_text, inline=True)
    embed.add_field(name="Voice channel", value=snapshot.channel_name, inline=True)
    embed.add_field(name="Timer settings", value=snapshot.settings_text, inline=True)

    if snapshot.ends_at is not None:
        embed.add_field(name="Phase ends", value=f"<t:{ts(snapshot.ends_at)}:R>", inline=True)

    return embed


def build_completion_embed(snapshot: StatusSnapshot) -> discord.Embed:
    return discord.Embed(
        title="🎉 Pomodoro session complete!",
        description=(
            f"Great work in **{snapshot.channel_name}**! "
            f"All {snapshot.total_cycles} cycles are finished."
        ),
        color=COMPLETED_COLOR,
        timestamp=now_utc(),
    )
