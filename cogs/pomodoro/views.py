"""Discord UI views for the pomodoro cog."""

from __future__ import annotations

from typing import Any

import discord

from .models import ControlRef
from .presenter import StatusSnapshot

BUTTON_STYLES = {
    "primary": discord.ButtonStyle.primary,
    "danger": discord.ButtonStyle.danger,
}


class PomodoroControlView(discord.ui.View):
    """Pause/Resume + Stop buttons under a status message.

    Parses the clicked button's custom id and hands it to the owning cog.
    """

    def __init__(self, cog: Any, snapshot: StatusSnapshot):
        # no timeout: the buttons live as long as the session does
        super().__init__(timeout=None)
        self.cog = cog

        for control in snapshot.controls:
            button = discord.ui.Button(
                label=control.label,
                emoji=control.emoji,
                style=BUTTON_STYLES.get(control.style, discord.ButtonStyle.secondary),
                custom_id=control.ref.custom_id,
            )
            button.callback = self._on_click
            self.add_item(button)

    async def _on_click(self, interaction: discord.Interaction) -> None:
        ref = ControlRef.parse(interaction.custom_id or "")
        await self.cog.handle_control(interaction, ref)
