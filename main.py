import os
import re
import discord
from discord.ext import commands
from dotenv import load_dotenv

load_dotenv()

from cogs.pomodoro import SessionRegistry  # noqa: E402
from cogs.pomodoro_cog import PomodoroCog  # noqa: E402
from health_server import HealthServer  # noqa: E402
from utils.settings import POMODORO  # noqa: E402


TOKEN = (os.getenv("DISCORD_TOKEN") or "").strip()

intents = discord.Intents.default()
intents.guilds = True
intents.members = True        # member cache, so we can unmute people by id
intents.voice_states = True   # needed for join/leave/move muting


class PomodoroBot(commands.Bot):
    """Bot that owns the session registry and releases it on shutdown."""

    def __init__(self, *args, registry: SessionRegistry, **kwargs):
        super().__init__(*args, **kwargs)
        self.registry = registry
        self.health = HealthServer(
            self,
            registry,
            host=POMODORO.health_host,
            port=POMODORO.health_port,
        )

    async def close(self):
        # unmute everyone we muted before the connection goes away
        if len(self.registry):
            stopped = await self.registry.stop_all()
            print(f"[shutdown] Stopped {stopped} active pomodoro session(s)")
        await self.health.stop()
        await super().close()


registry = SessionRegistry()
bot = PomodoroBot(command_prefix="!", intents=intents, registry=registry)

_HEALTH_BOOTSTRAPPED = False


def check_token(token: str) -> None:
    if not token:
        raise RuntimeError("Missing DISCORD_TOKEN env var.")
    if not re.fullmatch(r"[A-Za-z0-9._-]+", token):
        raise RuntimeError(
            "DISCORD_TOKEN format appears invalid "
            "(expected letters, digits, dots, underscores and hyphens only)."
        )


@bot.event
async def on_ready():
    global _HEALTH_BOOTSTRAPPED

    if POMODORO.health_enabled and not _HEALTH_BOOTSTRAPPED:
        _HEALTH_BOOTSTRAPPED = True
        await bot.health.start()

    print(f"Logged in as {bot.user} ({bot.user.id})")
    print(f"[boot] voice_states intent on? {bot.intents.voice_states}")


if __name__ == "__main__":
    check_token(TOKEN)

    bot.add_cog(PomodoroCog(bot, registry))

    bot.run(TOKEN)
