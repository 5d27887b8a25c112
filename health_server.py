# health_server.py
"""
Tiny HTTP health endpoint for container platforms (Cloud Run, Heroku, ...).

  GET /        -> name / status / version
  GET /health  -> liveness + Discord connection + active session count
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any, Optional

from aiohttp import web

from utils.logger import log_ok, log_warn

APP_NAME = "Discord Pomodoro Bot"
APP_VERSION = "1.0.0"


class HealthServer:
    def __init__(self, bot: Any, registry: Any, *, host: str = "0.0.0.0", port: int = 8080) -> None:
        self.bot = bot
        self.registry = registry
        self.host = host
        self.port = int(port)
        self._started_monotonic = time.monotonic()
        self._runner: Optional[web.AppRunner] = None

    def build_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/", self._root)
        app.router.add_get("/health", self._health)
        return app

    async def _root(self, request: web.Request) -> web.Response:
        return web.json_response({"name": APP_NAME, "status": "running", "version": APP_VERSION})

    async def _health(self, request: web.Request) -> web.Response:
        ready = False
        try:
            ready = bool(self.bot.is_ready())
        except Exception:
            ready = False

        return web.json_response({
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime": round(time.monotonic() - self._started_monotonic, 3),
            "discord": "connected" if ready else "disconnected",
            "activeSessions": len(self.registry),
        })

    async def start(self) -> None:
        if self._runner is not None:
            return
        runner = web.AppRunner(self.build_app())
        await runner.setup()
        site = web.TCPSite(runner, self.host, self.port)
        try:
            await site.start()
        except OSError as e:
            log_warn(f"[health] Could not bind {self.host}:{self.port}: {e}")
            await runner.cleanup()
            return
        self._runner = runner
        log_ok(f"[health] HTTP server listening on {self.host}:{self.port}")

    async def stop(self) -> None:
        runner, self._runner = self._runner, None
        if runner is not None:
            await runner.cleanup()
