"""
Status page and liveness check.

Runs an aiohttp server on HEALTH_PORT in the bot's event loop, so a browser or
a container probe can see the relay is up in either polling or webhook mode.

Endpoints:
  GET /        → 200 plain-text status line
  GET /health  → 200 {"status": "ok", "uptime_s": N, "mode": "..."}
"""

import asyncio
import logging
import time

from aiohttp import web

from .config import settings

logger = logging.getLogger(__name__)

_START_TIME = time.monotonic()


def _mode() -> str:
    return "webhook" if settings.webhook_url else "polling"


async def _handle_root(request: web.Request) -> web.Response:
    if settings.webhook_url:
        where = f"waiting for webhooks at /{settings.webhook_path}"
    else:
        where = "polling Telegram for updates"
    return web.Response(text=f"relaybot is running and {where}. Gemini integration enabled.")


async def _handle_health(request: web.Request) -> web.Response:
    uptime = int(time.monotonic() - _START_TIME)
    return web.json_response({"status": "ok", "uptime_s": uptime, "mode": _mode()})


def build_app() -> web.Application:
    app = web.Application()
    app.router.add_get("/", _handle_root)
    app.router.add_get("/health", _handle_health)
    return app


async def run_health_server(port: int) -> None:
    """
    Serve the status endpoints on ``port`` until cancelled.
    Call with asyncio.create_task().
    """
    runner = web.AppRunner(build_app(), access_log=None)
    await runner.setup()
    site = web.TCPSite(runner, "0.0.0.0", port)
    try:
        await site.start()
        logger.info("Status page listening on http://0.0.0.0:%d", port)
        while True:
            await asyncio.sleep(3600)
    except asyncio.CancelledError:
        logger.info("Status page shutting down")
    finally:
        await runner.cleanup()
