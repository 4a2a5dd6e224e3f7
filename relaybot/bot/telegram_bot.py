"""
python-telegram-bot Application for relaybot.

Builds the Application, registers one CommandHandler per bot command plus the
relay message handler, publishes the command menu and starts the status page on
startup, and runs either a webhook server (WEBHOOK_URL set) or long polling.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

import telegram.error
from telegram import BotCommand
from telegram.ext import (
    Application,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from ..config import settings
from ..constants import BOT_COMMANDS
from ..health import run_health_server

logger = logging.getLogger(__name__)

# /start is handled but not listed in the menu
COMMANDS = ("start", *BOT_COMMANDS)

_TRANSIENT_ERRORS = (telegram.error.NetworkError, telegram.error.TimedOut, telegram.error.Forbidden)


async def _error_handler(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Log errors that escape a handler. Transient Telegram errors are WARNING only."""
    err = context.error
    if isinstance(err, _TRANSIENT_ERRORS):
        logger.warning("Telegram transient error: %s", err)
        return

    user = getattr(update, "effective_user", None)
    logger.error(
        "Unhandled error in %s handler (user=%s): %s",
        type(update).__name__ if update else "unknown",
        user.id if user else None,
        err,
        exc_info=err,
    )


async def _publish_commands(app: Application) -> None:
    try:
        await app.bot.set_my_commands(
            [BotCommand(name, description) for name, description in BOT_COMMANDS.items()]
        )
    except telegram.error.TelegramError as e:
        logger.warning("Could not publish the command menu: %s", e)


async def _on_startup(app: Application) -> None:
    await _publish_commands(app)
    if settings.health_port:
        app.bot_data["status_task"] = asyncio.create_task(run_health_server(settings.health_port))


async def _on_shutdown(app: Application) -> None:
    task = app.bot_data.pop("status_task", None)
    if task is not None:
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)


class TelegramBot:
    def __init__(self) -> None:
        timeout = settings.telegram_timeout
        # Updates from different users are processed concurrently; turns of
        # one user are ordered by the session locks.
        builder = Application.builder().token(settings.telegram_bot_token).concurrent_updates(True)
        for option in ("connect", "read", "write", "pool"):
            getattr(builder, f"{option}_timeout")(timeout)
            getattr(builder, f"get_updates_{option}_timeout")(timeout)
        self.application = builder.build()

    @property
    def bot(self) -> telegram.Bot:
        return self.application.bot

    def register_handlers(self, handlers: dict[str, Callable[..., Awaitable[None]]]) -> None:
        app = self.application
        for command in COMMANDS:
            app.add_handler(CommandHandler(command, handlers[command]))
        # Unknown /commands are dropped rather than relayed
        app.add_handler(
            MessageHandler(filters.UpdateType.MESSAGE & ~filters.COMMAND, handlers["message"])
        )
        app.add_error_handler(_error_handler)
        app.post_init = _on_startup
        app.post_shutdown = _on_shutdown

    def run(self) -> None:
        """Block until shutdown."""
        if settings.webhook_url:
            logger.info(
                "Serving webhook %s on port %d (path /%s)",
                settings.webhook_endpoint, settings.port, settings.webhook_path,
            )
            self.application.run_webhook(
                listen="0.0.0.0",
                port=settings.port,
                url_path=settings.webhook_path,
                webhook_url=settings.webhook_endpoint,
            )
        else:
            logger.info("Polling for updates")
            self.application.run_polling(drop_pending_updates=True)
