"""
Core command handlers: start and help.
"""

from __future__ import annotations

import logging

from telegram import Update
from telegram.ext import ContextTypes

from .base import reject_unauthorized
from ...ai.capabilities import format_model_list
from ...constants import BOT_COMMANDS

logger = logging.getLogger(__name__)


def _command_list() -> str:
    return "\n".join(f"  /{name} — {description}" for name, description in BOT_COMMANDS.items())


def make_core_handlers():
    """
    Factory that returns core command handlers.

    Returns a dict of command_name -> handler_function.
    """

    async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
        if await reject_unauthorized(update):
            return
        logger.info("/start from user %d", update.effective_user.id)
        await update.effective_message.reply_text(
            "Hi! I relay your messages to Google Gemini.\n"
            "Send me text or a file (photo, PDF, video, audio, voice), with or "
            "without a caption, and I'll answer.\n\n"
            "Commands:\n" + _command_list()
        )

    async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
        if await reject_unauthorized(update):
            return
        await update.effective_message.reply_text(
            "Commands:\n" + _command_list()
            + "\n\nModels (alias: API name):\n" + format_model_list()
        )

    return {
        "start": start_command,
        "help": help_command,
    }
