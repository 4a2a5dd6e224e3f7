"""
Chat handler: every non-command message goes through the relay pipeline.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from telegram import Update
from telegram.ext import ContextTypes

from .base import inbound_from_update, reject_unauthorized

if TYPE_CHECKING:
    from ...conversation.orchestrator import TurnOrchestrator

logger = logging.getLogger(__name__)


def make_chat_handlers(*, orchestrator: "TurnOrchestrator"):
    """
    Factory that returns the chat message handler.

    Returns a dict of handler_name -> handler_function.
    """

    async def handle_message(update: Update, context: ContextTypes.DEFAULT_TYPE):
        if update.effective_message is None or update.effective_user is None:
            return
        if await reject_unauthorized(update):
            return
        inbound = inbound_from_update(update)
        logger.info(
            "Message from user %d: text=%s caption=%s attachment=%s",
            inbound.user_id,
            bool(inbound.text), bool(inbound.caption),
            inbound.attachment.kind if inbound.attachment else None,
        )
        await orchestrator.handle(inbound)

    return {
        "message": handle_message,
    }
