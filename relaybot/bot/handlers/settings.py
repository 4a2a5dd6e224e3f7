"""
Conversation settings commands.

Each command changes one field of the user's ConversationState. Commands take
the session lock, so a change never affects a turn that is already running;
it applies from the next message on.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Awaitable, Callable

from telegram import Update
from telegram.ext import ContextTypes

from .base import command_argument, reject_unauthorized
from ..session import SessionManager
from ...ai.capabilities import RECOMMENDED_MULTIMODAL, format_model_list, resolve_alias
from ...models import ConversationState, ToolId

if TYPE_CHECKING:
    from ..session import SessionStore

logger = logging.getLogger(__name__)


def _on_off(flag: bool) -> str:
    return "enabled" if flag else "disabled"


def make_settings_handlers(
    *,
    session_manager: SessionManager,
    store: "SessionStore",
):
    """
    Factory that returns the settings command handlers.

    Returns a dict of command_name -> handler_function.
    """

    async def _apply(update: Update, change: Callable[[ConversationState], str]) -> None:
        if await reject_unauthorized(update):
            return
        key = SessionManager.get_session_key(update.effective_user.id, update.effective_chat.id)
        async with session_manager.get_lock(key):
            state = await store.get(key)
            reply = change(state)
            await store.put(key, state)
        await update.effective_message.reply_text(reply)

    def _handler(change: Callable[[Update, ConversationState], str]) -> Callable[..., Awaitable[None]]:
        async def handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
            await _apply(update, lambda state: change(update, state))
        return handler

    def newchat(update: Update, state: ConversationState) -> str:
        state.reset()
        logger.info("Conversation reset for user %d", update.effective_user.id)
        return "Chat cleared. Previous history and system instructions were removed."

    def set_system_instruction(update: Update, state: ConversationState) -> str:
        instruction = command_argument(update)
        state.set_system_instruction(instruction)
        if instruction:
            return "System instructions set."
        return "System instructions cleared. Use /setsysteminstruction <text> to set them."

    def toggle_talk_mode(update: Update, state: ConversationState) -> str:
        on = state.toggle_thinking_indicator()
        return f"\"Thinking…\" notice {_on_off(on)}."

    def toggle_url_context(update: Update, state: ConversationState) -> str:
        on = state.toggle_tool(ToolId.URL_CONTEXT)
        return (
            f"URL Context tool {_on_off(on)}. "
            "(This tool may be deprecated or need a specific model, so it is not sent to Gemini.)"
        )

    def toggle_grounding(update: Update, state: ConversationState) -> str:
        on = state.toggle_tool(ToolId.GOOGLE_SEARCH)
        return f"Grounding (Google Search) tool {_on_off(on)}."

    def set_model(update: Update, state: ConversationState) -> str:
        name = command_argument(update)
        if not name:
            return (
                "Available models (alias: API name):\n" + format_model_list()
                + f"\n\nCurrent model: {state.selected_model}\n"
                "Use /setmodel <alias> to choose."
            )
        model_id = resolve_alias(name)
        if model_id is None:
            return (
                f"Unknown model name or alias: \"{name}\". "
                "Use /setmodel without arguments to list available models."
            )
        state.selected_model = model_id
        reply = f"Model set to {model_id}."
        if model_id not in RECOMMENDED_MULTIMODAL:
            reply += (
                "\nFor the best multimodal support (PDF, video, audio) "
                "'pro2.5' or 'flash2.5' is recommended."
            )
        return reply

    def show_tokens(update: Update, state: ConversationState) -> str:
        return f"Total tokens used (approximate): {state.total_tokens}."

    return {
        "newchat": _handler(newchat),
        "setsysteminstruction": _handler(set_system_instruction),
        "toggletalkmode": _handler(toggle_talk_mode),
        "toggleurlcontext": _handler(toggle_url_context),
        "togglegrounding": _handler(toggle_grounding),
        "setmodel": _handler(set_model),
        "showtokens": _handler(show_tokens),
    }
