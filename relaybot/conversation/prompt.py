"""Prompt assembly from conversation state and the current turn."""

from __future__ import annotations

import logging

from ..models import ConversationState, Prompt, ToolId, Turn

logger = logging.getLogger(__name__)

# Tools Gemini accepts as generic tool objects. url_context stays a user
# toggle but is not sent: the API no longer takes it in the generic tool list.
WIRE_SUPPORTED_TOOLS = frozenset({ToolId.GOOGLE_SEARCH})


def assemble(state: ConversationState, current_turn: Turn) -> Prompt:
    enabled = state.enabled_tools
    if ToolId.URL_CONTEXT in enabled:
        logger.warning("url_context is enabled but is not sent to the API")
    return Prompt(
        system_instruction=state.system_instruction,
        history=tuple(state.history),
        current_turn=current_turn,
        tools=enabled & WIRE_SUPPORTED_TOOLS,
    )
