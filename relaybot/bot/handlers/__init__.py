"""
Telegram command and message handlers.

Modules:
  - base: auth checks, command arguments, update → InboundMessage mapping
  - core: start, help
  - settings: newchat, system instruction, toggles, model selection, tokens
  - chat: the relay message handler
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .chat import make_chat_handlers
from .core import make_core_handlers
from .settings import make_settings_handlers

if TYPE_CHECKING:
    from ..session import SessionManager, SessionStore
    from ...conversation.orchestrator import TurnOrchestrator


def make_handlers(
    session_manager: "SessionManager",
    store: "SessionStore",
    orchestrator: "TurnOrchestrator",
):
    """
    Factory that returns handler functions bound to shared dependencies.
    Register the returned handlers with the Telegram Application.
    """
    handlers = {}

    handlers.update(make_core_handlers())

    handlers.update(make_settings_handlers(
        session_manager=session_manager,
        store=store,
    ))

    handlers.update(make_chat_handlers(
        orchestrator=orchestrator,
    ))

    return handlers


__all__ = ["make_handlers"]
