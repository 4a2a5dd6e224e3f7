"""
Per-user session management.

SessionStore holds ConversationState per session key; the in-memory store is
the default and loses everything on restart. A durable backend only needs to
implement the three SessionStore methods.

SessionManager hands out one asyncio lock per session key so that two
messages from the same user never interleave their history updates.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Callable

from ..exceptions import SessionError
from ..models import ConversationState

logger = logging.getLogger(__name__)


class SessionStore(ABC):
    """Key-value store for conversation state."""

    @abstractmethod
    async def get(self, key: str) -> ConversationState:
        """Return the state for ``key``, creating a fresh one on first use."""

    @abstractmethod
    async def put(self, key: str, state: ConversationState) -> None:
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        ...


class InMemorySessionStore(SessionStore):
    def __init__(self, factory: Callable[[], ConversationState]) -> None:
        self._factory = factory
        self._states: dict[str, ConversationState] = {}

    async def get(self, key: str) -> ConversationState:
        state = self._states.get(key)
        if state is None:
            try:
                state = self._factory()
            except Exception as e:
                raise SessionError(f"could not create session state for {key}: {e}") from e
            self._states[key] = state
            logger.info("Session initialised for %s (model=%s)", key, state.selected_model)
        return state

    async def put(self, key: str, state: ConversationState) -> None:
        self._states[key] = state

    async def delete(self, key: str) -> None:
        self._states.pop(key, None)

    def __len__(self) -> int:
        return len(self._states)


class SessionManager:
    """Per-session asyncio locks for the Telegram bot."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}

    def get_lock(self, key: str) -> asyncio.Lock:
        if key not in self._locks:
            self._locks[key] = asyncio.Lock()
        return self._locks[key]

    @staticmethod
    def get_session_key(user_id: int, chat_id: int) -> str:
        """
        Return the session key for a user in a chat: ``<user_id>:<chat_id>``.

        The same user gets separate conversations in separate chats.
        """
        return f"{user_id}:{chat_id}"
