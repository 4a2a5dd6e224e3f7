"""
Turn orchestration: one inbound message processed end to end.

    Received → TurnBuilt → PromptSent → Succeeded | Failed
             → HistoryUpdated → Replied → Done

Turns for the same session are serialised by the session lock. Every path
ends with a chat message; nothing raised inside a turn reaches the Telegram
handler.

History policy:
  - success: user turn + model reply (an empty reply is stored as an empty
    text placeholder so roles keep alternating)
  - provider error: user turn only, so the next call still sees what was asked
  - provider rejected the prompt as malformed: history cleared, user told to
    start a new conversation
  - message with nothing to send: no provider call, no history change
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

from ..bot.session import SessionManager
from ..bot.working_message import ThinkingNotice
from ..constants import ERROR_MESSAGES
from ..exceptions import EmptyTurnError, ProviderError
from .prompt import assemble

if TYPE_CHECKING:
    from ..ai.gateway import ProviderGateway
    from ..bot.platform import TelegramPlatform
    from ..bot.session import SessionStore
    from ..models import ConversationState, InboundMessage, Turn
    from .turns import TurnBuilder

logger = logging.getLogger(__name__)


class TurnPhase(str, Enum):
    RECEIVED = "received"
    TURN_BUILT = "turn_built"
    PROMPT_SENT = "prompt_sent"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    HISTORY_UPDATED = "history_updated"
    REPLIED = "replied"
    DONE = "done"


class TurnOrchestrator:
    def __init__(
        self,
        *,
        store: "SessionStore",
        session_manager: SessionManager,
        turn_builder: "TurnBuilder",
        gateway: "ProviderGateway",
        platform: "TelegramPlatform",
    ) -> None:
        self._store = store
        self._sessions = session_manager
        self._builder = turn_builder
        self._gateway = gateway
        self._platform = platform

    async def handle(self, inbound: "InboundMessage") -> str:
        """Process one message and reply to it. Returns the text that was sent."""
        key = SessionManager.get_session_key(inbound.user_id, inbound.chat_id)
        async with self._sessions.get_lock(key):
            reply = await self._run_turn(key, inbound)
            reply = await self._reply(inbound.chat_id, reply)
        logger.debug("Turn for %s: %s", key, TurnPhase.DONE.value)
        return reply

    async def _run_turn(self, key: str, inbound: "InboundMessage") -> str:
        phase = TurnPhase.RECEIVED
        notice: ThinkingNotice | None = None
        try:
            state = await self._store.get(key)
            try:
                turn = await self._builder.build(inbound, state.selected_model)
            except EmptyTurnError:
                logger.info("Unsupported message from %s, nothing to relay", key)
                return ERROR_MESSAGES["unsupported_message"]
            phase = TurnPhase.TURN_BUILT

            if state.thinking_indicator:
                notice = ThinkingNotice(self._platform, inbound.chat_id)
                await notice.start()

            # History must end on a model turn before the new user turn follows it
            state.close_dangling_user_turn()
            prompt = assemble(state, turn)
            phase = TurnPhase.PROMPT_SENT
            try:
                result = await self._gateway.send(prompt, state.selected_model)
            except ProviderError as e:
                phase = TurnPhase.FAILED
                reply = self._record_failure(state, turn, e)
            else:
                phase = TurnPhase.SUCCEEDED
                state.add_tokens(result.total_tokens)
                state.record_exchange(turn, result.reply_text)
                reply = result.reply_text

            await self._store.put(key, state)
            phase = TurnPhase.HISTORY_UPDATED
            logger.info(
                "Turn for %s finished (%s): history=%d total_tokens=%d",
                key, phase.value, len(state.history), state.total_tokens,
                extra={"session": key, "chat_id": inbound.chat_id, "model": state.selected_model},
            )
            return reply
        except Exception:
            logger.exception("Turn for %s failed during %s", key, phase.value)
            return ERROR_MESSAGES["internal_error"]
        finally:
            if notice is not None:
                await notice.stop()

    @staticmethod
    def _record_failure(state: "ConversationState", turn: "Turn", error: ProviderError) -> str:
        if error.is_invalid_prompt:
            logger.warning("Gemini rejected the prompt as malformed; clearing history: %s", error.message)
            state.clear_history()
            return ERROR_MESSAGES["invalid_prompt"]
        state.record_failed_attempt(turn)
        return f"{ERROR_MESSAGES['provider_error']} Error: {error.message}"

    async def _reply(self, chat_id: int, text: str) -> str:
        if not text or not text.strip():
            logger.warning("Reply text was empty, sending fallback message")
            text = ERROR_MESSAGES["empty_reply"]
        try:
            await self._platform.send_text(chat_id, text)
        except Exception as e:
            logger.error("Failed to send reply to chat %d: %s", chat_id, e)
        return text
