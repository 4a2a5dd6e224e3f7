"""
Provider gateway: one Gemini call per turn, normalised into a TurnResult.

Response shapes are read defensively (candidates, content, parts and
usage_metadata may each be missing). A response with no text is a successful
call with an empty reply, not an error. Token usage comes from
usage_metadata when present, otherwise from a count_tokens estimate, which
only covers the input side.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..exceptions import ProviderError, TokenCountError
from ..models import Prompt, TurnResult

if TYPE_CHECKING:
    from .gemini_client import GeminiClient

logger = logging.getLogger(__name__)


def extract_reply_text(response: Any) -> str:
    """Concatenate the text parts of the first candidate; '' when there are none."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return ""
    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []
    return "".join(p.text for p in parts if getattr(p, "text", None))


def reported_total_tokens(response: Any) -> int | None:
    usage = getattr(response, "usage_metadata", None)
    if usage is None:
        return None
    total = getattr(usage, "total_token_count", None)
    return total if isinstance(total, int) else None


def _error_message(exc: Exception) -> str:
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(exc) or type(exc).__name__


class ProviderGateway:
    def __init__(self, client: "GeminiClient") -> None:
        self._client = client

    async def send(self, prompt: Prompt, model_id: str) -> TurnResult:
        try:
            response = await self._client.generate(prompt, model_id)
        except Exception as e:
            message = _error_message(e)
            logger.error("Gemini generate_content failed (model=%s): %s", model_id, message)
            raise ProviderError(message, raw=e) from e

        reply = extract_reply_text(response)
        if not reply:
            logger.warning("Gemini response (model=%s) contained no text parts", model_id)

        total = reported_total_tokens(response)
        estimated = False
        if total is None:
            estimated = True
            total = await self._estimate_tokens(prompt, model_id)
        logger.info(
            "Gemini reply: %d chars, %d tokens%s",
            len(reply), total, " (estimated, input only)" if estimated else "",
        )
        return TurnResult(reply_text=reply, total_tokens=total, estimated=estimated)

    async def _estimate_tokens(self, prompt: Prompt, model_id: str) -> int:
        try:
            return await self._count(prompt, model_id)
        except TokenCountError as e:
            logger.warning("Token count unavailable, counting 0 for this call: %s", e)
            return 0

    async def _count(self, prompt: Prompt, model_id: str) -> int:
        try:
            return int(await self._client.count_tokens(prompt, model_id))
        except Exception as e:
            raise TokenCountError(_error_message(e)) from e
