"""
Pydantic v2 data models for relaybot.

Content parts and turns are immutable; ConversationState is the one mutable
record, and every mutation goes through its methods so the history bound and
the user/model alternation hold after each call.
"""

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AssetState(str, Enum):
    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


class AssetHandle(BaseModel):
    """Reference to a file held by the Gemini File API."""
    model_config = ConfigDict(frozen=True)

    name: str  # e.g. "files/abc123"
    uri: str = ""
    state: AssetState = AssetState.PENDING


class TextPart(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    text: str


class InlineMediaPart(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["inline_media"] = "inline_media"
    mime_type: str
    data: bytes


class StagedAssetPart(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["staged_asset"] = "staged_asset"
    mime_type: str
    handle: AssetHandle


ContentPart = Annotated[
    Union[TextPart, InlineMediaPart, StagedAssetPart],
    Field(discriminator="kind"),
]

Role = Literal["user", "model"]


class Turn(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Role
    parts: tuple[ContentPart, ...]

    @field_validator("parts")
    @classmethod
    def must_have_parts(cls, v: tuple) -> tuple:
        if not v:
            raise ValueError("a turn needs at least one content part")
        return v


class ToolId(str, Enum):
    GOOGLE_SEARCH = "google_search"
    # Kept as a user toggle only; never sent to the API (see conversation/prompt.py)
    URL_CONTEXT = "url_context"


def _default_tools() -> dict[ToolId, bool]:
    return {ToolId.GOOGLE_SEARCH: True, ToolId.URL_CONTEXT: False}


class ConversationState(BaseModel):
    """Per-user conversation record."""

    selected_model: str
    history: list[Turn] = Field(default_factory=list)
    system_instruction: Optional[str] = None
    tools: dict[ToolId, bool] = Field(default_factory=_default_tools)
    thinking_indicator: bool = True
    total_tokens: int = 0
    max_history: int = 20

    @property
    def enabled_tools(self) -> frozenset[ToolId]:
        return frozenset(tool for tool, on in self.tools.items() if on)

    # ── settings ────────────────────────────────────────────────────────────────

    def toggle_tool(self, tool: ToolId) -> bool:
        self.tools[tool] = not self.tools.get(tool, False)
        return self.tools[tool]

    def toggle_thinking_indicator(self) -> bool:
        self.thinking_indicator = not self.thinking_indicator
        return self.thinking_indicator

    def set_system_instruction(self, text: Optional[str]) -> None:
        self.system_instruction = text or None

    def add_tokens(self, count: int) -> None:
        self.total_tokens += max(count, 0)

    def reset(self) -> None:
        """Start a new conversation: drop history and the system instruction."""
        self.history.clear()
        self.system_instruction = None

    # ── history ─────────────────────────────────────────────────────────────────

    def record_exchange(self, user_turn: Turn, reply_text: str) -> None:
        """Append a user turn and the model reply (empty text is kept as a placeholder)."""
        self.close_dangling_user_turn()
        self.history.append(user_turn)
        self.history.append(Turn(role="model", parts=[TextPart(text=reply_text)]))
        self._evict()

    def record_failed_attempt(self, user_turn: Turn) -> None:
        """Append only the user turn, keeping the attempted context for the next call."""
        self.close_dangling_user_turn()
        self.history.append(user_turn)
        self._evict()

    def clear_history(self) -> None:
        self.history.clear()

    def close_dangling_user_turn(self) -> None:
        """Pair a trailing user turn (left by a failed call) with an empty model turn."""
        if self.history and self.history[-1].role == "user":
            self.history.append(Turn(role="model", parts=[TextPart(text="")]))
            self._evict()

    def _evict(self) -> None:
        while len(self.history) > self.max_history:
            del self.history[:2]


class Prompt(BaseModel):
    """Everything sent to Gemini for one call. Built fresh per call."""
    model_config = ConfigDict(frozen=True)

    system_instruction: Optional[str] = None
    history: tuple[Turn, ...] = ()
    current_turn: Turn
    tools: frozenset[ToolId] = frozenset()

    @property
    def contents(self) -> list[Turn]:
        return [*self.history, self.current_turn]


class TurnResult(BaseModel):
    reply_text: str
    total_tokens: int = 0
    estimated: bool = False  # True when tokens came from count_tokens (input only)


class AttachmentRef(BaseModel):
    """Platform reference to an attachment, plus what Telegram tells us about it."""
    model_config = ConfigDict(frozen=True)

    file_id: str
    kind: str
    hint_mime: str = "application/octet-stream"
    file_name: Optional[str] = None


class InboundMessage(BaseModel):
    """The parts of a Telegram update the relay pipeline consumes."""
    model_config = ConfigDict(frozen=True)

    chat_id: int
    user_id: int
    text: Optional[str] = None
    caption: Optional[str] = None
    attachment: Optional[AttachmentRef] = None
