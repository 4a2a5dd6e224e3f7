"""Custom exception hierarchy for relaybot."""

from enum import Enum


class RelayError(Exception):
    """Base exception for relaybot."""
    pass


class DownloadError(RelayError):
    """Raised when an attachment cannot be resolved or downloaded from Telegram."""
    pass


class UnsupportedMediaError(RelayError):
    """Raised when the selected model cannot accept an attachment of this type."""

    def __init__(self, mime_type: str, model_id: str) -> None:
        super().__init__(f"{mime_type} is not supported by {model_id}")
        self.mime_type = mime_type
        self.model_id = model_id


class StagingFailure(str, Enum):
    UPLOAD_FAILED = "upload_failed"
    PROCESSING_FAILED = "processing_failed"
    PROCESSING_TIMEOUT = "processing_timeout"


class StagingError(RelayError):
    """Raised when an upload to the Gemini File API does not become usable."""

    def __init__(self, reason: StagingFailure, detail: str = "") -> None:
        super().__init__(f"{reason.value}: {detail}" if detail else reason.value)
        self.reason = reason
        self.detail = detail


class EmptyTurnError(RelayError):
    """Raised when an update carries no text, caption or recognised attachment."""
    pass


# Substrings (lower-cased) that mark a request the provider rejected as
# structurally invalid. Resending the same history would fail again.
_INVALID_PROMPT_MARKERS = (
    "must not be empty",
    "contents is not specified",
    "empty text parameter",
)


class ProviderError(RelayError):
    """Raised when the Gemini API call fails (transport, auth or validation)."""

    def __init__(self, message: str, raw: object = None) -> None:
        super().__init__(message)
        self.message = message
        self.raw = raw

    @property
    def is_invalid_prompt(self) -> bool:
        text = self.message.lower()
        return any(marker in text for marker in _INVALID_PROMPT_MARKERS)


class TokenCountError(RelayError):
    """Raised when token estimation fails. Never surfaced to the user."""
    pass


class SessionError(RelayError):
    """Raised when session state is corrupted or missing."""
    pass
