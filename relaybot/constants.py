"""
Shared constants for relaybot.

Centralises user-facing strings that are used across multiple modules.
"""

# ── Transient notice shown while Gemini is working ──────────────────────────────
THINKING_MESSAGE = "Thinking…"


# ── Standardised error messages ─────────────────────────────────────────────────
ERROR_MESSAGES = {
    "not_authorised": "You're not authorised to use this bot.",
    "unsupported_message": (
        "Sorry, I can only relay text, photos, videos, documents (including PDF), "
        "voice messages, video notes, audio, animations and stickers, "
        "as far as the selected model supports them."
    ),
    "provider_error": "An error occurred while contacting Gemini.",
    "invalid_prompt": (
        "Gemini rejected the conversation as malformed, so the history has been cleared. "
        "Please start a new conversation (/newchat) and send your message again."
    ),
    "empty_reply": "Could not generate a reply. Try again or change your request/settings.",
    "internal_error": "Sorry, something went wrong while processing your message.",
}


# ── Placeholders substituted for attachments that could not be used ─────────────
ATTACHMENT_DOWNLOAD_FAILED = "[Could not download the attached file ({mime_type}) from Telegram.]"
ATTACHMENT_UNSUPPORTED = "[Attachment of type {mime_type} is not supported by the selected model ({model_id}).]"
ATTACHMENT_STAGING_FAILED = "[Attachment of type {mime_type} could not be processed ({reason}).]"


# ── Telegram message limits ─────────────────────────────────────────────────────
TELEGRAM_MAX_MESSAGE_LENGTH = 4000


# ── Bot commands: name → description (menu, /help) ──────────────────────────────
BOT_COMMANDS = {
    "newchat": "Start a new conversation",
    "setsysteminstruction": "Set system instructions (no text clears them)",
    "toggletalkmode": "Show/hide the \"Thinking…\" notice",
    "toggleurlcontext": "Toggle the URL context tool",
    "togglegrounding": "Toggle Google Search grounding",
    "setmodel": "Choose the Gemini model",
    "showtokens": "Show approximate token usage",
    "help": "Show the command list",
}
