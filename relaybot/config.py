"""
relaybot settings, read from the environment and an optional project-root .env.

Import ``settings`` for attribute access; the underlying Settings object is
built on first use, so importing this module never fails on missing variables.
"""

import os
from pathlib import Path

from dotenv import dotenv_values
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


def _preload_env(path: Path = _ENV_FILE) -> list[str]:
    """
    Copy .env entries into os.environ where the variable is missing or blank.

    A shell that exports GEMINI_API_KEY='' would otherwise shadow the .env
    value; a non-empty shell value still wins. Returns the keys copied.
    """
    if not path.is_file():
        return []
    copied = []
    for key, value in dotenv_values(path).items():
        if value and not os.environ.get(key):
            os.environ[key] = value
            copied.append(key)
    return copied


_preload_env()


def _parse_user_ids(raw: str) -> list[int]:
    return [int(part) for part in (p.strip() for p in raw.split(",")) if part]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Credentials ─────────────────────────────────────────────────────────────
    telegram_bot_token: str
    gemini_api_key: str

    # Comma-separated Telegram user ids; empty means everyone may use the bot
    telegram_allowed_users_raw: str = ""

    # ── Gemini ──────────────────────────────────────────────────────────────────
    default_model: str = "gemini-2.5-pro"
    history_max_turns: int = 20
    asset_poll_attempts: int = 12
    asset_poll_interval: float = 5.0  # seconds between File API status checks

    # ── Telegram transport ──────────────────────────────────────────────────────
    telegram_timeout: float = 30.0
    download_timeout: float = 60.0
    webhook_url: str = ""  # empty → long polling
    webhook_path: str = "webhook"
    port: int = 3000
    health_port: int = 8080  # status page; 0 disables it

    # ── Runtime ─────────────────────────────────────────────────────────────────
    data_dir: str = "./data"
    log_level: str = "INFO"
    json_logs: bool = False

    @field_validator("telegram_allowed_users_raw")
    @classmethod
    def user_ids_are_numeric(cls, v: str) -> str:
        try:
            _parse_user_ids(v)
        except ValueError:
            raise ValueError("TELEGRAM_ALLOWED_USERS_RAW must be comma-separated numeric ids") from None
        return v

    @field_validator("default_model")
    @classmethod
    def normalise_model(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("webhook_path")
    @classmethod
    def strip_slashes(cls, v: str) -> str:
        return v.strip("/")

    @field_validator("history_max_turns")
    @classmethod
    def history_holds_whole_exchanges(cls, v: int) -> int:
        if v < 2 or v % 2:
            raise ValueError("history_max_turns must be an even number >= 2")
        return v

    @field_validator("asset_poll_attempts")
    @classmethod
    def at_least_one_poll(cls, v: int) -> int:
        if v < 1:
            raise ValueError("asset_poll_attempts must be >= 1")
        return v

    @property
    def telegram_allowed_users(self) -> list[int]:
        return _parse_user_ids(self.telegram_allowed_users_raw)

    @property
    def logs_dir(self) -> str:
        return os.path.join(self.data_dir, "logs")

    @property
    def webhook_endpoint(self) -> str:
        """Public URL registered with Telegram; WEBHOOK_URL may be a bare base URL."""
        base = self.webhook_url.rstrip("/")
        if not self.webhook_path or base.endswith(f"/{self.webhook_path}"):
            return base
        return f"{base}/{self.webhook_path}"


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


class _SettingsProxy:
    """Forwards attribute access to the lazily built Settings singleton."""

    def __getattr__(self, name):
        return getattr(get_settings(), name)


settings = _SettingsProxy()  # type: ignore[assignment]
