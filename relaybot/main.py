"""
relaybot entry point.
Initialises all components and starts the Telegram bot.
"""

import logging
import os

from .ai.capabilities import CAPABILITIES
from .ai.gateway import ProviderGateway
from .ai.gemini_client import GeminiClient
from .bot.handlers import make_handlers
from .bot.platform import TelegramPlatform
from .bot.session import InMemorySessionStore, SessionManager
from .bot.telegram_bot import TelegramBot
from .config import get_settings, settings
from .conversation.orchestrator import TurnOrchestrator
from .conversation.turns import TurnBuilder
from .logging_config import log_startup_config, setup_logging
from .media.fetcher import AttachmentFetcher
from .media.staging import AssetStager
from .models import ConversationState

logger = logging.getLogger(__name__)


def new_conversation_state() -> ConversationState:
    return ConversationState(
        selected_model=settings.default_model,
        max_history=settings.history_max_turns,
    )


def main() -> None:
    os.makedirs(settings.data_dir, exist_ok=True)
    os.makedirs(settings.logs_dir, exist_ok=True)

    setup_logging(settings.log_level, settings.logs_dir, settings.json_logs)
    log_startup_config(get_settings())

    logger.info(
        "Starting relaybot (mode=%s, default_model=%s, history=%d turns)",
        "webhook" if settings.webhook_url else "polling",
        settings.default_model,
        settings.history_max_turns,
    )
    if settings.default_model not in CAPABILITIES:
        logger.warning(
            "DEFAULT_MODEL %s is not in the model catalogue; attachments will not be relayed",
            settings.default_model,
        )

    bot = TelegramBot()
    platform = TelegramPlatform(bot.bot)

    gemini = GeminiClient()
    stager = AssetStager(
        gemini,
        poll_attempts=settings.asset_poll_attempts,
        poll_interval=settings.asset_poll_interval,
    )
    fetcher = AttachmentFetcher(platform, timeout=settings.download_timeout)

    session_manager = SessionManager()
    store = InMemorySessionStore(new_conversation_state)

    orchestrator = TurnOrchestrator(
        store=store,
        session_manager=session_manager,
        turn_builder=TurnBuilder(fetcher, stager),
        gateway=ProviderGateway(gemini),
        platform=platform,
    )

    bot.register_handlers(make_handlers(session_manager, store, orchestrator))

    logger.info("relaybot ready")
    bot.run()


if __name__ == "__main__":
    main()
