"""Application wiring: handlers, polling lifecycle."""
import logging
from typing import Optional

from telegram.ext import (
    Application,
    CallbackQueryHandler,
    CommandHandler,
    ConversationHandler,
    MessageHandler,
    filters,
)

from polingo.bot import (
    MAIN_MENU,
    SEARCHING,
    handle_callback,
    handle_message,
    handle_search,
    handle_start,
)
from polingo.config import settings
from polingo.models.base import init_db

logger = logging.getLogger(__name__)


def build_conversation_handler() -> ConversationHandler:
    """Route /start, inline buttons and free text to the bot handlers.

    Free text is a search query while in SEARCHING and a hint to use /start
    otherwise.
    """
    text_only = filters.TEXT & ~filters.COMMAND
    return ConversationHandler(
        entry_points=[CommandHandler("start", handle_start)],
        states={
            MAIN_MENU: [
                CallbackQueryHandler(handle_callback),
                MessageHandler(text_only, handle_message),
            ],
            SEARCHING: [
                CallbackQueryHandler(handle_callback),
                MessageHandler(text_only, handle_search),
            ],
        },
        fallbacks=[CommandHandler("start", handle_start)],
        per_message=False,
    )


class PolingoBot:
    """Owns the telegram Application and its polling loop."""

    def __init__(self):
        self.application: Optional[Application] = None
        self.running = False

    async def start(self) -> None:
        """Create the storage tables and start polling for updates."""
        if self.running:
            return

        try:
            settings.validate()
            init_db()
            logger.info(f"Storage ready at {settings.database.url}")

            application = Application.builder().token(settings.bot.token).build()
            application.add_handler(build_conversation_handler())
            self.application = application

            await application.initialize()
            await application.start()
            await application.updater.start_polling()
            self.running = True
            logger.info(f"Polling started, word lists from {settings.word_list.base_url}")
        except Exception as e:
            logger.error(f"Failed to start bot: {e}")
            await self.stop()
            raise

    async def stop(self) -> None:
        """Stop polling and release the Application. Safe to call twice."""
        application, self.application = self.application, None
        if not self.running or application is None:
            self.running = False
            return

        self.running = False
        try:
            await application.updater.stop()
            await application.stop()
            await application.shutdown()
            logger.info("Bot stopped")
        except Exception as e:
            logger.error(f"Error while stopping bot: {e}")
            raise
