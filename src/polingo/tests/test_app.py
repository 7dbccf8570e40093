"""Tests for the main application."""
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from telegram.ext import ConversationHandler

from polingo.app import PolingoBot, build_conversation_handler
from polingo.bot import MAIN_MENU, SEARCHING
from polingo.config import settings


@pytest.fixture
def application() -> AsyncMock:
    """Create a mock telegram Application."""
    mock_app = AsyncMock()
    mock_app.updater = AsyncMock()
    mock_app.add_handler = MagicMock()
    return mock_app


@pytest.fixture
def bot(application: AsyncMock, monkeypatch):
    """Create a bot instance with mocked dependencies."""
    monkeypatch.setattr(settings.bot, "token", "test_token_123")

    mock_builder = MagicMock()
    mock_builder.token.return_value.build.return_value = application

    with patch("polingo.app.Application.builder", return_value=mock_builder), \
            patch("polingo.app.init_db") as init_db:
        bot = PolingoBot()
        bot.init_db = init_db
        yield bot


def test_conversation_states() -> None:
    handler = build_conversation_handler()

    assert isinstance(handler, ConversationHandler)
    assert set(handler.states) == {MAIN_MENU, SEARCHING}


@pytest.mark.asyncio
async def test_start(bot: PolingoBot, application: AsyncMock) -> None:
    """Test starting the bot."""
    await bot.start()

    assert bot.running
    assert bot.application is application
    bot.init_db.assert_called_once()
    application.add_handler.assert_called_once()
    application.updater.start_polling.assert_awaited_once()

    await bot.stop()


@pytest.mark.asyncio
async def test_stop(bot: PolingoBot, application: AsyncMock) -> None:
    """Test stopping the bot."""
    await bot.start()
    await bot.stop()

    assert not bot.running
    assert bot.application is None
    application.shutdown.assert_awaited_once()


@pytest.mark.asyncio
async def test_start_without_token(bot: PolingoBot, monkeypatch) -> None:
    monkeypatch.setattr(settings.bot, "token", "")

    with pytest.raises(ValueError):
        await bot.start()

    assert not bot.running
    assert bot.application is None
