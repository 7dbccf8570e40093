"""Configuration settings for the bot."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(env_file)


DATA_DIR = Path(os.getenv("DATA_DIR", "./data"))

# Word lists are published per language and level on GitHub
DEFAULT_WORD_LIST_URL = (
    "https://raw.githubusercontent.com/mehmetmerthan/polingo-words/main/word-list"
)


def ensure_directories() -> None:
    """Ensure all required directories exist."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)


def default_database_url() -> str:
    """SQLite database file kept in the data directory."""
    return f"sqlite:///{DATA_DIR / 'polingo.db'}"


@dataclass
class DatabaseSettings:
    """Database configuration settings."""
    url: str = os.getenv("DATABASE_URL", default_database_url())
    echo: bool = os.getenv("DATABASE_ECHO", "false").lower() == "true"


@dataclass
class LoggingSettings:
    """Logging configuration settings."""
    level: str = os.getenv("LOG_LEVEL", "INFO")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    dir: Optional[str] = os.getenv("LOG_DIR", None)
    rotation: str = os.getenv("LOG_ROTATION", "midnight")
    interval: int = int(os.getenv("LOG_INTERVAL", "1"))
    backup_count: int = int(os.getenv("LOG_BACKUP_COUNT", "7"))


@dataclass
class BotSettings:
    """Bot configuration settings."""
    token: str = os.getenv("TELEGRAM_BOT_TOKEN", "")


@dataclass
class WordListSettings:
    """Remote word list settings."""
    base_url: str = os.getenv("WORD_LIST_BASE_URL", DEFAULT_WORD_LIST_URL)
    timeout: float = float(os.getenv("WORD_LIST_TIMEOUT", "10"))


def get_database_settings() -> DatabaseSettings:
    """Get database settings."""
    return DatabaseSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings."""
    return LoggingSettings()


def get_bot_settings() -> BotSettings:
    """Get bot settings."""
    return BotSettings()


def get_word_list_settings() -> WordListSettings:
    """Get word list settings."""
    return WordListSettings()


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    database: DatabaseSettings = field(default_factory=get_database_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    bot: BotSettings = field(default_factory=get_bot_settings)
    word_list: WordListSettings = field(default_factory=get_word_list_settings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        if not self.bot.token:
            raise ValueError("TELEGRAM_BOT_TOKEN is required")

        if self.word_list.timeout <= 0:
            raise ValueError("WORD_LIST_TIMEOUT must be positive")

        if not self.word_list.base_url.startswith(("http://", "https://")):
            raise ValueError("WORD_LIST_BASE_URL must be an http(s) URL")


# Create global settings instance
settings = Settings()
