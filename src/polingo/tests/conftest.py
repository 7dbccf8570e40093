"""Test configuration."""
import os
from typing import Generator

import pytest
from faker import Faker

# Set test environment before any imports
os.environ["ENV"] = "test"
os.environ.setdefault("DATABASE_URL", "sqlite://")

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Import after environment setup
from polingo.models.base import init_db
from polingo.models.word import WordRecord
from polingo.services.language_service import LanguageService
from polingo.services.storage import MemoryKeyValueStore
from polingo.services.word_service import WordService

fake = Faker()


@pytest.fixture
def engine():
    """Create a private in-memory database."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory) -> Generator[Session, None, None]:
    """Create a fresh database session for each test."""
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def word_service(store: MemoryKeyValueStore) -> WordService:
    """Create a word service backed by an in-memory store."""
    return WordService(store)


@pytest.fixture
def language_service(store: MemoryKeyValueStore) -> LanguageService:
    return LanguageService(store)


@pytest.fixture
def make_word():
    """Factory for word records with random content."""
    def _make_word(term=None, meaning=None, level="a1") -> WordRecord:
        return WordRecord(
            term=term or fake.unique.word(),
            meaning=meaning or fake.word(),
            level=level,
        )
    return _make_word
