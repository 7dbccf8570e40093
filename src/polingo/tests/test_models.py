"""Tests for models and storage backends."""
import pytest
from sqlalchemy.exc import OperationalError

from polingo.models.models import StorageEntry
from polingo.models.word import LEVELS, Level, WordRecord
from polingo.services.storage import MemoryKeyValueStore, SqlKeyValueStore, StorageError


def test_levels_are_ordered() -> None:
    assert LEVELS == ["a1", "a2", "b1", "b2", "c1"]
    assert Level("b2") is Level.B2


def test_word_record_with_level() -> None:
    """Test that stamping a level returns a new record."""
    word = WordRecord(term="house", meaning="ev")
    stamped = word.with_level("a2")

    assert word.level is None
    assert stamped == WordRecord(term="house", meaning="ev", level="a2")


def test_word_record_to_dict_omits_missing_level() -> None:
    assert WordRecord(term="house", meaning="ev").to_dict() == {"term": "house", "meaning": "ev"}


@pytest.mark.parametrize("data", [
    {"meaning": "ev"},
    {"term": "house"},
    {"term": 1, "meaning": "ev"},
    {"term": "house", "meaning": "ev", "level": 3},
])
def test_word_record_from_dict_rejects_bad_fields(data) -> None:
    with pytest.raises(ValueError):
        WordRecord.from_dict(data)


def test_sql_store_set_get_remove(db) -> None:
    """Test the basic key-value operations on the database store."""
    store = SqlKeyValueStore(db, owner_id=42)

    assert store.get("selectedLanguageTwo") is None

    store.set("selectedLanguageTwo", "tr")
    assert store.get("selectedLanguageTwo") == "tr"

    store.set("selectedLanguageTwo", "de")
    assert store.get("selectedLanguageTwo") == "de"
    assert db.query(StorageEntry).count() == 1

    store.remove("selectedLanguageTwo")
    assert store.get("selectedLanguageTwo") is None

    # Removing again is a no-op
    store.remove("selectedLanguageTwo")


def test_sql_store_owners_are_isolated(db) -> None:
    first = SqlKeyValueStore(db, owner_id=1)
    second = SqlKeyValueStore(db, owner_id=2)

    first.set("knownWords", "[]")
    second.set("knownWords", '[{"term": "a", "meaning": "b"}]')
    first.multi_remove(["knownWords", "toLearnWords"])

    assert first.get("knownWords") is None
    assert second.get("knownWords") == '[{"term": "a", "meaning": "b"}]'


def test_sql_store_wraps_database_errors(db, mocker) -> None:
    """Test that database failures surface as StorageError and roll back."""
    store = SqlKeyValueStore(db, owner_id=1)
    mocker.patch.object(db, "commit", side_effect=OperationalError("UPDATE", {}, Exception("locked")))
    rollback = mocker.spy(db, "rollback")

    with pytest.raises(StorageError):
        store.set("knownWords", "[]")
    rollback.assert_called_once()


def test_sql_store_read_failure_rolls_back(db, mocker) -> None:
    """Test that a failed read leaves the session usable for later calls."""
    store = SqlKeyValueStore(db, owner_id=1)
    store.set("knownWords", "[]")
    query = mocker.patch.object(db, "query", side_effect=OperationalError("SELECT", {}, Exception("locked")))
    rollback = mocker.spy(db, "rollback")

    with pytest.raises(StorageError):
        store.get("knownWords")
    rollback.assert_called_once()

    mocker.stop(query)
    assert store.get("knownWords") == "[]"


def test_memory_store() -> None:
    store = MemoryKeyValueStore({"a": "1"})
    store.set("b", "2")
    store.multi_remove(["a", "missing"])

    assert store.get("a") is None
    assert store.get("b") == "2"
