"""Key-value storage backends for per-user app state."""
from typing import Dict, Iterable, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from polingo.models.models import StorageEntry


class StorageError(Exception):
    """Raised when the underlying storage can not be read or written."""


class KeyValueStore(Protocol):
    """Persistent string-to-string storage."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...

    def multi_remove(self, keys: Iterable[str]) -> None: ...


class SqlKeyValueStore:
    """Key-value store kept in the ``storage_entries`` table.

    Every Telegram user gets an independent namespace identified by
    ``owner_id``; keys of different owners never collide.
    """

    def __init__(self, db: Session, owner_id: int):
        """Initialize the store with a database session and owner."""
        self.db = db
        self.owner_id = owner_id

    def _entry(self, key: str) -> Optional[StorageEntry]:
        return (
            self.db.query(StorageEntry)
            .filter(StorageEntry.owner_id == self.owner_id, StorageEntry.key == key)
            .first()
        )

    def get(self, key: str) -> Optional[str]:
        """Get the value stored under ``key``, or None if absent."""
        try:
            entry = self._entry(key)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError(f"Could not read {key!r}: {e}") from e
        return entry.value if entry else None

    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        try:
            entry = self._entry(key)
            if entry:
                entry.value = value
            else:
                self.db.add(StorageEntry(owner_id=self.owner_id, key=key, value=value))
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError(f"Could not write {key!r}: {e}") from e

    def remove(self, key: str) -> None:
        """Remove ``key``. Removing a missing key is a no-op."""
        self.multi_remove([key])

    def multi_remove(self, keys: Iterable[str]) -> None:
        """Remove every key in ``keys`` in a single transaction."""
        keys = list(keys)
        if not keys:
            return
        try:
            (
                self.db.query(StorageEntry)
                .filter(StorageEntry.owner_id == self.owner_id, StorageEntry.key.in_(keys))
                .delete(synchronize_session="fetch")
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError(f"Could not remove {keys!r}: {e}") from e


class MemoryKeyValueStore:
    """Dict-backed store for tests and scripting."""

    def __init__(self, data: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(data or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)

    def multi_remove(self, keys: Iterable[str]) -> None:
        for key in keys:
            self.data.pop(key, None)
