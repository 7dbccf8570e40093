"""Database models for the bot."""
from sqlalchemy import Column, Integer, String, Text, UniqueConstraint

from polingo.models.base import Base, TimestampMixin


class StorageEntry(Base, TimestampMixin):
    """One key-value pair in a user's storage namespace."""

    __tablename__ = "storage_entries"
    __table_args__ = (UniqueConstraint("owner_id", "key", name="uq_storage_owner_key"),)

    id = Column(Integer, primary_key=True)
    owner_id = Column(Integer, nullable=False, index=True)  # Telegram user id
    key = Column(String, nullable=False)
    value = Column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<StorageEntry owner={self.owner_id} key={self.key!r}>"
