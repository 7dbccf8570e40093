"""Word record model."""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional


class Level(str, Enum):
    """Proficiency tiers, easiest first."""

    A1 = "a1"
    A2 = "a2"
    B1 = "b1"
    B2 = "b2"
    C1 = "c1"


LEVELS = [level.value for level in Level]


@dataclass(frozen=True)
class WordRecord:
    """A vocabulary item at one proficiency level.

    ``level`` is empty for words that come straight from a remote list; it is
    stamped when the user classifies the word for the first time.
    """

    term: str
    meaning: str
    level: Optional[str] = None

    def with_level(self, level: str) -> "WordRecord":
        """Return a copy of the record stamped with ``level``."""
        return replace(self, level=level)

    def to_dict(self) -> Dict[str, Any]:
        data = {"term": self.term, "meaning": self.meaning}
        if self.level is not None:
            data["level"] = self.level
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WordRecord":
        """Build a record from a decoded JSON object.

        Raises:
            ValueError: if ``term`` or ``meaning`` is missing or not a string.
        """
        term = data.get("term")
        meaning = data.get("meaning")
        if not isinstance(term, str) or not isinstance(meaning, str):
            raise ValueError(f"Word record needs string 'term' and 'meaning': {data!r}")
        level = data.get("level")
        if level is not None and not isinstance(level, str):
            raise ValueError(f"Word record has non-string 'level': {data!r}")
        return cls(term=term, meaning=meaning, level=level)
