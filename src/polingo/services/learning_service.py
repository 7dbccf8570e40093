"""Learning session: classify fetched words one at a time."""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from polingo.models.word import LEVELS, WordRecord
from polingo.services.word_service import WordService

logger = logging.getLogger(__name__)


class WordAction(str, Enum):
    """What the user decided about the current word."""

    KNOWN = "known"
    TO_LEARN = "to_learn"


@dataclass(frozen=True)
class Classification:
    """Outcome of classifying one word.

    ``exhausted`` is set after the last word of the list, when a new list
    should be loaded.
    """

    saved: bool
    exhausted: bool


@dataclass
class LearningSession:
    """A user's walk through one level's word list."""

    words: List[WordRecord] = field(default_factory=list)
    index: int = 0
    level_index: int = 0

    @property
    def level(self) -> str:
        return LEVELS[self.level_index]

    @property
    def current(self) -> Optional[WordRecord]:
        """The word being shown, or None when the list is empty or done."""
        if self.index >= len(self.words):
            return None
        return self.words[self.index]

    @property
    def position(self) -> int:
        """1-based position of the current word, 0 for an empty list."""
        return self.index + 1 if self.words else 0

    @property
    def remaining(self) -> int:
        return max(len(self.words) - self.index, 0)

    @property
    def is_complete(self) -> bool:
        return bool(self.words) and self.index >= len(self.words)

    def counter_text(self) -> str:
        return f"{self.position}/{len(self.words)}"

    def load(self, words: List[WordRecord]) -> None:
        """Replace the word list and start from its first word."""
        self.words = list(words)
        self.index = 0

    def change_level(self, direction: str) -> bool:
        """Move to the next or previous level. Returns True if the level changed."""
        if direction == "next" and self.level_index < len(LEVELS) - 1:
            self.level_index += 1
        elif direction == "prev" and self.level_index > 0:
            self.level_index -= 1
        else:
            return False
        logger.debug(f"Level changed to {self.level}")
        return True

    def classify(self, word_service: WordService, action: WordAction) -> Classification:
        """Store the current word as known or to-learn and advance.

        The current level is stamped onto the word before it is stored. A word
        that could not be saved stays current so the user can try again.
        """
        word = self.current
        if word is None:
            return Classification(saved=False, exhausted=False)

        word = word.with_level(self.level)
        if WordAction(action) == WordAction.KNOWN:
            saved = word_service.add_known(word)
        else:
            saved = word_service.add_to_learn(word)
        if not saved:
            return Classification(saved=False, exhausted=False)

        self.words[self.index] = word
        if self.index < len(self.words) - 1:
            self.index += 1
            return Classification(saved=True, exhausted=False)
        self.index = len(self.words)
        return Classification(saved=True, exhausted=True)
