"""Service for tracking words through the learning lifecycle."""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from polingo.models.word import WordRecord
from polingo.services.language_service import LANGUAGE_KEYS
from polingo.services.storage import KeyValueStore, StorageError
from polingo.services.word_codec import WordDecodeError, decode_words, encode_words

logger = logging.getLogger(__name__)


class Collection(str, Enum):
    """Named word collections and their storage keys."""

    KNOWN = "known"
    TO_LEARN = "toLearn"
    PROCESSING = "processing"

    @property
    def storage_key(self) -> str:
        return f"{self.value}Words"


WORD_KEYS = [collection.storage_key for collection in Collection]


@dataclass
class CollectionRead:
    """Result of reading one collection.

    A failed read carries the error and an empty word list, so callers can
    keep going with "no data" while still seeing what went wrong.
    """

    words: List[WordRecord] = field(default_factory=list)
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class ProcessingMove:
    """Both collections touched by :meth:`WordService.move_to_processing`."""

    to_learn: List[WordRecord]
    processing: List[WordRecord]


class WordService:
    """Single source of truth for which words are known, to learn or in progress.

    Collections are read and written as whole lists; the presentation layer
    should reload its view after every mutating call.
    """

    def __init__(self, store: KeyValueStore):
        """Initialize the service with a key-value store."""
        self.store = store

    def read_collection(self, name: Collection) -> CollectionRead:
        """Read a collection, capturing storage and decode failures."""
        name = Collection(name)
        try:
            raw = self.store.get(name.storage_key)
            if raw is None:
                return CollectionRead()
            return CollectionRead(words=decode_words(raw))
        except (StorageError, WordDecodeError) as e:
            return CollectionRead(error=e)

    def get_collection(self, name: Collection) -> List[WordRecord]:
        """Get a collection in insertion order, or an empty list if it can not be read."""
        result = self.read_collection(name)
        if not result.ok:
            logger.error(f"Error getting {Collection(name).value} words: {result.error}")
        return result.words

    def get_known_words(self) -> List[WordRecord]:
        return self.get_collection(Collection.KNOWN)

    def get_to_learn_words(self) -> List[WordRecord]:
        return self.get_collection(Collection.TO_LEARN)

    def get_processing_words(self) -> List[WordRecord]:
        return self.get_collection(Collection.PROCESSING)

    def get_all_processed_words(self) -> List[WordRecord]:
        """Get known, to-learn and processing words, in that order.

        Duplicates across collections are kept.
        """
        return self.get_known_words() + self.get_to_learn_words() + self.get_processing_words()

    def _load(self, name: Collection) -> List[WordRecord]:
        """Read a collection that is about to be rewritten.

        Raises:
            StorageError: if the collection could not be read.
            WordDecodeError: if the stored collection is malformed.
        """
        result = self.read_collection(name)
        if not result.ok:
            raise result.error
        return result.words

    def _save(self, name: Collection, words: List[WordRecord]) -> None:
        self.store.set(Collection(name).storage_key, encode_words(words))

    def _append(self, name: Collection, word: WordRecord) -> bool:
        # An unreadable collection is left as it is rather than overwritten
        try:
            self._save(name, self._load(name) + [word])
        except (StorageError, WordDecodeError) as e:
            logger.error(f"Error adding {Collection(name).value} word {word.term!r}: {e}")
            return False
        logger.debug(f"Added {word.term!r} to {Collection(name).value}")
        return True

    def add_known(self, word: WordRecord) -> bool:
        """Append a word to the known collection. Returns False if it could not be saved."""
        return self._append(Collection.KNOWN, word)

    def add_to_learn(self, word: WordRecord) -> bool:
        """Append a word to the to-learn collection. Returns False if it could not be saved."""
        return self._append(Collection.TO_LEARN, word)

    def move_to_processing(self, word: WordRecord) -> ProcessingMove:
        """Move a word from to-learn to processing.

        Every to-learn record with the same term is dropped and ``word`` itself
        is appended to processing, even when no to-learn record matched. Both
        collections are read before anything is written, so a failed read
        leaves the stored data unchanged.

        Raises:
            StorageError: if either collection could not be read or saved.
            WordDecodeError: if either stored collection is malformed.
        """
        to_learn = [w for w in self._load(Collection.TO_LEARN) if w.term != word.term]
        processing = self._load(Collection.PROCESSING) + [word]

        self._save(Collection.TO_LEARN, to_learn)
        self._save(Collection.PROCESSING, processing)
        logger.info(f"Moved {word.term!r} to processing")

        return ProcessingMove(to_learn=to_learn, processing=processing)

    def delete_from_processing(self, word: WordRecord) -> List[WordRecord]:
        """Delete every processing record with the word's term.

        Raises:
            StorageError: if the collection could not be read or saved.
            WordDecodeError: if the stored collection is malformed.
        """
        processing = [w for w in self._load(Collection.PROCESSING) if w.term != word.term]
        self._save(Collection.PROCESSING, processing)
        logger.info(f"Deleted {word.term!r} from processing")
        return processing

    def clear_all(self, keep_language: bool = False) -> None:
        """Erase all word collections, and the language selection unless ``keep_language``.

        Language keys are left untouched when kept.

        Raises:
            StorageError: if the keys could not be removed.
        """
        keys = list(WORD_KEYS)
        if not keep_language:
            keys.extend(LANGUAGE_KEYS)
        self.store.multi_remove(keys)
        logger.info(f"Cleared all data (keep_language={keep_language})")
