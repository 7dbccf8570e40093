"""JSON encoding of word collections."""
import json
from typing import Iterable, List

from polingo.models.word import WordRecord


class WordDecodeError(ValueError):
    """Raised when a stored collection is not a valid JSON array of words."""


def encode_words(words: Iterable[WordRecord]) -> str:
    """Serialize words to a JSON array of ``{term, meaning, level}`` objects."""
    return json.dumps([word.to_dict() for word in words], ensure_ascii=False)


def decode_words(text: str) -> List[WordRecord]:
    """Parse a JSON array produced by :func:`encode_words`."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise WordDecodeError(f"Invalid JSON: {e}") from e

    if not isinstance(data, list):
        raise WordDecodeError(f"Expected a JSON array, got {type(data).__name__}")

    words = []
    for item in data:
        if not isinstance(item, dict):
            raise WordDecodeError(f"Expected a JSON object, got {item!r}")
        try:
            words.append(WordRecord.from_dict(item))
        except ValueError as e:
            raise WordDecodeError(str(e)) from e
    return words
