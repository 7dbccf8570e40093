"""Search and level filtering for the dictionary view."""
from typing import Iterable, List, Optional

from polingo.models.word import WordRecord


def filter_words(
    words: Iterable[WordRecord],
    search: str = "",
    level: Optional[str] = None,
) -> List[WordRecord]:
    """Filter words by a case-insensitive search on term or meaning, then by level."""
    filtered = list(words)

    if search:
        needle = search.lower()
        filtered = [
            word for word in filtered
            if needle in word.term.lower() or needle in word.meaning.lower()
        ]

    if level:
        filtered = [word for word in filtered if word.level == level]

    return filtered
