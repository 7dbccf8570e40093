"""Client for the published per-level word lists."""
import logging
from typing import Iterable, List, Optional

import httpx

from polingo.config import settings
from polingo.models.word import WordRecord
from polingo.services.word_service import WordService

logger = logging.getLogger(__name__)


class WordListError(Exception):
    """Raised when a word list can not be fetched or parsed."""


def word_list_url(language_code: str, level: str, base_url: Optional[str] = None) -> str:
    """Build the URL of the word list for a language and level."""
    base_url = (base_url or settings.word_list.base_url).rstrip("/")
    return f"{base_url}/{language_code}/{language_code}-{level}.json"


def filter_unseen(words: Iterable[WordRecord], seen: Iterable[WordRecord]) -> List[WordRecord]:
    """Drop every word whose term is already in ``seen``."""
    seen_terms = {word.term for word in seen}
    return [word for word in words if word.term not in seen_terms]


class WordListClient:
    """Fetch word lists over HTTP."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url or settings.word_list.base_url
        self.timeout = timeout if timeout is not None else settings.word_list.timeout
        self.transport = transport

    async def fetch(self, language_code: str, level: str) -> List[WordRecord]:
        """Fetch the word list for a language and level.

        Raises:
            WordListError: on a network failure, a non-success status or a
                payload that is not an array of ``{term, meaning}`` objects.
        """
        url = word_list_url(language_code, level, self.base_url)
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(url)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise WordListError(
                    f"Failed to fetch words. Status: {e.response.status_code}"
                ) from e
            except httpx.HTTPError as e:
                raise WordListError(f"Failed to fetch words: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise WordListError(f"Word list at {url} is not valid JSON") from e

        if not isinstance(data, list):
            raise WordListError(f"Word list at {url} is not an array")

        words = []
        for item in data:
            if not isinstance(item, dict):
                raise WordListError(f"Unexpected item in word list at {url}: {item!r}")
            try:
                # Remote lists carry no level; it is stamped on classification
                words.append(WordRecord.from_dict({"term": item.get("term"), "meaning": item.get("meaning")}))
            except ValueError as e:
                raise WordListError(str(e)) from e

        logger.info(f"Fetched {len(words)} words for {language_code}-{level}")
        return words

    async def fetch_unseen(self, word_service: WordService, language_code: str, level: str) -> List[WordRecord]:
        """Fetch a word list without the words the user has already classified."""
        processed = word_service.get_all_processed_words()
        words = await self.fetch(language_code, level)
        return filter_unseen(words, processed)
