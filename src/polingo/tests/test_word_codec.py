"""Tests for the word collection codec."""
import json

import pytest

from polingo.models.word import WordRecord
from polingo.services.word_codec import WordDecodeError, decode_words, encode_words


def test_encode_keeps_non_ascii() -> None:
    text = encode_words([WordRecord(term="dog", meaning="köpek", level="a1")])

    assert "köpek" in text
    assert json.loads(text) == [{"term": "dog", "meaning": "köpek", "level": "a1"}]


def test_decode_existing_layout() -> None:
    """Test decoding data written by earlier installs."""
    text = '[{"term":"cat","meaning":"kedi","level":"a1"},{"term":"run","meaning":"koşmak","level":"b1","extra":true}]'

    assert decode_words(text) == [
        WordRecord(term="cat", meaning="kedi", level="a1"),
        WordRecord(term="run", meaning="koşmak", level="b1"),
    ]


def test_decode_empty_array() -> None:
    assert decode_words("[]") == []


@pytest.mark.parametrize("text", [
    "not json",
    '{"term": "cat", "meaning": "kedi"}',
    '["cat"]',
    '[{"term": "cat"}]',
])
def test_decode_rejects_malformed(text) -> None:
    with pytest.raises(WordDecodeError):
        decode_words(text)
