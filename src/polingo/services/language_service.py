"""Service for the user's target language selection."""
import logging
from dataclasses import dataclass
from typing import Dict, Optional

from polingo.services.storage import KeyValueStore, StorageError

logger = logging.getLogger(__name__)

SELECTED_LANGUAGE_TWO = "selectedLanguageTwo"
SELECTED_LANGUAGE_THREE = "selectedLanguageThree"
SELECTED_LANGUAGE_NAME = "selectedLanguageName"

LANGUAGE_KEYS = [SELECTED_LANGUAGE_TWO, SELECTED_LANGUAGE_THREE, SELECTED_LANGUAGE_NAME]

# Languages with published word lists: two-letter code -> display name
LANGUAGES: Dict[str, str] = {
    "zh-CN": "Chinese",
    "hi": "Hindi",
    "es": "Spanish",
    "pt": "Portuguese",
    "id": "Indonesian",
    "ja": "Japanese",
    "bn": "Bengali",
    "ru": "Russian",
    "de": "German",
    "fr": "French",
    "it": "Italian",
    "ar": "Arabic",
    "ko": "Korean",
    "vi": "Vietnamese",
    "tr": "Turkish",
}

# Display name -> three-letter (bibliographic) code
LANG_CODE_THREE: Dict[str, str] = {
    "Chinese": "chi",
    "Hindi": "hin",
    "Spanish": "spa",
    "Portuguese": "por",
    "Indonesian": "ind",
    "Japanese": "jpn",
    "Bengali": "ben",
    "Russian": "rus",
    "German": "ger",
    "French": "fre",
    "Italian": "ita",
    "Arabic": "ara",
    "Korean": "kor",
    "Vietnamese": "vie",
    "Turkish": "tur",
}


@dataclass(frozen=True)
class LanguageSelection:
    """The language the user is currently learning."""

    two_letter_code: str
    three_letter_code: Optional[str]
    name: Optional[str]


class LanguageService:
    """Persist and retrieve the language selection."""

    def __init__(self, store: KeyValueStore):
        """Initialize the service with a key-value store."""
        self.store = store

    def _get(self, key: str) -> Optional[str]:
        try:
            return self.store.get(key)
        except StorageError as e:
            logger.error(f"Error getting {key}: {e}")
            return None

    def get_two_letter_code(self) -> Optional[str]:
        return self._get(SELECTED_LANGUAGE_TWO)

    def get_three_letter_code(self) -> Optional[str]:
        return self._get(SELECTED_LANGUAGE_THREE)

    def get_name(self) -> Optional[str]:
        return self._get(SELECTED_LANGUAGE_NAME)

    def get(self) -> Optional[LanguageSelection]:
        """Get the current selection, or None if no language was chosen."""
        two_letter_code = self.get_two_letter_code()
        if not two_letter_code:
            return None
        return LanguageSelection(
            two_letter_code=two_letter_code,
            three_letter_code=self.get_three_letter_code(),
            name=self.get_name(),
        )

    def set(self, two_letter_code: str, name: str) -> bool:
        """Save a language selection.

        The three-letter code is looked up by display name; for an unknown
        name no three-letter code is stored.
        """
        three_letter_code = LANG_CODE_THREE.get(name)
        try:
            self.store.set(SELECTED_LANGUAGE_TWO, two_letter_code)
            if three_letter_code is None:
                logger.warning(f"No three-letter code for language {name!r}")
                self.store.remove(SELECTED_LANGUAGE_THREE)
            else:
                self.store.set(SELECTED_LANGUAGE_THREE, three_letter_code)
            self.store.set(SELECTED_LANGUAGE_NAME, name)
        except StorageError as e:
            logger.error(f"Error saving language selection: {e}")
            return False
        logger.info(f"Language set to {name} ({two_letter_code})")
        return True
