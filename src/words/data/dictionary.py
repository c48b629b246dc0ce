# Word list loader for the puzzle dictionary.
# The bundled list (words.txt) holds common English words, one per line.

import logging
from functools import lru_cache
from pathlib import Path
from typing import Iterable, Optional, Set

logger = logging.getLogger(__name__)

DEFAULT_WORDLIST = Path(__file__).parent / "words.txt"


class Dictionary:
    """
    Read-only set of uppercase words queried by exact membership.

    Loaded once at startup and shared by the validator and the
    letter pool generator.
    """

    def __init__(self, words: Iterable[str]):
        self._words: Set[str] = frozenset(
            w.strip().upper() for w in words if w and w.strip().isalpha()
        )

    @classmethod
    def load(cls, path: Optional[Path | str] = None) -> "Dictionary":
        """
        Load a dictionary from a text file with one word per line.

        Args:
            path: Word list file (defaults to the bundled list)

        Returns:
            A new Dictionary

        Raises:
            FileNotFoundError: If the word list does not exist
        """
        path = Path(path) if path else DEFAULT_WORDLIST
        if not path.exists():
            raise FileNotFoundError(f"Word list file not found: {path}")

        with path.open("r", encoding="utf-8", errors="ignore") as f:
            dictionary = cls(line for line in f if not line.startswith("#"))

        logger.info("Loaded %s words from %s", len(dictionary), path)
        return dictionary

    @property
    def words(self) -> Set[str]:
        return self._words

    def __contains__(self, word: str) -> bool:
        return word.upper() in self._words

    def __len__(self) -> int:
        return len(self._words)

    def __iter__(self):
        return iter(self._words)


@lru_cache(maxsize=1)
def get_default_dictionary() -> Dictionary:
    """The bundled dictionary, loaded on first use."""
    return Dictionary.load(DEFAULT_WORDLIST)


def check_word(word: str) -> bool:
    '''
    Returns True if `word` exists in the bundled dictionary.
    Returns False otherwise.
    '''
    return bool(word) and word in get_default_dictionary()
