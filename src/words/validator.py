"""
Word validation for submitted words.

Validates, in order (first failure wins):
1. Minimum length for the difficulty
2. Not already found in this session
3. Letter availability (word multiset is a sub-multiset of the pool)
4. Dictionary membership
"""

from collections import Counter
from typing import Iterable, List, Optional, Sequence

from .models import ValidationFailure, ValidationResult
from .data import Dictionary, get_default_dictionary


def letter_counts(letters: Iterable[str]) -> Counter:
    """Frequency map of uppercase letters."""
    return Counter(letter.upper() for letter in letters)


def can_form_word(word: str, letters: Sequence[str]) -> bool:
    """
    Check whether `word` can be assembled from the tiles in `letters`.

    Every letter of the word must appear in the pool at least as many
    times as it appears in the word.
    """
    if not word:
        return False
    available = letter_counts(letters)
    needed = letter_counts(word)
    return all(available[letter] >= count for letter, count in needed.items())


class WordValidator:
    """
    Validates words against a dictionary and a letter pool.

    All checks are case-insensitive and free of side effects.
    """

    def __init__(self, dictionary: Optional[Dictionary] = None):
        self.dictionary = dictionary if dictionary is not None else get_default_dictionary()

    def is_valid_word(self, word: str) -> bool:
        """Dictionary membership only."""
        if not word:
            return False
        return word.upper() in self.dictionary

    def can_form_word(self, word: str, letters: Sequence[str]) -> bool:
        """Tile availability only."""
        return can_form_word(word, letters)

    def validate(
        self,
        word: str,
        letters: Sequence[str],
        min_length: int,
        already_found: Iterable[str] = (),
    ) -> ValidationResult:
        """
        Validate a word for submission.

        Args:
            word: The submitted word
            letters: The session's letter pool
            min_length: Minimum word length for the difficulty
            already_found: Words found earlier in the session

        Returns:
            ValidationResult with the first failing reason, if any
        """
        text = (word or "").strip().upper()

        if len(text) < min_length:
            return ValidationResult.fail(text, ValidationFailure.TOO_SHORT, min_length)

        if text in {w.upper() for w in already_found}:
            return ValidationResult.fail(text, ValidationFailure.ALREADY_FOUND)

        if not can_form_word(text, letters):
            return ValidationResult.fail(text, ValidationFailure.INSUFFICIENT_LETTERS)

        if not self.is_valid_word(text):
            return ValidationResult.fail(text, ValidationFailure.NOT_IN_DICTIONARY)

        return ValidationResult.ok(text)

    def find_possible_words(
        self,
        letters: Sequence[str],
        min_length: int = 3,
        max_length: Optional[int] = None,
    ) -> List[str]:
        """
        All dictionary words that can be formed from the pool.

        Returns words sorted by length (longest first), then alphabetically.
        """
        max_length = max_length or len(letters)
        available = letter_counts(letters)
        found = []
        for word in self.dictionary:
            if not min_length <= len(word) <= max_length:
                continue
            needed = Counter(word)
            if all(available[letter] >= count for letter, count in needed.items()):
                found.append(word)
        return sorted(found, key=lambda w: (-len(w), w))

    def count_possible_words(self, letters: Sequence[str], min_length: int = 3) -> int:
        return len(self.find_possible_words(letters, min_length=min_length))

    def get_hint_words(
        self,
        letters: Sequence[str],
        already_found: Iterable[str] = (),
        max_hints: int = 3,
        min_length: int = 3,
    ) -> List[str]:
        """
        Words the player could still find, for hint and x-ray power-ups.

        Shorter words come first since they are the easiest to spot.
        """
        found = {w.upper() for w in already_found}
        candidates = [
            w for w in self.find_possible_words(letters, min_length=min_length)
            if w not in found
        ]
        candidates.sort(key=lambda w: (len(w), w))
        return candidates[:max_hints]
