"""
Letter pool generation.

Pools are sampled from an English letter-frequency distribution and
re-sampled until enough dictionary words can be formed from them.
"""

import logging
import random
from typing import Dict, List, Optional

from .validator import WordValidator

logger = logging.getLogger(__name__)


# Approximate English letter frequencies (percent)
LETTER_FREQUENCY: Dict[str, float] = {
    "A": 8.12, "B": 1.49, "C": 2.78, "D": 4.25, "E": 12.02, "F": 2.23,
    "G": 2.02, "H": 6.09, "I": 6.97, "J": 0.15, "K": 0.77, "L": 4.03,
    "M": 2.41, "N": 6.75, "O": 7.51, "P": 1.93, "Q": 0.10, "R": 5.99,
    "S": 6.33, "T": 9.06, "U": 2.76, "V": 0.98, "W": 2.36, "X": 0.15,
    "Y": 1.97, "Z": 0.07,
}

VOWELS: List[str] = ["A", "E", "I", "O", "U"]
CONSONANTS: List[str] = [c for c in LETTER_FREQUENCY if c not in VOWELS]

# Share of each pool drawn as vowels, per theme
VOWEL_RATIOS: Dict[str, float] = {
    "balanced": 0.3,
    "vowel_heavy": 0.5,
    "consonant_heavy": 0.2,
}

DEFAULT_MIN_SOLUTIONS = 5
DEFAULT_MAX_ATTEMPTS = 25


class LetterPoolGenerator:
    """
    Produces solvable letter pools for a difficulty.

    Attributes:
        validator: Validator used to count formable words
        min_solutions: Words a pool must yield to be accepted
        max_attempts: Sampling attempts before falling back
    """

    def __init__(
        self,
        validator: Optional[WordValidator] = None,
        min_solutions: int = DEFAULT_MIN_SOLUTIONS,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ):
        self.validator = validator or WordValidator()
        self.min_solutions = min_solutions
        self.max_attempts = max(1, max_attempts)
        self._rng = rng or random.Random(seed)

    def generate(self, letter_count: int, min_word_length: int = 3) -> List[str]:
        """
        Generate a pool with at least `min_solutions` formable words.

        Args:
            letter_count: Number of tiles in the pool
            min_word_length: Shortest word that counts towards solvability

        Returns:
            List of uppercase letters
        """
        best: List[str] = []
        best_count = -1

        for attempt in range(1, self.max_attempts + 1):
            letters = self.sample(letter_count)
            count = self.validator.count_possible_words(letters, min_length=min_word_length)
            if count >= self.min_solutions:
                logger.debug("Accepted pool %s after %s attempt(s) (%s words)",
                             "".join(letters), attempt, count)
                return letters
            if count > best_count:
                best, best_count = letters, count

        logger.warning(
            "No pool reached %s solutions in %s attempts; using best pool with %s",
            self.min_solutions, self.max_attempts, best_count,
        )
        return best

    def sample(self, count: int, theme: str = "balanced") -> List[str]:
        """
        Draw `count` letters without a solvability check.

        Raises:
            ValueError: If the theme is unknown
        """
        if count <= 0:
            return []
        if theme not in VOWEL_RATIOS:
            raise ValueError(f"Unknown letter theme: {theme!r}")

        min_vowels = 1 if count <= 3 else 2
        max_vowels = max(count // 2, min_vowels)
        vowel_count = round(count * VOWEL_RATIOS[theme])
        if theme == "balanced":
            vowel_count = min(max(vowel_count, min_vowels), max_vowels)
        else:
            vowel_count = min(max(vowel_count, 1), max(count - 1, 1))

        letters = [self._rng.choice(VOWELS) for _ in range(vowel_count)]
        weights = [LETTER_FREQUENCY[c] for c in CONSONANTS]
        letters.extend(self._rng.choices(CONSONANTS, weights=weights, k=count - vowel_count))
        self._rng.shuffle(letters)
        return letters

    def generate_themed(self, count: int, theme: str) -> List[str]:
        """Themed pool (`vowel_heavy`, `consonant_heavy`); `balanced` runs the solvable path."""
        if theme == "balanced":
            return self.generate(count)
        return self.sample(count, theme=theme)

    def shuffle(self, letters: List[str]) -> List[str]:
        """Return the same multiset of letters in a new order."""
        shuffled = list(letters)
        self._rng.shuffle(shuffled)
        return shuffled


def letter_distribution(letters: List[str]) -> Dict[str, int]:
    """Count of each letter in a pool, sorted by letter."""
    summary: Dict[str, int] = {}
    for tile in letters:
        summary[tile] = summary.get(tile, 0) + 1
    return dict(sorted(summary.items()))
