"""Dictionary, word validation and letter pools."""

from .models import ValidationFailure, ValidationResult
from .validator import WordValidator, can_form_word, letter_counts
from .letters import LetterPoolGenerator, LETTER_FREQUENCY, VOWELS, letter_distribution
from .data import Dictionary, get_default_dictionary, check_word

__all__ = [
    # Validation
    "WordValidator",
    "can_form_word",
    "letter_counts",
    # Models
    "ValidationFailure",
    "ValidationResult",
    # Letter pools
    "LetterPoolGenerator",
    "LETTER_FREQUENCY",
    "VOWELS",
    "letter_distribution",
    # Dictionary
    "Dictionary",
    "get_default_dictionary",
    "check_word",
]
