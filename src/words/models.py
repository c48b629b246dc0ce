"""Data models for word validation."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel


class ValidationFailure(str, Enum):
    """Reasons a submitted word can be rejected, in check order."""
    TOO_SHORT = "TOO_SHORT"
    ALREADY_FOUND = "ALREADY_FOUND"
    INSUFFICIENT_LETTERS = "INSUFFICIENT_LETTERS"
    NOT_IN_DICTIONARY = "NOT_IN_DICTIONARY"


FAILURE_MESSAGES = {
    ValidationFailure.TOO_SHORT: "Word must be at least {min_length} letters long",
    ValidationFailure.ALREADY_FOUND: "Word already found",
    ValidationFailure.INSUFFICIENT_LETTERS: "Cannot form word with available letters",
    ValidationFailure.NOT_IN_DICTIONARY: "Word not found in dictionary",
}


class ValidationResult(BaseModel):
    """Result of validating a single word against a letter pool."""
    is_valid: bool
    word: str = ""
    reason: Optional[ValidationFailure] = None
    message: str = ""

    @classmethod
    def ok(cls, word: str) -> "ValidationResult":
        return cls(is_valid=True, word=word)

    @classmethod
    def fail(cls, word: str, reason: ValidationFailure, min_length: int = 0) -> "ValidationResult":
        message = FAILURE_MESSAGES[reason].format(min_length=min_length)
        return cls(is_valid=False, word=word, reason=reason, message=message)
