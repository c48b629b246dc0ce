"""Shared fixtures: a small dictionary, a fixed letter pool and a manual clock."""

import random

import pytest

from src.engine import Difficulty, GameSettings, SessionStateMachine
from src.words import Dictionary, LetterPoolGenerator, WordValidator

# Nine tiles, the Easy pool size
POOL = list("CATEDONRS")

WORDS = ["CAT", "ACT", "TEA", "EAT", "ATE", "DONE", "NODE", "ONE", "END", "DEN", "STONE"]


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


class FixedPoolGenerator(LetterPoolGenerator):
    """Always deals the same tiles so sessions are reproducible."""

    def __init__(self, letters, validator):
        super().__init__(validator, rng=random.Random(7))
        self.letters = list(letters)

    def generate(self, letter_count, min_word_length=3):
        return list(self.letters[:letter_count])


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def dictionary():
    return Dictionary(WORDS)


@pytest.fixture
def validator(dictionary):
    return WordValidator(dictionary)


@pytest.fixture
def make_machine(validator, clock):
    """Factory for state machines dealing POOL on Easy."""

    def _make(**settings):
        settings.setdefault("difficulty", Difficulty.EASY)
        return SessionStateMachine(
            settings=GameSettings(**settings),
            validator=validator,
            generator=FixedPoolGenerator(POOL, validator),
            clock=clock,
        )

    return _make


@pytest.fixture
def machine(make_machine):
    """A started Easy session on POOL."""
    m = make_machine()
    m.start()
    return m
