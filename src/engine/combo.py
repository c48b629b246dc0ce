"""Combo streak bookkeeping for consecutive word finds."""

import time
from typing import Callable, List, Optional
from pydantic import BaseModel, Field


COMBO_WINDOW_SECONDS = 10.0
COMBO_MAX_LEVEL = 6
COMBO_BASE_MULTIPLIER = 1.0
COMBO_INCREMENT_PER_LEVEL = 0.25
COMBO_MAX_MULTIPLIER = 2.5

LEVEL_DESCRIPTIONS = {
    1: "Getting Started",
    2: "Nice Streak!",
    3: "Great Combo!",
    4: "Amazing Chain!",
    5: "Incredible Streak!",
    6: "LEGENDARY COMBO!",
}


def multiplier_for_level(level: int) -> float:
    """Multiplier for a combo level; level 0 or 1 is the base multiplier."""
    if level <= 1:
        return COMBO_BASE_MULTIPLIER
    multiplier = COMBO_BASE_MULTIPLIER + (level - 1) * COMBO_INCREMENT_PER_LEVEL
    return min(multiplier, COMBO_MAX_MULTIPLIER)


class ComboStreak(BaseModel):
    """Current streak state."""
    words_in_streak: int = 0
    level: int = 0
    multiplier: float = COMBO_BASE_MULTIPLIER
    last_word_time: Optional[float] = None
    words: List[str] = Field(default_factory=list)

    @property
    def description(self) -> str:
        return LEVEL_DESCRIPTIONS.get(self.level, "Combo")


class ComboTracker:
    """
    Tracks word-find streaks within a rolling time window.

    A word found within `window` seconds of the previous one extends the
    streak; otherwise a new streak starts at one word.

    Attributes:
        window: Seconds allowed between finds to keep the streak
        streak: Current streak state
        best_level: Highest level reached since the last reset
    """

    def __init__(
        self,
        window: float = COMBO_WINDOW_SECONDS,
        max_level: int = COMBO_MAX_LEVEL,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.window = window
        self.max_level = max_level
        self._clock = clock
        self.streak = ComboStreak()
        self.best_level = 0
        self.completed: List[ComboStreak] = []

    @property
    def multiplier(self) -> float:
        return self.streak.multiplier

    @property
    def level(self) -> int:
        return self.streak.level

    def has_active_combo(self, now: Optional[float] = None) -> bool:
        """True while a streak exists and the window has not elapsed."""
        if self.streak.words_in_streak <= 0 or self.streak.last_word_time is None:
            return False
        now = self._clock() if now is None else now
        return now - self.streak.last_word_time <= self.window

    def add_word(self, word: str, now: Optional[float] = None, boost: bool = False) -> bool:
        """
        Record an accepted word.

        Args:
            word: The accepted word
            now: Time of the find (defaults to the tracker clock)
            boost: Start a new streak at two words instead of one

        Returns:
            True if the combo level went up
        """
        now = self._clock() if now is None else now
        previous_level = self.streak.level

        if self.has_active_combo(now):
            words_in_streak = self.streak.words_in_streak + 1
            words = self.streak.words + [word]
        else:
            if self.streak.words_in_streak > 0:
                self.completed.append(self.streak)
            words_in_streak = 2 if boost else 1
            words = [word]
            previous_level = 0

        level = min(words_in_streak, self.max_level)
        self.streak = ComboStreak(
            words_in_streak=words_in_streak,
            level=level,
            multiplier=multiplier_for_level(level),
            last_word_time=now,
            words=words,
        )
        self.best_level = max(self.best_level, level)
        return level > max(previous_level, 1)

    def reset(self) -> None:
        """Clear the streak and history (session start/end)."""
        self.streak = ComboStreak()
        self.best_level = 0
        self.completed = []
