"""
Pydantic models for the game engine.

This module contains the data models (difficulty tiers, settings, words, sessions,
power-up configuration) shared by the engine and the progress trackers. The logic
classes (SessionStateMachine, ComboTracker, ScoringEngine, PowerUpEffectManager)
live in their own modules.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Dict, List, NamedTuple, Optional
from pydantic import BaseModel, ConfigDict, Field

from ..words.models import ValidationFailure


class DifficultyConfig(NamedTuple):
    """Tile count, grid shape, time limit and minimum word length of a tier."""
    letter_count: int
    grid_columns: int
    time_limit_seconds: int
    min_word_length: int


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def config(self) -> DifficultyConfig:
        return DIFFICULTY_CONFIGS[self]

    @property
    def letter_count(self) -> int:
        return self.config.letter_count

    @property
    def grid_columns(self) -> int:
        return self.config.grid_columns

    @property
    def time_limit_seconds(self) -> int:
        return self.config.time_limit_seconds

    @property
    def min_word_length(self) -> int:
        return self.config.min_word_length

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


# Time limits are tunable; the other columns are fixed by the tile grid
DIFFICULTY_CONFIGS: Dict[Difficulty, DifficultyConfig] = {
    Difficulty.EASY: DifficultyConfig(9, 3, 90, 3),
    Difficulty.MEDIUM: DifficultyConfig(12, 4, 120, 3),
    Difficulty.HARD: DifficultyConfig(15, 5, 150, 4),
}


class GameState(str, Enum):
    NOT_STARTED = "not_started"
    PLAYING = "playing"
    PAUSED = "paused"
    FINISHED = "finished"


class GameSettings(BaseModel):
    """Player settings and mode flags for a session."""
    model_config = ConfigDict(frozen=True)

    difficulty: Difficulty = Difficulty.MEDIUM
    player_name: str = "Player"
    sound_enabled: bool = True
    vibration_enabled: bool = True
    show_hints: bool = True
    # Adds each word's final score to the timer, in seconds
    score_time_bonus: bool = False
    # Challenge mode
    is_challenge_mode: bool = False
    challenge_id: Optional[str] = None
    target_score: Optional[int] = Field(None, ge=0)
    target_words: Optional[int] = Field(None, ge=0)
    time_limit_override: Optional[int] = Field(None, gt=0)

    @property
    def time_limit(self) -> int:
        return self.time_limit_override or self.difficulty.time_limit_seconds


# Thresholds for long words, quick finds and perfect games
LONG_WORD_LENGTH = 8
QUICK_FIND_SECONDS = 5.0
PERFECT_GAME_MIN_WORDS = 5


class Word(BaseModel):
    """A word found by the player. Only created by a successful validation."""
    model_config = ConfigDict(frozen=True)

    text: str = Field(..., min_length=1, pattern=r'^[A-Z]+$')
    letter_indices: List[int] = Field(default_factory=list)
    score: int = Field(0, ge=0)
    found_at: datetime = Field(default_factory=datetime.now)
    time_to_find: float = Field(0.0, ge=0.0)  # seconds since the previous find

    @property
    def is_long_word(self) -> bool:
        return len(self.text) >= LONG_WORD_LENGTH

    @property
    def is_quick_find(self) -> bool:
        return 0 < self.time_to_find < QUICK_FIND_SECONDS


def new_session_id() -> str:
    return uuid.uuid4().hex[:12]


class GameSession(BaseModel):
    """
    Immutable snapshot of a game session.

    The engine produces a new snapshot on every operation; trackers receive
    the finished snapshot read-only.

    Attributes:
        letters: The letter pool, length fixed by difficulty
        found_words: Accepted words in the order they were found
        time_remaining: Whole seconds left on the countdown
        selected_indices: Tiles selected for the word in progress
        current_input: Letters of the selected tiles, in selection order
        invalid_attempts: Rejected submissions (cleared by clear-mistakes)
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_session_id)
    letters: List[str] = Field(default_factory=list)
    found_words: List[Word] = Field(default_factory=list)
    settings: GameSettings = Field(default_factory=GameSettings)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    state: GameState = GameState.NOT_STARTED
    time_remaining: int = Field(0, ge=0)
    selected_indices: List[int] = Field(default_factory=list)
    current_input: str = ""
    invalid_attempts: int = Field(0, ge=0)
    hints_used: int = Field(0, ge=0)
    power_ups_used: int = Field(0, ge=0)
    max_combo_level: int = Field(0, ge=0)

    @property
    def difficulty(self) -> Difficulty:
        return self.settings.difficulty

    @property
    def total_score(self) -> int:
        return sum(word.score for word in self.found_words)

    @property
    def found_texts(self) -> List[str]:
        return [word.text for word in self.found_words]

    @property
    def longest_word(self) -> Optional[Word]:
        if not self.found_words:
            return None
        # First found wins among equal lengths
        return max(self.found_words, key=lambda w: len(w.text))

    @property
    def words_by_length(self) -> Dict[int, List[Word]]:
        grouped: Dict[int, List[Word]] = {}
        for word in self.found_words:
            grouped.setdefault(len(word.text), []).append(word)
        return grouped

    @property
    def duration_seconds(self) -> float:
        if self.start_time is None:
            return 0.0
        end = self.end_time or datetime.now()
        return max((end - self.start_time).total_seconds(), 0.0)

    @property
    def is_active(self) -> bool:
        return self.state in (GameState.PLAYING, GameState.PAUSED)

    @property
    def is_finished(self) -> bool:
        return self.state == GameState.FINISHED

    @property
    def is_perfect(self) -> bool:
        """Finished with at least five words and no rejected submissions."""
        return self.is_finished and len(self.found_words) >= PERFECT_GAME_MIN_WORDS and self.invalid_attempts == 0


class SubmissionResult(BaseModel):
    """Outcome of submitting the current input."""
    success: bool
    session: GameSession
    word: Optional[Word] = None
    reason: Optional[ValidationFailure] = None
    message: str = ""
    combo_level: int = 0
    multiplier: float = 1.0
    level_up: bool = False
    time_bonus: int = 0


class PowerUpType(str, Enum):
    TIME_FREEZE = "time_freeze"
    EXTRA_TIME = "extra_time"
    WORD_HINT = "word_hint"
    LETTER_SHUFFLE = "letter_shuffle"
    DOUBLE_POINTS = "double_points"
    COMBO_BOOST = "combo_boost"
    CLEAR_MISTAKES = "clear_mistakes"
    XRAY_VISION = "xray_vision"


class PowerUpConfig(BaseModel):
    """Static configuration of a power-up type."""
    model_config = ConfigDict(frozen=True)

    type: PowerUpType
    name: str
    description: str
    cost: int = Field(..., ge=0)
    duration: int = Field(0, ge=0)  # seconds, 0 = instant
    charges: Optional[int] = None  # uses before the effect is consumed

    @property
    def is_instant(self) -> bool:
        return self.duration == 0


POWER_UP_CONFIGS: Dict[PowerUpType, PowerUpConfig] = {
    PowerUpType.TIME_FREEZE: PowerUpConfig(
        type=PowerUpType.TIME_FREEZE, name="Time Freeze",
        description="Freeze the timer for 10 seconds", cost=50, duration=10,
    ),
    PowerUpType.EXTRA_TIME: PowerUpConfig(
        type=PowerUpType.EXTRA_TIME, name="Extra Time",
        description="Add 30 seconds to the timer", cost=75,
    ),
    PowerUpType.WORD_HINT: PowerUpConfig(
        type=PowerUpType.WORD_HINT, name="Word Hint",
        description="Reveal a valid word you can make", cost=30,
    ),
    PowerUpType.LETTER_SHUFFLE: PowerUpConfig(
        type=PowerUpType.LETTER_SHUFFLE, name="Letter Shuffle",
        description="Shuffle letters for new combinations", cost=25,
    ),
    PowerUpType.DOUBLE_POINTS: PowerUpConfig(
        type=PowerUpType.DOUBLE_POINTS, name="Double Points",
        description="2x points for the next 3 words", cost=100, duration=60, charges=3,
    ),
    PowerUpType.COMBO_BOOST: PowerUpConfig(
        type=PowerUpType.COMBO_BOOST, name="Combo Boost",
        description="Start your next combo at level 2", cost=80, duration=30, charges=1,
    ),
    PowerUpType.CLEAR_MISTAKES: PowerUpConfig(
        type=PowerUpType.CLEAR_MISTAKES, name="Clear Mistakes",
        description="Remove penalty from invalid attempts", cost=40,
    ),
    PowerUpType.XRAY_VISION: PowerUpConfig(
        type=PowerUpType.XRAY_VISION, name="X-Ray Vision",
        description="Highlight possible word patterns", cost=120, duration=15,
    ),
}

EXTRA_TIME_SECONDS = 30
XRAY_WORD_COUNT = 5


class PowerUpActivation(BaseModel):
    """Outcome of activating a power-up during a session."""
    type: PowerUpType
    accepted: bool
    session: GameSession
    hints: List[str] = Field(default_factory=list)
    time_added: int = 0
    message: str = ""
