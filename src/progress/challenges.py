"""
Daily challenges and completion streaks.

A challenge is derived deterministically from its date: the same date
always produces the same challenge, on any machine.
"""

import logging
import random
import datetime as dt
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, List, Optional
from pydantic import BaseModel, Field

from ..engine.models import Difficulty, GameSession, GameSettings
from .store import CHALLENGE_PROGRESS_KEY, KeyValueStore, PersistentTracker

logger = logging.getLogger(__name__)

STREAK_BASE_REWARD = 50
STREAK_DAY_BONUS = 10
STREAK_MAX_BONUS = 200

THEME_WORDS: Dict[str, FrozenSet[str]] = {
    "ANIMALS": frozenset({
        "CAT", "DOG", "BIRD", "FISH", "BEAR", "LION", "TIGER", "WOLF", "FOX", "DEER",
        "ELEPHANT", "GIRAFFE", "PENGUIN", "DOLPHIN", "BUTTERFLY",
    }),
    "FOOD": frozenset({
        "APPLE", "BREAD", "CAKE", "FISH", "MEAT", "RICE", "SOUP", "MILK", "EGG", "CHEESE",
        "PIZZA", "BURGER", "SPAGHETTI", "CHOCOLATE", "SANDWICH",
    }),
    "COLORS": frozenset({
        "RED", "BLUE", "GREEN", "YELLOW", "BLACK", "WHITE", "PINK", "BROWN", "GRAY", "ORANGE",
        "VIOLET", "CRIMSON", "TURQUOISE", "MAGENTA", "INDIGO",
    }),
    "NATURE": frozenset({
        "TREE", "FLOWER", "GRASS", "ROCK", "WATER", "WIND", "FIRE", "EARTH", "SKY", "CLOUD",
        "MOUNTAIN", "FOREST", "OCEAN", "RAINBOW", "WATERFALL",
    }),
    "SPORTS": frozenset({
        "BALL", "GAME", "TEAM", "WIN", "PLAY", "RUN", "JUMP", "KICK", "THROW", "CATCH",
        "FOOTBALL", "BASKETBALL", "TENNIS", "SWIMMING", "BASEBALL",
    }),
}


class ChallengeType(str, Enum):
    WORD_COUNT = "word_count"
    TIME_LIMIT = "time_limit"
    LONG_WORDS = "long_words"
    NO_HINTS = "no_hints"
    PERFECT_SCORE = "perfect_score"
    SPEED_RUN = "speed_run"
    THEME_WORDS = "theme_words"


class DailyChallenge(BaseModel):
    id: str
    type: ChallengeType
    title: str
    description: str
    parameters: Dict[str, Any] = Field(default_factory=dict)
    target: int = Field(..., ge=1)
    reward_points: int = Field(..., ge=0)
    date: dt.date
    difficulty: Difficulty = Difficulty.MEDIUM


def date_seed(day: dt.date) -> int:
    return day.year * 10000 + day.month * 100 + day.day


def _word_count(rng: random.Random) -> dict:
    target_words = rng.randint(8, 14)
    return dict(title="Word Hunter",
                description=f"Find {target_words} words in a single game",
                parameters={"target_words": target_words},
                target=target_words, reward_points=target_words * 10)


def _time_limit(rng: random.Random) -> dict:
    time_limit = rng.randint(45, 75)
    return dict(title="Speed Challenge",
                description=f"Find 5+ words in under {time_limit} seconds",
                parameters={"time_limit": time_limit, "min_words": 5},
                target=5, reward_points=150)


def _long_words(rng: random.Random) -> dict:
    min_length = rng.randint(6, 8)
    target_count = rng.randint(2, 3)
    return dict(title="Long Word Master",
                description=f"Find {target_count} words with {min_length}+ letters",
                parameters={"min_length": min_length, "target_count": target_count},
                target=target_count, reward_points=min_length * target_count * 20)


def _no_hints(rng: random.Random) -> dict:
    return dict(title="No Help Needed",
                description="Find 6+ words without using hints",
                parameters={"min_words": 6},
                target=6, reward_points=200)


def _perfect_score(rng: random.Random) -> dict:
    return dict(title="Perfect Game",
                description="Complete a game with no invalid word attempts",
                parameters={"min_words": 5},
                target=5, reward_points=250)


def _speed_run(rng: random.Random) -> dict:
    max_time = round(3.0 + rng.random() * 2.0, 1)
    return dict(title="Lightning Fast",
                description=f"Find 3 words in under {max_time:.1f} seconds each",
                parameters={"max_time_per_word": max_time, "target_words": 3},
                target=3, reward_points=180)


def _theme_words(rng: random.Random) -> dict:
    theme = rng.choice(sorted(THEME_WORDS))
    return dict(title="Theme Master",
                description=f"Find 3 words related to: {theme}",
                parameters={"theme": theme, "target_words": 3},
                target=3, reward_points=300)


CHALLENGE_BUILDERS: Dict[ChallengeType, Callable[[random.Random], dict]] = {
    ChallengeType.WORD_COUNT: _word_count,
    ChallengeType.TIME_LIMIT: _time_limit,
    ChallengeType.LONG_WORDS: _long_words,
    ChallengeType.NO_HINTS: _no_hints,
    ChallengeType.PERFECT_SCORE: _perfect_score,
    ChallengeType.SPEED_RUN: _speed_run,
    ChallengeType.THEME_WORDS: _theme_words,
}


def _long_word_count(challenge: DailyChallenge, session: GameSession) -> int:
    min_length = challenge.parameters.get("min_length", 6)
    return sum(1 for w in session.found_words if len(w.text) >= min_length)


def _fast_word_count(challenge: DailyChallenge, session: GameSession) -> int:
    max_time = challenge.parameters.get("max_time_per_word", 5.0)
    return sum(1 for w in session.found_words if w.time_to_find <= max_time)


def _theme_word_count(challenge: DailyChallenge, session: GameSession) -> int:
    theme = THEME_WORDS.get(challenge.parameters.get("theme", ""), frozenset())
    return sum(1 for w in session.found_words if w.text in theme)


# Progress a finished session makes toward a challenge
PROGRESS_RULES: Dict[ChallengeType, Callable[[DailyChallenge, GameSession], int]] = {
    ChallengeType.WORD_COUNT: lambda c, s: len(s.found_words),
    ChallengeType.TIME_LIMIT: lambda c, s: len(s.found_words),
    ChallengeType.LONG_WORDS: _long_word_count,
    ChallengeType.NO_HINTS: lambda c, s: len(s.found_words) if s.hints_used == 0 else 0,
    ChallengeType.PERFECT_SCORE: lambda c, s: len(s.found_words) if s.invalid_attempts == 0 else 0,
    ChallengeType.SPEED_RUN: _fast_word_count,
    ChallengeType.THEME_WORDS: _theme_word_count,
}

for _table in (CHALLENGE_BUILDERS, PROGRESS_RULES):
    _missing = set(ChallengeType) - set(_table)
    if _missing:
        raise RuntimeError(f"Challenge types missing from table: {sorted(c.value for c in _missing)}")


def generate_for_date(day: dt.date) -> DailyChallenge:
    """
    Build the challenge for a calendar date.

    Args:
        day: The date (a datetime is truncated to its date)

    Returns:
        The same DailyChallenge for the same date, every time
    """
    if isinstance(day, dt.datetime):
        day = day.date()
    rng = random.Random(date_seed(day))
    challenge_type = rng.choice(list(ChallengeType))
    fields = CHALLENGE_BUILDERS[challenge_type](rng)
    return DailyChallenge(
        id=f"daily_{day.year}_{day.month}_{day.day}",
        type=challenge_type,
        date=day,
        **fields,
    )


def generate_week(start: dt.date) -> List[DailyChallenge]:
    """Challenges for the seven days beginning at `start`."""
    return [generate_for_date(start + dt.timedelta(days=i)) for i in range(7)]


def settings_for(challenge: DailyChallenge, base: Optional[GameSettings] = None) -> GameSettings:
    """Challenge-mode settings derived from the player's settings."""
    base = base or GameSettings()
    return base.model_copy(update={
        "difficulty": challenge.difficulty,
        "is_challenge_mode": True,
        "challenge_id": challenge.id,
        "target_words": challenge.target,
        "target_score": None,
        "time_limit_override": challenge.parameters.get("time_limit"),
    })


def evaluate(challenge: DailyChallenge, session: GameSession) -> int:
    return PROGRESS_RULES[challenge.type](challenge, session)


class ChallengeTracker(PersistentTracker):
    """
    Completion records and the daily streak.

    Attributes:
        completed: Challenge ids marked complete
        progress: Best progress seen per challenge id
        streak: Consecutive days with a completed challenge
        last_completion: Date of the most recent completion
        last_reward_claim: Date the streak reward was last claimed
    """

    key = CHALLENGE_PROGRESS_KEY

    def __init__(self, store: Optional[KeyValueStore] = None):
        super().__init__(store)
        self.reset_defaults()

    def is_completed(self, challenge_id: str) -> bool:
        return challenge_id in self.completed

    def progress_for(self, challenge_id: str) -> int:
        return self.progress.get(challenge_id, 0)

    def completion_percentage(self, challenge: DailyChallenge) -> float:
        if challenge.target <= 0:
            return 0.0
        return min(max(self.progress_for(challenge.id) / challenge.target, 0.0), 1.0)

    def update_progress(
        self,
        session: GameSession,
        challenge: Optional[DailyChallenge] = None,
        today: Optional[dt.date] = None,
    ) -> bool:
        """
        Record a finished challenge-mode session.

        With `challenge` the progress rule of its type is used; without it
        progress is the score (when the settings carry a target score) or
        the word count.

        Args:
            session: The finished session
            challenge: The challenge that was played, if known
            today: Completion date (defaults to today)

        Returns:
            True if this session completed the challenge for the first time
        """
        settings = session.settings
        if not settings.is_challenge_mode or not settings.challenge_id:
            return False

        challenge_id = settings.challenge_id
        if challenge is not None:
            progress = evaluate(challenge, session)
            target = challenge.target
        elif settings.target_score is not None:
            progress = session.total_score
            target = settings.target_score
        elif settings.target_words is not None:
            progress = len(session.found_words)
            target = settings.target_words
        else:
            return False

        self.progress[challenge_id] = max(self.progress.get(challenge_id, 0), progress)

        newly_completed = progress >= target and challenge_id not in self.completed
        if newly_completed:
            self.completed.add(challenge_id)
            self._update_streak(today or dt.date.today())
            logger.info("Challenge %s completed, streak %s", challenge_id, self.streak)

        self.persist()
        return newly_completed

    def _update_streak(self, today: dt.date) -> None:
        if self.last_completion is None:
            self.streak = 1
        else:
            days = (today - self.last_completion).days
            if days == 0:
                return
            self.streak = self.streak + 1 if days == 1 else 1
        self.last_completion = today

    def can_claim_daily_reward(self, today: Optional[dt.date] = None) -> bool:
        today = today or dt.date.today()
        return (
            self.last_completion == today
            and self.streak > 0
            and self.last_reward_claim != today
        )

    def claim_daily_reward(self, today: Optional[dt.date] = None) -> int:
        """
        Claim the streak reward for today.

        Returns:
            Coins to credit, or 0 when nothing is claimable
        """
        today = today or dt.date.today()
        if not self.can_claim_daily_reward(today):
            return 0
        self.last_reward_claim = today
        self.persist()
        return self.streak_reward_coins()

    def streak_reward_coins(self) -> int:
        if self.streak <= 0:
            return 0
        bonus = min((self.streak - 1) * STREAK_DAY_BONUS, STREAK_MAX_BONUS)
        return STREAK_BASE_REWARD + bonus

    def reset_defaults(self) -> None:
        self.completed = set()
        self.progress: Dict[str, int] = {}
        self.streak = 0
        self.last_completion: Optional[dt.date] = None
        self.last_reward_claim: Optional[dt.date] = None

    def to_blob(self) -> dict:
        return {
            "completed": sorted(self.completed),
            "progress": dict(self.progress),
            "streak": self.streak,
            "last_completion": self.last_completion.isoformat() if self.last_completion else None,
            "last_reward_claim": self.last_reward_claim.isoformat() if self.last_reward_claim else None,
        }

    def from_blob(self, blob: dict) -> None:
        last = blob.get("last_completion")
        self.completed = set(blob.get("completed", []))
        self.progress = {str(k): int(v) for k, v in blob.get("progress", {}).items()}
        self.streak = int(blob.get("streak", 0))
        self.last_completion = dt.date.fromisoformat(last) if last else None
        claimed = blob.get("last_reward_claim")
        self.last_reward_claim = dt.date.fromisoformat(claimed) if claimed else None
