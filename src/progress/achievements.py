"""
Achievement unlocking.

Lifetime statistics (total words, longest word, fastest find, perfect
games, best words in one game) are updated from found words and finished
sessions. Each achievement's progress is recomputed from those statistics
and unlocks once progress reaches its target. Unlocks are permanent.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, List, NamedTuple, Optional
from pydantic import BaseModel, Field

from ..engine.models import GameSession, Word
from .store import (
    ACHIEVEMENTS_KEY,
    PLAYER_STATISTICS_KEY,
    KeyValueStore,
    PersistentTracker,
    load_blob,
    save_blob,
)

logger = logging.getLogger(__name__)

class AchievementType(str, Enum):
    FIRST_WORD = "first_word"
    WORD_MASTER = "word_master"
    SPEED_DEMON = "speed_demon"
    DICTIONARY = "dictionary"
    PERFECT_GAME = "perfect_game"
    TIME_CHALLENGER = "time_challenger"

    @property
    def info(self) -> "AchievementInfo":
        return ACHIEVEMENT_INFO[self]

    @property
    def display_name(self) -> str:
        return self.info.display_name

    @property
    def description(self) -> str:
        return self.info.description

    @property
    def points(self) -> int:
        return self.info.points

    @property
    def target(self) -> int:
        return self.info.target


class AchievementInfo(NamedTuple):
    display_name: str
    description: str
    points: int
    target: int


ACHIEVEMENT_INFO: Dict[AchievementType, AchievementInfo] = {
    AchievementType.FIRST_WORD: AchievementInfo(
        "First Word", "Find your first word", 50, 1),
    AchievementType.WORD_MASTER: AchievementInfo(
        "Word Master", "Find 100 words total", 500, 100),
    AchievementType.SPEED_DEMON: AchievementInfo(
        "Speed Demon", "Find a word in less than 5 seconds", 100, 1),
    AchievementType.DICTIONARY: AchievementInfo(
        "Dictionary", "Find a word with 8+ letters", 200, 1),
    AchievementType.PERFECT_GAME: AchievementInfo(
        "Perfect Game", "Complete a game without wrong attempts", 300, 1),
    AchievementType.TIME_CHALLENGER: AchievementInfo(
        "Time Challenger", "Find 10 words in a single game", 150, 10),
}


class PlayerStatistics(BaseModel):
    """Lifetime counters the achievements are computed from."""
    total_words_found: int = 0
    longest_word_length: int = 0
    fastest_word_time: Optional[float] = None
    quick_finds: int = 0
    long_words_found: int = 0
    perfect_games: int = 0
    best_words_in_game: int = 0


# Progress of each achievement derived from the lifetime statistics
PROGRESS_RULES: Dict[AchievementType, Callable[[PlayerStatistics], int]] = {
    AchievementType.FIRST_WORD: lambda s: min(s.total_words_found, 1),
    AchievementType.WORD_MASTER: lambda s: s.total_words_found,
    AchievementType.SPEED_DEMON: lambda s: min(s.quick_finds, 1),
    AchievementType.DICTIONARY: lambda s: min(s.long_words_found, 1),
    AchievementType.PERFECT_GAME: lambda s: s.perfect_games,
    AchievementType.TIME_CHALLENGER: lambda s: s.best_words_in_game,
}

for _table in (ACHIEVEMENT_INFO, PROGRESS_RULES):
    _missing = set(AchievementType) - set(_table)
    if _missing:
        raise RuntimeError(f"Achievements missing from table: {sorted(a.value for a in _missing)}")


class Achievement(BaseModel):
    type: AchievementType
    progress: int = 0
    target: int
    unlocked: bool = False
    unlocked_at: Optional[datetime] = None

    @property
    def progress_percentage(self) -> float:
        if self.target <= 0:
            return 1.0
        return min(max(self.progress / self.target, 0.0), 1.0)

    @classmethod
    def default(cls, achievement_type: AchievementType) -> "Achievement":
        return cls(type=achievement_type, target=achievement_type.target)


class AchievementTracker(PersistentTracker):
    """
    Tracks lifetime statistics and the achievements derived from them.

    Attributes:
        statistics: Lifetime counters
        achievements: One Achievement per AchievementType
    """

    key = ACHIEVEMENTS_KEY
    statistics_key = PLAYER_STATISTICS_KEY

    def __init__(self, store: Optional[KeyValueStore] = None):
        super().__init__(store)
        self.statistics = PlayerStatistics()
        self.achievements: Dict[AchievementType, Achievement] = {}
        self._newly_unlocked: List[Achievement] = []
        self.reset_defaults()

    @property
    def newly_unlocked(self) -> List[Achievement]:
        return list(self._newly_unlocked)

    @property
    def unlocked(self) -> List[Achievement]:
        return [a for a in self.achievements.values() if a.unlocked]

    @property
    def locked(self) -> List[Achievement]:
        return [a for a in self.achievements.values() if not a.unlocked]

    @property
    def total_points(self) -> int:
        return sum(a.type.points for a in self.unlocked)

    def get(self, achievement_type: AchievementType) -> Achievement:
        return self.achievements[achievement_type]

    def track_word_found(self, word: Word) -> List[Achievement]:
        """
        Update statistics for an accepted word.

        Returns:
            Achievements unlocked by this word
        """
        stats = self.statistics
        fastest = stats.fastest_word_time
        if word.time_to_find > 0 and (fastest is None or word.time_to_find < fastest):
            fastest = word.time_to_find
        self.statistics = stats.model_copy(update={
            "total_words_found": stats.total_words_found + 1,
            "longest_word_length": max(stats.longest_word_length, len(word.text)),
            "fastest_word_time": fastest,
            "quick_finds": stats.quick_finds + int(word.is_quick_find),
            "long_words_found": stats.long_words_found + int(word.is_long_word),
        })
        unlocked = self._refresh()
        self.persist()
        return unlocked

    def track_game_completed(self, session: GameSession) -> List[Achievement]:
        """Update per-game statistics from a finished session."""
        stats = self.statistics
        self.statistics = stats.model_copy(update={
            "perfect_games": stats.perfect_games + int(session.is_perfect),
            "best_words_in_game": max(stats.best_words_in_game, len(session.found_words)),
        })
        unlocked = self._refresh()
        self.persist()
        return unlocked

    def _refresh(self) -> List[Achievement]:
        unlocked = []
        for achievement_type, rule in PROGRESS_RULES.items():
            achievement = self.achievements[achievement_type]
            if achievement.unlocked:
                continue
            progress = min(rule(self.statistics), achievement.target)
            if progress >= achievement.target:
                achievement = achievement.model_copy(update={
                    "progress": achievement.target,
                    "unlocked": True,
                    "unlocked_at": datetime.now(),
                })
                self._newly_unlocked.append(achievement)
                unlocked.append(achievement)
                logger.info("Achievement unlocked: %s", achievement_type.display_name)
            else:
                achievement = achievement.model_copy(update={"progress": progress})
            self.achievements[achievement_type] = achievement
        return unlocked

    def drain_newly_unlocked(self) -> List[Achievement]:
        """Return and clear achievements unlocked since the last drain."""
        drained = self._newly_unlocked
        self._newly_unlocked = []
        return drained

    def reset(self) -> None:
        self.reset_defaults()
        self.persist()

    def reset_defaults(self) -> None:
        self.statistics = PlayerStatistics()
        self.achievements = {t: Achievement.default(t) for t in AchievementType}
        self._newly_unlocked = []

    def to_blob(self) -> dict:
        return {"achievements": [a.model_dump(mode="json") for a in self.achievements.values()]}

    def from_blob(self, blob: dict) -> None:
        achievements = {t: Achievement.default(t) for t in AchievementType}
        for item in blob.get("achievements", []):
            achievement = Achievement.model_validate(item)
            achievements[achievement.type] = achievement
        self.achievements = achievements
        self._newly_unlocked = []

    async def load(self) -> None:
        await super().load()
        blob = await load_blob(self.store, self.statistics_key)
        try:
            self.statistics = PlayerStatistics.model_validate(blob or {})
        except Exception as e:
            logger.warning("Corrupt %r blob, using defaults: %s", self.statistics_key, e)
            self.statistics = PlayerStatistics()

    async def save(self) -> bool:
        saved = await super().save()
        stats_saved = await save_blob(
            self.store, self.statistics_key, self.statistics.model_dump(mode="json")
        )
        return saved and stats_saved
