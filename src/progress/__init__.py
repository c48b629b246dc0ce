"""Durable player progress: high scores, achievements, challenges, stats, inventory."""

from .store import (
    KeyValueStore,
    JsonFileStore,
    MemoryStore,
    PersistentTracker,
    STORE_KEYS,
)
from .high_scores import HighScore, HighScoreLedger, MAX_HIGH_SCORES
from .achievements import (
    Achievement,
    AchievementTracker,
    AchievementType,
    PlayerStatistics,
)
from .challenges import (
    ChallengeTracker,
    ChallengeType,
    DailyChallenge,
    generate_for_date,
    generate_week,
    settings_for,
)
from .statistics import GameStats, StatisticsTracker
from .inventory import PowerUpInventory, coins_for_game
from .settings import SettingsStore
from .recorder import GameReport, ProgressRecorder

__all__ = [
    "KeyValueStore",
    "JsonFileStore",
    "MemoryStore",
    "PersistentTracker",
    "STORE_KEYS",
    "HighScore",
    "HighScoreLedger",
    "MAX_HIGH_SCORES",
    "Achievement",
    "AchievementTracker",
    "AchievementType",
    "PlayerStatistics",
    "ChallengeTracker",
    "ChallengeType",
    "DailyChallenge",
    "generate_for_date",
    "generate_week",
    "settings_for",
    "GameStats",
    "StatisticsTracker",
    "PowerUpInventory",
    "coins_for_game",
    "SettingsStore",
    "GameReport",
    "ProgressRecorder",
]
