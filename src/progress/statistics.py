"""Lifetime game statistics."""

from typing import Optional
from pydantic import BaseModel

from ..engine.models import GameSession
from .store import GAME_STATS_KEY, KeyValueStore, PersistentTracker


class GameStats(BaseModel):
    total_games_played: int = 0
    total_words_found: int = 0
    total_score: int = 0
    best_score: int = 0
    longest_word: str = ""

    @property
    def average_score(self) -> float:
        if self.total_games_played == 0:
            return 0.0
        return self.total_score / self.total_games_played


class StatisticsTracker(PersistentTracker):
    key = GAME_STATS_KEY

    def __init__(self, store: Optional[KeyValueStore] = None):
        super().__init__(store)
        self.stats = GameStats()

    def record_game(self, session: GameSession) -> GameStats:
        """Fold a finished session into the lifetime totals."""
        stats = self.stats
        longest = session.longest_word
        longest_text = longest.text if longest else ""
        self.stats = GameStats(
            total_games_played=stats.total_games_played + 1,
            total_words_found=stats.total_words_found + len(session.found_words),
            total_score=stats.total_score + session.total_score,
            best_score=max(stats.best_score, session.total_score),
            longest_word=longest_text if len(longest_text) > len(stats.longest_word) else stats.longest_word,
        )
        self.persist()
        return self.stats

    def reset_defaults(self) -> None:
        self.stats = GameStats()

    def to_blob(self) -> dict:
        blob = self.stats.model_dump(mode="json")
        blob["average_score"] = self.stats.average_score
        return blob

    def from_blob(self, blob: dict) -> None:
        blob = {k: v for k, v in blob.items() if k != "average_score"}
        self.stats = GameStats.model_validate(blob)
