"""High-score ledger: capped, descending score lists per difficulty."""

import logging
from datetime import datetime
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from ..engine.models import Difficulty, GameSession
from .store import HIGH_SCORES_KEY, KeyValueStore, PersistentTracker

logger = logging.getLogger(__name__)

MAX_HIGH_SCORES = 10


class HighScore(BaseModel):
    player_name: str
    score: int = Field(..., ge=0)
    words_found: int = Field(0, ge=0)
    difficulty: Difficulty
    longest_word: str = ""
    achieved_at: datetime = Field(default_factory=datetime.now)
    duration_seconds: float = 0.0

    @classmethod
    def from_session(cls, session: GameSession) -> "HighScore":
        longest = session.longest_word
        return cls(
            player_name=session.settings.player_name,
            score=session.total_score,
            words_found=len(session.found_words),
            difficulty=session.difficulty,
            longest_word=longest.text if longest else "",
            duration_seconds=session.duration_seconds,
        )


class HighScoreLedger(PersistentTracker):
    """
    Top scores per difficulty, at most `cap` entries each.

    Lists are kept sorted by score descending; equal scores keep their
    insertion order, so an earlier entry stays ahead of a later tie.
    """

    key = HIGH_SCORES_KEY

    def __init__(self, store: Optional[KeyValueStore] = None, cap: int = MAX_HIGH_SCORES):
        super().__init__(store)
        self.cap = cap
        self._scores: Dict[Difficulty, List[HighScore]] = {d: [] for d in Difficulty}

    def would_qualify(self, score: int, difficulty: Difficulty) -> bool:
        scores = self._scores[difficulty]
        if len(scores) < self.cap:
            return True
        return score > scores[-1].score

    def add(self, session: GameSession) -> bool:
        """
        Record a finished session if it makes the list for its difficulty.

        Returns:
            True if the score was inserted
        """
        entry = HighScore.from_session(session)
        if not self.would_qualify(entry.score, entry.difficulty):
            return False

        scores = self._scores[entry.difficulty] + [entry]
        # sorted() is stable
        scores = sorted(scores, key=lambda s: s.score, reverse=True)
        self._scores[entry.difficulty] = scores[:self.cap]
        logger.info("New %s high score: %s (%s)", entry.difficulty.value, entry.score, entry.player_name)
        self.persist()
        return True

    def scores_for(self, difficulty: Difficulty) -> List[HighScore]:
        return list(self._scores[difficulty])

    def top_score(self, difficulty: Difficulty) -> Optional[HighScore]:
        scores = self._scores[difficulty]
        return scores[0] if scores else None

    def player_best(self, player_name: str) -> Optional[HighScore]:
        """Best entry for a player across difficulties (case-insensitive)."""
        name = player_name.lower()
        entries = [s for scores in self._scores.values() for s in scores
                   if s.player_name.lower() == name]
        if not entries:
            return None
        return max(entries, key=lambda s: s.score)

    def all_scores(self) -> List[HighScore]:
        return [s for d in Difficulty for s in self._scores[d]]

    def clear(self) -> None:
        self.reset_defaults()
        self.persist()

    def reset_defaults(self) -> None:
        self._scores = {d: [] for d in Difficulty}

    def to_blob(self) -> dict:
        return {
            d.value: [s.model_dump(mode="json") for s in self._scores[d]]
            for d in Difficulty
        }

    def from_blob(self, blob: dict) -> None:
        scores: Dict[Difficulty, List[HighScore]] = {d: [] for d in Difficulty}
        for d in Difficulty:
            entries = [HighScore.model_validate(item) for item in blob.get(d.value, [])]
            entries = sorted(entries, key=lambda s: s.score, reverse=True)
            scores[d] = entries[:self.cap]
        self._scores = scores
