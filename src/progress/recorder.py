"""
Fan-out of game results into every progress tracker.

Usage:
    progress = ProgressRecorder(JsonFileStore("data"))
    await progress.load()

    progress.watch(machine)          # live achievement tracking
    ...
    report = progress.record(machine.session, challenge)
"""

import asyncio
import logging
from typing import List, Optional
from pydantic import BaseModel, Field

from ..engine.events import EventQueue, EventType, GameEvent
from ..engine.models import GameSession
from ..engine.session import SessionStateMachine
from .achievements import Achievement, AchievementTracker
from .challenges import ChallengeTracker, DailyChallenge
from .high_scores import HighScoreLedger
from .inventory import PowerUpInventory
from .settings import SettingsStore
from .statistics import GameStats, StatisticsTracker
from .store import KeyValueStore, MemoryStore

logger = logging.getLogger(__name__)


class GameReport(BaseModel):
    """What a finished session changed in the player's progress."""
    session: GameSession
    high_score: bool = False
    achievements: List[Achievement] = Field(default_factory=list)
    challenge_completed: bool = False
    coins_awarded: int = 0
    stats: Optional[GameStats] = None


class ProgressRecorder:
    """Owns the trackers that share one KeyValueStore."""

    def __init__(self, store: Optional[KeyValueStore] = None):
        self.store = store if store is not None else MemoryStore()
        self.settings = SettingsStore(self.store)
        self.high_scores = HighScoreLedger(self.store)
        self.achievements = AchievementTracker(self.store)
        self.challenges = ChallengeTracker(self.store)
        self.statistics = StatisticsTracker(self.store)
        self.inventory = PowerUpInventory(self.store)
        self._events: Optional[EventQueue] = None
        self._machine: Optional[SessionStateMachine] = None

    @property
    def trackers(self):
        return (self.settings, self.high_scores, self.achievements,
                self.challenges, self.statistics, self.inventory)

    async def load(self) -> None:
        await asyncio.gather(*(t.load() for t in self.trackers))

    async def flush(self) -> None:
        await asyncio.gather(*(t.flush() for t in self.trackers))

    def watch(self, machine: SessionStateMachine) -> None:
        """Track achievements as words are found in `machine`."""
        self.unwatch()
        self._machine = machine
        self._events = machine.events
        machine.events.on(EventType.WORD_FOUND, self._on_word_found)

    def unwatch(self) -> None:
        if self._events is not None:
            self._events.off(EventType.WORD_FOUND, self._on_word_found)
        self._events = None
        self._machine = None

    def _on_word_found(self, event: GameEvent) -> None:
        if self._machine is None or not self._machine.session.found_words:
            return
        word = self._machine.session.found_words[-1]
        for achievement in self.achievements.track_word_found(word):
            self._emit(EventType.ACHIEVEMENT_UNLOCKED, event.session_id,
                       achievement=achievement.type.value, points=achievement.type.points)

    def _emit(self, event_type: EventType, session_id: str, **data) -> None:
        if self._events is not None:
            self._events.emit(event_type, session_id=session_id, **data)

    def record(self, session: GameSession, challenge: Optional[DailyChallenge] = None) -> GameReport:
        """
        Apply a finished session to every tracker.

        Sessions that are not finished are ignored.
        """
        if not session.is_finished:
            logger.debug("Not recording unfinished session %s", session.id)
            return GameReport(session=session)

        if self._machine is None:
            # No live tracking happened; credit the words now
            for word in session.found_words:
                self.achievements.track_word_found(word)

        high_score = self.high_scores.add(session)
        if high_score:
            self._emit(EventType.HIGH_SCORE, session.id, score=session.total_score)

        # Word unlocks were announced live; only announce per-game ones here
        for achievement in self.achievements.track_game_completed(session):
            self._emit(EventType.ACHIEVEMENT_UNLOCKED, session.id,
                       achievement=achievement.type.value, points=achievement.type.points)
        unlocked = self.achievements.drain_newly_unlocked()

        completed = self.challenges.update_progress(session, challenge)
        if completed:
            self._emit(EventType.CHALLENGE_COMPLETED, session.id,
                       challenge_id=session.settings.challenge_id)

        stats = self.statistics.record_game(session)
        coins = self.inventory.award_coins_for_game(session)
        self.unwatch()

        return GameReport(
            session=session,
            high_score=high_score,
            achievements=unlocked,
            challenge_completed=completed,
            coins_awarded=coins,
            stats=stats,
        )
