"""
Event queue for session notifications.

The session layer pushes events (word found, combo level-up, achievement
unlocked, ...) and the presentation layer either drains the queue or
subscribes to event types. Each SessionStateMachine owns its own queue;
there is no global instance.

Usage:
    queue = EventQueue()
    queue.on(EventType.WORD_FOUND, show_word)

    queue.emit(EventType.WORD_FOUND, word="CAT", score=10)

    for event in queue.drain():
        render(event)
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Deque, Dict, List, Optional

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Events published by the engine and trackers."""

    # Session lifecycle
    SESSION_STARTED = "session.started"
    SESSION_PAUSED = "session.paused"
    SESSION_RESUMED = "session.resumed"
    SESSION_FINISHED = "session.finished"

    # Gameplay
    WORD_FOUND = "word.found"
    WORD_REJECTED = "word.rejected"
    COMBO_LEVEL_UP = "combo.level_up"
    TIME_BONUS = "time.bonus"
    LETTERS_SHUFFLED = "letters.shuffled"

    # Power-ups
    POWER_UP_ACTIVATED = "powerup.activated"
    POWER_UP_EXPIRED = "powerup.expired"

    # Progress
    ACHIEVEMENT_UNLOCKED = "achievement.unlocked"
    HIGH_SCORE = "highscore.added"
    CHALLENGE_COMPLETED = "challenge.completed"


@dataclass
class GameEvent:
    """
    Event payload.

    Attributes:
        type: The event type
        data: Event-specific payload
        session_id: Session the event belongs to, if any
        timestamp: When the event was emitted
    """

    type: EventType
    data: dict = field(default_factory=dict)
    session_id: str = ""
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        return f"[{self.type.value}] {self.data}"


EventHandler = Callable[[GameEvent], None]


class EventQueue:
    """
    FIFO of pending events plus optional synchronous subscribers.

    Subscribers are called on emit(); the event also stays queued until
    drain() is called, so a presentation layer can use either style.
    """

    def __init__(self, max_pending: int = 500):
        self._pending: Deque[GameEvent] = deque(maxlen=max_pending)
        self._listeners: Dict[EventType, List[EventHandler]] = {}

    def on(self, event_type: EventType, handler: EventHandler) -> None:
        """Subscribe to an event type."""
        handlers = self._listeners.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)

    def off(self, event_type: EventType, handler: EventHandler) -> None:
        """Unsubscribe from an event type."""
        handlers = self._listeners.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event_type: EventType, session_id: str = "", **data) -> GameEvent:
        """
        Queue an event and notify subscribers.

        Returns:
            The emitted GameEvent
        """
        event = GameEvent(type=event_type, data=data, session_id=session_id)
        self._pending.append(event)

        for handler in list(self._listeners.get(event_type, [])):
            try:
                handler(event)
            except Exception:
                # Listener errors are logged, not raised
                logger.exception("Error in handler for %s", event_type.value)

        return event

    def drain(self, event_type: Optional[EventType] = None) -> List[GameEvent]:
        """
        Remove and return pending events in emission order.

        Args:
            event_type: Only drain events of this type, or None for all
        """
        if event_type is None:
            events = list(self._pending)
            self._pending.clear()
            return events

        events = [e for e in self._pending if e.type == event_type]
        remaining = [e for e in self._pending if e.type != event_type]
        self._pending.clear()
        self._pending.extend(remaining)
        return events

    def peek(self) -> List[GameEvent]:
        return list(self._pending)

    def __len__(self) -> int:
        return len(self._pending)

    def listener_count(self, event_type: EventType) -> int:
        return len(self._listeners.get(event_type, []))
