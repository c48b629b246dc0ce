import logging
import time
from datetime import datetime
from typing import Callable, Dict, List, Optional

from .combo import ComboTracker
from .events import EventQueue, EventType
from .models import (
    GameSession,
    GameSettings,
    GameState,
    PowerUpActivation,
    PowerUpType,
    SubmissionResult,
    Word,
    EXTRA_TIME_SECONDS,
    POWER_UP_CONFIGS,
    XRAY_WORD_COUNT,
)
from .powerups import PowerUpEffectManager
from .scoring import ScoringEngine
from ..words.letters import LetterPoolGenerator
from ..words.validator import WordValidator

logger = logging.getLogger(__name__)


class SessionStateMachine:
    """
    Drives one game session through its lifecycle.

    NOT_STARTED -> PLAYING <-> PAUSED -> FINISHED. Operations outside their
    valid states are silent no-ops that return the unchanged snapshot.
    Every operation returns the new immutable GameSession snapshot (or a
    result carrying it) and pushes events to `events`.

    Attributes:
        session: The current snapshot
        events: Queue drained by the presentation layer
        frozen: External freeze flag set by the session clock
    """

    def __init__(
        self,
        settings: Optional[GameSettings] = None,
        validator: Optional[WordValidator] = None,
        generator: Optional[LetterPoolGenerator] = None,
        scoring: Optional[ScoringEngine] = None,
        events: Optional[EventQueue] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.validator = validator or WordValidator()
        self.generator = generator or LetterPoolGenerator(self.validator)
        self.scoring = scoring or ScoringEngine()
        self.events = events if events is not None else EventQueue()
        self.combo = ComboTracker(clock=clock)
        self.power_ups = PowerUpEffectManager(clock=clock)
        self._clock = clock
        self._last_find_time = 0.0
        self.frozen = False
        self.session = GameSession(settings=settings or GameSettings())

    @property
    def state(self) -> GameState:
        return self.session.state

    @property
    def is_frozen(self) -> bool:
        """Frozen by the clock's flag or by an unexpired time-freeze effect."""
        return self.frozen or self.power_ups.is_active(PowerUpType.TIME_FREEZE)

    def _update(self, **changes) -> GameSession:
        self.session = self.session.model_copy(update=changes)
        return self.session

    def _emit(self, event_type: EventType, **data) -> None:
        self.events.emit(event_type, session_id=self.session.id, **data)

    def _ignored(self, operation: str) -> GameSession:
        logger.debug("Ignoring %s in state %s", operation, self.state.value)
        return self.session

    # Lifecycle

    def start(self, settings: Optional[GameSettings] = None) -> GameSession:
        """
        Generate the letter pool and start the countdown.

        Only valid from NOT_STARTED.

        Args:
            settings: Settings to play with (defaults to the constructor's)
        """
        if self.state != GameState.NOT_STARTED:
            return self._ignored("start")

        settings = settings or self.session.settings
        config = settings.difficulty.config
        letters = self.generator.generate(config.letter_count, config.min_word_length)

        self.power_ups.reset()
        self.combo.reset()
        self.frozen = False
        self._last_find_time = self._clock()

        self.session = GameSession(
            id=self.session.id,
            letters=letters,
            settings=settings,
            start_time=datetime.now(),
            state=GameState.PLAYING,
            time_remaining=settings.time_limit,
        )
        logger.info("Session %s started (%s, %s letters, %ss)", self.session.id,
                    settings.difficulty.value, len(letters), settings.time_limit)
        self._emit(EventType.SESSION_STARTED, letters=list(letters),
                   time_remaining=self.session.time_remaining)
        return self.session

    def pause(self) -> GameSession:
        if self.state != GameState.PLAYING:
            return self._ignored("pause")
        self._update(state=GameState.PAUSED)
        self._emit(EventType.SESSION_PAUSED)
        return self.session

    def resume(self) -> GameSession:
        if self.state != GameState.PAUSED:
            return self._ignored("resume")
        self._update(state=GameState.PLAYING)
        self._emit(EventType.SESSION_RESUMED)
        return self.session

    def end_game(self) -> GameSession:
        """Force the session to FINISHED from PLAYING or PAUSED."""
        if not self.session.is_active:
            return self._ignored("end_game")
        return self._finish()

    def _finish(self) -> GameSession:
        self.combo.reset()
        self.power_ups.reset()
        self.frozen = False
        self._update(
            state=GameState.FINISHED,
            end_time=datetime.now(),
            time_remaining=0,
            selected_indices=[],
            current_input="",
        )
        logger.info("Session %s finished: %s points, %s words", self.session.id,
                    self.session.total_score, len(self.session.found_words))
        self._emit(
            EventType.SESSION_FINISHED,
            score=self.session.total_score,
            words_found=len(self.session.found_words),
        )
        return self.session

    # Timer

    def tick(self) -> GameSession:
        """
        Advance the countdown by one second.

        Skipped while not PLAYING or while frozen. Reaching zero finishes
        the session.
        """
        if self.state != GameState.PLAYING:
            return self._ignored("tick")

        for expired in self.power_ups.cleanup_expired():
            self._emit(EventType.POWER_UP_EXPIRED, power_up=expired.value)

        # Re-check right before decrementing; a freeze may have just ended
        if self.is_frozen:
            return self.session

        remaining = max(self.session.time_remaining - 1, 0)
        self._update(time_remaining=remaining)
        if remaining == 0:
            return self._finish()
        return self.session

    def add_time_bonus(self, seconds: int) -> GameSession:
        if self.state != GameState.PLAYING or seconds <= 0:
            return self._ignored("add_time_bonus")
        self._update(time_remaining=self.session.time_remaining + seconds)
        self._emit(EventType.TIME_BONUS, seconds=seconds)
        return self.session

    # Tile selection

    def select_letter(self, index: int) -> GameSession:
        """Append the tile at `index` to the current input."""
        if self.state != GameState.PLAYING:
            return self._ignored("select_letter")
        letters = self.session.letters
        if index < 0 or index >= len(letters) or index in self.session.selected_indices:
            return self.session

        return self._update(
            selected_indices=self.session.selected_indices + [index],
            current_input=self.session.current_input + letters[index],
        )

    def deselect_last_letter(self) -> GameSession:
        if self.state != GameState.PLAYING:
            return self._ignored("deselect_last_letter")
        if not self.session.selected_indices:
            return self.session

        indices = self.session.selected_indices[:-1]
        return self._update(
            selected_indices=indices,
            current_input="".join(self.session.letters[i] for i in indices),
        )

    def clear_selection(self) -> GameSession:
        if self.state != GameState.PLAYING:
            return self._ignored("clear_selection")
        return self._update(selected_indices=[], current_input="")

    def set_input(self, text: str) -> GameSession:
        """
        Replace the current input with typed text.

        Tiles are matched left to right; letters without a free tile keep
        their place in the input but select nothing.
        """
        if self.state != GameState.PLAYING:
            return self._ignored("set_input")

        text = "".join(c for c in text.upper() if c.isalpha())
        indices: List[int] = []
        for letter in text:
            for i, tile in enumerate(self.session.letters):
                if tile == letter and i not in indices:
                    indices.append(i)
                    break
        return self._update(selected_indices=indices, current_input=text)

    # Words

    def submit_word(self) -> SubmissionResult:
        """
        Validate and score the current input.

        On success the word is appended, the combo updated and the input
        cleared. On failure nothing is cleared and the reason is returned.
        """
        if self.state != GameState.PLAYING:
            self._ignored("submit_word")
            return SubmissionResult(success=False, session=self.session,
                                    message="Game is not active")

        session = self.session
        if not session.current_input:
            return SubmissionResult(success=False, session=session, message="No word entered")

        validation = self.validator.validate(
            session.current_input,
            session.letters,
            session.difficulty.min_word_length,
            session.found_texts,
        )
        if not validation.is_valid:
            self._update(invalid_attempts=session.invalid_attempts + 1)
            self._emit(EventType.WORD_REJECTED, word=validation.word,
                       reason=validation.reason.value)
            return SubmissionResult(
                success=False,
                session=self.session,
                reason=validation.reason,
                message=validation.message,
            )

        now = self._clock()
        text = validation.word

        boost = (
            self.power_ups.is_active(PowerUpType.COMBO_BOOST, now)
            and not self.combo.has_active_combo(now)
        )
        level_up = self.combo.add_word(text, now=now, boost=boost)
        if boost:
            self.power_ups.use_charge(PowerUpType.COMBO_BOOST, now)

        double_points = self.power_ups.is_active(PowerUpType.DOUBLE_POINTS, now)
        score = self.scoring.score(text, self.combo.multiplier, double_points)
        if double_points:
            self.power_ups.use_charge(PowerUpType.DOUBLE_POINTS, now)

        word = Word(
            text=text,
            letter_indices=list(session.selected_indices),
            score=score,
            time_to_find=max(now - self._last_find_time, 0.0),
        )
        self._last_find_time = now

        time_bonus = score if session.settings.score_time_bonus else 0
        self._update(
            found_words=session.found_words + [word],
            selected_indices=[],
            current_input="",
            time_remaining=session.time_remaining + time_bonus,
            max_combo_level=max(session.max_combo_level, self.combo.level),
        )

        self._emit(EventType.WORD_FOUND, word=text, score=score,
                   multiplier=self.combo.multiplier)
        if level_up:
            self._emit(EventType.COMBO_LEVEL_UP, level=self.combo.level,
                       multiplier=self.combo.multiplier)
        if time_bonus:
            self._emit(EventType.TIME_BONUS, seconds=time_bonus)

        message = f"Word found! +{score} points"
        if self.combo.level > 1:
            message += f" • {self.combo.multiplier:.2f}x COMBO"

        return SubmissionResult(
            success=True,
            session=self.session,
            word=word,
            message=message,
            combo_level=self.combo.level,
            multiplier=self.combo.multiplier,
            level_up=level_up,
            time_bonus=time_bonus,
        )

    def hint_words(self, max_hints: int = 3) -> List[str]:
        """Formable words not yet found, shortest first."""
        if not self.session.letters:
            return []
        return self.validator.get_hint_words(
            self.session.letters,
            self.session.found_texts,
            max_hints=max_hints,
            min_length=self.session.difficulty.min_word_length,
        )

    # Power-ups

    def activate_power_up(self, power_up: PowerUpType) -> PowerUpActivation:
        """
        Apply a power-up to the running session.

        The caller is responsible for spending inventory only when the
        activation is accepted.
        """
        if self.state != GameState.PLAYING:
            self._ignored("activate_power_up")
            return PowerUpActivation(type=power_up, accepted=False, session=self.session,
                                     message="Game is not active")

        handler = POWER_UP_HANDLERS[power_up]
        activation = handler(self, self._clock())
        if activation.accepted:
            self._update(power_ups_used=self.session.power_ups_used + 1)
            self._emit(
                EventType.POWER_UP_ACTIVATED,
                power_up=power_up.value,
                duration=POWER_UP_CONFIGS[power_up].duration,
            )
            activation = activation.model_copy(update={"session": self.session})
        return activation

    def _activation(self, power_up: PowerUpType, message: str, **extra) -> PowerUpActivation:
        return PowerUpActivation(type=power_up, accepted=True, session=self.session,
                                 message=message, **extra)

    def _instant(self, power_up: PowerUpType, now: float) -> None:
        self.power_ups.apply(power_up, now)
        self.power_ups.consume(power_up)

    def _time_freeze(self, now: float) -> PowerUpActivation:
        effect = self.power_ups.apply(PowerUpType.TIME_FREEZE, now)
        return self._activation(PowerUpType.TIME_FREEZE,
                                f"Time frozen for {effect.duration} seconds!")

    def _extra_time(self, now: float) -> PowerUpActivation:
        self._instant(PowerUpType.EXTRA_TIME, now)
        self.add_time_bonus(EXTRA_TIME_SECONDS)
        return self._activation(PowerUpType.EXTRA_TIME, f"+{EXTRA_TIME_SECONDS} seconds added!",
                                time_added=EXTRA_TIME_SECONDS)

    def _word_hint(self, now: float) -> PowerUpActivation:
        hints = self.hint_words(max_hints=1)
        if not hints:
            return PowerUpActivation(type=PowerUpType.WORD_HINT, accepted=False,
                                     session=self.session, message="No words left to hint")
        self._instant(PowerUpType.WORD_HINT, now)
        self._update(hints_used=self.session.hints_used + 1)
        return self._activation(PowerUpType.WORD_HINT, f"Try: {hints[0]}", hints=hints)

    def _letter_shuffle(self, now: float) -> PowerUpActivation:
        self._instant(PowerUpType.LETTER_SHUFFLE, now)
        letters = self.generator.shuffle(self.session.letters)
        self._update(letters=letters, selected_indices=[], current_input="")
        self._emit(EventType.LETTERS_SHUFFLED, letters=list(letters))
        return self._activation(PowerUpType.LETTER_SHUFFLE, "Letters shuffled!")

    def _double_points(self, now: float) -> PowerUpActivation:
        self.power_ups.apply(PowerUpType.DOUBLE_POINTS, now)
        return self._activation(PowerUpType.DOUBLE_POINTS, "Double score for next 3 words!")

    def _combo_boost(self, now: float) -> PowerUpActivation:
        self.power_ups.apply(PowerUpType.COMBO_BOOST, now)
        return self._activation(PowerUpType.COMBO_BOOST, "Combo boost activated!")

    def _clear_mistakes(self, now: float) -> PowerUpActivation:
        self._instant(PowerUpType.CLEAR_MISTAKES, now)
        self._update(invalid_attempts=0)
        return self._activation(PowerUpType.CLEAR_MISTAKES, "Mistakes cleared!")

    def _xray_vision(self, now: float) -> PowerUpActivation:
        self.power_ups.apply(PowerUpType.XRAY_VISION, now)
        hints = self.hint_words(max_hints=XRAY_WORD_COUNT)
        self._update(hints_used=self.session.hints_used + 1)
        return self._activation(PowerUpType.XRAY_VISION, "X-ray vision activated!", hints=hints)

    def get_state(self) -> Dict:
        """
        Get the current session state as a dictionary.

        Useful for serialization and logging.
        """
        session = self.session
        return {
            "session_id": session.id,
            "state": session.state.value,
            "difficulty": session.difficulty.value,
            "letters": list(session.letters),
            "time_remaining": session.time_remaining,
            "score": session.total_score,
            "words_found": len(session.found_words),
            "current_input": session.current_input,
            "combo_level": self.combo.level,
            "multiplier": self.combo.multiplier,
            "frozen": self.is_frozen,
            "active_power_ups": [e.type.value for e in self.power_ups.active_effects()],
        }


POWER_UP_HANDLERS: Dict[PowerUpType, Callable[[SessionStateMachine, float], PowerUpActivation]] = {
    PowerUpType.TIME_FREEZE: SessionStateMachine._time_freeze,
    PowerUpType.EXTRA_TIME: SessionStateMachine._extra_time,
    PowerUpType.WORD_HINT: SessionStateMachine._word_hint,
    PowerUpType.LETTER_SHUFFLE: SessionStateMachine._letter_shuffle,
    PowerUpType.DOUBLE_POINTS: SessionStateMachine._double_points,
    PowerUpType.COMBO_BOOST: SessionStateMachine._combo_boost,
    PowerUpType.CLEAR_MISTAKES: SessionStateMachine._clear_mistakes,
    PowerUpType.XRAY_VISION: SessionStateMachine._xray_vision,
}

_unhandled = set(PowerUpType) - set(POWER_UP_HANDLERS)
if _unhandled:
    raise RuntimeError(f"Power-ups without a session handler: {sorted(p.value for p in _unhandled)}")
