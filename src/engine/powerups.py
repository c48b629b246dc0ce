"""Active power-up effect tracking."""

import time
from typing import Callable, Dict, List, Optional
from pydantic import BaseModel

from .models import PowerUpType, PowerUpConfig, POWER_UP_CONFIGS


class PowerUpEffect(BaseModel):
    """An applied power-up. Instant effects have a duration of zero."""
    type: PowerUpType
    applied_at: float
    duration: int = 0
    charges: Optional[int] = None
    consumed: bool = False

    def remaining(self, now: float) -> float:
        """Seconds left before the effect expires (0 for instant effects)."""
        if self.duration == 0:
            return 0.0
        return max(self.duration - (now - self.applied_at), 0.0)

    def is_expired(self, now: float) -> bool:
        if self.consumed:
            return True
        if self.duration == 0:
            return False
        return now - self.applied_at >= self.duration


class PowerUpEffectManager:
    """
    Tracks active power-up effects for one session.

    At most one effect per type is kept: applying a type that is already
    active replaces it with a fresh duration and charge count. The manager
    does not own the game timer; time-freeze is read by the session as a flag.
    """

    def __init__(
        self,
        configs: Optional[Dict[PowerUpType, PowerUpConfig]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.configs = configs or POWER_UP_CONFIGS
        self._clock = clock
        self._effects: Dict[PowerUpType, PowerUpEffect] = {}
        self._usage: Dict[PowerUpType, int] = {}

    def _now(self, now: Optional[float]) -> float:
        return self._clock() if now is None else now

    def apply(self, power_up: PowerUpType, now: Optional[float] = None) -> PowerUpEffect:
        """Activate an effect, replacing any effect of the same type."""
        config = self.configs[power_up]
        effect = PowerUpEffect(
            type=power_up,
            applied_at=self._now(now),
            duration=config.duration,
            charges=config.charges,
        )
        self._effects[power_up] = effect
        self._usage[power_up] = self._usage.get(power_up, 0) + 1
        return effect

    def consume(self, power_up: PowerUpType) -> bool:
        """
        Mark an effect consumed. Consuming twice has no further effect.

        Returns:
            True if an unconsumed effect was marked
        """
        effect = self._effects.get(power_up)
        if effect is None or effect.consumed:
            return False
        self._effects[power_up] = effect.model_copy(update={"consumed": True})
        return True

    def use_charge(self, power_up: PowerUpType, now: Optional[float] = None) -> bool:
        """
        Spend one charge of an active effect; the last charge consumes it.

        Effects without charges are left untouched.

        Returns:
            True if the effect was active when called
        """
        if not self.is_active(power_up, now):
            return False
        effect = self._effects[power_up]
        if effect.charges is None:
            return True
        charges = effect.charges - 1
        self._effects[power_up] = effect.model_copy(
            update={"charges": charges, "consumed": charges <= 0}
        )
        return True

    def cleanup_expired(self, now: Optional[float] = None) -> List[PowerUpType]:
        """Remove consumed or elapsed effects and return their types."""
        now = self._now(now)
        expired = [t for t, effect in self._effects.items() if effect.is_expired(now)]
        for power_up in expired:
            del self._effects[power_up]
        return expired

    def reset(self) -> None:
        """Clear all effects and usage counts (session start)."""
        self._effects.clear()
        self._usage.clear()

    def is_active(self, power_up: PowerUpType, now: Optional[float] = None) -> bool:
        effect = self._effects.get(power_up)
        return effect is not None and not effect.is_expired(self._now(now))

    def get(self, power_up: PowerUpType) -> Optional[PowerUpEffect]:
        return self._effects.get(power_up)

    def active_effects(self, now: Optional[float] = None) -> List[PowerUpEffect]:
        now = self._now(now)
        return [e for e in self._effects.values() if not e.is_expired(now)]

    def usage_count(self, power_up: PowerUpType) -> int:
        return self._usage.get(power_up, 0)
