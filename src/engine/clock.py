"""
Async countdown driver for a SessionStateMachine.

Ticks the machine once per interval and handles time-freeze by scheduling
the unfreeze with loop.call_later. Stopping the clock cancels both the tick
task and any pending unfreeze.
"""

import asyncio
import logging
from typing import Optional

from .events import EventType, GameEvent
from .models import PowerUpType
from .session import SessionStateMachine

logger = logging.getLogger(__name__)


class SessionClock:
    """
    One-second ticker bound to a single session at a time.

    Usage:
        clock = SessionClock(machine)
        machine.start()
        await clock.start()
        ...
        await clock.stop()
    """

    def __init__(self, machine: SessionStateMachine, interval: float = 1.0):
        self.machine = machine
        self.interval = interval
        self._task: Optional[asyncio.Task] = None
        self._freeze_handle: Optional[asyncio.TimerHandle] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def is_frozen(self) -> bool:
        return self._freeze_handle is not None

    async def start(self) -> None:
        """Start ticking. Must be called from a running event loop."""
        if self.is_running:
            return
        self.machine.events.on(EventType.POWER_UP_ACTIVATED, self._on_power_up)
        self._task = asyncio.create_task(self._run())

    async def _run(self) -> None:
        try:
            while not self.machine.session.is_finished:
                await asyncio.sleep(self.interval)
                self.machine.tick()
        finally:
            self._cancel_freeze()
            logger.debug("Clock for session %s stopped", self.machine.session.id)

    def freeze(self, seconds: float) -> None:
        """
        Freeze the countdown for `seconds`.

        A second freeze replaces the pending one rather than stacking.
        """
        if self.machine.session.is_finished:
            return
        self._cancel_freeze()
        loop = asyncio.get_running_loop()
        self.machine.frozen = True
        self._freeze_handle = loop.call_later(seconds, self._unfreeze)

    def _unfreeze(self) -> None:
        self._freeze_handle = None
        self.machine.frozen = False

    def _cancel_freeze(self) -> None:
        if self._freeze_handle is not None:
            self._freeze_handle.cancel()
            self._freeze_handle = None
        self.machine.frozen = False

    def _on_power_up(self, event: GameEvent) -> None:
        if event.data.get("power_up") == PowerUpType.TIME_FREEZE.value:
            self.freeze(event.data.get("duration", 0))

    async def stop(self) -> None:
        """Cancel the tick task and any scheduled unfreeze."""
        self.machine.events.off(EventType.POWER_UP_ACTIVATED, self._on_power_up)
        self._cancel_freeze()
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    async def attach(self, machine: SessionStateMachine) -> None:
        """Stop driving the current session and bind to a new one."""
        await self.stop()
        self.machine = machine
