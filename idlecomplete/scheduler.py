"""Idle countdown that fires once input has been quiet for a delay."""

import asyncio
from abc import ABC, abstractmethod
from functools import partial
from typing import Any, Callable, Optional

from .errors import SchedulerArmFailure


class TimerHost(ABC):
    """Host facility able to run a callback after a delay."""

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> Any:
        """Arm a single-shot timer.

        Returns:
            A handle exposing ``cancel()``
        """
        pass


class AsyncioTimerHost(TimerHost):
    """Arms timers on an asyncio event loop.

    prompt_toolkit applications run on asyncio, so the fired callback lands
    on the same thread that dispatches key presses.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        # Raises RuntimeError outside a running loop
        return asyncio.get_running_loop()

    def call_later(self, delay: float, callback: Callable[[], None]):
        loop = self._get_loop()
        if delay <= 0:
            return loop.call_soon(callback)
        return loop.call_later(delay, callback)


class IdleScheduler:
    """Single-slot debounce timer.

    Every ``notify_activity()`` cancels the pending countdown and arms a new
    one; ``on_idle`` runs once when a countdown survives its full delay.
    """

    def __init__(self, delay: float, on_idle: Callable[[], None], timer_host: Optional[TimerHost] = None):
        """Initialize the scheduler.

        Args:
            delay: Quiet period in seconds (0 fires on the next loop turn)
            on_idle: Callback invoked when the countdown elapses
            timer_host: Timer facility, defaults to the running asyncio loop
        """
        self.delay = delay
        self.on_idle = on_idle
        self.timer_host = timer_host or AsyncioTimerHost()
        self._pending = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        """True while a countdown is armed."""
        return self._pending is not None

    def notify_activity(self) -> None:
        """Restart the countdown.

        Raises:
            SchedulerArmFailure: If the timer host cannot arm a timer
        """
        self.cancel()
        self._generation += 1
        try:
            self._pending = self.timer_host.call_later(self.delay, partial(self._fire, self._generation))
        except Exception as e:
            self._pending = None
            raise SchedulerArmFailure(f"Could not arm idle timer: {e}") from e

    def cancel(self) -> None:
        """Release the pending countdown, if any."""
        handle = self._pending
        self._pending = None
        # Any callback already queued by the host belongs to an old generation now
        self._generation += 1
        if handle is not None:
            handle.cancel()

    def _fire(self, generation: int) -> None:
        if generation != self._generation or self._pending is None:
            return  # superseded
        self._pending = None
        self.on_idle()
