import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable


class TimerHandle(ABC):
    @abstractmethod
    def cancel(self):
        """Stop the timer. Calling it more than once is harmless."""


class TimerService(ABC):
    """
    Schedules the two waits of the session loop: the repeating countdown
    tick and the one-shot cooldown between poses.
    """

    @abstractmethod
    def call_every(self, interval: float, fn: Callable[[], None]) -> TimerHandle:
        """Call ``fn`` every ``interval`` seconds until cancelled."""

    @abstractmethod
    def call_later(self, delay: float, fn: Callable[[], None]) -> TimerHandle:
        """Call ``fn`` once after ``delay`` seconds unless cancelled first."""


class _RepeatingTimer(threading.Thread, TimerHandle):
    def __init__(self, interval: float, fn: Callable[[], None]):
        super().__init__(name=f"tick-{interval}s", daemon=True)
        self.interval = interval
        self.fn = fn
        self._stopped = threading.Event()
        self.log = logging.getLogger("TimerService")

    def run(self):
        while not self._stopped.wait(self.interval):
            try:
                self.fn()
            except Exception as e:
                self.log.error(f"Tick callback failed: {e}", exc_info=True)

    def cancel(self):
        self._stopped.set()


class _OneShotTimer(TimerHandle):
    def __init__(self, delay: float, fn: Callable[[], None]):
        self.log = logging.getLogger("TimerService")
        self._fn = fn
        self._timer = threading.Timer(delay, self._fire)
        self._timer.daemon = True

    def _fire(self):
        try:
            self._fn()
        except Exception as e:
            self.log.error(f"Delayed callback failed: {e}", exc_info=True)

    def start(self):
        self._timer.start()

    def cancel(self):
        self._timer.cancel()


class ThreadingTimerService(TimerService):
    """Daemon-thread timers. Callbacks run off the caller's thread."""

    def call_every(self, interval: float, fn: Callable[[], None]) -> TimerHandle:
        timer = _RepeatingTimer(interval, fn)
        timer.start()
        return timer

    def call_later(self, delay: float, fn: Callable[[], None]) -> TimerHandle:
        timer = _OneShotTimer(delay, fn)
        timer.start()
        return timer
