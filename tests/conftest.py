# tests/conftest.py
"""Pytest configuration and shared fixtures."""

from typing import Callable, List, Optional

import numpy as np
import pytest

from photostrip.camera import VideoSource
from photostrip.config import BoothConfig
from photostrip.pipeline import SessionController
from photostrip.timer import TimerHandle, TimerService


class FakeVideoSource(VideoSource):
    """Serves synthetic BGR frames; each read brightens the frame by one step."""

    def __init__(self, width: int = 64, height: int = 48, ready: bool = True):
        self._width = width
        self._height = height
        self.ready = ready
        self.reads = 0
        self.fail_on_read: Optional[int] = None
        self.frame_override: Optional[np.ndarray] = None

    def is_ready(self) -> bool:
        return self.ready

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def read_frame(self):
        self.reads += 1
        if self.fail_on_read is not None and self.reads == self.fail_on_read:
            raise IOError("sensor disconnected")
        if self.frame_override is not None:
            return self.frame_override
        frame = np.zeros((self._height, self._width, 3), dtype=np.uint8)
        # left half marked so mirroring is observable
        frame[:, : self._width // 2] = (10 * self.reads) % 256
        return frame


class ManualHandle(TimerHandle):
    def __init__(self):
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class _Job:
    def __init__(self, due: float, seq: int, interval: Optional[float], fn: Callable[[], None]):
        self.due = due
        self.seq = seq
        self.interval = interval
        self.fn = fn
        self.handle = ManualHandle()


class ManualTimerService(TimerService):
    """Virtual clock: nothing fires until the test calls advance()."""

    def __init__(self):
        self.now = 0.0
        self._jobs: List[_Job] = []
        self._seq = 0

    def _add(self, delay, interval, fn) -> TimerHandle:
        self._seq += 1
        job = _Job(self.now + delay, self._seq, interval, fn)
        self._jobs.append(job)
        return job.handle

    def call_every(self, interval, fn):
        return self._add(interval, interval, fn)

    def call_later(self, delay, fn):
        return self._add(delay, None, fn)

    @property
    def pending(self) -> int:
        return sum(1 for job in self._jobs if not job.handle.cancelled)

    def advance(self, seconds: float):
        target = self.now + seconds
        while True:
            self._jobs = [job for job in self._jobs if not job.handle.cancelled]
            due = [job for job in self._jobs if job.due <= target + 1e-9]
            if not due:
                break
            job = min(due, key=lambda j: (j.due, j.seq))
            self.now = job.due
            if job.interval is None:
                self._jobs.remove(job)
            else:
                job.due += job.interval
            job.fn()
        self.now = target


# one full pose: 3 ticks + cooldown
POSE_CYCLE = 3.5


@pytest.fixture
def source() -> FakeVideoSource:
    return FakeVideoSource()


@pytest.fixture
def timers() -> ManualTimerService:
    return ManualTimerService()


@pytest.fixture
def controller(source, timers, tmp_path) -> SessionController:
    config = BoothConfig(output_dir=str(tmp_path / "strips"))
    ctl = SessionController(source, timers=timers, config=config)
    yield ctl
    ctl.close()


@pytest.fixture
def events(controller) -> list:
    """Every snapshot the controller publishes."""
    seen = []
    controller.subscribe(seen.append)
    return seen
