import threading

from photostrip.config import BoothConfig
from photostrip.fsm import SessionPhase
from photostrip.pipeline import SessionController
from photostrip.timer import ThreadingTimerService
from tests.conftest import FakeVideoSource


def test_call_later_fires_once():
    fired = threading.Event()
    calls = []

    def fn():
        calls.append(1)
        fired.set()

    ThreadingTimerService().call_later(0.01, fn)

    assert fired.wait(2)
    assert calls == [1]


def test_cancelled_call_later_never_fires():
    fired = threading.Event()
    handle = ThreadingTimerService().call_later(0.2, fired.set)

    handle.cancel()
    handle.cancel()

    assert not fired.wait(0.4)


def test_call_every_repeats_until_cancelled():
    ticks = []
    enough = threading.Event()

    def tick():
        ticks.append(1)
        if len(ticks) >= 3:
            enough.set()

    handle = ThreadingTimerService().call_every(0.01, tick)
    assert enough.wait(2)
    handle.cancel()
    handle.join(1)

    count = len(ticks)
    assert not handle.is_alive()
    assert len(ticks) == count


def test_session_completes_on_real_timers():
    done = threading.Event()
    config = BoothConfig(countdown_seconds=1, tick_interval=0.01, cooldown=0.01, default_layout="C")
    controller = SessionController(FakeVideoSource(), timers=ThreadingTimerService(), config=config)

    def on_change(snapshot):
        if snapshot.phase is SessionPhase.COMPLETE:
            done.set()

    controller.subscribe(on_change)
    controller.start_session()

    try:
        assert done.wait(5)
        assert len(controller.photos) == 2
    finally:
        controller.close()
