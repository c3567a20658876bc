from .service import TimerHandle, TimerService, ThreadingTimerService

__all__ = ["TimerHandle", "TimerService", "ThreadingTimerService"]
