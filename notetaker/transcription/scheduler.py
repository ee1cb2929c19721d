"""Cancellable one-shot timers used for pause detection."""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable

logger = logging.getLogger(__name__)


class ScheduledTask(ABC):
    """Handle to a pending callback."""

    @abstractmethod
    def cancel(self) -> None:
        """Prevent the callback from running if it has not started yet."""
        pass


class PauseScheduler(ABC):
    """Schedules one-shot callbacks after a delay."""

    @abstractmethod
    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        """Run ``callback`` once after ``delay`` seconds.

        Args:
            delay: Delay in seconds
            callback: Function to call on expiry

        Returns:
            Handle that cancels the callback
        """
        pass


class _TimerTask(ScheduledTask):

    def __init__(self, timer: threading.Timer):
        self.timer = timer

    def cancel(self) -> None:
        self.timer.cancel()


class ThreadingPauseScheduler(PauseScheduler):
    """Runs callbacks on ``threading.Timer`` daemon threads."""

    def __init__(self, name: str = "PauseTimer"):
        self.name = name

    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        timer = threading.Timer(delay, callback)
        timer.name = self.name
        timer.daemon = True
        timer.start()
        logger.debug(f"Scheduled {self.name} in {delay:.2f}s")
        return _TimerTask(timer)
