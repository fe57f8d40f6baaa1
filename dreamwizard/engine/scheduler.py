"""Scheduler interface - delayed callbacks owned by a flow controller."""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, List

logger = logging.getLogger(__name__)


class ScheduledTask(ABC):
    """Handle for a callback scheduled to run later."""

    @abstractmethod
    def cancel(self) -> None:
        """Prevent the callback from running. Safe to call more than once."""
        pass

    @property
    @abstractmethod
    def cancelled(self) -> bool:
        pass


class Scheduler(ABC):
    """Interface for running a callback after a delay."""

    @abstractmethod
    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        """Run callback once, delay seconds from now.

        Args:
            delay: Seconds to wait (0 or more)
            callback: Zero-argument function to run

        Returns:
            Task handle that can cancel the callback
        """
        pass


class _TimerTask(ScheduledTask):

    def __init__(self, timer: threading.Timer):
        self._timer = timer
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True
        self._timer.cancel()

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class ThreadingScheduler(Scheduler):
    """Real implementation - runs callbacks on daemon timer threads.

    Callbacks run off the caller's thread; presentation layers that need
    a single UI thread must marshal the listener notification themselves.
    """

    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        logger.debug("Scheduled callback in %.2fs", delay)
        return _TimerTask(timer)


class _ManualTask(ScheduledTask):

    def __init__(self, due: float, callback: Callable[[], None]):
        self.due = due
        self.callback = callback
        self.done = False
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler(Scheduler):
    """Mock for testing - virtual clock driven by advance()."""

    def __init__(self):
        self.now = 0.0
        self.calls = []
        self.tasks: List[_ManualTask] = []

    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        self.calls.append(('schedule', delay))
        task = _ManualTask(self.now + delay, callback)
        self.tasks.append(task)
        return task

    @property
    def pending(self) -> List[ScheduledTask]:
        """Tasks that have neither run nor been cancelled."""
        return [t for t in self.tasks if not t.done and not t.cancelled]

    def advance(self, seconds: float) -> int:
        """Move the virtual clock forward and run every task now due.

        Returns:
            Number of callbacks that ran
        """
        self.now += seconds
        ran = 0
        for task in sorted(self.pending, key=lambda t: t.due):
            if task.due <= self.now and not task.cancelled:
                task.done = True
                task.callback()
                ran += 1
        return ran

    def run_all(self) -> int:
        """Run every pending task regardless of its due time."""
        if not self.pending:
            return 0
        latest = max(t.due for t in self.pending)
        return self.advance(max(0.0, latest - self.now))
