"""
Throttling helpers for calls against external book APIs.
"""

import logging
import time
from typing import Callable, Iterable, List, Optional, TypeVar

T = TypeVar("T")
R = TypeVar("R")

ProgressCallback = Callable[[int, int], None]


class RateLimiter:
    """Simple rate limiter"""

    def __init__(self, calls_per_second: float = 1.0, sleep: Callable[[float], None] = time.sleep):
        self.min_interval = 1.0 / calls_per_second
        self.last_called = 0.0
        self._sleep = sleep

    def wait(self):
        elapsed = time.time() - self.last_called
        if elapsed < self.min_interval:
            self._sleep(self.min_interval - elapsed)
        self.last_called = time.time()


class SequentialExecutor:
    """
    Runs one call at a time with a fixed pause between consecutive calls.

    This is the rate-limit policy for batch lookups: calls never overlap and
    there is no pause after the last one. Progress is reported as
    (current, total) after every call.
    """

    def __init__(self, delay: float = 0.1, sleep: Callable[[float], None] = time.sleep):
        if delay < 0:
            raise ValueError("delay must be non-negative")
        self.delay = delay
        self._sleep = sleep
        self.logger = logging.getLogger(self.__class__.__name__)

    def map(
        self,
        func: Callable[[T], R],
        items: Iterable[T],
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[R]:
        items = list(items)
        total = len(items)
        results = []

        for i, item in enumerate(items):
            results.append(func(item))

            if on_progress:
                on_progress(i + 1, total)

            if i < total - 1 and self.delay:
                self._sleep(self.delay)

        self.logger.debug(f"Ran {total} calls with {self.delay}s spacing")
        return results
