"""
Quota aware retries.
Google Sheets allows 100 requests per 100 seconds per user.  When a call is
rejected for quota the only cure is to wait until the window has rolled over,
so rather than an exponential backoff the wait is whatever is left of the
window since the last time we were throttled.
"""
import asyncio
from collections.abc import Awaitable, Callable
import logging
import time
from typing import TypeVar

from ..errors import QuotaExceededError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_QUOTA_WINDOW_SECONDS = 100.0
DEFAULT_MAX_RETRIES = 3


class RateLimitTracker():
    """
    Time since the quota window was last restarted.
    The quota belongs to the credential, not to a client, so every client
    using the same credential should be handed the same tracker.
    Until the first reset() nothing is known about the window and elapsed()
    is 0, meaning a first throttle waits out a whole window.
    """
    def __init__(self, budget_seconds: float = DEFAULT_QUOTA_WINDOW_SECONDS,
                 clock: Callable[[], float] = time.monotonic) -> None:
        self.budget_seconds = float(budget_seconds)
        self._clock = clock
        self._started = None
        self.resets = 0

    def elapsed(self) -> float:
        if self._started is None:
            return 0.0
        return self._clock() - self._started

    def wait_time(self) -> float:
        return max(0.0, self.budget_seconds - self.elapsed())

    def reset(self) -> None:
        self._started = self._clock()
        self.resets += 1


_default_tracker = None


def default_tracker(budget_seconds: float = DEFAULT_QUOTA_WINDOW_SECONDS) -> RateLimitTracker:
    """
    One tracker for the whole process, for when every client shares a credential.
    budget_seconds only counts on the call that creates it.
    """
    global _default_tracker
    if _default_tracker is None:
        _default_tracker = RateLimitTracker(budget_seconds)
    return _default_tracker


class RetryingInvoker():
    """
    Runs remote calls, retrying only the ones rejected for quota.
    Anything else is raised straight away.  Cancelling the awaiting task
    cancels the current attempt or the wait before the next one.
    """
    def __init__(self, tracker: RateLimitTracker | None = None,
                 max_retries: int = DEFAULT_MAX_RETRIES,
                 sleep: Callable[[float], Awaitable[None]] = asyncio.sleep) -> None:
        self.tracker = tracker if tracker is not None else default_tracker()
        self.max_retries = int(max_retries)
        self._sleep = sleep

    async def invoke(self, call: Callable[[], Awaitable[T]]) -> T:
        retries = 0
        while True:
            try:
                return await call()
            except QuotaExceededError:
                if retries >= self.max_retries:
                    logger.error("Google API request quota still exceeded after %d retries", retries)
                    raise
                retries += 1
                wait = self.tracker.wait_time()
                logger.warning("Google API request quota reached; waiting %.0f seconds (retry %d of %d)...",
                               wait, retries, self.max_retries)
                await self._sleep(wait)
                self.tracker.reset()
