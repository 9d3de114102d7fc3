# tasks/ratelimit.py

import logging
import time
from typing import Callable

from django.core.cache import caches

logger = logging.getLogger(__name__)


class SlidingWindowRateLimiter:
    """
    Rolling-window request limiter keyed by (actor, action).

    Keeps the timestamps of accepted requests in the Django cache (the same
    history-list approach as DRF's SimpleRateThrottle), so pointing the
    cache alias at Redis shares the budget between instances. The
    read-modify-write is not atomic; concurrent requests from the same actor
    can slip one or two past the limit.
    """

    def __init__(
        self,
        max_requests: int = 10,
        window_seconds: int = 60,
        cache_alias: str = "default",
        timer: Callable[[], float] = time.time,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.cache_alias = cache_alias
        self.timer = timer

    def allow(self, actor_id, action: str) -> bool:
        """Record the request and return True, or return False if over budget."""
        key = self._key(actor_id, action)
        backend = caches[self.cache_alias]
        now = self.timer()

        history = backend.get(key, [])
        history = [stamp for stamp in history if now - stamp < self.window_seconds]

        if len(history) >= self.max_requests:
            logger.warning(f"Rate limit hit for {key} ({len(history)}/{self.max_requests})")
            return False

        history.append(now)
        backend.set(key, history, timeout=self.window_seconds)
        return True

    def reset(self, actor_id, action: str) -> None:
        caches[self.cache_alias].delete(self._key(actor_id, action))

    @staticmethod
    def _key(actor_id, action: str) -> str:
        return f"ratelimit:{actor_id}:{action}"
