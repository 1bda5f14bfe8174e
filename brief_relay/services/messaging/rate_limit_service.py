import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from brief_relay.services.redis_storage_manager import RedisStorageManager

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    count: int
    retry_after: int


class RateLimitService:
    """
    SERVICE: Fixed window rate limiting per client key

    Each key may make MAX_REQUESTS requests inside one window of
    WINDOW_SECONDS. Windows are aligned to multiples of WINDOW_SECONDS, so
    every key's counter resets at the same instant.
    """

    MAX_REQUESTS = 10
    WINDOW_SECONDS = 60

    def __init__(self, storage: Optional[RedisStorageManager] = None,
                 max_requests: Optional[int] = None,
                 window_seconds: Optional[int] = None,
                 clock: Callable[[], float] = time.time):
        self.storage = storage or RedisStorageManager()
        self.max_requests = max_requests if max_requests is not None else self.MAX_REQUESTS
        self.window_seconds = window_seconds if window_seconds is not None else self.WINDOW_SECONDS
        if self.window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self._clock = clock
        self._last_window = None

    def check(self, client_key: str) -> RateLimitDecision:
        """
        Count this request against the client's current window

        Returns a decision; allowed is False once the quota is used up.
        Rejected requests still count, as they do in the window they land in.
        """
        now = self._clock()
        window = int(now // self.window_seconds)
        self._prune_expired_windows(window)

        count = self.storage.increment(self._key(client_key, window), ttl=self.window_seconds)
        retry_after = int((window + 1) * self.window_seconds - now) or 1
        allowed = count <= self.max_requests

        if not allowed:
            logger.warning(f"Rate limit exceeded for {client_key}: {count}/{self.max_requests} in window")

        return RateLimitDecision(
            allowed=allowed,
            count=count,
            retry_after=retry_after
        )

    # Private methods
    def _key(self, client_key: str, window: int) -> str:
        return f"rate_limit:{window}:{client_key}"

    def _prune_expired_windows(self, window: int):
        """Local counters have no TTL; drop them once their window has passed"""
        if self._last_window == window:
            return
        self._last_window = window
        current_prefix = f"rate_limit:{window}:"
        self.storage.discard_local(lambda key: key.startswith(current_prefix))
