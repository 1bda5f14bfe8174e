import logging
import threading
from typing import Dict, Optional

import redis
from redis import exceptions as redis_exceptions

logger = logging.getLogger(__name__)


class RedisStorageManager:
    """
    Counter storage for the rate limiter.

    Uses Redis when a URL is configured so several relay processes share one
    window, otherwise keeps counters in process memory behind a lock.
    """

    def __init__(self, redis_url: Optional[str] = None, redis_client=None):
        self._lock = threading.Lock()
        self.local_counters: Dict[str, int] = {}
        self.redis_client = redis_client

        if self.redis_client is None and redis_url:
            self.redis_client = self._get_redis_client(redis_url)

        self.use_redis = self.redis_client is not None
        if self.use_redis:
            logger.info("Using Redis for rate limit counters")
        else:
            logger.info("Using local storage for rate limit counters")

    def _get_redis_client(self, redis_url: str):
        """Get Redis client, or None if the URL cannot be used"""
        try:
            return redis.from_url(redis_url, decode_responses=True)
        except (redis_exceptions.ConnectionError, ValueError) as e:
            logger.warning(f"Failed to set up Redis client: {e}, falling back to local storage")
            return None

    def increment(self, key: str, ttl: int) -> int:
        """
        Atomically add one to a counter and return the new value.

        Args:
            key (str): Counter key. Callers put the window index in the key.
            ttl (int): Seconds the counter should live after its first increment.

        Returns:
            int: The counter value after incrementing.
        """
        if self.use_redis and self.redis_client:
            try:
                pipe = self.redis_client.pipeline()
                pipe.incr(key)
                pipe.expire(key, ttl)
                count, _ = pipe.execute()
                return int(count)
            except redis_exceptions.RedisError as e:
                logger.warning(f"Redis increment error for key '{key}': {e}, falling back to local storage.")

        with self._lock:
            count = self.local_counters.get(key, 0) + 1
            self.local_counters[key] = count
            return count

    def discard_local(self, keep):
        """Keep only local counters for which keep(key) is true"""
        with self._lock:
            self.local_counters = {k: v for k, v in self.local_counters.items() if keep(k)}
