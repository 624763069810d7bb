# Redis handle: opt-in, fail-open access to a shared Redis connection.
# Owned by the application (app.state.redis) so tests and workers can construct their own.
import logging
from typing import Optional

import redis

_logger = logging.getLogger("skytower.redis")


class RedisHandle:
    def __init__(self, url: str, enabled: bool = False) -> None:
        self.url = url
        self.enabled = enabled
        self._client: Optional[redis.Redis] = None
        self._attempted = False

    def get(self) -> Optional[redis.Redis]:
        """
        Return a connected client, or None when disabled or unreachable.

        Connection is attempted once per handle; after a failure the handle stays
        fail-open so callers degrade instead of erroring.
        """
        if not self.enabled:
            return None
        if self._client is not None:
            return self._client
        if self._attempted:
            return None

        self._attempted = True
        try:
            client = redis.Redis.from_url(
                self.url,
                socket_timeout=0.25,
                socket_connect_timeout=0.25,
                retry_on_timeout=False,
                health_check_interval=0,
            )
            client.ping()
        except redis.RedisError as exc:
            _logger.warning("Redis unavailable (fail-open): %s", exc)
            return None
        _logger.info("Connected to Redis at %s", self.url)
        self._client = client
        return client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
        self._client = None
        self._attempted = False
