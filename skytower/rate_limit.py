# Redis-backed fixed-window rate limiter for registration and write endpoints.
# - Per-IP counters, keys rl:v1:ip:{ip}:{scope}, TTL = window.
# - Fail-open if Redis is disabled or unavailable.
import logging
from typing import Callable, Literal

import redis
from fastapi import Request, status

from .errors import AppError

logger = logging.getLogger("skytower.rate_limit")

Scope = Literal["register", "write"]


class RateLimited(AppError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS


def _client_ip(request: Request) -> str:
    # Connection's remote address only; X-Forwarded-For is not trusted here
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def rate_limit(scope: Scope) -> Callable[[Request], None]:
    """
    Dependency factory. Limits come from the app settings:
    RATE_LIMIT_WINDOW_SECONDS and RATE_LIMIT_{REGISTER,WRITE}_PER_WINDOW.
    """

    def _dependency(request: Request) -> None:
        r = request.app.state.redis.get()
        if r is None:
            return

        settings = request.app.state.settings
        window = settings.rate_limit_window_seconds
        if scope == "register":
            limit = settings.rate_limit_register_per_window
        else:
            limit = settings.rate_limit_write_per_window

        ip = _client_ip(request)
        key = f"rl:v1:ip:{ip}:{scope}"
        try:
            current = r.incr(key, amount=1)
            if current == 1:
                r.expire(key, window)
            if current <= limit:
                return
            ttl = r.ttl(key)
        except redis.RedisError as exc:
            logger.warning("Rate limit fail-open (scope=%s, ip=%s): %s", scope, ip, exc)
            return

        retry_after = ttl if isinstance(ttl, int) and ttl > 0 else window
        raise RateLimited(f"Too many requests; retry after {retry_after}s")

    return _dependency
