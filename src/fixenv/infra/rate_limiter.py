from __future__ import annotations

from typing import Any, Mapping

import redis

from ..core.ports import LoggerPort


KEY_PREFIX = "fixenv:ratelimit"


class RedisRateLimiter:
    """Fixed-window request counter shared by every service instance.

    Each (scope, client) pair gets one Redis key per window: ``INCR`` counts
    the request and the first hit of a window sets ``EXPIRE``. Scopes absent
    from ``limits`` are never limited. When Redis is unreachable requests are
    let through.
    """

    def __init__(
        self,
        *,
        redis: Any,
        limits: Mapping[str, int],
        logger: LoggerPort,
        window_seconds: int = 60,
    ) -> None:
        self._redis = redis
        self._limits = dict(limits)
        self._logger = logger
        self._window = window_seconds

    def hit(self, scope: str, client_id: str) -> tuple[bool, int]:
        limit = self._limits.get(scope)
        if limit is None:
            return True, 0

        key = f"{KEY_PREFIX}:{scope}:{client_id}"
        try:
            count = int(self._redis.incr(key))
            if count == 1:
                self._redis.expire(key, self._window)
            if count <= limit:
                return True, 0
            ttl = int(self._redis.ttl(key))
            # Key lost its expiry; re-arm the window.
            if ttl < 0:
                self._redis.expire(key, self._window)
                ttl = self._window
        except redis.RedisError as e:
            self._logger.warning("rate_limit_redis_error", scope=scope, error=str(e))
            return True, 0

        self._logger.warning(
            "rate_limit_exceeded",
            scope=scope,
            client_id=client_id,
            count=count,
            limit=limit,
        )
        return False, max(ttl, 1)


class DisabledRateLimiter:
    """Used when no Redis URL is configured."""

    def hit(self, scope: str, client_id: str) -> tuple[bool, int]:
        return True, 0


def build_rate_limiter(
    *,
    redis_url: str | None,
    limits: Mapping[str, int],
    window_seconds: int,
    logger: LoggerPort,
) -> RedisRateLimiter | DisabledRateLimiter:
    if not redis_url:
        logger.info("rate_limit_disabled")
        return DisabledRateLimiter()
    client = redis.Redis.from_url(redis_url, decode_responses=True)
    return RedisRateLimiter(redis=client, limits=limits, logger=logger, window_seconds=window_seconds)
