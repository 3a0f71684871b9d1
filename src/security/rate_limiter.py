"""Redis-backed fixed-window rate limiter.

Uses INCR + EXPIRE for simple, performant rate limiting.
Applied as a router dependency, before auth and any DB work.

Usage:
    from src.security.rate_limiter import rate_limiter

    allowed, retry_after = await rate_limiter.check("rate:10.0.0.1", limit=100, window=60)
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, Request, status

from src.config import settings
from src.db.engine import redis_client

logger = logging.getLogger(__name__)


class RateLimiter:
    """Fixed-window rate limiter backed by Redis INCR + EXPIRE."""

    def __init__(self, redis: object) -> None:
        self._redis = redis

    async def check(self, key: str, limit: int, window: int) -> tuple[bool, int]:
        """Check if a request is within the rate limit.

        Args:
            key: Redis key (e.g. "rate:{client_ip}").
            limit: Max requests allowed in the window.
            window: Window size in seconds.

        Returns:
            (allowed, retry_after): allowed is True if under limit,
            retry_after is seconds until window resets (0 if allowed).
        """
        try:
            count = await self._redis.incr(key)
            if count == 1:
                await self._redis.expire(key, window)

            if count > limit:
                ttl = await self._redis.ttl(key)
                retry_after = max(ttl, 1)
                return False, retry_after

            return True, 0
        except Exception:
            logger.exception("Rate limiter Redis error for key %s", key)
            # Fail open if Redis is down
            return True, 0


# Module-level singleton
rate_limiter = RateLimiter(redis_client)


async def enforce_rate_limit(request: Request) -> None:
    """FastAPI dependency: 429 once a client exceeds the configured window."""
    client_ip = request.client.host if request.client else "unknown"
    allowed, retry_after = await rate_limiter.check(
        f"rate:{client_ip}",
        limit=settings.api.rate_limit_max,
        window=settings.api.rate_limit_window,
    )
    if not allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={"message": "Too many requests", "code": "RATE_LIMITED"},
            headers={"Retry-After": str(retry_after)},
        )
