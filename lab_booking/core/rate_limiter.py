import logging
import threading
import time
from abc import ABC, abstractmethod
from collections import defaultdict, deque
from dataclasses import dataclass
from uuid import uuid4

import redis

from lab_booking.core.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    retry_after: int = 0


@dataclass(frozen=True)
class RateLimitPolicy:
    scope: str
    limit: int
    window_seconds: int


def auth_policy() -> RateLimitPolicy:
    return RateLimitPolicy(
        scope="auth",
        limit=settings.auth_max_attempts,
        window_seconds=settings.auth_rate_limit_window_seconds,
    )


def booking_policy() -> RateLimitPolicy:
    return RateLimitPolicy(
        scope="booking",
        limit=settings.booking_max_attempts,
        window_seconds=settings.booking_rate_limit_window_seconds,
    )


def admin_policy() -> RateLimitPolicy:
    return RateLimitPolicy(
        scope="admin",
        limit=settings.admin_max_attempts,
        window_seconds=settings.admin_rate_limit_window_seconds,
    )


class RateLimiter(ABC):
    """Sliding-window limiter keyed by ``scope:identifier``."""

    def check(self, policy: RateLimitPolicy, identifier: str) -> RateLimitDecision:
        return self.hit(f"{policy.scope}:{identifier}", policy.limit, policy.window_seconds)

    @abstractmethod
    def hit(self, key: str, limit: int, window_seconds: int) -> RateLimitDecision:
        raise NotImplementedError

    @abstractmethod
    def reset(self) -> None:
        raise NotImplementedError


class InMemoryRateLimiter(RateLimiter):
    def __init__(self) -> None:
        self._hits: dict[str, deque[float]] = defaultdict(deque)
        self._lock = threading.Lock()

    def hit(self, key: str, limit: int, window_seconds: int) -> RateLimitDecision:
        now = time.time()
        window_start = now - window_seconds
        with self._lock:
            hits = self._hits[key]
            while hits and hits[0] <= window_start:
                hits.popleft()

            if len(hits) >= limit:
                return RateLimitDecision(
                    allowed=False,
                    retry_after=max(1, int(hits[0] + window_seconds - now)),
                )

            hits.append(now)
            return RateLimitDecision(allowed=True)

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()


class RedisRateLimiter(RateLimiter):
    def __init__(self, redis_url: str, prefix: str = "lab-rl") -> None:
        self._client = redis.Redis.from_url(
            redis_url,
            socket_connect_timeout=0.2,
            socket_timeout=0.2,
            decode_responses=False,
        )
        self._prefix = prefix

    def hit(self, key: str, limit: int, window_seconds: int) -> RateLimitDecision:
        redis_key = f"{self._prefix}:{key}"
        now_ms = int(time.time() * 1000)
        window_ms = window_seconds * 1000

        pipe = self._client.pipeline()
        pipe.zremrangebyscore(redis_key, 0, now_ms - window_ms)
        pipe.zcard(redis_key)
        _, current_count = pipe.execute()

        if current_count >= limit:
            oldest = self._client.zrange(redis_key, 0, 0, withscores=True)
            retry_after = window_seconds
            if oldest:
                retry_after = int((int(oldest[0][1]) + window_ms - now_ms) / 1000)
            return RateLimitDecision(allowed=False, retry_after=max(1, retry_after))

        pipe = self._client.pipeline()
        pipe.zadd(redis_key, {f"{now_ms}:{uuid4().hex}".encode(): now_ms})
        pipe.expire(redis_key, window_seconds + 5)
        pipe.execute()
        return RateLimitDecision(allowed=True)

    def reset(self) -> None:
        keys = self._client.keys(f"{self._prefix}:*")
        if keys:
            self._client.delete(*keys)


class FallbackRateLimiter(RateLimiter):
    def __init__(self, primary: RateLimiter, fallback: RateLimiter) -> None:
        self._primary = primary
        self._fallback = fallback

    def hit(self, key: str, limit: int, window_seconds: int) -> RateLimitDecision:
        try:
            return self._primary.hit(key, limit, window_seconds)
        except redis.RedisError:
            logger.warning("rate_limiter_fallback key=%s", key)
            return self._fallback.hit(key, limit, window_seconds)

    def reset(self) -> None:
        try:
            self._primary.reset()
        except redis.RedisError:
            logger.warning("rate_limiter_reset_failed backend=primary")
        self._fallback.reset()


def _build_rate_limiter() -> RateLimiter:
    backend = settings.rate_limit_backend.strip().lower()
    memory = InMemoryRateLimiter()
    if backend == "redis":
        return FallbackRateLimiter(
            primary=RedisRateLimiter(redis_url=settings.rate_limit_redis_url),
            fallback=memory,
        )
    return memory


rate_limiter: RateLimiter = _build_rate_limiter()
