"""Login throttling backed by Redis.

Two independent guards protect POST /auth/login:

- a sliding window per client fingerprint (IP + User-Agent) that caps
  attempts within RATE_LIMIT_WINDOW_SECONDS
- a per-account failure counter that locks the client out for
  LOCKOUT_DURATION_SECONDS once LOCKOUT_THRESHOLD failures accumulate

Both are no-ops when REDIS_URL is unset or Redis cannot be reached, so a
single-node deployment without Redis still serves logins.
"""

import hashlib
import logging
import time
from typing import Optional

from fastapi import Request, status
from redis import Redis
from redis.exceptions import RedisError

from audit.service import get_client_ip, get_user_agent
from config import get_settings
from errors import ApiError

logger = logging.getLogger(__name__)

KEY_PREFIX = "uaetrail"


def _digest(value: str) -> str:
    return hashlib.sha256(value.encode()).hexdigest()[:32]


def client_fingerprint(request: Request) -> str:
    """Stable hash of the caller's IP address and User-Agent."""
    ip = get_client_ip(request) or "unknown"
    return _digest(f"{ip}:{get_user_agent(request) or ''}")


def connect_redis(redis_url: Optional[str]) -> Optional[Redis]:
    if not redis_url:
        return None
    try:
        client = Redis.from_url(redis_url, decode_responses=True)
        client.ping()
    except RedisError as e:
        logger.warning(f"Login throttling disabled, Redis unavailable: {e}")
        return None
    return client


class RateLimiter:
    """Sliding-window attempt counter and account lockout.

    The Redis connection is opened lazily on first use and cached until
    reset() is called.
    """

    def __init__(self):
        self._redis: Optional[Redis] = None
        self._connected = False

    @property
    def redis(self) -> Optional[Redis]:
        if not self._connected:
            self._redis = connect_redis(get_settings().REDIS_URL)
            self._connected = True
        return self._redis

    def reset(self) -> None:
        self._redis = None
        self._connected = False

    @staticmethod
    def _window_key(request: Request, endpoint: str) -> str:
        return f"{KEY_PREFIX}:attempts:{endpoint}:{client_fingerprint(request)}"

    @staticmethod
    def _lockout_key(request: Request) -> str:
        return f"{KEY_PREFIX}:lockout:{client_fingerprint(request)}"

    @staticmethod
    def _failures_key(email: str) -> str:
        return f"{KEY_PREFIX}:failures:{_digest(email.strip().lower())}"

    def is_rate_limited(self, request: Request, endpoint: str = "auth") -> bool:
        if not self.redis:
            return False

        settings = get_settings()
        key = self._window_key(request, endpoint)
        self.redis.zremrangebyscore(key, 0, time.time() - settings.RATE_LIMIT_WINDOW_SECONDS)
        return self.redis.zcard(key) >= settings.RATE_LIMIT_MAX_ATTEMPTS

    def record_attempt(self, request: Request, endpoint: str = "auth") -> int:
        """Add an attempt to the window; returns the attempts now in it."""
        if not self.redis:
            return 0

        key = self._window_key(request, endpoint)
        now = time.time()
        pipe = self.redis.pipeline()
        pipe.zadd(key, {f"{now:.6f}": now})
        pipe.expire(key, get_settings().RATE_LIMIT_WINDOW_SECONDS)
        pipe.zcard(key)
        return pipe.execute()[-1]

    def is_locked_out(self, request: Request) -> bool:
        if not self.redis:
            return False
        return bool(self.redis.exists(self._lockout_key(request)))

    def get_lockout_remaining(self, request: Request) -> int:
        if not self.redis:
            return 0
        return max(0, self.redis.ttl(self._lockout_key(request)))

    def record_failed_login(self, email: str, request: Request) -> bool:
        """Count a failed login for the account.

        Returns:
            True when this failure triggered a lockout of the client
        """
        if not self.redis:
            return False

        settings = get_settings()
        key = self._failures_key(email)
        failures = self.redis.incr(key)
        self.redis.expire(key, settings.RATE_LIMIT_WINDOW_SECONDS)

        if failures < settings.LOCKOUT_THRESHOLD:
            return False

        self.redis.setex(self._lockout_key(request), settings.LOCKOUT_DURATION_SECONDS, "1")
        logger.warning(f"Client locked out after {failures} failed logins for one account")
        return True

    def clear_failed_attempts(self, email: str) -> None:
        if self.redis:
            self.redis.delete(self._failures_key(email))


rate_limiter = RateLimiter()


def check_rate_limit(request: Request) -> None:
    """FastAPI dependency guarding the login route; raises 429 rate_limited."""
    if rate_limiter.is_locked_out(request):
        remaining = rate_limiter.get_lockout_remaining(request)
        raise ApiError(
            status.HTTP_429_TOO_MANY_REQUESTS,
            "rate_limited",
            f"Too many failed attempts. Try again in {remaining} seconds.",
            details={"retryAfter": remaining},
        )

    if rate_limiter.is_rate_limited(request, "auth"):
        raise ApiError(
            status.HTTP_429_TOO_MANY_REQUESTS,
            "rate_limited",
            "Too many login attempts. Please wait before trying again.",
            details={"retryAfter": get_settings().RATE_LIMIT_WINDOW_SECONDS},
        )

    rate_limiter.record_attempt(request, "auth")
