"""One-time passwords for admin login, kept in a TTL-bounded store."""

from __future__ import annotations

import asyncio
import secrets
import time
from collections.abc import Callable
from typing import Protocol

from loguru import logger
from redis.asyncio import Redis

from rental_admin import settings

_redis: Redis | None = None


def get_redis() -> Redis:
    global _redis
    if _redis is None:
        _redis = Redis.from_url(settings.REDIS_URL, decode_responses=True)
    return _redis


def generate_otp() -> str:
    """Six-digit code, never starting with zero."""
    return str(secrets.randbelow(900_000) + 100_000)


def otp_matches(expected: str, given: str) -> bool:
    return secrets.compare_digest(expected.encode(), given.encode())


class OtpStore(Protocol):
    async def set(self, key: str, code: str, ttl: int) -> None: ...

    async def get(self, key: str) -> str | None: ...

    async def delete(self, key: str) -> None: ...

    async def sweep_expired(self) -> int: ...


class InMemoryOtpStore:
    """Single-process store. Expired codes read as missing and are dropped by sweeps."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._codes: dict[str, tuple[str, float]] = {}
        self._lock = asyncio.Lock()

    async def set(self, key: str, code: str, ttl: int) -> None:
        async with self._lock:
            self._codes[key] = (code, self._clock() + ttl)

    async def get(self, key: str) -> str | None:
        async with self._lock:
            entry = self._codes.get(key)
            if entry is None:
                return None
            code, expires_at = entry
            if self._clock() >= expires_at:
                del self._codes[key]
                return None
            return code

    async def delete(self, key: str) -> None:
        async with self._lock:
            self._codes.pop(key, None)

    async def sweep_expired(self) -> int:
        async with self._lock:
            now = self._clock()
            expired = [k for k, (_, exp) in self._codes.items() if now >= exp]
            for key in expired:
                del self._codes[key]
        if expired:
            logger.debug("Swept {} expired OTPs", len(expired))
        return len(expired)


class RedisOtpStore:
    """Redis-backed store; Redis expires keys itself, so sweeping is a no-op."""

    def __init__(self, redis: Redis | None = None, prefix: str = "otp") -> None:
        self._redis = redis
        self._prefix = prefix

    @property
    def redis(self) -> Redis:
        return self._redis if self._redis is not None else get_redis()

    def _key(self, key: str) -> str:
        return f"{self._prefix}:{key}"

    async def set(self, key: str, code: str, ttl: int) -> None:
        await self.redis.setex(self._key(key), ttl, code)

    async def get(self, key: str) -> str | None:
        return await self.redis.get(self._key(key))

    async def delete(self, key: str) -> None:
        await self.redis.delete(self._key(key))

    async def sweep_expired(self) -> int:
        return 0


async def sweep_forever(store: OtpStore, interval: float) -> None:
    """Periodically drop expired codes; runs until cancelled."""
    while True:
        await asyncio.sleep(interval)
        try:
            await store.sweep_expired()
        except Exception:
            logger.opt(exception=True).warning("OTP sweep failed")


def build_otp_store(backend: str = settings.OTP_BACKEND) -> OtpStore:
    if backend == "redis":
        return RedisOtpStore()
    if backend == "memory":
        return InMemoryOtpStore()
    raise ValueError(f"Unknown OTP backend: {backend!r}")
