from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod

from parafort_core.checkout.wizard import CheckoutSession
from parafort_core.core.config import get_settings
from parafort_core.core.errors import AppError, ErrorCodes

logger = logging.getLogger(__name__)

KEY_PREFIX = "checkout_session:"


def session_not_found(session_id: str) -> AppError:
    return AppError(
        code=ErrorCodes.CHECKOUT_SESSION_NOT_FOUND,
        message="Checkout session not found or expired.",
        status_code=404,
        details={"session_id": session_id},
    )


class CheckoutSessionStore(ABC):
    @abstractmethod
    async def get(self, session_id: str) -> CheckoutSession | None:
        raise NotImplementedError

    @abstractmethod
    async def save(self, session: CheckoutSession) -> None:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, session_id: str) -> None:
        raise NotImplementedError

    async def require(self, session_id: str) -> CheckoutSession:
        session = await self.get(session_id)
        if session is None:
            raise session_not_found(session_id)
        return session


class InMemoryCheckoutSessionStore(CheckoutSessionStore):
    def __init__(self, ttl_seconds: int) -> None:
        self.ttl_seconds = ttl_seconds
        self._items: dict[str, tuple[float, str]] = {}
        self._lock = asyncio.Lock()

    async def get(self, session_id: str) -> CheckoutSession | None:
        async with self._lock:
            item = self._items.get(session_id)
            if item is None:
                return None
            expires_at, raw = item
            if expires_at <= time.monotonic():
                del self._items[session_id]
                return None
        return CheckoutSession.model_validate_json(raw)

    async def save(self, session: CheckoutSession) -> None:
        async with self._lock:
            self._items[session.id] = (time.monotonic() + self.ttl_seconds, session.model_dump_json())

    async def delete(self, session_id: str) -> None:
        async with self._lock:
            self._items.pop(session_id, None)


class RedisCheckoutSessionStore(CheckoutSessionStore):
    def __init__(self, redis_url: str, ttl_seconds: int) -> None:
        import redis.asyncio as redis_async

        self.ttl_seconds = ttl_seconds
        self.client = redis_async.from_url(redis_url, encoding="utf-8", decode_responses=True)

    async def get(self, session_id: str) -> CheckoutSession | None:
        raw = await self.client.get(f"{KEY_PREFIX}{session_id}")
        if raw is None:
            return None
        return CheckoutSession.model_validate_json(raw)

    async def save(self, session: CheckoutSession) -> None:
        await self.client.set(f"{KEY_PREFIX}{session.id}", session.model_dump_json(), ex=self.ttl_seconds)

    async def delete(self, session_id: str) -> None:
        await self.client.delete(f"{KEY_PREFIX}{session_id}")


_store_instance: CheckoutSessionStore | None = None


def get_checkout_session_store() -> CheckoutSessionStore:
    global _store_instance
    if _store_instance is None:
        settings = get_settings()
        if settings.redis_url:
            _store_instance = RedisCheckoutSessionStore(settings.redis_url, settings.checkout_session_ttl_seconds)
        else:
            logger.warning(
                "checkout_session_store.memory: REDIS_URL not set, sessions are process-local",
                extra={"ttl_seconds": settings.checkout_session_ttl_seconds},
            )
            _store_instance = InMemoryCheckoutSessionStore(settings.checkout_session_ttl_seconds)
    return _store_instance
