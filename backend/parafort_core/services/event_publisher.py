from __future__ import annotations

import json
import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from typing import Any

import redis.asyncio as redis_async

from parafort_core.core.config import get_settings

logger = logging.getLogger(__name__)

TOPIC_PREFIX = "parafort"


@dataclass(frozen=True)
class DomainEvent:
    """Envelope broadcast on ``parafort.<event_name>`` after a commit."""

    event_type: str
    entity_id: str
    payload: dict[str, Any]
    entity_type: str = "unknown"
    correlation_id: str | None = None
    ts: str = field(default_factory=lambda: datetime.now(UTC).isoformat())

    @property
    def topic(self) -> str:
        return f"{TOPIC_PREFIX}.{self.event_type}"

    def to_json(self) -> str:
        return json.dumps({"topic": self.topic, **asdict(self)}, default=str)


class EventPublisher(ABC):
    @abstractmethod
    async def publish(
        self,
        event_name: str,
        entity_id: uuid.UUID,
        payload: dict[str, Any],
        *,
        entity_type: str | None = None,
        correlation_id: str | None = None,
    ) -> None:
        raise NotImplementedError


class NoOpEventPublisher(EventPublisher):
    async def publish(self, event_name, entity_id, payload, *, entity_type=None, correlation_id=None):
        logger.debug("domain_event_dropped event=%s entity_id=%s", event_name, entity_id)


class RedisEventPublisher(EventPublisher):
    def __init__(self, redis_url: str) -> None:
        self._redis_url = redis_url
        self._client: redis_async.Redis | None = None

    @property
    def client(self) -> redis_async.Redis:
        if self._client is None:
            self._client = redis_async.from_url(self._redis_url, decode_responses=True)
        return self._client

    async def publish(
        self,
        event_name: str,
        entity_id: uuid.UUID,
        payload: dict[str, Any],
        *,
        entity_type: str | None = None,
        correlation_id: str | None = None,
    ) -> None:
        event = DomainEvent(
            event_type=event_name,
            entity_id=str(entity_id),
            payload=payload,
            entity_type=entity_type or "unknown",
            correlation_id=correlation_id,
        )
        try:
            receivers = await self.client.publish(event.topic, event.to_json())
        except Exception:
            # Subscribers re-read state from the database; a lost event is logged, not raised.
            logger.exception(
                "domain_event_publish_failed",
                extra={"topic": event.topic, "entity_id": event.entity_id, "correlation_id": correlation_id},
            )
            return
        logger.debug("domain_event_published topic=%s receivers=%s", event.topic, receivers)


_publisher: EventPublisher | None = None


def get_event_publisher() -> EventPublisher:
    global _publisher
    if _publisher is not None:
        return _publisher
    settings = get_settings()
    if settings.redis_url:
        _publisher = RedisEventPublisher(settings.redis_url)
    else:
        logger.warning("REDIS_URL not set; domain events will not be broadcast", extra={"environment": settings.environment})
        _publisher = NoOpEventPublisher()
    return _publisher
