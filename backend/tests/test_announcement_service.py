import uuid
from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from parafort_core.core.errors import AppError, ErrorCodes
from parafort_core.models.announcement import Announcement
from parafort_core.schemas.announcement import AnnouncementCreateRequest, AnnouncementUpdateRequest
from parafort_core.services.announcement_service import AnnouncementService, sort_by_priority


class FakeDB:
    def __init__(self) -> None:
        self.added: list[object] = []
        self.commits = 0

    def add(self, obj: object) -> None:
        self.added.append(obj)

    async def flush(self) -> None:
        return None

    async def commit(self) -> None:
        self.commits += 1


class FakeRepository:
    def __init__(self) -> None:
        self.items: dict[uuid.UUID, Announcement] = {}

    async def create(self, announcement: Announcement) -> Announcement:
        now = datetime.now(UTC)
        announcement.id = announcement.id or uuid.uuid4()
        announcement.created_at = now
        announcement.updated_at = now
        self.items[announcement.id] = announcement
        return announcement

    async def get_by_id(self, announcement_id: uuid.UUID) -> Announcement | None:
        item = self.items.get(announcement_id)
        if item is None or item.deleted_at is not None:
            return None
        return item

    async def save(self, announcement: Announcement) -> Announcement:
        announcement.updated_at = datetime.now(UTC)
        return announcement

    async def list_published(self, *, audience: str, now: datetime) -> list[Announcement]:
        return [
            item
            for item in self.items.values()
            if item.deleted_at is None and item.status == "published" and item.target_audience in ("all", audience)
        ]


def _announcement(priority: str, *, published_days_ago: int = 0, title: str | None = None) -> Announcement:
    now = datetime.now(UTC)
    return Announcement(
        id=uuid.uuid4(),
        created_by=uuid.uuid4(),
        title=title or priority,
        content="body",
        priority=priority,
        publish_date=now - timedelta(days=published_days_ago),
        created_at=now,
    )


def _service() -> tuple[AnnouncementService, FakeDB]:
    db = FakeDB()
    service = AnnouncementService(db=db)
    service.repository = FakeRepository()
    return service, db


def _create_payload(**overrides) -> AnnouncementCreateRequest:
    data = {
        "title": "Scheduled maintenance",
        "content": "Filing portal offline Sunday.",
        "type": "maintenance",
        "priority": "high",
        "target_audience": "clients",
        "status": "published",
    }
    data.update(overrides)
    return AnnouncementCreateRequest(**data)


def test_sort_by_priority_puts_urgent_first_then_newest():
    older_high = _announcement("high", published_days_ago=3, title="older-high")
    newer_high = _announcement("high", published_days_ago=1, title="newer-high")
    ordered = sort_by_priority([_announcement("low"), older_high, _announcement("urgent"), newer_high])

    assert [item.title for item in ordered] == ["urgent", "newer-high", "older-high", "low"]


def test_create_rejects_inverted_window():
    now = datetime.now(UTC)
    with pytest.raises(ValueError):
        _create_payload(publish_date=now, expiration_date=now - timedelta(hours=1))


@pytest.mark.asyncio
async def test_create_audits_and_commits() -> None:
    service, db = _service()

    created = await service.create(actor_user_id=uuid.uuid4(), payload=_create_payload(), correlation_id="corr-1")

    assert created.title == "Scheduled maintenance"
    assert created.target_audience == "clients"
    assert db.commits == 1
    assert len(db.added) == 1


@pytest.mark.asyncio
async def test_update_rejects_expiration_before_publish() -> None:
    service, db = _service()
    now = datetime.now(UTC)
    created = await service.create(
        actor_user_id=uuid.uuid4(), payload=_create_payload(publish_date=now), correlation_id=None
    )

    with pytest.raises(AppError) as exc:
        await service.update(
            actor_user_id=uuid.uuid4(),
            announcement_id=created.id,
            payload=AnnouncementUpdateRequest(expiration_date=now - timedelta(days=1)),
            correlation_id=None,
        )

    assert exc.value.code == ErrorCodes.ANNOUNCEMENT_INVALID_WINDOW
    assert db.commits == 1


@pytest.mark.asyncio
async def test_deleted_announcement_is_not_found() -> None:
    service, _ = _service()
    actor = uuid.uuid4()
    created = await service.create(actor_user_id=actor, payload=_create_payload(), correlation_id=None)

    await service.delete(actor_user_id=actor, announcement_id=created.id, correlation_id=None)

    with pytest.raises(AppError) as exc:
        await service.get(announcement_id=created.id)
    assert exc.value.code == ErrorCodes.ANNOUNCEMENT_NOT_FOUND
    assert exc.value.status_code == 404
    assert await service.list_active(audience="clients") == []


@pytest.mark.asyncio
async def test_list_active_filters_audience() -> None:
    service, _ = _service()
    actor = uuid.uuid4()
    await service.create(actor_user_id=actor, payload=_create_payload(title="For clients"), correlation_id=None)
    await service.create(
        actor_user_id=actor, payload=_create_payload(title="For admins", target_audience="admins"), correlation_id=None
    )

    active = await service.list_active(audience="clients")

    assert [item.title for item in active] == ["For clients"]


@pytest.mark.parametrize("field_name", ["title", "content", "priority", "status", "is_dismissible"])
def test_update_rejects_null_for_required_columns(field_name):
    with pytest.raises(ValidationError):
        AnnouncementUpdateRequest.model_validate({field_name: None})


@pytest.mark.asyncio
async def test_update_can_clear_expiration_and_leaves_omitted_fields() -> None:
    service, _ = _service()
    now = datetime.now(UTC)
    created = await service.create(
        actor_user_id=uuid.uuid4(),
        payload=_create_payload(publish_date=now, expiration_date=now + timedelta(days=7)),
        correlation_id=None,
    )

    updated = await service.update(
        actor_user_id=uuid.uuid4(),
        announcement_id=created.id,
        payload=AnnouncementUpdateRequest.model_validate({"expiration_date": None, "priority": "urgent"}),
        correlation_id=None,
    )

    assert updated.expiration_date is None
    assert updated.priority == "urgent"
    assert updated.title == "Scheduled maintenance"
