import uuid
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from parafort_core.core.errors import AppError, ErrorCodes
from parafort_core.models.announcement import PRIORITY_RANK, Announcement
from parafort_core.repositories.announcement_repository import AnnouncementRepository
from parafort_core.schemas.announcement import (
    AnnouncementCreateRequest,
    AnnouncementListResponse,
    AnnouncementResponse,
    AnnouncementUpdateRequest,
)
from parafort_core.services.audit import write_audit_log


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def sort_by_priority(announcements: list[Announcement]) -> list[Announcement]:
    """Urgent first; within one priority the newest publish date wins."""
    def key(item: Announcement) -> tuple[int, float]:
        published = _as_utc(item.publish_date or item.created_at)
        return (PRIORITY_RANK.get(item.priority, len(PRIORITY_RANK)), -published.timestamp() if published else 0.0)

    return sorted(announcements, key=key)


class AnnouncementService:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self.repository = AnnouncementRepository(db)

    async def create(
        self, *, actor_user_id: uuid.UUID, payload: AnnouncementCreateRequest, correlation_id: str | None
    ) -> AnnouncementResponse:
        announcement = Announcement(created_by=actor_user_id, **payload.model_dump())
        created = await self.repository.create(announcement)
        await write_audit_log(
            self.db,
            actor_user_id=actor_user_id,
            entity_name="announcement",
            entity_id=created.id,
            action="announcement_created",
            changed_field_names=sorted(payload.model_fields_set) or ["title"],
            metadata={"status": created.status},
            correlation_id=correlation_id,
        )
        await self.db.commit()
        return AnnouncementResponse.model_validate(created)

    async def list_announcements(self, *, limit: int, offset: int, status: str | None = None) -> AnnouncementListResponse:
        items, total = await self.repository.list_paginated(limit=limit, offset=offset, status=status)
        return AnnouncementListResponse(
            items=[AnnouncementResponse.model_validate(item) for item in items],
            total=total,
            limit=limit,
            offset=offset,
        )

    async def get(self, *, announcement_id: uuid.UUID) -> AnnouncementResponse:
        return AnnouncementResponse.model_validate(await self._require(announcement_id))

    async def update(
        self,
        *,
        actor_user_id: uuid.UUID,
        announcement_id: uuid.UUID,
        payload: AnnouncementUpdateRequest,
        correlation_id: str | None,
    ) -> AnnouncementResponse:
        announcement = await self._require(announcement_id)
        changes = payload.model_dump(exclude_unset=True)
        for field_name, value in changes.items():
            setattr(announcement, field_name, value)

        publish_date = _as_utc(announcement.publish_date)
        expiration_date = _as_utc(announcement.expiration_date)
        if publish_date and expiration_date and expiration_date <= publish_date:
            raise AppError(
                code=ErrorCodes.ANNOUNCEMENT_INVALID_WINDOW,
                message="expiration_date must be after publish_date.",
                status_code=422,
                details={"announcement_id": str(announcement_id)},
            )

        updated = await self.repository.save(announcement)
        await write_audit_log(
            self.db,
            actor_user_id=actor_user_id,
            entity_name="announcement",
            entity_id=updated.id,
            action="announcement_updated",
            changed_field_names=sorted(changes),
            metadata={"status": updated.status},
            correlation_id=correlation_id,
        )
        await self.db.commit()
        return AnnouncementResponse.model_validate(updated)

    async def delete(self, *, actor_user_id: uuid.UUID, announcement_id: uuid.UUID, correlation_id: str | None) -> None:
        announcement = await self._require(announcement_id)
        announcement.deleted_at = datetime.now(UTC)
        await self.repository.save(announcement)
        await write_audit_log(
            self.db,
            actor_user_id=actor_user_id,
            entity_name="announcement",
            entity_id=announcement.id,
            action="announcement_deleted",
            changed_field_names=["deleted_at"],
            metadata={},
            correlation_id=correlation_id,
        )
        await self.db.commit()

    async def list_active(self, *, audience: str, now: datetime | None = None) -> list[AnnouncementResponse]:
        items = await self.repository.list_published(audience=audience, now=now or datetime.now(UTC))
        return [AnnouncementResponse.model_validate(item) for item in sort_by_priority(items)]

    async def _require(self, announcement_id: uuid.UUID) -> Announcement:
        announcement = await self.repository.get_by_id(announcement_id)
        if announcement is None:
            raise AppError(
                code=ErrorCodes.ANNOUNCEMENT_NOT_FOUND,
                message="Announcement not found.",
                status_code=404,
                details={"announcement_id": str(announcement_id)},
            )
        return announcement
