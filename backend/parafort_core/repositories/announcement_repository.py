import uuid
from datetime import datetime

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from parafort_core.models.announcement import Announcement


class AnnouncementRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create(self, announcement: Announcement) -> Announcement:
        self.db.add(announcement)
        await self.db.flush()
        await self.db.refresh(announcement)
        return announcement

    async def get_by_id(self, announcement_id: uuid.UUID) -> Announcement | None:
        stmt = select(Announcement).where(
            Announcement.id == announcement_id,
            Announcement.deleted_at.is_(None),
        )
        return await self.db.scalar(stmt)

    async def list_paginated(
        self, *, limit: int, offset: int, status: str | None = None
    ) -> tuple[list[Announcement], int]:
        filters = [Announcement.deleted_at.is_(None)]
        if status:
            filters.append(Announcement.status == status)
        list_stmt = (
            select(Announcement)
            .where(*filters)
            .order_by(Announcement.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        count_stmt = select(func.count()).select_from(Announcement).where(*filters)
        items = list((await self.db.scalars(list_stmt)).all())
        total = int((await self.db.scalar(count_stmt)) or 0)
        return items, total

    async def list_published(self, *, audience: str, now: datetime) -> list[Announcement]:
        stmt = select(Announcement).where(
            Announcement.deleted_at.is_(None),
            Announcement.status == "published",
            Announcement.target_audience.in_(["all", audience]),
            or_(Announcement.publish_date.is_(None), Announcement.publish_date <= now),
            or_(Announcement.expiration_date.is_(None), Announcement.expiration_date > now),
        )
        return list((await self.db.scalars(stmt)).all())

    async def save(self, announcement: Announcement) -> Announcement:
        await self.db.flush()
        await self.db.refresh(announcement)
        return announcement
