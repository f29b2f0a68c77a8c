from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from parafort_core.models.service import Service


class ServiceRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_active_by_id(self, service_id: int) -> Service | None:
        stmt = select(Service).where(Service.id == service_id, Service.is_active.is_(True))
        return await self.db.scalar(stmt)

    async def list_active(self) -> list[Service]:
        stmt = select(Service).where(Service.is_active.is_(True)).order_by(Service.sort_order, Service.id)
        return list((await self.db.scalars(stmt)).all())
