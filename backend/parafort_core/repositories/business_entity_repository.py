import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from parafort_core.models.business_entity import BusinessEntity, ComplianceItem, Document


class BusinessEntityRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create(self, entity: BusinessEntity) -> BusinessEntity:
        self.db.add(entity)
        await self.db.flush()
        await self.db.refresh(entity)
        return entity

    async def get_by_id(self, entity_id: uuid.UUID) -> BusinessEntity | None:
        stmt = select(BusinessEntity).where(BusinessEntity.id == entity_id, BusinessEntity.deleted_at.is_(None))
        return await self.db.scalar(stmt)

    async def list_documents(self, entity_id: uuid.UUID) -> list[Document]:
        stmt = (
            select(Document)
            .where(Document.business_entity_id == entity_id, Document.deleted_at.is_(None))
            .order_by(Document.uploaded_at.desc())
        )
        return list((await self.db.scalars(stmt)).all())

    async def list_compliance_items(self, entity_id: uuid.UUID) -> list[ComplianceItem]:
        stmt = (
            select(ComplianceItem)
            .where(ComplianceItem.business_entity_id == entity_id)
            .order_by(ComplianceItem.due_date.asc())
        )
        return list((await self.db.scalars(stmt)).all())
