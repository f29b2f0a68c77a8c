import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from parafort_core.core.errors import AppError, ErrorCodes
from parafort_core.models.business_entity import BusinessEntity
from parafort_core.models.user import UserRole
from parafort_core.repositories.business_entity_repository import BusinessEntityRepository
from parafort_core.schemas.auth import CurrentUser
from parafort_core.schemas.business_entity import (
    BusinessEntityResponse,
    ComplianceItemResponse,
    DocumentResponse,
)


class BusinessEntityService:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self.repository = BusinessEntityRepository(db)

    async def get_entity(self, *, current_user: CurrentUser, entity_id: uuid.UUID) -> BusinessEntityResponse:
        entity = await self.require_accessible(current_user=current_user, entity_id=entity_id)
        return BusinessEntityResponse.model_validate(entity)

    async def list_documents(self, *, current_user: CurrentUser, entity_id: uuid.UUID) -> list[DocumentResponse]:
        await self.require_accessible(current_user=current_user, entity_id=entity_id)
        return [DocumentResponse.model_validate(doc) for doc in await self.repository.list_documents(entity_id)]

    async def list_compliance_items(
        self, *, current_user: CurrentUser, entity_id: uuid.UUID
    ) -> list[ComplianceItemResponse]:
        await self.require_accessible(current_user=current_user, entity_id=entity_id)
        items = await self.repository.list_compliance_items(entity_id)
        return [ComplianceItemResponse.model_validate(item) for item in items]

    async def require_accessible(self, *, current_user: CurrentUser, entity_id: uuid.UUID) -> BusinessEntity:
        entity = await self.repository.get_by_id(entity_id)
        # Someone else's entity looks exactly like a missing one.
        if entity is None or (current_user.role != UserRole.ADMIN and entity.user_id != current_user.user_id):
            raise AppError(
                code=ErrorCodes.BUSINESS_ENTITY_NOT_FOUND,
                message="Business entity not found.",
                status_code=404,
                details={"business_entity_id": str(entity_id)},
            )
        return entity
