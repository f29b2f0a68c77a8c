from sqlalchemy.ext.asyncio import AsyncSession

from parafort_core.core.errors import AppError, ErrorCodes
from parafort_core.repositories.service_repository import ServiceRepository
from parafort_core.schemas.service import ServiceResponse


class ServiceCatalogService:
    def __init__(self, db: AsyncSession) -> None:
        self.repository = ServiceRepository(db)

    async def list_services(self) -> list[ServiceResponse]:
        return [ServiceResponse.model_validate(service) for service in await self.repository.list_active()]

    async def get_service(self, *, service_id: int) -> ServiceResponse:
        service = await self.repository.get_active_by_id(service_id)
        if service is None:
            raise AppError(
                code=ErrorCodes.SERVICE_NOT_FOUND,
                message="Service not found.",
                status_code=404,
                details={"service_id": service_id},
            )
        return ServiceResponse.model_validate(service)
