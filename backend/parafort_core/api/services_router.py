from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from parafort_core.db.session import get_async_db_session
from parafort_core.schemas.service import ServiceResponse
from parafort_core.services.service_catalog_service import ServiceCatalogService

router = APIRouter(prefix="/api/services", tags=["services"])


def catalog_service_dependency(db: AsyncSession = Depends(get_async_db_session)) -> ServiceCatalogService:
    return ServiceCatalogService(db)


@router.get("", response_model=list[ServiceResponse])
async def list_services(service: ServiceCatalogService = Depends(catalog_service_dependency)) -> list[ServiceResponse]:
    return await service.list_services()


@router.get("/{service_id}", response_model=ServiceResponse)
async def get_service(
    service_id: int, service: ServiceCatalogService = Depends(catalog_service_dependency)
) -> ServiceResponse:
    return await service.get_service(service_id=service_id)
