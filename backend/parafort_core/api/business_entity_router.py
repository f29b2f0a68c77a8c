import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from parafort_core.api.dependencies import event_publisher_dependency, get_current_user
from parafort_core.db.session import get_async_db_session
from parafort_core.schemas.auth import CurrentUser
from parafort_core.schemas.business_entity import (
    BusinessEntityResponse,
    ComplianceItemResponse,
    DocumentResponse,
)
from parafort_core.schemas.formation_order import FormationOrderListResponse
from parafort_core.services.business_entity_service import BusinessEntityService
from parafort_core.services.event_publisher import EventPublisher
from parafort_core.services.formation_order_service import FormationOrderService

router = APIRouter(prefix="/api/business-entities", tags=["business-entities"])


def business_entity_service_dependency(db: AsyncSession = Depends(get_async_db_session)) -> BusinessEntityService:
    return BusinessEntityService(db)


@router.get("/{entity_id}", response_model=BusinessEntityResponse)
async def get_business_entity(
    entity_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    service: BusinessEntityService = Depends(business_entity_service_dependency),
) -> BusinessEntityResponse:
    return await service.get_entity(current_user=current_user, entity_id=entity_id)


@router.get("/{entity_id}/formation-orders", response_model=FormationOrderListResponse)
async def list_entity_orders(
    entity_id: uuid.UUID,
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db_session),
    publisher: EventPublisher = Depends(event_publisher_dependency),
    service: BusinessEntityService = Depends(business_entity_service_dependency),
) -> FormationOrderListResponse:
    await service.require_accessible(current_user=current_user, entity_id=entity_id)
    orders = FormationOrderService(db=db, publisher=publisher)
    return await orders.list_orders(limit=limit, offset=offset, business_entity_id=entity_id)


@router.get("/{entity_id}/documents", response_model=list[DocumentResponse])
async def list_entity_documents(
    entity_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    service: BusinessEntityService = Depends(business_entity_service_dependency),
) -> list[DocumentResponse]:
    return await service.list_documents(current_user=current_user, entity_id=entity_id)


@router.get("/{entity_id}/compliance", response_model=list[ComplianceItemResponse])
async def list_entity_compliance(
    entity_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    service: BusinessEntityService = Depends(business_entity_service_dependency),
) -> list[ComplianceItemResponse]:
    return await service.list_compliance_items(current_user=current_user, entity_id=entity_id)
