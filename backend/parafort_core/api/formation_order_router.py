import uuid

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from parafort_core.api.dependencies import event_publisher_dependency, get_current_user, require_role
from parafort_core.db.session import get_async_db_session
from parafort_core.models.formation_order import OrderStatus
from parafort_core.models.user import UserRole
from parafort_core.schemas.auth import CurrentUser
from parafort_core.schemas.formation_order import (
    FormationOrderListResponse,
    FormationOrderResponse,
    FormationOrderStatusUpdateRequest,
)
from parafort_core.services.event_publisher import EventPublisher
from parafort_core.services.formation_order_service import FormationOrderService

admin_router = APIRouter(prefix="/api/admin/formation-orders", tags=["admin", "formation-orders"])
router = APIRouter(prefix="/api/formation-orders", tags=["formation-orders"])


def formation_order_service_dependency(
    db: AsyncSession = Depends(get_async_db_session),
    publisher: EventPublisher = Depends(event_publisher_dependency),
) -> FormationOrderService:
    return FormationOrderService(db=db, publisher=publisher)


@admin_router.get("", response_model=FormationOrderListResponse)
async def admin_list_orders(
    status: OrderStatus | None = Query(default=None),
    search: str | None = Query(default=None, max_length=255),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    current_user: CurrentUser = Depends(require_role(UserRole.ADMIN)),
    service: FormationOrderService = Depends(formation_order_service_dependency),
) -> FormationOrderListResponse:
    return await service.list_orders(limit=limit, offset=offset, status=status, search=search)


@admin_router.get("/{order_id}", response_model=FormationOrderResponse)
async def admin_get_order(
    order_id: uuid.UUID,
    current_user: CurrentUser = Depends(require_role(UserRole.ADMIN)),
    service: FormationOrderService = Depends(formation_order_service_dependency),
) -> FormationOrderResponse:
    return await service.get_order(order_id=order_id)


@admin_router.patch("/{order_id}", response_model=FormationOrderResponse)
async def admin_update_order_status(
    order_id: uuid.UUID,
    payload: FormationOrderStatusUpdateRequest,
    request: Request,
    current_user: CurrentUser = Depends(require_role(UserRole.ADMIN)),
    service: FormationOrderService = Depends(formation_order_service_dependency),
) -> FormationOrderResponse:
    return await service.update_status(
        actor_user_id=current_user.user_id,
        order_id=order_id,
        payload=payload,
        correlation_id=request.state.correlation_id,
    )


@router.get("", response_model=FormationOrderListResponse)
async def list_my_orders(
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    current_user: CurrentUser = Depends(get_current_user),
    service: FormationOrderService = Depends(formation_order_service_dependency),
) -> FormationOrderListResponse:
    return await service.list_orders(limit=limit, offset=offset, user_id=current_user.user_id)
