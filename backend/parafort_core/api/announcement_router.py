import uuid

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from parafort_core.api.dependencies import require_role
from parafort_core.db.session import get_async_db_session
from parafort_core.models.user import UserRole
from parafort_core.schemas.announcement import (
    AnnouncementAudience,
    AnnouncementCreateRequest,
    AnnouncementListResponse,
    AnnouncementResponse,
    AnnouncementStatus,
    AnnouncementUpdateRequest,
)
from parafort_core.schemas.auth import CurrentUser
from parafort_core.services.announcement_service import AnnouncementService

admin_router = APIRouter(prefix="/api/admin/announcements", tags=["admin", "announcements"])
router = APIRouter(prefix="/api/announcements", tags=["announcements"])


def announcement_service_dependency(db: AsyncSession = Depends(get_async_db_session)) -> AnnouncementService:
    return AnnouncementService(db)


@admin_router.get("", response_model=AnnouncementListResponse)
async def list_announcements(
    status_filter: AnnouncementStatus | None = Query(default=None, alias="status"),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    current_user: CurrentUser = Depends(require_role(UserRole.ADMIN)),
    service: AnnouncementService = Depends(announcement_service_dependency),
) -> AnnouncementListResponse:
    return await service.list_announcements(limit=limit, offset=offset, status=status_filter)


@admin_router.post("", response_model=AnnouncementResponse, status_code=status.HTTP_201_CREATED)
async def create_announcement(
    payload: AnnouncementCreateRequest,
    request: Request,
    current_user: CurrentUser = Depends(require_role(UserRole.ADMIN)),
    service: AnnouncementService = Depends(announcement_service_dependency),
) -> AnnouncementResponse:
    return await service.create(
        actor_user_id=current_user.user_id, payload=payload, correlation_id=request.state.correlation_id
    )


@admin_router.get("/{announcement_id}", response_model=AnnouncementResponse)
async def get_announcement(
    announcement_id: uuid.UUID,
    current_user: CurrentUser = Depends(require_role(UserRole.ADMIN)),
    service: AnnouncementService = Depends(announcement_service_dependency),
) -> AnnouncementResponse:
    return await service.get(announcement_id=announcement_id)


@admin_router.put("/{announcement_id}", response_model=AnnouncementResponse)
async def update_announcement(
    announcement_id: uuid.UUID,
    payload: AnnouncementUpdateRequest,
    request: Request,
    current_user: CurrentUser = Depends(require_role(UserRole.ADMIN)),
    service: AnnouncementService = Depends(announcement_service_dependency),
) -> AnnouncementResponse:
    return await service.update(
        actor_user_id=current_user.user_id,
        announcement_id=announcement_id,
        payload=payload,
        correlation_id=request.state.correlation_id,
    )


@admin_router.delete("/{announcement_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_announcement(
    announcement_id: uuid.UUID,
    request: Request,
    current_user: CurrentUser = Depends(require_role(UserRole.ADMIN)),
    service: AnnouncementService = Depends(announcement_service_dependency),
) -> Response:
    await service.delete(
        actor_user_id=current_user.user_id,
        announcement_id=announcement_id,
        correlation_id=request.state.correlation_id,
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/active", response_model=list[AnnouncementResponse])
async def active_announcements(
    audience: AnnouncementAudience = Query(default="clients"),
    service: AnnouncementService = Depends(announcement_service_dependency),
) -> list[AnnouncementResponse]:
    return await service.list_active(audience=audience)
