import uuid
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from parafort_core.core.errors import AppError, ErrorCodes
from parafort_core.models.formation_order import (
    FormationOrder,
    OrderStatus,
    allowed_transition_targets,
    get_progress_for_status,
)
from parafort_core.repositories.formation_order_repository import FormationOrderRepository
from parafort_core.schemas.formation_order import (
    FormationOrderListResponse,
    FormationOrderResponse,
    FormationOrderStatusUpdateRequest,
)
from parafort_core.services.audit import write_audit_log
from parafort_core.services.event_publisher import EventPublisher


class FormationOrderService:
    def __init__(self, db: AsyncSession, publisher: EventPublisher) -> None:
        self.db = db
        self.publisher = publisher
        self.repository = FormationOrderRepository(db)

    async def list_orders(
        self,
        *,
        limit: int,
        offset: int,
        status: OrderStatus | None = None,
        search: str | None = None,
        user_id: uuid.UUID | None = None,
        business_entity_id: uuid.UUID | None = None,
    ) -> FormationOrderListResponse:
        orders, total = await self.repository.list_paginated(
            limit=limit,
            offset=offset,
            status=status,
            search=search,
            user_id=user_id,
            business_entity_id=business_entity_id,
        )
        return FormationOrderListResponse(
            items=[FormationOrderResponse.model_validate(order) for order in orders],
            total=total,
            limit=limit,
            offset=offset,
        )

    async def get_order(self, *, order_id: uuid.UUID) -> FormationOrderResponse:
        order = await self._require_order(order_id)
        return FormationOrderResponse.model_validate(order)

    async def update_status(
        self,
        *,
        actor_user_id: uuid.UUID,
        order_id: uuid.UUID,
        payload: FormationOrderStatusUpdateRequest,
        correlation_id: str | None,
    ) -> FormationOrderResponse:
        order = await self._require_order(order_id)
        if payload.version is not None:
            self._enforce_version(order=order, version=payload.version)

        from_status = order.status
        target_status = payload.status
        changed_fields: list[str] = []

        if target_status != from_status:
            self._validate_transition(from_status=from_status, to_status=target_status)
            order.status = target_status
            changed_fields.append("status")
            now = datetime.now(UTC)
            if target_status == OrderStatus.FILED:
                order.filing_date = now
                changed_fields.append("filing_date")
            elif target_status == OrderStatus.COMPLETED:
                order.completion_date = now
                changed_fields.append("completion_date")

        progress = (
            payload.current_progress
            if payload.current_progress is not None
            else get_progress_for_status(target_status.value)
        )
        if progress != order.current_progress:
            order.current_progress = progress
            changed_fields.append("current_progress")

        if not changed_fields:
            return FormationOrderResponse.model_validate(order)

        order.version += 1
        changed_fields.append("version")
        updated = await self.repository.update_fields(order)

        await write_audit_log(
            self.db,
            actor_user_id=actor_user_id,
            entity_name="formation_order",
            entity_id=updated.id,
            action="formation_order_status_changed",
            changed_field_names=changed_fields,
            metadata={
                "from_status": from_status.value,
                "to_status": target_status.value,
                "current_progress": updated.current_progress,
            },
            correlation_id=correlation_id,
        )
        await self.db.commit()
        await self.publisher.publish(
            "formation_order.status_changed",
            updated.id,
            {
                "order_id": updated.order_id,
                "from_status": from_status.value,
                "to_status": target_status.value,
                "current_progress": updated.current_progress,
            },
            entity_type="formation_order",
            correlation_id=correlation_id,
        )
        return FormationOrderResponse.model_validate(updated)

    async def _require_order(self, order_id: uuid.UUID) -> FormationOrder:
        order = await self.repository.get_by_id(order_id)
        if order is None:
            raise AppError(
                code=ErrorCodes.ORDER_NOT_FOUND,
                message="Formation order not found.",
                status_code=404,
                details={"order_id": str(order_id)},
            )
        return order

    @staticmethod
    def _validate_transition(*, from_status: OrderStatus, to_status: OrderStatus) -> None:
        allowed_targets = allowed_transition_targets(from_status)
        if to_status not in allowed_targets:
            raise AppError(
                code=ErrorCodes.ORDER_INVALID_TRANSITION,
                message=f"Transition from {from_status.value} to {to_status.value} is not allowed.",
                status_code=422,
                details={
                    "from_status": from_status.value,
                    "to_status": to_status.value,
                    "allowed_targets": [status.value for status in sorted(allowed_targets, key=lambda item: item.value)],
                },
            )

    @staticmethod
    def _enforce_version(*, order: FormationOrder, version: int) -> None:
        if order.version != version:
            raise AppError(
                code=ErrorCodes.CONCURRENCY_CONFLICT,
                message="Formation order version conflict.",
                status_code=409,
                details={
                    "expected_version": version,
                    "server_version": order.version,
                    "updated_at": order.updated_at.isoformat() if order.updated_at else None,
                },
            )
