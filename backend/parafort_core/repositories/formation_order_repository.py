import uuid

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from parafort_core.models.formation_order import FormationOrder, OrderStatus


class FormationOrderRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create(self, order: FormationOrder) -> FormationOrder:
        self.db.add(order)
        await self.db.flush()
        await self.db.refresh(order)
        return order

    async def get_by_id(self, order_id: uuid.UUID) -> FormationOrder | None:
        return await self.db.scalar(select(FormationOrder).where(FormationOrder.id == order_id))

    async def get_by_payment_intent(self, payment_intent_id: str) -> FormationOrder | None:
        stmt = select(FormationOrder).where(FormationOrder.stripe_payment_intent_id == payment_intent_id)
        return await self.db.scalar(stmt)

    async def list_paginated(
        self,
        *,
        limit: int,
        offset: int,
        status: OrderStatus | None = None,
        search: str | None = None,
        user_id: uuid.UUID | None = None,
        business_entity_id: uuid.UUID | None = None,
    ) -> tuple[list[FormationOrder], int]:
        filters = []
        if status is not None:
            filters.append(FormationOrder.status == status)
        if user_id is not None:
            filters.append(FormationOrder.user_id == user_id)
        if business_entity_id is not None:
            filters.append(FormationOrder.business_entity_id == business_entity_id)
        if search:
            pattern = f"%{search.strip().lower()}%"
            filters.append(
                or_(
                    func.lower(FormationOrder.order_id).like(pattern),
                    func.lower(FormationOrder.business_name).like(pattern),
                    func.lower(FormationOrder.customer_email).like(pattern),
                )
            )

        list_stmt = (
            select(FormationOrder)
            .where(*filters)
            .order_by(FormationOrder.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        count_stmt = select(func.count()).select_from(FormationOrder).where(*filters)
        orders = list((await self.db.scalars(list_stmt)).all())
        total = int((await self.db.scalar(count_stmt)) or 0)
        return orders, total

    async def update_fields(self, order: FormationOrder) -> FormationOrder:
        await self.db.flush()
        await self.db.refresh(order)
        return order
