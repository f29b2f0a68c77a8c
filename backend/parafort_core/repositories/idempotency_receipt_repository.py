from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from parafort_core.models.idempotency_receipt import IdempotencyReceipt


class IdempotencyReceiptRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_by_key(self, *, idempotency_key: str, route_key: str) -> IdempotencyReceipt | None:
        stmt = select(IdempotencyReceipt).where(
            IdempotencyReceipt.idempotency_key == idempotency_key,
            IdempotencyReceipt.route_key == route_key,
        )
        return await self.db.scalar(stmt)

    async def create(self, receipt: IdempotencyReceipt) -> IdempotencyReceipt:
        self.db.add(receipt)
        await self.db.flush()
        await self.db.refresh(receipt)
        return receipt
