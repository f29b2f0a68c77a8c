import hashlib
import json
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from parafort_core.core.errors import AppError, ErrorCodes
from parafort_core.models.idempotency_receipt import IdempotencyReceipt
from parafort_core.repositories.idempotency_receipt_repository import IdempotencyReceiptRepository


def fingerprint(payload: dict[str, Any]) -> str:
    """Stable sha256 of a JSON payload, independent of key order."""
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


class IdempotencyService:
    """Receipts for one route; a key replays its first response or conflicts."""

    def __init__(self, db: AsyncSession | None, *, route_key: str) -> None:
        self.route_key = route_key
        self.repository = IdempotencyReceiptRepository(db)

    async def replay(self, idempotency_key: str, request_hash: str) -> dict | None:
        receipt = await self.repository.get_by_key(idempotency_key=idempotency_key, route_key=self.route_key)
        if receipt is None:
            return None
        if receipt.request_hash != request_hash:
            raise AppError(
                code=ErrorCodes.IDEMPOTENCY_CONFLICT,
                message="Idempotency key already used with a different request.",
                status_code=409,
                details={"idempotency_key": idempotency_key, "route_key": self.route_key},
            )
        return receipt.response_json

    async def record(self, idempotency_key: str, request_hash: str, response_json: dict) -> None:
        receipt = IdempotencyReceipt(
            idempotency_key=idempotency_key,
            route_key=self.route_key,
            request_hash=request_hash,
            response_json=response_json,
        )
        await self.repository.create(receipt)
