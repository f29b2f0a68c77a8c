from sqlalchemy import JSON, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from parafort_core.db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class IdempotencyReceipt(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "idempotency_receipts"
    __table_args__ = (
        UniqueConstraint("idempotency_key", "route_key", name="uq_idempotency_key_route"),
    )

    idempotency_key: Mapped[str] = mapped_column(String(255), nullable=False)
    route_key: Mapped[str] = mapped_column(String(255), nullable=False)
    request_hash: Mapped[str] = mapped_column(String(128), nullable=False)
    response_json: Mapped[dict] = mapped_column(JSON().with_variant(JSONB(), "postgresql"), nullable=False)
