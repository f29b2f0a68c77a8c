import enum
import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Enum, Integer, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from parafort_core.db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, VersionMixin


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    DOCUMENTS_PREPARED = "documents_prepared"
    FILED = "filed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


ORDER_STATUS_PROGRESS: dict[OrderStatus, int] = {
    OrderStatus.PENDING: 10,
    OrderStatus.PROCESSING: 25,
    OrderStatus.DOCUMENTS_PREPARED: 60,
    OrderStatus.FILED: 80,
    OrderStatus.COMPLETED: 100,
    OrderStatus.CANCELLED: 0,
}


ALLOWED_ORDER_TRANSITIONS: dict[OrderStatus, set[OrderStatus]] = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.DOCUMENTS_PREPARED, OrderStatus.CANCELLED},
    OrderStatus.DOCUMENTS_PREPARED: {OrderStatus.FILED, OrderStatus.CANCELLED},
    OrderStatus.FILED: {OrderStatus.COMPLETED},
    OrderStatus.COMPLETED: set(),
    OrderStatus.CANCELLED: set(),
}


def allowed_transition_targets(from_status: OrderStatus) -> set[OrderStatus]:
    return ALLOWED_ORDER_TRANSITIONS.get(from_status, set())


def get_progress_for_status(status: str) -> int:
    try:
        return ORDER_STATUS_PROGRESS[OrderStatus(status)]
    except ValueError:
        return 0


class FormationOrder(Base, UUIDPrimaryKeyMixin, TimestampMixin, VersionMixin):
    __tablename__ = "formation_orders"

    order_id: Mapped[str] = mapped_column(String(16), nullable=False, unique=True, index=True)
    user_id: Mapped[uuid.UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True, index=True)
    business_entity_id: Mapped[uuid.UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True, index=True)

    business_name: Mapped[str] = mapped_column(String(255), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(64), nullable=False)
    state: Mapped[str] = mapped_column(String(64), nullable=False)
    customer_email: Mapped[str] = mapped_column(String(320), nullable=False)
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)

    stripe_payment_intent_id: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(8), nullable=False, default="usd")
    payment_status: Mapped[PaymentStatus] = mapped_column(
        Enum(PaymentStatus, name="payment_status"), nullable=False, default=PaymentStatus.PENDING
    )

    status: Mapped[OrderStatus] = mapped_column(
        Enum(OrderStatus, name="order_status"), nullable=False, default=OrderStatus.PENDING
    )
    current_progress: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
    filing_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completion_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return (
            "FormationOrder("
            f"id={self.id}, order_id={self.order_id}, status={self.status.value}, "
            f"payment_intent={self.stripe_payment_intent_id}, version={self.version}"
            ")"
        )
