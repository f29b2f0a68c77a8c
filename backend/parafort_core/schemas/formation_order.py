import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, computed_field

from parafort_core.models.formation_order import (
    OrderStatus,
    PaymentStatus,
    get_progress_for_status,
)


class FormationOrderStatusUpdateRequest(BaseModel):
    status: OrderStatus
    current_progress: int | None = Field(default=None, ge=0, le=100)
    version: int | None = Field(default=None, ge=1)


class FormationOrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    order_id: str
    user_id: uuid.UUID | None
    business_entity_id: uuid.UUID | None
    business_name: str
    entity_type: str
    state: str
    customer_email: str
    customer_name: str
    stripe_payment_intent_id: str
    total_amount: Decimal
    currency: str
    payment_status: PaymentStatus
    status: OrderStatus
    current_progress: int
    filing_date: datetime | None
    completion_date: datetime | None
    version: int
    created_at: datetime
    updated_at: datetime

    @computed_field  # type: ignore[prop-decorator]
    @property
    def progress_percentage(self) -> int:
        return get_progress_for_status(self.status.value)


class FormationOrderListResponse(BaseModel):
    items: list[FormationOrderResponse]
    total: int
    limit: int
    offset: int
