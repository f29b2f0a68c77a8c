import uuid
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator


class StripePublicConfigResponse(BaseModel):
    publishable_key: str
    environment: str


class OrderData(BaseModel):
    """Order details the browser sends when asking for a PaymentIntent."""

    model_config = ConfigDict(populate_by_name=True)

    business_name: str = Field(min_length=1, max_length=255, alias="businessName")
    total_amount: Decimal | None = Field(default=None, gt=0, alias="totalAmount")
    entity_type: str = Field(default="LLC", max_length=64, alias="entityType")
    state: str = Field(default="", max_length=64)
    subscription_plan_id: int | None = Field(default=None, alias="subscriptionPlanId")
    contact_email: EmailStr | None = Field(default=None, alias="contactEmail")
    source: str = Field(default="formation", max_length=64)
    checkout_session_id: str | None = Field(default=None, alias="checkoutSessionId")


class CreatePaymentIntentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    order_data: OrderData = Field(alias="orderData")


class CreatePaymentIntentResponse(BaseModel):
    client_secret: str
    payment_intent_id: str
    amount: str


class CompleteFormationOrderRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    payment_intent_id: str | None = Field(default=None, max_length=255, alias="paymentIntentId")
    client_secret: str | None = Field(default=None, max_length=255, alias="clientSecret")
    business_entity_id: uuid.UUID | None = Field(default=None, alias="businessEntityId")

    @model_validator(mode="after")
    def _has_reference(self) -> "CompleteFormationOrderRequest":
        if not self.payment_intent_id and not self.client_secret:
            raise ValueError("payment_intent_id or client_secret is required")
        return self


class CompleteFormationOrderResponse(BaseModel):
    success: bool
    message: str
    order_id: str
    business_entity_id: str
    already_completed: bool = False
