from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class ServiceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None
    category: str | None
    service_type: str
    one_time_price: Decimal | None
    recurring_price: Decimal | None
    recurring_interval: str | None
    expedited_price: Decimal | None
    questionnaire: str


class ServiceSnapshot(BaseModel):
    """The part of a service a checkout session keeps for its whole lifetime."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    name: str
    one_time_price: Decimal | None = None
    recurring_price: Decimal | None = None
    expedited_price: Decimal | None = None
    questionnaire: str = "general"
