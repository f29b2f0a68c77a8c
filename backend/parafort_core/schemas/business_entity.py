import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class BusinessEntityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID | None
    name: str
    entity_type: str
    state: str
    status: str
    ein: str | None
    formation_date: date | None
    created_at: datetime


class DocumentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    business_entity_id: uuid.UUID
    file_name: str
    document_type: str
    file_size: int | None
    uploaded_at: datetime


class ComplianceItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    business_entity_id: uuid.UUID
    event_type: str
    title: str
    due_date: date
    status: str
    fee_amount: Decimal | None
