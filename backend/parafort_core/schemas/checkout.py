from datetime import datetime
from decimal import Decimal
from typing import Annotated, Literal

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from parafort_core.schemas.service import ServiceSnapshot


class GeneralAnswers(BaseModel):
    questionnaire: Literal["general"] = "general"
    notes: str | None = Field(default=None, max_length=2000)


class FormationAnswers(BaseModel):
    questionnaire: Literal["formation"] = "formation"
    entity_type: str = Field(min_length=1, max_length=64)
    state: str = Field(min_length=2, max_length=64)
    business_name: str = Field(min_length=1, max_length=255)
    designator: str | None = Field(default=None, max_length=64)
    management_structure: Literal["member_managed", "manager_managed"] | None = None


class AnnualReportAnswers(BaseModel):
    questionnaire: Literal["annual_report"] = "annual_report"
    business_entity_id: str | None = None
    state: str = Field(min_length=2, max_length=64)
    filing_year: int = Field(ge=2000, le=2100)


class BeneficialOwner(BaseModel):
    full_name: str = Field(min_length=1, max_length=255)
    ownership_percent: Decimal = Field(gt=0, le=100)


class BoirAnswers(BaseModel):
    questionnaire: Literal["boir"] = "boir"
    beneficial_owners: list[BeneficialOwner] = Field(min_length=1)

    @model_validator(mode="after")
    def _ownership_total(self) -> "BoirAnswers":
        total = sum((owner.ownership_percent for owner in self.beneficial_owners), Decimal("0"))
        if total > 100:
            raise ValueError(f"beneficial owner ownership totals {total}%, which exceeds 100%")
        return self


class EinAnswers(BaseModel):
    questionnaire: Literal["ein"] = "ein"
    responsible_party_name: str = Field(min_length=1, max_length=255)
    entity_type: str = Field(min_length=1, max_length=64)


ServiceAnswers = Annotated[
    GeneralAnswers | FormationAnswers | AnnualReportAnswers | BoirAnswers | EinAnswers,
    Field(discriminator="questionnaire"),
]


class ClientInformation(BaseModel):
    business_name: str = Field(min_length=1, max_length=255)
    business_type: str | None = Field(default=None, max_length=64)
    state: str | None = Field(default=None, max_length=64)
    phone: str | None = Field(default=None, max_length=32)
    address: str | None = Field(default=None, max_length=255)
    city: str | None = Field(default=None, max_length=120)
    zip_code: str | None = Field(default=None, max_length=16)
    ein: str | None = Field(default=None, max_length=16)
    contact_person: str | None = Field(default=None, max_length=255)


class EmailData(BaseModel):
    email: EmailStr | None = None
    is_verified: bool = False
    code_sent: bool = False


class AccountData(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    user_id: str | None = None


# Requests


class CreateCheckoutSessionRequest(BaseModel):
    service_id: int = Field(ge=1)


class CheckoutSendVerificationRequest(BaseModel):
    email: EmailStr


class CheckoutVerifyEmailRequest(BaseModel):
    code: str = Field(min_length=6, max_length=6)


class CreateAccountRequest(BaseModel):
    first_name: str = Field(min_length=1, max_length=120)
    last_name: str = Field(min_length=1, max_length=120)
    password: str = Field(min_length=8, max_length=128)
    confirm_password: str = Field(min_length=1, max_length=128)

    @field_validator("first_name", "last_name")
    @classmethod
    def _strip(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class ServiceQuestionsRequest(BaseModel):
    is_expedited: bool = False
    answers: ServiceAnswers | None = None


# Responses


class CheckoutStepDescriptor(BaseModel):
    id: int
    title: str
    description: str
    completed: bool


class CheckoutSessionResponse(BaseModel):
    id: str
    service: ServiceSnapshot
    email_data: EmailData
    account_data: AccountData
    service_questions: ServiceAnswers | None
    client_information: ClientInformation | None
    is_expedited: bool
    current_step: int
    steps: list[CheckoutStepDescriptor]
    total: str
    created_at: datetime


class CreateAccountResponse(BaseModel):
    session: CheckoutSessionResponse
    access_token: str
    token_type: str = "bearer"


class ReviewResponse(BaseModel):
    service_name: str
    base_price: str
    expedited_fee: str
    is_expedited: bool
    total: str
    client_information: ClientInformation | None
