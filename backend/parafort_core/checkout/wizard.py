"""Five-step checkout wizard.

The session model carries everything the customer has entered so far. Each
step has a completion predicate; the cursor only moves forward when the
predicate for the current step holds.
"""

from __future__ import annotations

import enum
import uuid
from collections.abc import Callable
from datetime import UTC, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from parafort_core.checkout.pricing import DEFAULT_EXPEDITED_FEE, OrderTotal, calculate_order_total
from parafort_core.core.errors import AppError, ErrorCodes
from parafort_core.schemas.checkout import (
    AccountData,
    CheckoutStepDescriptor,
    ClientInformation,
    EmailData,
    ServiceAnswers,
)
from parafort_core.schemas.service import ServiceSnapshot


class CheckoutStep(enum.IntEnum):
    EMAIL_VERIFICATION = 1
    ACCOUNT_CREATION = 2
    SERVICE_QUESTIONS = 3
    CLIENT_INFORMATION = 4
    REVIEW_PAYMENT = 5


STEP_DETAILS: dict[CheckoutStep, tuple[str, str]] = {
    CheckoutStep.EMAIL_VERIFICATION: ("Email Verification", "Verify your email address"),
    CheckoutStep.ACCOUNT_CREATION: ("Account Creation", "Create your secure account"),
    CheckoutStep.SERVICE_QUESTIONS: ("Service Questions", "Tell us about your service needs"),
    CheckoutStep.CLIENT_INFORMATION: ("Client Information", "Provide your business details"),
    CheckoutStep.REVIEW_PAYMENT: ("Review & Payment", "Review and complete your order"),
}


class CheckoutSession(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    service: ServiceSnapshot
    email_data: EmailData = Field(default_factory=EmailData)
    account_data: AccountData = Field(default_factory=AccountData)
    service_questions: ServiceAnswers | None = None
    questions_answered: bool = False
    client_information: ClientInformation | None = None
    is_expedited: bool = False
    current_step: CheckoutStep = CheckoutStep.EMAIL_VERIFICATION
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def is_step_complete(self, step: CheckoutStep) -> bool:
        return STEP_PREDICATES[step](self)

    def advance(self) -> CheckoutStep:
        if self.current_step == CheckoutStep.REVIEW_PAYMENT:
            return self.current_step
        if not self.is_step_complete(self.current_step):
            title, _ = STEP_DETAILS[self.current_step]
            raise AppError(
                code=ErrorCodes.CHECKOUT_STEP_INCOMPLETE,
                message=f"Complete '{title}' before continuing.",
                status_code=422,
                details={"session_id": self.id, "current_step": int(self.current_step)},
            )
        self.current_step = CheckoutStep(self.current_step + 1)
        return self.current_step

    def back(self) -> CheckoutStep:
        if self.current_step > CheckoutStep.EMAIL_VERIFICATION:
            self.current_step = CheckoutStep(self.current_step - 1)
        return self.current_step

    def totals(self, default_expedited_fee: Decimal = DEFAULT_EXPEDITED_FEE) -> OrderTotal:
        return calculate_order_total(
            self.service, is_expedited=self.is_expedited, default_expedited_fee=default_expedited_fee
        )

    def step_descriptors(self) -> list[CheckoutStepDescriptor]:
        return [
            CheckoutStepDescriptor(
                id=int(step),
                title=title,
                description=description,
                completed=step < self.current_step and self.is_step_complete(step),
            )
            for step, (title, description) in STEP_DETAILS.items()
        ]


def _email_verified(session: CheckoutSession) -> bool:
    return bool(session.email_data.email) and session.email_data.is_verified


def _account_created(session: CheckoutSession) -> bool:
    return bool(session.account_data.user_id)


def _questions_answered(session: CheckoutSession) -> bool:
    return session.questions_answered


def _client_information_saved(session: CheckoutSession) -> bool:
    return session.client_information is not None and bool(session.client_information.business_name.strip())


STEP_PREDICATES: dict[CheckoutStep, Callable[[CheckoutSession], bool]] = {
    CheckoutStep.EMAIL_VERIFICATION: _email_verified,
    CheckoutStep.ACCOUNT_CREATION: _account_created,
    CheckoutStep.SERVICE_QUESTIONS: _questions_answered,
    CheckoutStep.CLIENT_INFORMATION: _client_information_saved,
    CheckoutStep.REVIEW_PAYMENT: lambda session: True,
}
