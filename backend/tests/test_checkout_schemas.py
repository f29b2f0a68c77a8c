from __future__ import annotations

from decimal import Decimal

import pytest
from pydantic import ValidationError

from parafort_core.schemas.auth import VerifyEmailRequest
from parafort_core.schemas.checkout import (
    BoirAnswers,
    CheckoutVerifyEmailRequest,
    FormationAnswers,
    ServiceQuestionsRequest,
)
from parafort_core.schemas.payment import CompleteFormationOrderRequest, CreatePaymentIntentRequest


def test_six_character_code_is_accepted():
    assert CheckoutVerifyEmailRequest(code="123456").code == "123456"
    assert VerifyEmailRequest(email="owner@example.com", code="000001").code == "000001"


@pytest.mark.parametrize("code", ["", "12345", "1234567"])
def test_other_code_lengths_are_rejected(code: str):
    with pytest.raises(ValidationError):
        CheckoutVerifyEmailRequest(code=code)


def test_answers_are_discriminated_by_questionnaire():
    payload = ServiceQuestionsRequest.model_validate(
        {
            "is_expedited": True,
            "answers": {
                "questionnaire": "formation",
                "entity_type": "LLC",
                "state": "DE",
                "business_name": "Acme",
            },
        }
    )
    assert isinstance(payload.answers, FormationAnswers)
    assert payload.is_expedited is True


def test_unknown_questionnaire_is_rejected():
    with pytest.raises(ValidationError):
        ServiceQuestionsRequest.model_validate({"answers": {"questionnaire": "bogus"}})


def test_beneficial_ownership_cannot_exceed_100_percent():
    with pytest.raises(ValidationError, match="exceeds 100%"):
        BoirAnswers(
            beneficial_owners=[
                {"full_name": "A", "ownership_percent": Decimal("60")},
                {"full_name": "B", "ownership_percent": Decimal("50")},
            ]
        )


def test_payment_intent_request_accepts_browser_field_names():
    payload = CreatePaymentIntentRequest.model_validate(
        {"orderData": {"businessName": "Acme LLC", "totalAmount": "325.00", "entityType": "LLC", "state": "DE"}}
    )
    assert payload.order_data.business_name == "Acme LLC"
    assert payload.order_data.total_amount == Decimal("325.00")


def test_complete_order_request_needs_an_intent_reference():
    with pytest.raises(ValidationError):
        CompleteFormationOrderRequest.model_validate({})
    assert CompleteFormationOrderRequest(client_secret="pi_1_secret_2").client_secret == "pi_1_secret_2"
