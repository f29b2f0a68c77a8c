import pytest
import stripe

from parafort_core.core.errors import AppError, ErrorCodes
from parafort_core.payments import stripe_service
from parafort_core.payments.stripe_service import (
    InvalidClientSecret,
    StripeConfig,
    StripeNotConfigured,
    create_payment_intent,
    payment_intent_id_from_client_secret,
    verify_webhook_signature,
)
from parafort_core.services.payment_service import PaymentService, translate_payment_error


class FakePaymentIntentApi:
    created: list[dict] = []

    @classmethod
    def create(cls, **params):
        cls.created.append(params)
        return {"id": "pi_fake123", "client_secret": "pi_fake123_secret_abc", "amount": params["amount"], "status": "requires_payment_method"}


@pytest.fixture(autouse=True)
def _reset_stripe(monkeypatch):
    stripe_service.reset_configuration()
    FakePaymentIntentApi.created = []
    monkeypatch.setattr(stripe, "PaymentIntent", FakePaymentIntentApi)
    monkeypatch.setattr(stripe, "api_key", None)
    yield
    stripe_service.reset_configuration()


def test_client_secret_yields_payment_intent_id():
    assert payment_intent_id_from_client_secret("pi_3Abc123_secret_XyZ789") == "pi_3Abc123"


@pytest.mark.parametrize("secret", ["", "garbage", "pi_123", "seti_123_secret_abc", "pi_123_secret_"])
def test_malformed_client_secret_is_rejected(secret):
    with pytest.raises(InvalidClientSecret):
        payment_intent_id_from_client_secret(secret)


def test_environment_follows_publishable_key():
    assert StripeConfig(secret_key="sk_test_1", publishable_key="pk_test_1").environment == "test"
    assert StripeConfig(secret_key="sk_live_1", publishable_key="pk_live_1").environment == "live"


def test_sdk_is_configured_once_per_key(monkeypatch):
    cfg = StripeConfig(secret_key="sk_test_once", publishable_key="pk_test_once")

    create_payment_intent(cfg=cfg, amount_cents=32500, metadata={"source": "formation"})
    assert stripe.api_key == "sk_test_once"

    monkeypatch.setattr(stripe, "api_key", "sk_overwritten")
    create_payment_intent(cfg=cfg, amount_cents=32500, metadata={"source": "formation"})

    assert stripe.api_key == "sk_overwritten"
    assert [params["amount"] for params in FakePaymentIntentApi.created] == [32500, 32500]
    assert FakePaymentIntentApi.created[0]["automatic_payment_methods"] == {"enabled": True}


def test_missing_secret_key_raises_not_configured():
    with pytest.raises(StripeNotConfigured):
        create_payment_intent(cfg=StripeConfig(secret_key=""), amount_cents=100, metadata={})
    assert FakePaymentIntentApi.created == []


def test_webhook_without_secret_raises_not_configured():
    with pytest.raises(StripeNotConfigured):
        verify_webhook_signature(cfg=StripeConfig(secret_key="sk_test_1"), payload=b"{}", sig_header="t=1,v1=x")


def test_translate_payment_error_mapping():
    card = translate_payment_error(stripe.CardError("Your card was declined.", "number", "card_declined"))
    assert card.code == ErrorCodes.PAYMENT_VALIDATION_FAILED
    assert card.status_code == 400

    invalid = translate_payment_error(stripe.InvalidRequestError("Bad amount", "amount"))
    assert invalid.code == ErrorCodes.PAYMENT_VALIDATION_FAILED

    upstream = translate_payment_error(stripe.APIConnectionError("network down"))
    assert upstream.code == ErrorCodes.PAYMENT_CONFIRMATION_FAILED
    assert upstream.status_code == 502

    unexpected = translate_payment_error(RuntimeError("boom"))
    assert unexpected.code == ErrorCodes.PAYMENT_UNEXPECTED_ERROR
    assert unexpected.status_code == 500

    not_ready = translate_payment_error(StripeNotConfigured("stripe_secret_key_missing"))
    assert not_ready.code == ErrorCodes.PAYMENT_NOT_READY
    assert not_ready.status_code == 503

    expired = translate_payment_error(InvalidClientSecret("client_secret_malformed"))
    assert expired.code == ErrorCodes.PAYMENT_SESSION_EXPIRED


def test_resolve_payment_intent_id_prefers_client_secret():
    resolved = PaymentService.resolve_payment_intent_id(
        payment_intent_id="pi_other", client_secret="pi_fromsecret_secret_abc"
    )
    assert resolved == "pi_fromsecret"
    assert PaymentService.resolve_payment_intent_id(payment_intent_id="pi_abc", client_secret=None) == "pi_abc"


def test_resolve_payment_intent_id_rejects_malformed_input():
    with pytest.raises(AppError) as exc:
        PaymentService.resolve_payment_intent_id(payment_intent_id=None, client_secret="not-a-secret")
    assert exc.value.code == ErrorCodes.PAYMENT_SESSION_EXPIRED
    assert exc.value.status_code == 400

    with pytest.raises(AppError):
        PaymentService.resolve_payment_intent_id(payment_intent_id="ch_123", client_secret=None)


def test_public_config_without_publishable_key_is_not_ready():
    service = PaymentService(store=None, cfg=StripeConfig(secret_key="sk_test_1"))

    with pytest.raises(AppError) as exc:
        service.public_config()

    assert exc.value.code == ErrorCodes.PAYMENT_NOT_READY
    assert exc.value.status_code == 503


def test_public_config_reports_environment():
    service = PaymentService(store=None, cfg=StripeConfig(secret_key="sk_test_1", publishable_key="pk_test_1"))

    config = service.public_config()

    assert config.publishable_key == "pk_test_1"
    assert config.environment == "test"
