from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

import stripe

from parafort_core.core.config import get_settings

logger = logging.getLogger(__name__)

CLIENT_SECRET_PATTERN = re.compile(r"^(pi_[A-Za-z0-9]+)_secret_[A-Za-z0-9]+$")

_init_lock = threading.Lock()
_configured_key: str | None = None


class StripeNotConfigured(RuntimeError):
    pass


class InvalidClientSecret(ValueError):
    pass


@dataclass(frozen=True)
class StripeConfig:
    secret_key: str
    publishable_key: str = ""
    webhook_secret: str | None = None

    @property
    def environment(self) -> str:
        return "test" if self.publishable_key.startswith("pk_test_") else "live"


@lru_cache(maxsize=1)
def get_stripe_config() -> StripeConfig:
    settings = get_settings()
    return StripeConfig(
        secret_key=settings.stripe_secret_key,
        publishable_key=settings.stripe_publishable_key,
        webhook_secret=settings.stripe_webhook_secret or None,
    )


def _configure(cfg: StripeConfig) -> None:
    """Point the SDK at ``cfg.secret_key``.

    Concurrent first callers race on the lock; only one of them assigns the
    key, later calls with the same key return without locking.
    """
    global _configured_key
    if not cfg.secret_key:
        raise StripeNotConfigured("stripe_secret_key_missing")
    if _configured_key == cfg.secret_key:
        return
    with _init_lock:
        if _configured_key != cfg.secret_key:
            stripe.api_key = cfg.secret_key
            _configured_key = cfg.secret_key
            logger.info("stripe_sdk_configured environment=%s", cfg.environment)


def reset_configuration() -> None:
    global _configured_key
    with _init_lock:
        _configured_key = None


def payment_intent_id_from_client_secret(client_secret: str) -> str:
    match = CLIENT_SECRET_PATTERN.match(client_secret or "")
    if match is None:
        raise InvalidClientSecret("client_secret_malformed")
    return match.group(1)


def create_payment_intent(
    *,
    cfg: StripeConfig,
    amount_cents: int,
    metadata: dict[str, str],
    currency: str = "usd",
    receipt_email: str | None = None,
    description: str | None = None,
    idempotency_key: str | None = None,
) -> dict[str, Any]:
    _configure(cfg)
    params: dict[str, Any] = {
        "amount": amount_cents,
        "currency": currency,
        "automatic_payment_methods": {"enabled": True},
        "metadata": metadata,
    }
    if receipt_email:
        params["receipt_email"] = receipt_email
    if description:
        params["description"] = description
    if idempotency_key:
        params["idempotency_key"] = idempotency_key

    intent = stripe.PaymentIntent.create(**params)
    logger.info(
        "stripe_payment_intent_created payment_intent_id=%s amount_cents=%s",
        intent["id"],
        amount_cents,
    )
    return {
        "id": intent["id"],
        "client_secret": intent["client_secret"],
        "amount": intent["amount"],
        "status": intent["status"],
    }


def retrieve_payment_intent(*, cfg: StripeConfig, payment_intent_id: str) -> dict[str, Any]:
    _configure(cfg)
    intent = stripe.PaymentIntent.retrieve(payment_intent_id)
    data = dict(intent)
    data["metadata"] = dict(intent.get("metadata") or {})
    return data


def verify_webhook_signature(
    *,
    cfg: StripeConfig,
    payload: bytes,
    sig_header: str,
) -> dict[str, Any]:
    """
    Verify Stripe-Signature using the raw request body bytes.
    Raises stripe.SignatureVerificationError on failure.
    """
    if not cfg.webhook_secret:
        raise StripeNotConfigured("stripe_webhook_secret_missing")
    event = stripe.Webhook.construct_event(payload, sig_header, cfg.webhook_secret)
    return dict(event)
