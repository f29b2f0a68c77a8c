from __future__ import annotations

import logging
import uuid

import stripe
from fastapi import APIRouter, Depends, Header, HTTPException, Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from parafort_core.api.payments_router import order_completion_service_dependency
from parafort_core.core.errors import AppError
from parafort_core.db.session import get_async_db_session
from parafort_core.payments.stripe_service import StripeNotConfigured, get_stripe_config, verify_webhook_signature
from parafort_core.services.idempotency_service import IdempotencyService, fingerprint
from parafort_core.services.order_completion_service import OrderCompletionService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Webhooks - Stripe"])

ROUTE_KEY = "POST:/webhooks/stripe"


def webhook_receipts_dependency(db: AsyncSession = Depends(get_async_db_session)) -> IdempotencyService:
    return IdempotencyService(db, route_key=ROUTE_KEY)


@router.post("/webhooks/stripe", include_in_schema=True)
async def stripe_webhook(
    request: Request,
    db: AsyncSession = Depends(get_async_db_session),
    completion: OrderCompletionService = Depends(order_completion_service_dependency),
    receipts: IdempotencyService = Depends(webhook_receipts_dependency),
    stripe_signature: str = Header(default="", alias="Stripe-Signature"),
):
    """
    Stripe webhook receiver.

    1. Read raw body (mandatory before any json parse for sig verification).
    2. Verify Stripe-Signature with signing secret.
    3. Idempotency check by Stripe event id.
    4. Complete the formation order on payment_intent.succeeded.
    5. Record the receipt.
    """
    raw_body = await request.body()
    correlation_id = getattr(request.state, "correlation_id", str(uuid.uuid4()))

    if not stripe_signature:
        raise HTTPException(status_code=400, detail="missing_stripe_signature")

    try:
        event = verify_webhook_signature(cfg=get_stripe_config(), payload=raw_body, sig_header=stripe_signature)
    except StripeNotConfigured:
        logger.error("stripe_webhook_secret_not_configured correlation_id=%s", correlation_id)
        raise HTTPException(status_code=500, detail="webhook_secret_not_configured")
    except (stripe.SignatureVerificationError, ValueError) as exc:
        logger.warning("stripe_sig_invalid correlation_id=%s error=%s", correlation_id, exc)
        raise HTTPException(status_code=400, detail="invalid_stripe_signature")

    event_id: str = event.get("id", "")
    event_type: str = event.get("type", "unknown")
    logger.info(
        "stripe_webhook_received event_id=%s event_type=%s correlation_id=%s",
        event_id, event_type, correlation_id,
    )

    request_hash = fingerprint({"event_id": event_id, "event_type": event_type})
    if await receipts.replay(event_id, request_hash):
        logger.info("stripe_webhook_duplicate event_id=%s", event_id)
        return {"status": "duplicate", "event_id": event_id}

    result: dict = {"status": "ok", "event_id": event_id, "event_type": event_type}
    if event_type == "payment_intent.succeeded":
        intent = dict(event["data"]["object"])
        intent["metadata"] = dict(intent.get("metadata") or {})
        try:
            completed = await completion.complete_from_intent(intent, correlation_id=correlation_id)
        except AppError as exc:
            logger.error(
                "stripe_webhook_completion_failed event_id=%s code=%s message=%s",
                event_id, exc.code, exc.message,
            )
            raise
        result["order_id"] = completed.order_id
        result["already_completed"] = completed.already_completed
    elif event_type == "payment_intent.payment_failed":
        intent = event["data"]["object"]
        logger.warning("stripe_payment_failed payment_intent_id=%s", intent.get("id"))
    else:
        logger.info("stripe_webhook_ignored event_type=%s", event_type)

    try:
        await receipts.record(event_id, request_hash, result)
        await db.commit()
    except IntegrityError:
        # A concurrent delivery of the same event recorded its receipt first.
        await db.rollback()
        logger.info("stripe_webhook_duplicate_race event_id=%s", event_id)
        return {"status": "duplicate", "event_id": event_id}
    return result
