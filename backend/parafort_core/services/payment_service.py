import asyncio
import logging

import stripe

from parafort_core.checkout.pricing import format_amount, to_cents
from parafort_core.checkout.session_store import CheckoutSessionStore
from parafort_core.checkout.wizard import CheckoutStep
from parafort_core.core.config import get_settings
from parafort_core.core.errors import AppError, ErrorCodes
from parafort_core.payments.stripe_service import (
    InvalidClientSecret,
    StripeConfig,
    StripeNotConfigured,
    create_payment_intent,
    get_stripe_config,
    payment_intent_id_from_client_secret,
    retrieve_payment_intent,
)
from parafort_core.schemas.payment import (
    CreatePaymentIntentResponse,
    OrderData,
    StripePublicConfigResponse,
)

logger = logging.getLogger(__name__)


def payment_not_ready() -> AppError:
    return AppError(
        code=ErrorCodes.PAYMENT_NOT_READY,
        message="Payment system not ready. Please try again.",
        status_code=503,
    )


def payment_session_expired(details: dict | None = None) -> AppError:
    return AppError(
        code=ErrorCodes.PAYMENT_SESSION_EXPIRED,
        message="Payment session expired. Please refresh and try again.",
        status_code=400,
        details=details,
    )


def translate_payment_error(exc: Exception) -> AppError:
    """Map a Stripe or configuration failure onto the payment error codes."""
    if isinstance(exc, AppError):
        return exc
    if isinstance(exc, StripeNotConfigured):
        return payment_not_ready()
    if isinstance(exc, InvalidClientSecret):
        return payment_session_expired()
    if isinstance(exc, (stripe.InvalidRequestError, stripe.CardError)):
        return AppError(
            code=ErrorCodes.PAYMENT_VALIDATION_FAILED,
            message=exc.user_message or "The payment request was rejected.",
            status_code=400,
            details={"stripe_code": exc.code},
        )
    if isinstance(exc, stripe.StripeError):
        return AppError(
            code=ErrorCodes.PAYMENT_CONFIRMATION_FAILED,
            message="We could not confirm your payment. Please try again.",
            status_code=502,
            details={"stripe_code": exc.code},
        )
    return AppError(
        code=ErrorCodes.PAYMENT_UNEXPECTED_ERROR,
        message="An unexpected error occurred.",
        status_code=500,
    )


class PaymentService:
    def __init__(self, store: CheckoutSessionStore, cfg: StripeConfig | None = None) -> None:
        self.store = store
        self.cfg = cfg or get_stripe_config()
        self.default_expedited_fee = get_settings().default_expedited_fee

    def public_config(self) -> StripePublicConfigResponse:
        if not self.cfg.publishable_key:
            raise payment_not_ready()
        return StripePublicConfigResponse(
            publishable_key=self.cfg.publishable_key,
            environment=self.cfg.environment,
        )

    async def create_intent(self, order_data: OrderData) -> CreatePaymentIntentResponse:
        metadata = {
            "business_name": order_data.business_name,
            "entity_type": order_data.entity_type,
            "state": order_data.state,
            "source": order_data.source,
        }
        if order_data.subscription_plan_id is not None:
            metadata["subscription_plan_id"] = str(order_data.subscription_plan_id)
        receipt_email = order_data.contact_email

        if order_data.checkout_session_id:
            session = await self.store.require(order_data.checkout_session_id)
            if session.current_step < CheckoutStep.REVIEW_PAYMENT:
                raise AppError(
                    code=ErrorCodes.CHECKOUT_STEP_OUT_OF_ORDER,
                    message="Finish the checkout steps before paying.",
                    status_code=409,
                    details={
                        "session_id": session.id,
                        "current_step": int(session.current_step),
                        "requested_step": int(CheckoutStep.REVIEW_PAYMENT),
                    },
                )
            amount = session.totals(self.default_expedited_fee).total
            metadata["checkout_session_id"] = session.id
            metadata["service_id"] = str(session.service.id)
            metadata["is_expedited"] = "true" if session.is_expedited else "false"
            if session.account_data.user_id:
                metadata["user_id"] = session.account_data.user_id
            if session.account_data.first_name:
                metadata["customer_name"] = f"{session.account_data.first_name} {session.account_data.last_name or ''}".strip()
            receipt_email = session.email_data.email or receipt_email
        elif order_data.total_amount is not None:
            amount = order_data.total_amount
        else:
            raise AppError(
                code=ErrorCodes.PAYMENT_VALIDATION_FAILED,
                message="An order total or checkout session is required.",
                status_code=422,
                details={"field": "total_amount"},
            )

        if receipt_email:
            metadata["contact_email"] = receipt_email

        try:
            intent = await asyncio.to_thread(
                create_payment_intent,
                cfg=self.cfg,
                amount_cents=to_cents(amount),
                metadata=metadata,
                receipt_email=receipt_email,
                description=f"ParaFort order: {order_data.business_name}",
            )
        except Exception as exc:
            logger.error("payment_intent_create_failed business_name=%s error=%s", order_data.business_name, exc)
            raise translate_payment_error(exc) from exc

        return CreatePaymentIntentResponse(
            client_secret=intent["client_secret"],
            payment_intent_id=intent["id"],
            amount=format_amount(amount),
        )

    @staticmethod
    def resolve_payment_intent_id(*, payment_intent_id: str | None, client_secret: str | None) -> str:
        if client_secret:
            try:
                return payment_intent_id_from_client_secret(client_secret)
            except InvalidClientSecret as exc:
                raise payment_session_expired({"reason": "client_secret_malformed"}) from exc
        if not payment_intent_id or not payment_intent_id.startswith("pi_"):
            raise payment_session_expired({"reason": "payment_intent_id_malformed"})
        return payment_intent_id

    async def retrieve_intent(self, payment_intent_id: str) -> dict:
        try:
            return await asyncio.to_thread(
                retrieve_payment_intent, cfg=self.cfg, payment_intent_id=payment_intent_id
            )
        except stripe.InvalidRequestError as exc:
            if exc.code == "resource_missing":
                raise payment_session_expired({"payment_intent_id": payment_intent_id}) from exc
            raise translate_payment_error(exc) from exc
        except Exception as exc:
            logger.error("payment_intent_retrieve_failed payment_intent_id=%s error=%s", payment_intent_id, exc)
            raise translate_payment_error(exc) from exc
