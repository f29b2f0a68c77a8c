from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from parafort_core.api.dependencies import checkout_store_dependency, event_publisher_dependency, get_optional_user
from parafort_core.checkout.session_store import CheckoutSessionStore
from parafort_core.db.session import get_async_db_session
from parafort_core.schemas.auth import CurrentUser
from parafort_core.schemas.payment import (
    CompleteFormationOrderRequest,
    CompleteFormationOrderResponse,
    CreatePaymentIntentRequest,
    CreatePaymentIntentResponse,
    StripePublicConfigResponse,
)
from parafort_core.services.event_publisher import EventPublisher
from parafort_core.services.order_completion_service import OrderCompletionService
from parafort_core.services.payment_service import PaymentService

router = APIRouter(prefix="/api", tags=["payments"])


def payment_service_dependency(store: CheckoutSessionStore = Depends(checkout_store_dependency)) -> PaymentService:
    return PaymentService(store=store)


def order_completion_service_dependency(
    db: AsyncSession = Depends(get_async_db_session),
    publisher: EventPublisher = Depends(event_publisher_dependency),
    payments: PaymentService = Depends(payment_service_dependency),
) -> OrderCompletionService:
    return OrderCompletionService(db=db, publisher=publisher, payments=payments)


@router.get("/stripe/config", response_model=StripePublicConfigResponse)
async def stripe_config(payments: PaymentService = Depends(payment_service_dependency)) -> StripePublicConfigResponse:
    return payments.public_config()


@router.post("/create-payment-intent", response_model=CreatePaymentIntentResponse)
async def create_payment_intent(
    payload: CreatePaymentIntentRequest,
    payments: PaymentService = Depends(payment_service_dependency),
) -> CreatePaymentIntentResponse:
    return await payments.create_intent(payload.order_data)


@router.post("/complete-formation-order", response_model=CompleteFormationOrderResponse)
async def complete_formation_order(
    payload: CompleteFormationOrderRequest,
    request: Request,
    current_user: CurrentUser | None = Depends(get_optional_user),
    payments: PaymentService = Depends(payment_service_dependency),
    service: OrderCompletionService = Depends(order_completion_service_dependency),
) -> CompleteFormationOrderResponse:
    payment_intent_id = payments.resolve_payment_intent_id(
        payment_intent_id=payload.payment_intent_id,
        client_secret=payload.client_secret,
    )
    return await service.complete(
        payment_intent_id=payment_intent_id,
        business_entity_id=payload.business_entity_id,
        actor_user_id=current_user.user_id if current_user else None,
        actor_role=current_user.role if current_user else None,
        correlation_id=request.state.correlation_id,
    )
