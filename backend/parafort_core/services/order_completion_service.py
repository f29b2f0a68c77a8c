"""Turn a succeeded PaymentIntent into a business entity and a formation order.

Completion is keyed on the PaymentIntent id. The browser calls it after
confirming the payment and the Stripe webhook calls it again; whichever
arrives second gets the existing order back.
"""

import asyncio
import logging
import secrets
import string
import uuid
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from parafort_core.checkout.pricing import CENTS, format_amount
from parafort_core.core.config import get_settings
from parafort_core.core.errors import AppError, ErrorCodes
from parafort_core.models.business_entity import BusinessEntity
from parafort_core.models.formation_order import FormationOrder, OrderStatus, PaymentStatus, get_progress_for_status
from parafort_core.models.user import UserRole
from parafort_core.repositories.business_entity_repository import BusinessEntityRepository
from parafort_core.repositories.formation_order_repository import FormationOrderRepository
from parafort_core.repositories.user_repository import UserRepository
from parafort_core.schemas.payment import CompleteFormationOrderResponse
from parafort_core.services.audit import write_audit_log
from parafort_core.services.event_publisher import EventPublisher
from parafort_core.services.payment_service import PaymentService
from parafort_core.services.ses_service import SesService, get_ses_service

logger = logging.getLogger(__name__)

ORDER_ID_PREFIX = "PF-"
ORDER_ID_ALPHABET = string.ascii_uppercase + string.digits
ORDER_ID_LENGTH = 9


def generate_order_id() -> str:
    return ORDER_ID_PREFIX + "".join(secrets.choice(ORDER_ID_ALPHABET) for _ in range(ORDER_ID_LENGTH))


def _parse_uuid(value: str | None) -> uuid.UUID | None:
    if not value:
        return None
    try:
        return uuid.UUID(value)
    except ValueError:
        return None


class OrderCompletionService:
    def __init__(
        self,
        db: AsyncSession,
        publisher: EventPublisher,
        payments: PaymentService,
        mailer: SesService | None = None,
    ) -> None:
        self.db = db
        self.publisher = publisher
        self.payments = payments
        self.mailer = mailer or get_ses_service()
        self.repository = FormationOrderRepository(db)
        self.entity_repository = BusinessEntityRepository(db)
        self.user_repository = UserRepository(db)

    async def complete(
        self,
        *,
        payment_intent_id: str,
        business_entity_id: uuid.UUID | None = None,
        actor_user_id: uuid.UUID | None = None,
        actor_role: str | None = None,
        correlation_id: str | None = None,
    ) -> CompleteFormationOrderResponse:
        existing = await self.repository.get_by_payment_intent(payment_intent_id)
        if existing is not None:
            return self._already_completed(existing)

        intent = await self.payments.retrieve_intent(payment_intent_id)
        return await self.complete_from_intent(
            intent,
            business_entity_id=business_entity_id,
            actor_user_id=actor_user_id,
            actor_role=actor_role,
            correlation_id=correlation_id,
        )

    async def complete_from_intent(
        self,
        intent: dict,
        *,
        business_entity_id: uuid.UUID | None = None,
        actor_user_id: uuid.UUID | None = None,
        actor_role: str | None = None,
        correlation_id: str | None = None,
    ) -> CompleteFormationOrderResponse:
        payment_intent_id = intent["id"]
        existing = await self.repository.get_by_payment_intent(payment_intent_id)
        if existing is not None:
            return self._already_completed(existing)

        if intent.get("status") != "succeeded":
            raise AppError(
                code=ErrorCodes.PAYMENT_NOT_COMPLETED,
                message="Payment was not completed.",
                status_code=409,
                details={"payment_intent_id": payment_intent_id, "status": intent.get("status")},
            )

        metadata = dict(intent.get("metadata") or {})
        user_id = self._resolve_owner(
            payment_intent_id,
            intent_user_id=_parse_uuid(metadata.get("user_id")),
            actor_user_id=actor_user_id,
            actor_role=actor_role,
        )
        email = metadata.get("contact_email") or intent.get("receipt_email") or ""
        user = await self.user_repository.get_by_id(user_id) if user_id else None
        if user is None and email:
            user = await self.user_repository.get_by_email(email)
        if user is not None:
            user_id = user.id
            email = email or user.email
        customer_name = metadata.get("customer_name") or (user.full_name if user else "") or email

        amount_cents = intent.get("amount_received") or intent.get("amount") or 0
        total_amount = (Decimal(amount_cents) / 100).quantize(CENTS)
        business_name = metadata.get("business_name") or "Unnamed business"
        entity_type = metadata.get("entity_type") or "LLC"
        state = metadata.get("state") or ""

        if business_entity_id is not None:
            entity = await self.entity_repository.get_by_id(business_entity_id)
            if entity is None or (actor_role != UserRole.ADMIN and entity.user_id != user_id):
                raise AppError(
                    code=ErrorCodes.BUSINESS_ENTITY_NOT_FOUND,
                    message="Business entity not found.",
                    status_code=404,
                    details={"business_entity_id": str(business_entity_id)},
                )
        else:
            entity = await self.entity_repository.create(
                BusinessEntity(
                    user_id=user_id,
                    name=business_name,
                    entity_type=entity_type,
                    state=state,
                    status="in_formation",
                )
            )

        order = FormationOrder(
            order_id=generate_order_id(),
            user_id=user_id,
            business_entity_id=entity.id,
            business_name=business_name,
            entity_type=entity_type,
            state=state,
            customer_email=email,
            customer_name=customer_name,
            stripe_payment_intent_id=payment_intent_id,
            total_amount=total_amount,
            currency=intent.get("currency") or "usd",
            payment_status=PaymentStatus.PAID,
            status=OrderStatus.PENDING,
            current_progress=get_progress_for_status(OrderStatus.PENDING.value),
            version=1,
        )
        try:
            created = await self.repository.create(order)
        except IntegrityError:
            # Lost the race against a concurrent completion for the same intent.
            await self.db.rollback()
            existing = await self.repository.get_by_payment_intent(payment_intent_id)
            if existing is None:
                raise
            return self._already_completed(existing)

        await write_audit_log(
            self.db,
            actor_user_id=actor_user_id,
            entity_name="formation_order",
            entity_id=created.id,
            action="formation_order_created",
            changed_field_names=["status", "payment_status", "total_amount"],
            metadata={"order_id": created.order_id, "payment_intent_id": payment_intent_id},
            correlation_id=correlation_id,
        )
        await self.db.commit()
        logger.info(
            "formation_order_completed order_id=%s payment_intent_id=%s amount=%s",
            created.order_id,
            payment_intent_id,
            format_amount(total_amount),
        )
        await self.publisher.publish(
            "formation_order.created",
            created.id,
            {"order_id": created.order_id, "status": created.status.value},
            entity_type="formation_order",
            correlation_id=correlation_id,
        )
        await self._send_confirmation(created)

        return CompleteFormationOrderResponse(
            success=True,
            message="Order completed successfully.",
            order_id=created.order_id,
            business_entity_id=str(entity.id),
        )

    async def _send_confirmation(self, order: FormationOrder) -> None:
        if not order.customer_email:
            return
        settings = get_settings()
        try:
            await asyncio.to_thread(
                self.mailer.send_order_confirmation,
                email=order.customer_email,
                customer_name=order.customer_name,
                order_id=order.order_id,
                business_name=order.business_name,
                total_amount=format_amount(order.total_amount),
                dashboard_url=f"{settings.frontend_base_url}/dashboard",
            )
        except Exception:
            # The order is persisted; a missing email must not fail the payment.
            logger.exception("order_confirmation_email_failed order_id=%s", order.order_id)

    @staticmethod
    def _resolve_owner(
        payment_intent_id: str,
        *,
        intent_user_id: uuid.UUID | None,
        actor_user_id: uuid.UUID | None,
        actor_role: str | None,
    ) -> uuid.UUID | None:
        """The customer recorded on the PaymentIntent owns the order, not the caller."""
        if intent_user_id is None:
            return actor_user_id
        if actor_user_id is not None and actor_user_id != intent_user_id and actor_role != UserRole.ADMIN:
            # Someone else's payment looks exactly like a missing one.
            raise AppError(
                code=ErrorCodes.PAYMENT_INTENT_NOT_FOUND,
                message="Payment not found.",
                status_code=404,
                details={"payment_intent_id": payment_intent_id},
            )
        return intent_user_id

    @staticmethod
    def _already_completed(order: FormationOrder) -> CompleteFormationOrderResponse:
        logger.info("formation_order_already_completed order_id=%s", order.order_id)
        return CompleteFormationOrderResponse(
            success=True,
            message="Order already completed.",
            order_id=order.order_id,
            business_entity_id=str(order.business_entity_id) if order.business_entity_id else "",
            already_completed=True,
        )
