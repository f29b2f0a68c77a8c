import logging

from sqlalchemy.ext.asyncio import AsyncSession

from parafort_core.checkout.pricing import format_amount
from parafort_core.checkout.session_store import CheckoutSessionStore
from parafort_core.checkout.wizard import STEP_DETAILS, CheckoutSession, CheckoutStep
from parafort_core.core.config import get_settings
from parafort_core.core.errors import AppError, ErrorCodes
from parafort_core.repositories.service_repository import ServiceRepository
from parafort_core.schemas.auth import RegisterRequest
from parafort_core.schemas.checkout import (
    CheckoutSessionResponse,
    ClientInformation,
    CreateAccountRequest,
    CreateAccountResponse,
    ReviewResponse,
    ServiceQuestionsRequest,
)
from parafort_core.schemas.service import ServiceSnapshot
from parafort_core.services.auth_service import AuthService
from parafort_core.services.email_verification_service import EmailVerificationService

logger = logging.getLogger(__name__)


class CheckoutService:
    def __init__(
        self,
        db: AsyncSession,
        store: CheckoutSessionStore,
        verification_service: EmailVerificationService | None = None,
        auth_service: AuthService | None = None,
    ) -> None:
        self.db = db
        self.store = store
        self.service_repo = ServiceRepository(db)
        self.verification_service = verification_service or EmailVerificationService(db)
        self.auth_service = auth_service or AuthService(db)
        self.default_expedited_fee = get_settings().default_expedited_fee

    async def create_session(self, *, service_id: int) -> CheckoutSessionResponse:
        service = await self.service_repo.get_active_by_id(service_id)
        if service is None:
            raise AppError(
                code=ErrorCodes.SERVICE_NOT_FOUND,
                message="Service not found.",
                status_code=404,
                details={"service_id": service_id},
            )
        session = CheckoutSession(service=ServiceSnapshot.model_validate(service))
        await self.store.save(session)
        logger.info("checkout_session_created session_id=%s service_id=%s", session.id, service_id)
        return self.to_response(session)

    async def get_session(self, session_id: str) -> CheckoutSessionResponse:
        return self.to_response(await self.store.require(session_id))

    async def send_verification_code(self, session_id: str, *, email: str) -> CheckoutSessionResponse:
        session = await self.store.require(session_id)
        self._require_reached(session, CheckoutStep.EMAIL_VERIFICATION)
        email = email.lower()
        if session.account_data.user_id and email != session.email_data.email:
            raise AppError(
                code=ErrorCodes.CHECKOUT_STEP_OUT_OF_ORDER,
                message="The email address cannot change after the account is created.",
                status_code=409,
                details={"session_id": session.id},
            )

        await self.verification_service.send_code(email)
        if email != session.email_data.email:
            session.email_data.email = email
            session.email_data.is_verified = False
            # A new address must be verified again before the wizard can move on.
            session.current_step = CheckoutStep.EMAIL_VERIFICATION
        session.email_data.code_sent = True
        await self.store.save(session)
        return self.to_response(session)

    async def verify_email(self, session_id: str, *, code: str) -> CheckoutSessionResponse:
        session = await self.store.require(session_id)
        self._require_reached(session, CheckoutStep.EMAIL_VERIFICATION)
        if not session.email_data.email or not session.email_data.code_sent:
            raise AppError(
                code=ErrorCodes.CHECKOUT_STEP_OUT_OF_ORDER,
                message="Request a verification code first.",
                status_code=409,
                details={"session_id": session.id},
            )

        await self.verification_service.verify_code(session.email_data.email, code)
        session.email_data.is_verified = True
        self._advance_from(session, CheckoutStep.EMAIL_VERIFICATION)
        await self.store.save(session)
        return self.to_response(session)

    async def create_account(self, session_id: str, payload: CreateAccountRequest) -> CreateAccountResponse:
        session = await self.store.require(session_id)
        self._require_reached(session, CheckoutStep.ACCOUNT_CREATION)
        if payload.password != payload.confirm_password:
            raise AppError(
                code=ErrorCodes.PASSWORD_MISMATCH,
                message="Passwords do not match.",
                status_code=422,
                details={"field": "confirm_password"},
            )

        registered = await self.auth_service.register(
            RegisterRequest(
                email=session.email_data.email,
                first_name=payload.first_name,
                last_name=payload.last_name,
                password=payload.password,
            )
        )
        session.account_data.first_name = payload.first_name.strip()
        session.account_data.last_name = payload.last_name.strip()
        session.account_data.user_id = str(registered.user_id)
        self._advance_from(session, CheckoutStep.ACCOUNT_CREATION)
        await self.store.save(session)
        return CreateAccountResponse(session=self.to_response(session), access_token=registered.access_token)

    async def save_service_questions(self, session_id: str, payload: ServiceQuestionsRequest) -> CheckoutSessionResponse:
        session = await self.store.require(session_id)
        self._require_reached(session, CheckoutStep.SERVICE_QUESTIONS)
        expected = session.service.questionnaire
        if payload.answers is None and expected != "general":
            raise AppError(
                code=ErrorCodes.SERVICE_QUESTIONS_MISMATCH,
                message=f"Answers for the '{expected}' questionnaire are required.",
                status_code=422,
                details={"expected": expected, "received": None},
            )
        if payload.answers is not None and payload.answers.questionnaire != expected:
            raise AppError(
                code=ErrorCodes.SERVICE_QUESTIONS_MISMATCH,
                message=f"This service uses the '{expected}' questionnaire.",
                status_code=422,
                details={"expected": expected, "received": payload.answers.questionnaire},
            )

        session.service_questions = payload.answers
        session.is_expedited = payload.is_expedited
        session.questions_answered = True
        self._advance_from(session, CheckoutStep.SERVICE_QUESTIONS)
        await self.store.save(session)
        return self.to_response(session)

    async def save_client_information(self, session_id: str, payload: ClientInformation) -> CheckoutSessionResponse:
        session = await self.store.require(session_id)
        self._require_reached(session, CheckoutStep.CLIENT_INFORMATION)
        session.client_information = payload
        self._advance_from(session, CheckoutStep.CLIENT_INFORMATION)
        await self.store.save(session)
        return self.to_response(session)

    async def go_back(self, session_id: str) -> CheckoutSessionResponse:
        session = await self.store.require(session_id)
        session.back()
        await self.store.save(session)
        return self.to_response(session)

    async def get_review(self, session_id: str) -> ReviewResponse:
        session = await self.store.require(session_id)
        self._require_reached(session, CheckoutStep.REVIEW_PAYMENT)
        totals = session.totals(self.default_expedited_fee)
        return ReviewResponse(
            service_name=session.service.name,
            base_price=format_amount(totals.base_price),
            expedited_fee=format_amount(totals.expedited_fee),
            is_expedited=session.is_expedited,
            total=format_amount(totals.total),
            client_information=session.client_information,
        )

    def to_response(self, session: CheckoutSession) -> CheckoutSessionResponse:
        return CheckoutSessionResponse(
            id=session.id,
            service=session.service,
            email_data=session.email_data,
            account_data=session.account_data,
            service_questions=session.service_questions,
            client_information=session.client_information,
            is_expedited=session.is_expedited,
            current_step=int(session.current_step),
            steps=session.step_descriptors(),
            total=format_amount(session.totals(self.default_expedited_fee).total),
            created_at=session.created_at,
        )

    @staticmethod
    def _require_reached(session: CheckoutSession, step: CheckoutStep) -> None:
        if session.current_step < step:
            title, _ = STEP_DETAILS[step]
            raise AppError(
                code=ErrorCodes.CHECKOUT_STEP_OUT_OF_ORDER,
                message=f"'{title}' is not available yet.",
                status_code=409,
                details={
                    "session_id": session.id,
                    "current_step": int(session.current_step),
                    "requested_step": int(step),
                },
            )

    @staticmethod
    def _advance_from(session: CheckoutSession, step: CheckoutStep) -> None:
        # Re-submitting an earlier step after jumping ahead leaves the cursor in place.
        if session.current_step == step:
            session.advance()
