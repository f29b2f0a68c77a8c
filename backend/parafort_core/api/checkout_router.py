from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from parafort_core.api.dependencies import checkout_store_dependency
from parafort_core.checkout.session_store import CheckoutSessionStore
from parafort_core.db.session import get_async_db_session
from parafort_core.schemas.checkout import (
    CheckoutSendVerificationRequest,
    CheckoutSessionResponse,
    CheckoutVerifyEmailRequest,
    ClientInformation,
    CreateAccountRequest,
    CreateAccountResponse,
    CreateCheckoutSessionRequest,
    ReviewResponse,
    ServiceQuestionsRequest,
)
from parafort_core.services.checkout_service import CheckoutService

router = APIRouter(prefix="/api/checkout/sessions", tags=["checkout"])


def checkout_service_dependency(
    db: AsyncSession = Depends(get_async_db_session),
    store: CheckoutSessionStore = Depends(checkout_store_dependency),
) -> CheckoutService:
    return CheckoutService(db=db, store=store)


@router.post("", response_model=CheckoutSessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(
    payload: CreateCheckoutSessionRequest,
    service: CheckoutService = Depends(checkout_service_dependency),
) -> CheckoutSessionResponse:
    return await service.create_session(service_id=payload.service_id)


@router.get("/{session_id}", response_model=CheckoutSessionResponse)
async def get_session(
    session_id: str, service: CheckoutService = Depends(checkout_service_dependency)
) -> CheckoutSessionResponse:
    return await service.get_session(session_id)


@router.post("/{session_id}/send-verification", response_model=CheckoutSessionResponse)
async def send_verification(
    session_id: str,
    payload: CheckoutSendVerificationRequest,
    service: CheckoutService = Depends(checkout_service_dependency),
) -> CheckoutSessionResponse:
    return await service.send_verification_code(session_id, email=payload.email)


@router.post("/{session_id}/verify-email", response_model=CheckoutSessionResponse)
async def verify_email(
    session_id: str,
    payload: CheckoutVerifyEmailRequest,
    service: CheckoutService = Depends(checkout_service_dependency),
) -> CheckoutSessionResponse:
    return await service.verify_email(session_id, code=payload.code)


@router.post("/{session_id}/account", response_model=CreateAccountResponse)
async def create_account(
    session_id: str,
    payload: CreateAccountRequest,
    service: CheckoutService = Depends(checkout_service_dependency),
) -> CreateAccountResponse:
    return await service.create_account(session_id, payload)


@router.post("/{session_id}/service-questions", response_model=CheckoutSessionResponse)
async def save_service_questions(
    session_id: str,
    payload: ServiceQuestionsRequest,
    service: CheckoutService = Depends(checkout_service_dependency),
) -> CheckoutSessionResponse:
    return await service.save_service_questions(session_id, payload)


@router.post("/{session_id}/client-information", response_model=CheckoutSessionResponse)
async def save_client_information(
    session_id: str,
    payload: ClientInformation,
    service: CheckoutService = Depends(checkout_service_dependency),
) -> CheckoutSessionResponse:
    return await service.save_client_information(session_id, payload)


@router.post("/{session_id}/back", response_model=CheckoutSessionResponse)
async def go_back(
    session_id: str, service: CheckoutService = Depends(checkout_service_dependency)
) -> CheckoutSessionResponse:
    return await service.go_back(session_id)


@router.get("/{session_id}/review", response_model=ReviewResponse)
async def get_review(
    session_id: str, service: CheckoutService = Depends(checkout_service_dependency)
) -> ReviewResponse:
    return await service.get_review(session_id)
