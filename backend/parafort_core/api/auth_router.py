from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from parafort_core.api.dependencies import get_current_user
from parafort_core.core.security import create_access_token
from parafort_core.db.session import get_async_db_session
from parafort_core.schemas.auth import (
    CurrentUser,
    LoginRequest,
    RegisterRequest,
    RegisterResponse,
    SendVerificationRequest,
    TokenResponse,
    VerificationResponse,
    VerifyEmailRequest,
)
from parafort_core.services.auth_service import AuthService, InvalidCredentialsError
from parafort_core.services.email_verification_service import EmailVerificationService

router = APIRouter(prefix="/api/auth", tags=["auth"])


def auth_service_dependency(db: AsyncSession = Depends(get_async_db_session)) -> AuthService:
    return AuthService(db)


def verification_service_dependency(db: AsyncSession = Depends(get_async_db_session)) -> EmailVerificationService:
    return EmailVerificationService(db)


@router.post("/login", response_model=TokenResponse)
async def login(payload: LoginRequest, service: AuthService = Depends(auth_service_dependency)) -> TokenResponse:
    try:
        return await service.login(payload)
    except InvalidCredentialsError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest, service: AuthService = Depends(auth_service_dependency)
) -> RegisterResponse:
    return await service.register(payload)


@router.post("/refresh", response_model=TokenResponse)
async def refresh(current: CurrentUser = Depends(get_current_user)) -> TokenResponse:
    return TokenResponse(access_token=create_access_token(str(current.user_id), current.role))


@router.post("/send-verification", response_model=VerificationResponse)
async def send_verification(
    payload: SendVerificationRequest,
    service: EmailVerificationService = Depends(verification_service_dependency),
) -> VerificationResponse:
    return await service.send_code(payload.email)


@router.post("/verify-email", response_model=VerificationResponse)
async def verify_email(
    payload: VerifyEmailRequest,
    service: EmailVerificationService = Depends(verification_service_dependency),
) -> VerificationResponse:
    return await service.verify_code(payload.email, payload.code)
