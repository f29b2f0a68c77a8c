import logging
from datetime import UTC, datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from parafort_core.core.errors import AppError, ErrorCodes
from parafort_core.core.security import create_access_token, hash_password, verify_password
from parafort_core.models.user import User, UserRole
from parafort_core.repositories.email_verification_repository import EmailVerificationRepository
from parafort_core.repositories.user_repository import UserRepository
from parafort_core.schemas.auth import LoginRequest, RegisterRequest, RegisterResponse, TokenResponse

logger = logging.getLogger(__name__)

REGISTRATION_PURPOSE = "registration"


class InvalidCredentialsError(ValueError):
    pass


class AuthService:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self.user_repo = UserRepository(db)
        self.verification_repo = EmailVerificationRepository(db)

    async def login(self, payload: LoginRequest) -> TokenResponse:
        user = await self.user_repo.get_by_email(payload.email)
        if user is None or not verify_password(payload.password, user.hashed_password):
            raise InvalidCredentialsError("Invalid email or password")

        token = create_access_token(str(user.id), user.role)
        return TokenResponse(access_token=token)

    async def register(self, payload: RegisterRequest) -> RegisterResponse:
        email = payload.email.lower()
        verification = await self.verification_repo.get_latest_verified(email=email, purpose=REGISTRATION_PURPOSE)
        if verification is None:
            raise AppError(
                code=ErrorCodes.EMAIL_NOT_VERIFIED,
                message="Verify your email address before creating an account.",
                status_code=403,
                details={"email": email},
            )

        if await self.user_repo.get_by_email(email) is not None:
            raise self._already_registered(email)

        user = User(
            email=email,
            hashed_password=hash_password(payload.password),
            first_name=payload.first_name,
            last_name=payload.last_name,
            role=UserRole.CLIENT,
            email_verified_at=verification.verified_at or datetime.now(UTC),
            version=1,
        )
        try:
            created = await self.user_repo.create(user)
        except IntegrityError as exc:
            await self.db.rollback()
            raise self._already_registered(email) from exc
        await self.db.commit()

        logger.info("user_registered user_id=%s", created.id)
        return RegisterResponse(
            user_id=created.id,
            email=created.email,
            access_token=create_access_token(str(created.id), created.role),
        )

    @staticmethod
    def _already_registered(email: str) -> AppError:
        return AppError(
            code=ErrorCodes.EMAIL_ALREADY_REGISTERED,
            message="An account with this email already exists.",
            status_code=409,
            details={"email": email},
        )
