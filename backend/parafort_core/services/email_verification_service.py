"""Issue and check six-digit email verification codes.

Codes are stored only as SHA-256 digests. Issuing a new code invalidates any
earlier pending code for the same address and purpose, so at most one code is
live at a time.
"""

import asyncio
import hashlib
import hmac
import logging
import secrets
from datetime import UTC, datetime, timedelta

from botocore.exceptions import BotoCoreError, ClientError
from sqlalchemy.ext.asyncio import AsyncSession

from parafort_core.core.config import get_settings
from parafort_core.core.errors import AppError, ErrorCodes
from parafort_core.models.email_verification import EmailVerification
from parafort_core.repositories.email_verification_repository import EmailVerificationRepository
from parafort_core.schemas.auth import VerificationResponse
from parafort_core.services.ses_service import SesService, get_ses_service

logger = logging.getLogger(__name__)

CODE_LENGTH = 6
REGISTRATION_PURPOSE = "registration"


def generate_code() -> str:
    return f"{secrets.randbelow(10**CODE_LENGTH):0{CODE_LENGTH}d}"


def hash_code(code: str) -> str:
    return hashlib.sha256(code.encode("utf-8")).hexdigest()


def mask_email(email: str) -> str:
    local, _, domain = email.partition("@")
    if not domain:
        return "****"
    masked_local = (local[:1] + "****") if len(local) <= 2 else (local[0] + "****" + local[-1])
    return f"{masked_local}@{domain}"


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


class EmailVerificationService:
    def __init__(self, db: AsyncSession, mailer: SesService | None = None) -> None:
        settings = get_settings()
        self.db = db
        self.repository = EmailVerificationRepository(db)
        self.mailer = mailer or get_ses_service()
        self.ttl_minutes = settings.verification_code_ttl_minutes
        self.max_attempts = settings.verification_max_attempts

    async def send_code(self, email: str, *, purpose: str = REGISTRATION_PURPOSE) -> VerificationResponse:
        email = email.lower()
        now = datetime.now(UTC)
        code = generate_code()

        await self.repository.invalidate_pending(email=email, purpose=purpose, now=now)
        await self.repository.create(
            EmailVerification(
                email=email,
                code_hash=hash_code(code),
                purpose=purpose,
                expires_at=now + timedelta(minutes=self.ttl_minutes),
                attempts=0,
            )
        )

        try:
            await asyncio.to_thread(self.mailer.send_verification_code, email, code, self.ttl_minutes)
        except (ClientError, BotoCoreError) as exc:
            await self.db.rollback()
            logger.error("verification_email_failed email=%s error=%s", mask_email(email), exc)
            raise AppError(
                code=ErrorCodes.EMAIL_DELIVERY_FAILED,
                message="We could not send a verification email. Please try again.",
                status_code=502,
                details={"email": email},
            ) from exc

        await self.db.commit()
        logger.info("verification_code_sent email=%s purpose=%s", mask_email(email), purpose)
        return VerificationResponse(success=True, message=f"Verification code sent to {email}.")

    async def verify_code(self, email: str, code: str, *, purpose: str = REGISTRATION_PURPOSE) -> VerificationResponse:
        email = email.lower()
        now = datetime.now(UTC)
        record = await self.repository.get_latest_pending(email=email, purpose=purpose)
        if record is None:
            raise AppError(
                code=ErrorCodes.VERIFICATION_CODE_INVALID,
                message="No active verification code. Request a new one.",
                status_code=400,
                details={"email": email},
            )

        if _as_utc(record.expires_at) <= now:
            record.invalidated_at = now
            await self.repository.save(record)
            await self.db.commit()
            raise AppError(
                code=ErrorCodes.VERIFICATION_CODE_EXPIRED,
                message="Verification code has expired. Request a new one.",
                status_code=400,
                details={"email": email},
            )

        if not hmac.compare_digest(hash_code(code), record.code_hash):
            record.attempts += 1
            remaining = self.max_attempts - record.attempts
            if remaining <= 0:
                record.invalidated_at = now
                await self.repository.save(record)
                await self.db.commit()
                logger.warning("verification_attempts_exceeded email=%s", mask_email(email))
                raise AppError(
                    code=ErrorCodes.VERIFICATION_ATTEMPTS_EXCEEDED,
                    message="Too many incorrect attempts. Request a new code.",
                    status_code=429,
                    details={"email": email, "max_attempts": self.max_attempts},
                )
            await self.repository.save(record)
            await self.db.commit()
            raise AppError(
                code=ErrorCodes.VERIFICATION_CODE_INVALID,
                message="Invalid verification code.",
                status_code=400,
                details={"email": email, "attempts_remaining": remaining},
            )

        record.verified_at = now
        await self.repository.save(record)
        await self.db.commit()
        logger.info("email_verified email=%s purpose=%s", mask_email(email), purpose)
        return VerificationResponse(success=True, message="Email verified successfully.")
