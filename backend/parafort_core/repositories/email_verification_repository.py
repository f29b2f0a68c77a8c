from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from parafort_core.models.email_verification import EmailVerification


class EmailVerificationRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create(self, verification: EmailVerification) -> EmailVerification:
        self.db.add(verification)
        await self.db.flush()
        await self.db.refresh(verification)
        return verification

    async def get_latest_pending(self, *, email: str, purpose: str) -> EmailVerification | None:
        stmt = (
            select(EmailVerification)
            .where(
                EmailVerification.email == email,
                EmailVerification.purpose == purpose,
                EmailVerification.verified_at.is_(None),
                EmailVerification.invalidated_at.is_(None),
            )
            .order_by(EmailVerification.created_at.desc())
            .limit(1)
        )
        return await self.db.scalar(stmt)

    async def get_latest_verified(self, *, email: str, purpose: str) -> EmailVerification | None:
        stmt = (
            select(EmailVerification)
            .where(
                EmailVerification.email == email,
                EmailVerification.purpose == purpose,
                EmailVerification.verified_at.is_not(None),
            )
            .order_by(EmailVerification.verified_at.desc())
            .limit(1)
        )
        return await self.db.scalar(stmt)

    async def invalidate_pending(self, *, email: str, purpose: str, now: datetime) -> None:
        stmt = (
            update(EmailVerification)
            .where(
                EmailVerification.email == email,
                EmailVerification.purpose == purpose,
                EmailVerification.verified_at.is_(None),
                EmailVerification.invalidated_at.is_(None),
            )
            .values(invalidated_at=now)
        )
        await self.db.execute(stmt)

    async def save(self, verification: EmailVerification) -> EmailVerification:
        await self.db.flush()
        return verification
