from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from botocore.exceptions import ClientError

from parafort_core.core.errors import AppError, ErrorCodes
from parafort_core.models.email_verification import EmailVerification
from parafort_core.services.email_verification_service import (
    EmailVerificationService,
    generate_code,
    hash_code,
    mask_email,
)


class FakeDB:
    def __init__(self) -> None:
        self.commits = 0
        self.rollbacks = 0

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        self.rollbacks += 1


class FakeRepository:
    def __init__(self) -> None:
        self.rows: list[EmailVerification] = []

    async def create(self, verification: EmailVerification) -> EmailVerification:
        verification.created_at = datetime.now(UTC)
        self.rows.append(verification)
        return verification

    async def get_latest_pending(self, *, email: str, purpose: str) -> EmailVerification | None:
        pending = [r for r in self.rows if r.email == email and r.purpose == purpose and r.is_pending]
        return pending[-1] if pending else None

    async def invalidate_pending(self, *, email: str, purpose: str, now: datetime) -> None:
        for row in self.rows:
            if row.email == email and row.purpose == purpose and row.is_pending:
                row.invalidated_at = now

    async def save(self, verification: EmailVerification) -> EmailVerification:
        return verification


class FakeMailer:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.sent: list[tuple[str, str, int]] = []

    def send_verification_code(self, email: str, code: str, expires_minutes: int = 10) -> dict:
        if self.fail:
            raise ClientError({"Error": {"Code": "MessageRejected", "Message": "nope"}}, "SendEmail")
        self.sent.append((email, code, expires_minutes))
        return {"message_id": "m-1", "status": "sent"}


def _service(mailer: FakeMailer | None = None) -> tuple[EmailVerificationService, FakeDB, FakeRepository, FakeMailer]:
    db = FakeDB()
    mailer = mailer or FakeMailer()
    service = EmailVerificationService(db=db, mailer=mailer)
    repository = FakeRepository()
    service.repository = repository
    return service, db, repository, mailer


def test_generated_codes_are_six_digits():
    for _ in range(50):
        code = generate_code()
        assert len(code) == 6 and code.isdigit()


def test_mask_email_hides_local_part():
    assert mask_email("owner@example.com") == "o****r@example.com"
    assert mask_email("ab@example.com") == "a****@example.com"


@pytest.mark.asyncio
async def test_send_code_stores_only_hash_and_invalidates_previous() -> None:
    service, db, repository, mailer = _service()

    await service.send_code("Owner@Example.com")
    await service.send_code("owner@example.com")

    assert len(repository.rows) == 2
    first, second = repository.rows
    assert first.invalidated_at is not None
    assert second.is_pending
    sent_code = mailer.sent[-1][1]
    assert second.code_hash == hash_code(sent_code)
    assert mailer.sent[-1][2] == 10
    assert db.commits == 2


@pytest.mark.asyncio
async def test_delivery_failure_rolls_back_and_raises_502() -> None:
    service, db, _, _ = _service(FakeMailer(fail=True))

    with pytest.raises(AppError) as exc:
        await service.send_code("owner@example.com")

    assert exc.value.code == ErrorCodes.EMAIL_DELIVERY_FAILED
    assert exc.value.status_code == 502
    assert db.rollbacks == 1
    assert db.commits == 0


@pytest.mark.asyncio
async def test_correct_code_verifies() -> None:
    service, _, repository, mailer = _service()
    await service.send_code("owner@example.com")

    result = await service.verify_code("owner@example.com", mailer.sent[-1][1])

    assert result.success is True
    assert repository.rows[-1].verified_at is not None


@pytest.mark.asyncio
async def test_wrong_code_counts_attempts_then_locks_out() -> None:
    service, _, repository, mailer = _service()
    await service.send_code("owner@example.com")
    wrong = "000000" if mailer.sent[-1][1] != "000000" else "111111"

    for attempt in range(1, 5):
        with pytest.raises(AppError) as exc:
            await service.verify_code("owner@example.com", wrong)
        assert exc.value.code == ErrorCodes.VERIFICATION_CODE_INVALID
        assert exc.value.details["attempts_remaining"] == 5 - attempt

    with pytest.raises(AppError) as exc:
        await service.verify_code("owner@example.com", wrong)
    assert exc.value.code == ErrorCodes.VERIFICATION_ATTEMPTS_EXCEEDED
    assert exc.value.status_code == 429

    # The code is burned even if the right value arrives afterwards.
    with pytest.raises(AppError) as exc:
        await service.verify_code("owner@example.com", mailer.sent[-1][1])
    assert exc.value.code == ErrorCodes.VERIFICATION_CODE_INVALID
    assert repository.rows[-1].attempts == 5


@pytest.mark.asyncio
async def test_expired_code_is_rejected() -> None:
    service, _, repository, mailer = _service()
    await service.send_code("owner@example.com")
    # SQLite returns naive datetimes; make sure those compare correctly too.
    repository.rows[-1].expires_at = (datetime.now(UTC) - timedelta(seconds=1)).replace(tzinfo=None)

    with pytest.raises(AppError) as exc:
        await service.verify_code("owner@example.com", mailer.sent[-1][1])

    assert exc.value.code == ErrorCodes.VERIFICATION_CODE_EXPIRED
    assert repository.rows[-1].invalidated_at is not None


@pytest.mark.asyncio
async def test_verify_without_pending_code_is_invalid() -> None:
    service, _, _, _ = _service()

    with pytest.raises(AppError) as exc:
        await service.verify_code("nobody@example.com", "123456")

    assert exc.value.code == ErrorCodes.VERIFICATION_CODE_INVALID
