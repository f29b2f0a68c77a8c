from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(slots=True)
class AppError(Exception):
    code: str
    message: str
    status_code: int
    details: dict[str, Any] | None = None

    def to_response(self, trace_id: str | None) -> dict[str, Any]:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details or {},
                "trace_id": trace_id,
            }
        }


class ErrorCodes:
    CONCURRENCY_CONFLICT = "CONCURRENCY_CONFLICT"
    IDEMPOTENCY_CONFLICT = "IDEMPOTENCY_CONFLICT"

    SERVICE_NOT_FOUND = "SERVICE_NOT_FOUND"

    CHECKOUT_SESSION_NOT_FOUND = "CHECKOUT_SESSION_NOT_FOUND"
    CHECKOUT_STEP_INCOMPLETE = "CHECKOUT_STEP_INCOMPLETE"
    CHECKOUT_STEP_OUT_OF_ORDER = "CHECKOUT_STEP_OUT_OF_ORDER"
    SERVICE_QUESTIONS_MISMATCH = "SERVICE_QUESTIONS_MISMATCH"

    EMAIL_DELIVERY_FAILED = "EMAIL_DELIVERY_FAILED"
    EMAIL_NOT_VERIFIED = "EMAIL_NOT_VERIFIED"
    EMAIL_ALREADY_REGISTERED = "EMAIL_ALREADY_REGISTERED"
    VERIFICATION_CODE_INVALID = "VERIFICATION_CODE_INVALID"
    VERIFICATION_CODE_EXPIRED = "VERIFICATION_CODE_EXPIRED"
    VERIFICATION_ATTEMPTS_EXCEEDED = "VERIFICATION_ATTEMPTS_EXCEEDED"
    PASSWORD_MISMATCH = "PASSWORD_MISMATCH"

    PAYMENT_NOT_READY = "PAYMENT_NOT_READY"
    PAYMENT_SESSION_EXPIRED = "PAYMENT_SESSION_EXPIRED"
    PAYMENT_VALIDATION_FAILED = "PAYMENT_VALIDATION_FAILED"
    PAYMENT_CONFIRMATION_FAILED = "PAYMENT_CONFIRMATION_FAILED"
    PAYMENT_NOT_COMPLETED = "PAYMENT_NOT_COMPLETED"
    PAYMENT_UNEXPECTED_ERROR = "PAYMENT_UNEXPECTED_ERROR"

    ORDER_NOT_FOUND = "ORDER_NOT_FOUND"
    ORDER_INVALID_TRANSITION = "ORDER_INVALID_TRANSITION"

    ANNOUNCEMENT_NOT_FOUND = "ANNOUNCEMENT_NOT_FOUND"
    ANNOUNCEMENT_INVALID_WINDOW = "ANNOUNCEMENT_INVALID_WINDOW"
    BUSINESS_ENTITY_NOT_FOUND = "BUSINESS_ENTITY_NOT_FOUND"
    PAYMENT_INTENT_NOT_FOUND = "PAYMENT_INTENT_NOT_FOUND"
