"""Domain errors raised by the attempt services.

Each error is an ``HTTPException`` so services can raise it directly and
FastAPI renders it without a translation layer. ``detail`` is always a dict
with a machine-readable ``code`` and a human ``message``; some errors add
fields the caller needs to route the student (quota numbers, payment amount).
"""
from typing import Any

from fastapi import HTTPException, status


class AttemptError(HTTPException):
    """Base class for attempt lifecycle errors."""

    code = "attempt_error"
    default_status = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, **extra: Any) -> None:
        super().__init__(
            status_code=self.default_status,
            detail={"code": self.code, "message": message, **extra},
        )
        self.message = message
        self.extra = extra


class NotFoundError(AttemptError):
    code = "not_found"
    default_status = status.HTTP_404_NOT_FOUND


class ForbiddenError(AttemptError):
    code = "forbidden"
    default_status = status.HTTP_403_FORBIDDEN


class InvalidStateError(AttemptError):
    code = "invalid_state"
    default_status = status.HTTP_409_CONFLICT


class ValidationError(AttemptError):
    code = "validation_error"
    default_status = status.HTTP_400_BAD_REQUEST


class QuotaExceededError(AttemptError):
    """Attempt limit reached; carries the numbers the caller needs to show the last result."""

    code = "quota_exceeded"
    default_status = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        attempts_allowed: int,
        attempts_used: int,
        last_attempt_id: int | None,
    ) -> None:
        super().__init__(
            "Attempt limit reached",
            attemptsAllowed=attempts_allowed,
            attemptsUsed=attempts_used,
            attemptsLeft=max(attempts_allowed - attempts_used, 0),
            lastAttemptId=last_attempt_id,
        )


class PaymentRequiredError(AttemptError):
    code = "payment_required"
    default_status = status.HTTP_402_PAYMENT_REQUIRED

    def __init__(self, paper_id: int, amount: float) -> None:
        super().__init__("Payment required", paperId=paper_id, amount=amount)


class AttemptConflictError(AttemptError):
    """A concurrent start claimed the same attempt number; safe to retry."""

    code = "attempt_conflict"
    default_status = status.HTTP_409_CONFLICT

    def __init__(self, message: str = "Attempt was started concurrently, retry", **extra: Any) -> None:
        super().__init__(message, retryable=True, **extra)
