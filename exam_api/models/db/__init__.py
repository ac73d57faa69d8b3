"""Database models."""
from exam_api.models.db.user import User, ProgressState
from exam_api.models.db.paper import (
    ALL_PAYMENT_TYPES,
    COIN_PAYMENT_TYPES,
    Paper,
    PaymentType,
    Question,
)
from exam_api.models.db.payment import Payment, PaymentStatus
from exam_api.models.db.attempt import Attempt, AttemptAnswer, AttemptStatus

__all__ = [
    "User",
    "ProgressState",
    "ALL_PAYMENT_TYPES",
    "COIN_PAYMENT_TYPES",
    "Paper",
    "PaymentType",
    "Question",
    "Payment",
    "PaymentStatus",
    "Attempt",
    "AttemptAnswer",
    "AttemptStatus",
]
