"""Payment facts consumed by the attempt lifecycle."""
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session as DbSession

from exam_api.errors import NotFoundError
from exam_api.models.db.paper import Paper, PaymentType
from exam_api.models.db.payment import Payment, PaymentStatus

logger = logging.getLogger(__name__)


def has_paid(db: DbSession, student_id: int, paper_id: int) -> bool:
    """Whether a successful payment exists for (student, paper)."""
    stmt = (
        select(Payment.id)
        .where(
            Payment.user_id == student_id,
            Payment.paper_id == paper_id,
            Payment.status == PaymentStatus.SUCCESS.value,
        )
        .limit(1)
    )
    return db.execute(stmt).first() is not None


def record_payment(
    db: DbSession,
    student_id: int,
    paper_id: int,
    amount: float,
    status: PaymentStatus = PaymentStatus.SUCCESS,
) -> Payment:
    """Record a payment confirmed by the gateway."""
    payment = Payment(
        user_id=student_id,
        paper_id=paper_id,
        amount=amount,
        status=status.value,
    )
    db.add(payment)
    db.commit()
    db.refresh(payment)
    logger.info(f"Recorded {status.value} payment for student {student_id} on paper {paper_id}")
    return payment


def get_payment_status(db: DbSession, student_id: int, paper_id: int) -> dict[str, object]:
    """Whether a paper still needs payment before it can be attempted."""
    paper = db.get(Paper, paper_id)
    if paper is None:
        raise NotFoundError("Paper not found", paperId=paper_id)

    if paper.payment is not PaymentType.PAID:
        return {
            "paperId": paper_id,
            "payment": paper.payment_type,
            "required": False,
            "unlocked": True,
            "amount": 0,
        }

    unlocked = has_paid(db, student_id, paper_id)
    return {
        "paperId": paper_id,
        "payment": paper.payment_type,
        "required": True,
        "unlocked": unlocked,
        "amount": float(paper.amount or 0),
    }
