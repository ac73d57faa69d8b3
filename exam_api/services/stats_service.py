"""Service layer for per-student statistics."""
from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session as DbSession

from exam_api.models.db.attempt import Attempt, AttemptStatus
from exam_api.models.db.paper import COIN_PAYMENT_TYPES, Paper
from exam_api.services.best_attempt import best_by_paper
from exam_api.utils.numbers import round_half_up
from exam_api.utils.time_utils import ensure_utc, isoformat_utc


def get_submitted_attempts(
    db: DbSession,
    student_id: int | None = None,
    payment_types: Iterable[str] | None = None,
) -> list[Attempt]:
    """
    Submitted attempts, optionally for one student and a set of payment types.

    Payment type filtering uses the snapshot stored on each attempt.
    """
    query = select(Attempt).where(
        Attempt.status == AttemptStatus.SUBMITTED.value,
        Attempt.submitted_at.is_not(None),
    )
    if student_id is not None:
        query = query.where(Attempt.student_id == student_id)
    if payment_types is not None:
        query = query.where(Attempt.payment_type.in_(list(payment_types)))
    return list(db.execute(query).scalars().all())


def coins_for(attempt: Attempt) -> float:
    """Coins an attempt contributes; practice attempts never earn coins."""
    payment = attempt.payment
    if payment is None or not payment.earns_coins:
        return 0.0
    return float(attempt.total_points_earned or 0)


def get_completed_papers(db: DbSession, student_id: int) -> list[dict[str, object]]:
    """One entry per completed paper, represented by its best attempt."""
    best = best_by_paper(get_submitted_attempts(db, student_id))
    if not best:
        return []

    papers = {
        paper.id: paper
        for paper in db.execute(select(Paper).where(Paper.id.in_(list(best)))).scalars()
    }

    # Newest completion first
    attempts = sorted(
        best.values(), key=lambda a: ensure_utc(a.submitted_at), reverse=True
    )

    items = []
    for attempt in attempts:
        paper = papers.get(attempt.paper_id)
        items.append(
            {
                "paperId": attempt.paper_id,
                "paperTitle": paper.paper_title if paper else "",
                "paymentType": attempt.payment_type,
                "totalQuestions": attempt.question_count,
                "correct": attempt.correct_count,
                "percentage": attempt.percentage,
                "coins": coins_for(attempt),
                "attemptId": attempt.id,
                "attemptNo": attempt.attempt_no,
                "completedAt": isoformat_utc(attempt.submitted_at),
            }
        )
    return items


def get_stats(db: DbSession, student_id: int) -> dict[str, object]:
    """Coin total and finished-exam count over free and paid papers."""
    best = best_by_paper(get_submitted_attempts(db, student_id, COIN_PAYMENT_TYPES))
    total_coins = sum(coins_for(attempt) for attempt in best.values())
    return {
        "totalCoins": round_half_up(total_coins, 2),
        "totalFinishedExams": len(best),
    }
