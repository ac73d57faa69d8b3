"""Best-attempt selection shared by every aggregate view.

Completed papers, stats, progress and the leaderboard must all agree on
which attempt represents a paper, so they all go through ``best_of``.
Order: more points, then higher percentage, then most recent submission.
"""
from collections.abc import Iterable
from datetime import datetime
from typing import Protocol, TypeVar

from exam_api.models.db.attempt import AttemptStatus
from exam_api.utils.time_utils import ensure_utc


class RankableAttempt(Protocol):
    paper_id: int
    status: str
    total_points_earned: float
    percentage: int
    submitted_at: datetime | None


A = TypeVar("A", bound=RankableAttempt)


def is_completed(attempt: RankableAttempt) -> bool:
    """Only submitted attempts with a submission time take part."""
    return attempt.status == AttemptStatus.SUBMITTED.value and attempt.submitted_at is not None


def best_attempt_key(attempt: RankableAttempt) -> tuple[float, float, float]:
    """Sort key; larger is better."""
    submitted_at = ensure_utc(attempt.submitted_at)
    return (
        float(attempt.total_points_earned or 0),
        float(attempt.percentage or 0),
        submitted_at.timestamp() if submitted_at else 0.0,
    )


def best_of(attempts: Iterable[A]) -> A | None:
    """Pick the best completed attempt for one (student, paper) pair."""
    best: A | None = None
    for attempt in attempts:
        if not is_completed(attempt):
            continue
        if best is None or best_attempt_key(attempt) > best_attempt_key(best):
            best = attempt
    return best


def best_by_paper(attempts: Iterable[A]) -> dict[int, A]:
    """Apply ``best_of`` independently per paper of one student."""
    grouped: dict[int, list[A]] = {}
    for attempt in attempts:
        grouped.setdefault(attempt.paper_id, []).append(attempt)

    result: dict[int, A] = {}
    for paper_id, paper_attempts in grouped.items():
        best = best_of(paper_attempts)
        if best is not None:
            result[paper_id] = best
    return result

