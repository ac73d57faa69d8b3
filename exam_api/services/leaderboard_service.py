"""Leaderboard across all students.

Standings are recomputed from the attempt table on every request. Each
student's best free/paid attempt per paper is summed into coins; the
composite score ``coins * 10**15 + exams * 10**12 + last_submit_epoch_s``
lets coins dominate exam count, which dominates recency, so one key drives
a dense rank.
"""
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session as DbSession

from exam_api.config import LEADERBOARD_DEFAULT_LIMIT, LEADERBOARD_MAX_LIMIT
from exam_api.models.db.attempt import Attempt
from exam_api.models.db.paper import COIN_PAYMENT_TYPES
from exam_api.models.db.user import User
from exam_api.services.best_attempt import best_by_paper
from exam_api.services.stats_service import coins_for, get_submitted_attempts
from exam_api.utils.numbers import round_half_up
from exam_api.utils.time_utils import ensure_utc, epoch_seconds, isoformat_utc

logger = logging.getLogger(__name__)

COINS_WEIGHT = 10**15
EXAMS_WEIGHT = 10**12
DEFAULT_NAME = "Student"


@dataclass
class Standing:
    """Aggregated leaderboard row of one student."""

    student_id: int
    total_coins: float
    total_finished_exams: int
    last_submitted_at: datetime | None
    name: str = DEFAULT_NAME
    rank: int = 0
    score: int = field(init=False)

    def __post_init__(self) -> None:
        self.score = composite_score(
            self.total_coins, self.total_finished_exams, self.last_submitted_at
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "studentId": self.student_id,
            "name": self.name,
            "totalCoins": self.total_coins,
            "totalFinishedExams": self.total_finished_exams,
            "lastSubmittedAt": isoformat_utc(self.last_submitted_at),
            "rank": self.rank,
        }


def composite_score(
    total_coins: float, total_finished_exams: int, last_submitted_at: datetime | None
) -> int:
    """Single integer sort key: coins, then exam count, then recency."""
    coins = Decimal(str(round_half_up(total_coins, 2)))
    return int(
        coins * COINS_WEIGHT
        + total_finished_exams * EXAMS_WEIGHT
        + epoch_seconds(last_submitted_at)
    )


def clamp_limit(limit: int | None) -> int:
    """Bound the requested number of rows to 1..LEADERBOARD_MAX_LIMIT."""
    if limit is None:
        limit = LEADERBOARD_DEFAULT_LIMIT
    return min(max(int(limit), 1), LEADERBOARD_MAX_LIMIT)


def build_standings(attempts: Iterable[Attempt]) -> list[Standing]:
    """Aggregate free/paid submitted attempts into one unranked row per student."""
    by_student: dict[int, list[Attempt]] = {}
    for attempt in attempts:
        by_student.setdefault(attempt.student_id, []).append(attempt)

    standings = []
    for student_id, student_attempts in by_student.items():
        best = best_by_paper(
            a for a in student_attempts if a.payment_type in COIN_PAYMENT_TYPES
        )
        if not best:
            continue
        last_submitted = max(ensure_utc(a.submitted_at) for a in best.values())
        standings.append(
            Standing(
                student_id=student_id,
                total_coins=round_half_up(sum(coins_for(a) for a in best.values()), 2),
                total_finished_exams=len(best),
                last_submitted_at=last_submitted,
            )
        )
    return standings


def dense_rank(standings: list[Standing]) -> list[Standing]:
    """Sort by score and assign dense ranks (ties share, no gaps)."""
    ordered = sorted(standings, key=lambda s: (-s.score, s.student_id))
    rank = 0
    previous_score: int | None = None
    for standing in ordered:
        if standing.score != previous_score:
            rank += 1
            previous_score = standing.score
        standing.rank = rank
    return ordered


def _attach_names(db: DbSession, standings: Iterable[Standing]) -> None:
    rows = list(standings)
    ids = [s.student_id for s in rows]
    if not ids:
        return
    users = {
        user.id: user
        for user in db.execute(select(User).where(User.id.in_(ids))).scalars()
    }
    for standing in rows:
        user = users.get(standing.student_id)
        standing.name = user.name if user else DEFAULT_NAME


def get_leaderboard(
    db: DbSession, student_id: int, limit: int | None = None
) -> dict[str, object]:
    """Top ``limit`` standings plus the requesting student's own row."""
    limit = clamp_limit(limit)
    standings = dense_rank(
        build_standings(get_submitted_attempts(db, payment_types=COIN_PAYMENT_TYPES))
    )

    top = standings[:limit]
    me = next((s for s in standings if s.student_id == student_id), None)
    top_ids = {s.student_id for s in top}
    _attach_names(db, top + ([me] if me is not None and me.student_id not in top_ids else []))

    if me is None:
        user = db.get(User, student_id)
        me_payload = {
            "studentId": student_id,
            "name": user.name if user else "",
            "totalCoins": 0,
            "totalFinishedExams": 0,
            "lastSubmittedAt": None,
            "rank": 0,
        }
    else:
        me_payload = me.to_dict()

    logger.debug(f"Leaderboard computed for {len(standings)} students (limit {limit})")
    return {
        "top": [standing.to_dict() for standing in top],
        "me": me_payload,
    }
