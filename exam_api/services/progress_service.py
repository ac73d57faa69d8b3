"""Student progress percentage.

Two tiers:

* the first ten completed papers (any payment type) unlock up to 30%
  linearly;
* from ten completions on, the remaining 70% is split evenly between the
  completion ratio over the whole catalog and the coin ratio over all
  free and paid points available.

The reported value never decreases: the highest value ever computed is
stored per student and returned whenever a fresh computation is lower.
"""
import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session as DbSession

from exam_api.models.db.paper import ALL_PAYMENT_TYPES, COIN_PAYMENT_TYPES
from exam_api.models.db.user import ProgressState
from exam_api.services import catalog_service
from exam_api.services.best_attempt import best_by_paper
from exam_api.services.stats_service import coins_for, get_submitted_attempts
from exam_api.utils.numbers import clamp01, round_half_up
from exam_api.utils.time_utils import utc_now

logger = logging.getLogger(__name__)

GATE_COMPLETIONS = 10
BASE_WEIGHT = 0.30
EXTRA_WEIGHT = 0.70


@dataclass(frozen=True)
class ProgressBreakdown:
    """Inputs and intermediate terms of one progress computation."""

    completed_count_all: int
    total_available_all: int
    coins_points: float
    max_coins_possible: float
    completion_ratio: float
    points_ratio: float
    base: float
    extra: float
    raw_progress: float


def compute_raw_progress(
    completed_count_all: int,
    total_available_all: int,
    coins_points: float,
    max_coins_possible: float,
) -> ProgressBreakdown:
    """Progress from counts alone, before the high-water mark is applied."""
    completion_ratio = (
        clamp01(completed_count_all / total_available_all) if total_available_all > 0 else 0.0
    )
    points_ratio = clamp01(coins_points / max_coins_possible) if max_coins_possible > 0 else 0.0

    n = min(completed_count_all, GATE_COMPLETIONS)
    base = BASE_WEIGHT * (n / GATE_COMPLETIONS)

    extra = 0.0
    if completed_count_all >= GATE_COMPLETIONS:
        extra = EXTRA_WEIGHT * (0.5 * completion_ratio + 0.5 * points_ratio)

    return ProgressBreakdown(
        completed_count_all=completed_count_all,
        total_available_all=total_available_all,
        coins_points=coins_points,
        max_coins_possible=max_coins_possible,
        completion_ratio=completion_ratio,
        points_ratio=points_ratio,
        base=base,
        extra=extra,
        raw_progress=clamp01(base + extra),
    )


def apply_high_water_mark(stored: float | None, raw_progress: float) -> float:
    """Never report less than what was reported before."""
    return max(clamp01(stored or 0.0), clamp01(raw_progress))


def get_high_water_mark(db: DbSession, student_id: int) -> float:
    """Stored progress high-water mark (0 when never computed)."""
    state = db.get(ProgressState, student_id)
    return clamp01(state.high_water_mark) if state else 0.0


def raise_high_water_mark(db: DbSession, student_id: int, value: float) -> bool:
    """Persist ``value`` if it beats the stored mark. Returns True when raised."""
    state = db.get(ProgressState, student_id)
    previous = clamp01(state.high_water_mark) if state else 0.0
    if value <= previous:
        return False

    if state is None:
        state = ProgressState(student_id=student_id)
        db.add(state)
    state.high_water_mark = value
    state.updated_at = utc_now()
    try:
        db.commit()
    except IntegrityError:
        # A concurrent request created the row first; raise it only if still lower.
        db.rollback()
        state = db.get(ProgressState, student_id)
        if state is None or clamp01(state.high_water_mark) >= value:
            return False
        previous = clamp01(state.high_water_mark)
        state.high_water_mark = value
        state.updated_at = utc_now()
        db.commit()

    logger.info(f"Progress of student {student_id} raised {previous:.4f} -> {value:.4f}")
    return True


def get_progress(db: DbSession, student_id: int) -> dict[str, object]:
    """Compute, ratchet and report a student's progress."""
    available = catalog_service.list_available_papers(db)
    coin_paper_ids = [p.id for p in available if p.payment_type in COIN_PAYMENT_TYPES]

    best = best_by_paper(get_submitted_attempts(db, student_id, ALL_PAYMENT_TYPES))
    coins_points = round_half_up(sum(coins_for(attempt) for attempt in best.values()), 2)
    max_coins_possible = catalog_service.sum_paper_max_points(db, coin_paper_ids)

    breakdown = compute_raw_progress(
        completed_count_all=len(best),
        total_available_all=len(available),
        coins_points=coins_points,
        max_coins_possible=max_coins_possible,
    )

    progress = apply_high_water_mark(get_high_water_mark(db, student_id), breakdown.raw_progress)
    raise_high_water_mark(db, student_id, progress)

    return {
        "progress": round_half_up(progress, 4),
        "meta": {
            "completedCountAll": breakdown.completed_count_all,
            "totalAvailableAll": breakdown.total_available_all,
            "coinsPoints": breakdown.coins_points,
            "maxCoinsPossible": breakdown.max_coins_possible,
            "pointsRatio": round_half_up(breakdown.points_ratio, 4),
            "completionRatio": round_half_up(breakdown.completion_ratio, 4),
            "base": round_half_up(breakdown.base, 4),
            "extra": round_half_up(breakdown.extra, 4),
            "rawProgress": round_half_up(breakdown.raw_progress, 4),
        },
    }
