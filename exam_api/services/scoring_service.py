"""Per-question grading rules.

Pure functions: nothing here touches the database. The payment type snapshot
of the attempt selects the formula:

* ``free``     proportional partial credit, ``point * hit / k``
* ``paid``     single-correct is all-or-nothing; multi-correct earns a flat
               half of the point value as soon as one correct option is picked
* ``practice`` never earns points, correctness is still reported
"""
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from exam_api.models.db.paper import PaymentType
from exam_api.utils.numbers import round_half_up


class GradableQuestion(Protocol):
    correct_indexes: list[int]
    point: float


@dataclass(frozen=True)
class ScoreResult:
    """Outcome of grading one question."""

    earned_points: float
    is_correct: bool


NO_CREDIT = ScoreResult(earned_points=0.0, is_correct=False)


def _score_free(point: float, hit: int, k: int) -> float:
    return round_half_up(point * hit / k, 2)


def _score_paid(point: float, hit: int, k: int) -> float:
    if k == 1:
        return float(point)
    return round_half_up(point / 2, 2)


def score_answer(
    payment_type: PaymentType | str | None,
    question: GradableQuestion,
    selected_indexes: Iterable[int],
) -> ScoreResult:
    """Grade one selection against a question.

    Args:
        payment_type: Payment type snapshot of the attempt.
        question: Anything exposing ``correct_indexes`` and ``point``.
        selected_indexes: Option indexes the student picked.

    Returns:
        ScoreResult with earned points and the full-match flag.
    """
    correct = set(question.correct_indexes or [])
    point = float(question.point or 0)
    k = len(correct)
    hit = len(correct & set(selected_indexes))

    if k == 0 or point <= 0 or hit == 0:
        return NO_CREDIT

    is_correct = hit == k
    payment = PaymentType.parse(payment_type)

    if payment is PaymentType.PRACTICE:
        return ScoreResult(earned_points=0.0, is_correct=is_correct)
    if payment is PaymentType.FREE:
        return ScoreResult(earned_points=_score_free(point, hit, k), is_correct=is_correct)
    if payment is PaymentType.PAID:
        return ScoreResult(earned_points=_score_paid(point, hit, k), is_correct=is_correct)

    # Unknown payment type
    return NO_CREDIT
