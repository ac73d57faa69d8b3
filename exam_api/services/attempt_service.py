"""Attempt lifecycle: start, answer, submit, and per-attempt read models.

This module is the only writer of ``attempts`` and ``attempt_answers``.
Attempts move ``in_progress -> submitted`` exactly once; answers are mutable
only while their attempt is in progress.
"""
import logging
from collections.abc import Iterable

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session as DbSession

from exam_api.errors import (
    AttemptConflictError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    PaymentRequiredError,
    QuotaExceededError,
    ValidationError,
)
from exam_api.models.db.attempt import Attempt, AttemptAnswer, AttemptStatus
from exam_api.models.db.paper import PaymentType, Question
from exam_api.serialization import serialize_question_sheet, serialize_review_row
from exam_api.services import catalog_service, payment_service
from exam_api.services.scoring_service import score_answer
from exam_api.utils.numbers import percent, round_half_up
from exam_api.utils.time_utils import utc_now

logger = logging.getLogger(__name__)


def get_attempt(db: DbSession, attempt_id: int) -> Attempt | None:
    """Get attempt by ID."""
    return db.get(Attempt, attempt_id)


def get_owned_attempt(db: DbSession, attempt_id: int, student_id: int) -> Attempt:
    """Get attempt by ID, checking it belongs to the student."""
    attempt = get_attempt(db, attempt_id)
    if attempt is None:
        raise NotFoundError("Attempt not found", attemptId=attempt_id)
    if attempt.student_id != student_id:
        raise ForbiddenError("Attempt belongs to another student", attemptId=attempt_id)
    return attempt


def get_attempts_for_student_paper(
    db: DbSession, student_id: int, paper_id: int
) -> list[Attempt]:
    """All attempts of a student on a paper, newest attempt number first."""
    return list(
        db.execute(
            select(Attempt)
            .where(Attempt.paper_id == paper_id, Attempt.student_id == student_id)
            .order_by(Attempt.attempt_no.desc())
        ).scalars().all()
    )


def start_attempt(db: DbSession, student_id: int, paper_id: int) -> Attempt:
    """
    Start the next attempt of a student on a paper.

    Raises:
        NotFoundError: paper missing, inactive or unpublished.
        PaymentRequiredError: paid paper without a successful payment.
        QuotaExceededError: all allowed attempts already used.
        InvalidStateError: an earlier attempt is still in progress.
        AttemptConflictError: a concurrent start took the same attempt number.
    """
    paper = catalog_service.get_available_paper(db, paper_id)

    if paper.payment is PaymentType.PAID and not payment_service.has_paid(
        db, student_id, paper_id
    ):
        logger.info(f"Student {student_id} must pay for paper {paper_id} before starting")
        raise PaymentRequiredError(paper_id, float(paper.amount or 0))

    attempts = get_attempts_for_student_paper(db, student_id, paper_id)
    attempts_used = len(attempts)
    attempts_allowed = paper.attempts_allowed

    if attempts_used >= attempts_allowed:
        last = attempts[0] if attempts else None
        logger.info(
            f"Student {student_id} reached the attempt limit on paper {paper_id} "
            f"({attempts_used}/{attempts_allowed})"
        )
        raise QuotaExceededError(attempts_allowed, attempts_used, last.id if last else None)

    active = next((a for a in attempts if not a.is_submitted), None)
    if active is not None:
        raise InvalidStateError(
            "Another attempt on this paper is still in progress",
            activeAttemptId=active.id,
        )

    attempt = Attempt(
        paper_id=paper.id,
        student_id=student_id,
        attempt_no=attempts_used + 1,
        status=AttemptStatus.IN_PROGRESS.value,
        payment_type=paper.payment_type,
        question_count=paper.question_count,
        answers_per_question=paper.answers_per_question,
        time_minutes=paper.time_minutes,
        started_at=utc_now(),
    )
    db.add(attempt)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning(
            f"Concurrent start for student {student_id} on paper {paper_id} "
            f"(attempt {attempts_used + 1})"
        )
        raise AttemptConflictError(paperId=paper_id, attemptNo=attempts_used + 1)

    db.refresh(attempt)
    logger.info(
        f"Started attempt {attempt.id} (#{attempt.attempt_no}) for student {student_id} "
        f"on paper {paper_id}"
    )
    return attempt


def _validate_selection(selected_indexes: Iterable[object], answer_count: int) -> list[int]:
    """Check indexes are integers inside the answer list; return them sorted and unique."""
    cleaned: set[int] = set()
    for value in selected_indexes or []:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError("Selected indexes must be integers", selectedIndex=value)
        if value < 0 or value >= answer_count:
            raise ValidationError(
                "Selected index out of range",
                selectedIndex=value,
                answerCount=answer_count,
            )
        cleaned.add(value)
    if not cleaned:
        raise ValidationError("At least one answer must be selected")
    return sorted(cleaned)


def _find_answer(db: DbSession, attempt_id: int, question_id: int) -> AttemptAnswer | None:
    return db.execute(
        select(AttemptAnswer).where(
            AttemptAnswer.attempt_id == attempt_id,
            AttemptAnswer.question_id == question_id,
        )
    ).scalar_one_or_none()


def save_answer(
    db: DbSession,
    attempt_id: int,
    student_id: int,
    question_id: int,
    selected_indexes: Iterable[object],
) -> AttemptAnswer:
    """
    Record or overwrite the selection for a question. No grading happens here.
    """
    attempt = get_owned_attempt(db, attempt_id, student_id)
    if attempt.is_submitted:
        raise InvalidStateError("Attempt already submitted", attemptId=attempt_id)

    question = catalog_service.get_question(db, question_id)
    if question is None:
        raise NotFoundError("Question not found", questionId=question_id)
    if question.paper_id != attempt.paper_id:
        raise ValidationError("Question not in this attempt paper", questionId=question_id)
    if not question.is_active:
        raise ValidationError("Question is not active", questionId=question_id)

    indexes = _validate_selection(selected_indexes, len(question.answers))

    answer = _find_answer(db, attempt_id, question_id)
    if answer is None:
        answer = AttemptAnswer(
            attempt_id=attempt_id,
            paper_id=attempt.paper_id,
            question_id=question_id,
            question_number=question.question_number,
        )
        db.add(answer)

    answer.selected_indexes = indexes
    answer.answered_at = utc_now()

    try:
        db.commit()
    except IntegrityError:
        # Another request inserted the same (attempt, question) row first; overwrite it.
        db.rollback()
        answer = _find_answer(db, attempt_id, question_id)
        if answer is None:
            raise AttemptConflictError("Answer could not be saved, retry", questionId=question_id)
        answer.selected_indexes = indexes
        answer.answered_at = utc_now()
        db.commit()

    db.refresh(answer)
    return answer


def submit_attempt(db: DbSession, attempt_id: int, student_id: int) -> Attempt:
    """
    Grade and submit an attempt.

    Every question of the paper, active or not, contributes its point value to the
    possible total; only answered questions are graded and counted as
    correct or wrong. Answer write-back and the status change commit
    together, so a failure leaves the attempt in progress. Submitting an
    already submitted attempt returns the stored result unchanged.
    """
    attempt = get_owned_attempt(db, attempt_id, student_id)
    if attempt.is_submitted:
        return attempt

    questions = catalog_service.get_questions(db, attempt.paper_id, include_inactive=True)
    answers = {
        answer.question_id: answer
        for answer in db.execute(
            select(AttemptAnswer).where(AttemptAnswer.attempt_id == attempt_id)
        ).scalars()
    }

    total_possible = 0.0
    earned = 0.0
    correct_count = 0
    wrong_count = 0

    for question in questions:
        total_possible += float(question.point or 0)

        answer = answers.get(question.id)
        if answer is None or not answer.selected_indexes:
            continue

        result = score_answer(attempt.payment_type, question, answer.selected_indexes)
        answer.is_correct = result.is_correct
        answer.earned_points = result.earned_points
        earned += result.earned_points
        if result.is_correct:
            correct_count += 1
        else:
            wrong_count += 1

    total_possible = round_half_up(total_possible, 2)
    earned = round_half_up(earned, 2)

    try:
        outcome = db.execute(
            update(Attempt)
            .where(
                Attempt.id == attempt_id,
                Attempt.status == AttemptStatus.IN_PROGRESS.value,
            )
            .values(
                status=AttemptStatus.SUBMITTED.value,
                submitted_at=utc_now(),
                total_possible_points=total_possible,
                total_points_earned=earned,
                correct_count=correct_count,
                wrong_count=wrong_count,
                percentage=percent(earned, total_possible),
            )
            .execution_options(synchronize_session=False)
        )
        if outcome.rowcount != 1:
            # Submitted by a concurrent request; keep its result.
            db.rollback()
            db.refresh(attempt)
            return attempt
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Failed to submit attempt {attempt_id}")
        raise

    db.refresh(attempt)
    logger.info(
        f"Submitted attempt {attempt_id}: {attempt.total_points_earned}/"
        f"{attempt.total_possible_points} points ({attempt.percentage}%)"
    )
    return attempt


def get_attempt_questions(db: DbSession, attempt_id: int, student_id: int) -> dict[str, object]:
    """Question sheet of an attempt with the student's saved selections."""
    attempt = get_owned_attempt(db, attempt_id, student_id)
    questions = catalog_service.get_questions(db, attempt.paper_id)
    saved = {answer.question_id: answer for answer in attempt.answers}

    return {
        "attempt": {
            "id": attempt.id,
            "status": attempt.status,
            "attemptNo": attempt.attempt_no,
        },
        "paper": {
            "id": attempt.paper_id,
            "timeMinutes": attempt.time_minutes,
        },
        "questions": [
            serialize_question_sheet(question, saved.get(question.id))
            for question in questions
        ],
    }


def get_attempts_for_paper(db: DbSession, student_id: int, paper_id: int) -> dict[str, object]:
    """Quota usage of a student on a paper and the last submitted attempt."""
    paper = catalog_service.get_paper(db, paper_id)
    if paper is None:
        raise NotFoundError("Paper not found", paperId=paper_id)

    attempts = get_attempts_for_student_paper(db, student_id, paper_id)
    attempts_allowed = paper.attempts_allowed
    attempts_used = len(attempts)
    last_submitted = next((a for a in attempts if a.is_submitted), None)

    return {
        "paperId": paper_id,
        "attemptsAllowed": attempts_allowed,
        "attemptsUsed": attempts_used,
        "attemptsLeft": max(attempts_allowed - attempts_used, 0),
        "lastSubmittedAttemptId": last_submitted.id if last_submitted else None,
        "lastAttemptNo": last_submitted.attempt_no if last_submitted else None,
        "lastStatus": last_submitted.status if last_submitted else None,
    }


def _quota_meta(db: DbSession, attempt: Attempt) -> dict[str, int]:
    paper = catalog_service.get_paper(db, attempt.paper_id)
    if paper is None:
        raise NotFoundError("Paper not found", paperId=attempt.paper_id)
    used = len(get_attempts_for_student_paper(db, attempt.student_id, attempt.paper_id))
    return {
        "attemptsAllowed": paper.attempts_allowed,
        "attemptsUsed": used,
        "attemptsLeft": max(paper.attempts_allowed - used, 0),
        "nextAttemptNo": used + 1,
    }


def get_attempt_summary(db: DbSession, attempt_id: int, student_id: int) -> dict[str, object]:
    """Attempt numbering and remaining quota for the result screen."""
    attempt = get_owned_attempt(db, attempt_id, student_id)
    return {
        "paperId": attempt.paper_id,
        "attemptNo": attempt.attempt_no,
        **_quota_meta(db, attempt),
    }


def get_review(db: DbSession, attempt_id: int, student_id: int) -> dict[str, object]:
    """Per-question breakdown of a submitted attempt, wrong answers first."""
    attempt = get_owned_attempt(db, attempt_id, student_id)
    if not attempt.is_submitted:
        raise InvalidStateError("Attempt is not submitted yet", attemptId=attempt_id)

    answers = list(attempt.answers)
    question_ids = [answer.question_id for answer in answers]
    questions = {
        question.id: question
        for question in db.execute(
            select(Question).where(Question.id.in_(question_ids))
        ).scalars()
    } if question_ids else {}

    rows = [
        serialize_review_row(questions[answer.question_id], answer)
        for answer in answers
        if answer.question_id in questions
    ]
    rows.sort(key=lambda row: row["questionNumber"])

    wrong_first = [row for row in rows if not row["isCorrect"]]
    correct_after = [row for row in rows if row["isCorrect"]]

    return {
        "meta": {
            "paperId": attempt.paper_id,
            "attemptId": attempt.id,
            "attemptNo": attempt.attempt_no,
            **_quota_meta(db, attempt),
        },
        "result": {
            "totalQuestions": attempt.question_count,
            "correctCount": attempt.correct_count,
            "wrongCount": attempt.wrong_count,
            "percentage": attempt.percentage,
            "totalPointsEarned": attempt.total_points_earned,
            "totalPossiblePoints": attempt.total_possible_points,
        },
        "wrongFirst": wrong_first,
        "correctAfter": correct_after,
    }


def list_my_attempts(
    db: DbSession,
    student_id: int,
    paper_id: int | None = None,
    status: str | None = None,
    limit: int = 100,
    offset: int = 0,
) -> list[Attempt]:
    """
    Get attempts for a student, optionally filtered by paper and status.
    Practice attempts are included.
    """
    query = select(Attempt).where(Attempt.student_id == student_id)

    if paper_id:
        query = query.where(Attempt.paper_id == paper_id)
    if status:
        query = query.where(Attempt.status == status)

    query = query.order_by(Attempt.started_at.desc(), Attempt.id.desc()).limit(limit).offset(offset)

    return list(db.execute(query).scalars().all())
