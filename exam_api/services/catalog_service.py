"""Read access to the paper/question catalog, plus a JSON importer."""
import logging
from collections.abc import Iterable
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session as DbSession

from exam_api.config import DEFAULT_ATTEMPTS_ALLOWED, MAX_ATTEMPTS_ALLOWED
from exam_api.errors import NotFoundError, ValidationError
from exam_api.models.db.paper import ALL_PAYMENT_TYPES, Paper, PaymentType, Question
from exam_api.utils.numbers import round_half_up

logger = logging.getLogger(__name__)


def get_paper(db: DbSession, paper_id: int) -> Paper | None:
    """Get paper by ID."""
    return db.get(Paper, paper_id)


def get_available_paper(db: DbSession, paper_id: int) -> Paper:
    """Get a paper students may attempt, or raise NotFoundError."""
    paper = get_paper(db, paper_id)
    if paper is None or not paper.is_available:
        raise NotFoundError("Paper not available", paperId=paper_id)
    return paper


def get_questions(
    db: DbSession, paper_id: int, include_inactive: bool = False
) -> list[Question]:
    """
    Get questions of a paper, ordered by question number.

    Inactive questions are hidden from students but still belong to the
    paper, so grading passes ``include_inactive=True``.
    """
    query = select(Question).where(Question.paper_id == paper_id)
    if not include_inactive:
        query = query.where(Question.is_active.is_(True))
    return list(db.execute(query.order_by(Question.question_number)).scalars().all())


def get_question(db: DbSession, question_id: int) -> Question | None:
    """Get question by ID."""
    return db.get(Question, question_id)


def list_available_papers(
    db: DbSession,
    payment_types: Iterable[str] = ALL_PAYMENT_TYPES,
) -> list[Paper]:
    """List active, published papers of the given payment types."""
    return list(
        db.execute(
            select(Paper)
            .where(
                Paper.is_active.is_(True),
                Paper.is_published.is_(True),
                Paper.payment_type.in_(list(payment_types)),
            )
            .order_by(Paper.id)
        ).scalars().all()
    )


def sum_paper_max_points(db: DbSession, paper_ids: Iterable[int]) -> float:
    """Sum of point values over every question of the given papers."""
    ids = list(paper_ids)
    if not ids:
        return 0.0
    total = db.execute(
        select(func.coalesce(func.sum(Question.point), 0.0)).where(Question.paper_id.in_(ids))
    ).scalar()
    return round_half_up(float(total or 0), 2)


def _correct_indexes_from_payload(entry: dict[str, Any]) -> list[int]:
    raw = entry.get("correctIndexes")
    if raw is None:
        raw = entry.get("correctAnswerIndexes")
    if raw is None and entry.get("correctAnswerIndex") is not None:
        raw = [entry.get("correctAnswerIndex")]
    if not isinstance(raw, list):
        return []
    return [item for item in raw if isinstance(item, int) and not isinstance(item, bool)]


def import_paper(db: DbSession, payload: dict[str, Any]) -> Paper:
    """
    Create a paper and its questions from a JSON payload.

    Expected shape::

        {"title": "...", "paymentType": "free", "attemptsAllowed": 1,
         "timeMinutes": 30, "amount": 0, "isPublished": true,
         "questions": [{"question": "...", "answers": [...],
                        "correctIndexes": [0, 2], "point": 5}]}
    """
    title = str(payload.get("title") or "").strip()
    if not title:
        raise ValidationError("Paper title is required")

    payment = PaymentType.parse(payload.get("paymentType", PaymentType.FREE.value))
    if payment is None:
        raise ValidationError("Unknown payment type", paymentType=payload.get("paymentType"))

    attempts_allowed = payload.get("attemptsAllowed", DEFAULT_ATTEMPTS_ALLOWED)
    if not isinstance(attempts_allowed, int) or not 1 <= attempts_allowed <= MAX_ATTEMPTS_ALLOWED:
        raise ValidationError(
            f"attemptsAllowed must be between 1 and {MAX_ATTEMPTS_ALLOWED}",
            attemptsAllowed=attempts_allowed,
        )

    questions = payload.get("questions") or []
    if not isinstance(questions, list) or not questions:
        raise ValidationError("Paper needs at least one question")

    answers_per_question = max(
        (len(q.get("answers") or []) for q in questions if isinstance(q, dict)), default=0
    )

    paper = Paper(
        paper_title=title,
        paper_type=str(payload.get("paperType") or ""),
        time_minutes=int(payload.get("timeMinutes") or 10),
        question_count=len(questions),
        answers_per_question=answers_per_question,
        payment_type=payment.value,
        amount=float(payload.get("amount") or 0),
        attempts_allowed=attempts_allowed,
        is_active=bool(payload.get("isActive", True)),
        is_published=bool(payload.get("isPublished", True)),
    )

    for number, entry in enumerate(questions, start=1):
        if not isinstance(entry, dict):
            raise ValidationError("Invalid question entry", questionNumber=number)
        answers = [str(item) for item in entry.get("answers") or []]
        if len(answers) < 2:
            raise ValidationError("Question needs at least two answers", questionNumber=number)
        correct = _correct_indexes_from_payload(entry)
        if not correct or any(index < 0 or index >= len(answers) for index in correct):
            raise ValidationError("Invalid correct answer indexes", questionNumber=number)

        question = Question(
            question_number=int(entry.get("questionNumber") or number),
            question=str(entry.get("question") or ""),
            lesson_name=str(entry.get("lessonName") or ""),
            point=float(entry.get("point", 5)),
            explanation_text=str(entry.get("explanationText") or ""),
            explanation_video_url=str(entry.get("explanationVideoUrl") or ""),
            image_url=str(entry.get("imageUrl") or ""),
        )
        question.answers = answers
        question.correct_indexes = correct
        paper.questions.append(question)

    db.add(paper)
    db.commit()
    db.refresh(paper)
    logger.info(f"Imported paper {paper.id} '{paper.paper_title}' with {len(questions)} questions")
    return paper
