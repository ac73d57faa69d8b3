"""Attempt lifecycle endpoints."""
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session as DbSession

from exam_api.database import get_db
from exam_api.dependencies.auth import get_current_user
from exam_api.models import (
    AttemptsForPaperResponse,
    AttemptSummaryResponse,
    SaveAnswerRequest,
    StartAttemptRequest,
    SubmitAttemptResponse,
)
from exam_api.models.db.user import User
from exam_api.serialization import serialize_answer, serialize_attempt, serialize_paper_brief
from exam_api.services import attempt_service

router = APIRouter(prefix="/api/attempts", tags=["attempts"])


@router.post("/start", status_code=status.HTTP_201_CREATED)
def start_attempt(
    payload: StartAttemptRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
) -> dict[str, object]:
    """Start the next attempt on a paper."""
    attempt = attempt_service.start_attempt(db, current_user.id, payload.paperId)
    quota = attempt_service.get_attempts_for_paper(db, current_user.id, payload.paperId)
    return {
        "message": "Attempt started",
        "attempt": serialize_attempt(attempt),
        "paper": serialize_paper_brief(attempt.paper),
        "meta": {
            "attemptNo": attempt.attempt_no,
            "attemptsAllowed": quota["attemptsAllowed"],
            "attemptsUsed": quota["attemptsUsed"],
            "attemptsLeft": quota["attemptsLeft"],
        },
    }


@router.post("/answer")
def save_answer(
    payload: SaveAnswerRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
) -> dict[str, object]:
    """Save or replace the selection for one question."""
    answer = attempt_service.save_answer(
        db,
        payload.attemptId,
        current_user.id,
        payload.questionId,
        payload.selectedIndexes,
    )
    return {"message": "Answer saved", "answer": serialize_answer(answer)}


@router.get("/my")
def list_my_attempts(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
    paper_id: int | None = Query(None, alias="paperId"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> dict[str, object]:
    """List the current student's attempts (practice included), newest first."""
    attempts = attempt_service.list_my_attempts(
        db, current_user.id, paper_id=paper_id, limit=limit, offset=offset
    )
    return {
        "attempts": [serialize_attempt(attempt) for attempt in attempts],
        "offset": offset,
        "limit": limit,
    }


@router.get("/my/{paper_id}", response_model=AttemptsForPaperResponse)
def attempts_for_paper(
    paper_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
) -> dict[str, object]:
    """Attempt quota usage on a paper."""
    return attempt_service.get_attempts_for_paper(db, current_user.id, paper_id)


@router.post("/{attempt_id}/submit", response_model=SubmitAttemptResponse)
def submit_attempt(
    attempt_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
) -> dict[str, object]:
    """Grade and submit an attempt. Safe to retry."""
    attempt = attempt_service.submit_attempt(db, attempt_id, current_user.id)
    return {
        "status": attempt.status,
        "result": attempt.result,
        "attempt": serialize_attempt(attempt),
    }


@router.get("/{attempt_id}/questions")
def attempt_questions(
    attempt_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
) -> dict[str, object]:
    """Question sheet for a running attempt (no correct answers)."""
    return attempt_service.get_attempt_questions(db, attempt_id, current_user.id)


@router.get("/{attempt_id}/summary", response_model=AttemptSummaryResponse)
def attempt_summary(
    attempt_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
) -> dict[str, object]:
    """Attempt numbering and remaining quota."""
    return attempt_service.get_attempt_summary(db, attempt_id, current_user.id)


@router.get("/{attempt_id}/review")
def attempt_review(
    attempt_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
) -> dict[str, object]:
    """Graded breakdown of a submitted attempt, wrong answers first."""
    return attempt_service.get_review(db, attempt_id, current_user.id)
