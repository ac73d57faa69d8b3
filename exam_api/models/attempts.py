"""Attempt-related Pydantic models."""
from typing import Any

from pydantic import BaseModel, Field


class StartAttemptRequest(BaseModel):
    """Model for starting an attempt."""

    paperId: int = Field(..., ge=1)


class SaveAnswerRequest(BaseModel):
    """Model for saving (or replacing) the selection for one question."""

    attemptId: int = Field(..., ge=1)
    questionId: int = Field(..., ge=1)
    selectedIndexes: list[int]


class AttemptResult(BaseModel):
    """Grading result of a submitted attempt."""

    attemptId: int
    percentage: int
    totalPointsEarned: float
    totalPossiblePoints: float
    correctCount: int
    wrongCount: int


class SubmitAttemptResponse(BaseModel):
    """Model for attempt submission response."""

    status: str
    result: AttemptResult
    attempt: dict[str, Any]


class AttemptsForPaperResponse(BaseModel):
    """Quota usage of the current student on a paper."""

    paperId: int
    attemptsAllowed: int
    attemptsUsed: int
    attemptsLeft: int
    lastSubmittedAttemptId: int | None = None
    lastAttemptNo: int | None = None
    lastStatus: str | None = None


class AttemptSummaryResponse(BaseModel):
    """Attempt numbering and remaining quota."""

    paperId: int
    attemptNo: int
    attemptsAllowed: int
    attemptsUsed: int
    attemptsLeft: int
    nextAttemptNo: int
