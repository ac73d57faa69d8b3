"""Pydantic models."""
from exam_api.models.attempts import (
    AttemptResult,
    AttemptsForPaperResponse,
    AttemptSummaryResponse,
    SaveAnswerRequest,
    StartAttemptRequest,
    SubmitAttemptResponse,
)
from exam_api.models.stats import (
    CompletedPaper,
    CompletedPapersResponse,
    LeaderboardEntry,
    LeaderboardResponse,
    PaymentStatusResponse,
    ProgressResponse,
    StatsResponse,
)

__all__ = [
    "AttemptResult",
    "AttemptsForPaperResponse",
    "AttemptSummaryResponse",
    "SaveAnswerRequest",
    "StartAttemptRequest",
    "SubmitAttemptResponse",
    "CompletedPaper",
    "CompletedPapersResponse",
    "LeaderboardEntry",
    "LeaderboardResponse",
    "PaymentStatusResponse",
    "ProgressResponse",
    "StatsResponse",
]
