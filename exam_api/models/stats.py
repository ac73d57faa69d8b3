"""Statistics, progress and leaderboard Pydantic models."""
from pydantic import BaseModel


class StatsResponse(BaseModel):
    """Coin total and finished exams of the current student."""

    totalCoins: float
    totalFinishedExams: int


class CompletedPaper(BaseModel):
    """Best attempt of one completed paper."""

    paperId: int
    paperTitle: str
    paymentType: str
    totalQuestions: int
    correct: int
    percentage: int
    coins: float
    attemptId: int
    attemptNo: int
    completedAt: str | None = None


class CompletedPapersResponse(BaseModel):
    items: list[CompletedPaper]


class ProgressMeta(BaseModel):
    completedCountAll: int
    totalAvailableAll: int
    coinsPoints: float
    maxCoinsPossible: float
    pointsRatio: float
    completionRatio: float
    base: float
    extra: float
    rawProgress: float


class ProgressResponse(BaseModel):
    """Monotonic progress in [0, 1] with the terms it was computed from."""

    progress: float
    meta: ProgressMeta


class LeaderboardEntry(BaseModel):
    studentId: int
    name: str
    totalCoins: float
    totalFinishedExams: int
    lastSubmittedAt: str | None = None
    rank: int


class LeaderboardResponse(BaseModel):
    top: list[LeaderboardEntry]
    me: LeaderboardEntry


class PaymentStatusResponse(BaseModel):
    paperId: int
    payment: str
    required: bool
    unlocked: bool
    amount: float
