"""Statistics, progress and leaderboard endpoints."""
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session as DbSession

from exam_api.config import LEADERBOARD_DEFAULT_LIMIT
from exam_api.database import get_db
from exam_api.dependencies.auth import get_current_user
from exam_api.models import (
    CompletedPapersResponse,
    LeaderboardResponse,
    PaymentStatusResponse,
    ProgressResponse,
    StatsResponse,
)
from exam_api.models.db.user import User
from exam_api.services import leaderboard_service, payment_service, progress_service, stats_service

router = APIRouter(prefix="/api", tags=["statistics"])


@router.get("/stats/completed", response_model=CompletedPapersResponse)
def completed_papers(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
) -> dict[str, object]:
    """Completed papers of the current student, one best attempt each."""
    return {"items": stats_service.get_completed_papers(db, current_user.id)}


@router.get("/stats/me", response_model=StatsResponse)
def my_stats(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
) -> dict[str, object]:
    """Coin total and finished exam count."""
    return stats_service.get_stats(db, current_user.id)


@router.get("/progress/my", response_model=ProgressResponse)
def my_progress(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
) -> dict[str, object]:
    """Progress of the current student (never decreases)."""
    return progress_service.get_progress(db, current_user.id)


@router.get("/rank/leaderboard", response_model=LeaderboardResponse)
def leaderboard(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
    limit: int = Query(LEADERBOARD_DEFAULT_LIMIT),
) -> dict[str, object]:
    """Dense-ranked standings; ``limit`` is clamped to 1..200."""
    return leaderboard_service.get_leaderboard(db, current_user.id, limit)


@router.get("/payments/my/{paper_id}", response_model=PaymentStatusResponse)
def my_payment_status(
    paper_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
) -> dict[str, object]:
    """Whether a paper is unlocked for the current student."""
    return payment_service.get_payment_status(db, current_user.id, paper_id)
