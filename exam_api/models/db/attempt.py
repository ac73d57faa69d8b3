"""
Attempt and AttemptAnswer database models.
"""

from __future__ import annotations

import enum
import json
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import sqlalchemy as sa
from sqlalchemy import ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from exam_api.database import Base
from exam_api.models.db.paper import PaymentType

if TYPE_CHECKING:
    from exam_api.models.db.paper import Paper
    from exam_api.models.db.user import User


class AttemptStatus(str, enum.Enum):
    """Status of a paper attempt. ``submitted`` is terminal."""

    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"


# Copied from the paper when the attempt starts; grading never re-reads the paper.
SNAPSHOT_FIELDS = ("payment_type", "question_count", "answers_per_question", "time_minutes")


class Attempt(Base):
    """
    One run of a student through a paper.
    attempt_no is 1..k per (paper, student) with no gaps.
    """

    __tablename__ = "attempts"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    # References
    paper_id: Mapped[int] = mapped_column(
        ForeignKey("papers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    student_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    attempt_no: Mapped[int] = mapped_column(nullable=False)

    status: Mapped[str] = mapped_column(
        String(20), default=AttemptStatus.IN_PROGRESS.value, nullable=False, index=True
    )

    # Paper snapshot
    payment_type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    question_count: Mapped[int] = mapped_column(nullable=False)
    answers_per_question: Mapped[int] = mapped_column(nullable=False)
    time_minutes: Mapped[int] = mapped_column(default=10, nullable=False)

    # Scoring
    total_possible_points: Mapped[float] = mapped_column(default=0.0, nullable=False)
    total_points_earned: Mapped[float] = mapped_column(default=0.0, nullable=False)
    correct_count: Mapped[int] = mapped_column(default=0, nullable=False)
    wrong_count: Mapped[int] = mapped_column(default=0, nullable=False)
    percentage: Mapped[int] = mapped_column(default=0, nullable=False)

    # Timing
    started_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    submitted_at: Mapped[datetime | None] = mapped_column(
        sa.DateTime(timezone=True), nullable=True, index=True
    )

    # Constraints
    __table_args__ = (
        UniqueConstraint(
            "paper_id", "student_id", "attempt_no", name="uq_attempt_paper_student_no"
        ),
    )

    # Relationships
    paper: Mapped["Paper"] = relationship("Paper", back_populates="attempts")
    student: Mapped["User"] = relationship("User", back_populates="attempts")
    answers: Mapped[list["AttemptAnswer"]] = relationship(
        "AttemptAnswer", back_populates="attempt", cascade="all, delete-orphan"
    )

    @validates(*SNAPSHOT_FIELDS)
    def _freeze_snapshot(self, key: str, value: object) -> object:
        current = self.__dict__.get(key)
        if current is not None and current != value:
            raise ValueError(f"Attempt.{key} is a paper snapshot and cannot change")
        return value

    @property
    def payment(self) -> PaymentType | None:
        """Snapshotted payment type as an enum member."""
        return PaymentType.parse(self.payment_type)

    @property
    def is_submitted(self) -> bool:
        """Check if attempt is submitted."""
        return self.status == AttemptStatus.SUBMITTED.value

    @property
    def result(self) -> dict[str, object]:
        """Stored grading result."""
        return {
            "attemptId": self.id,
            "percentage": self.percentage,
            "totalPointsEarned": self.total_points_earned,
            "totalPossiblePoints": self.total_possible_points,
            "correctCount": self.correct_count,
            "wrongCount": self.wrong_count,
        }


class AttemptAnswer(Base):
    """
    Student's selection for one question within an attempt.
    is_correct and earned_points are written at submit time.
    """

    __tablename__ = "attempt_answers"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    attempt_id: Mapped[int] = mapped_column(
        ForeignKey("attempts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    paper_id: Mapped[int] = mapped_column(
        ForeignKey("papers.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Question reference
    question_id: Mapped[int] = mapped_column(
        ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    question_number: Mapped[int] = mapped_column(nullable=False)

    # Answer data
    selected_indexes_json: Mapped[str] = mapped_column(Text, nullable=False)
    is_correct: Mapped[bool] = mapped_column(default=False, nullable=False)
    earned_points: Mapped[float] = mapped_column(default=0.0, nullable=False)
    answered_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    # Constraints
    __table_args__ = (
        UniqueConstraint("attempt_id", "question_id", name="uq_attempt_answer_question"),
    )

    # Relationships
    attempt: Mapped["Attempt"] = relationship("Attempt", back_populates="answers")

    @property
    def selected_indexes(self) -> list[int]:
        """Parse selected indexes from JSON."""
        try:
            value = json.loads(self.selected_indexes_json or "[]")
        except (json.JSONDecodeError, TypeError):
            return []
        if not isinstance(value, list):
            return []
        return sorted({item for item in value if isinstance(item, int) and not isinstance(item, bool)})

    @selected_indexes.setter
    def selected_indexes(self, value: list[int]) -> None:
        """Serialize selected indexes to JSON."""
        self.selected_indexes_json = json.dumps(sorted(set(value)))
