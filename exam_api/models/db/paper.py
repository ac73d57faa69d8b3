"""
Paper and Question catalog models.

The catalog is owned by the paper administration service; the attempt core
only reads it. Lists (answer texts, correct indexes) are stored as JSON text.
"""

from __future__ import annotations

import enum
import json
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import sqlalchemy as sa
from sqlalchemy import ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from exam_api.database import Base

if TYPE_CHECKING:
    from exam_api.models.db.attempt import Attempt


class PaymentType(str, enum.Enum):
    """Commercial rule of a paper; also selects the grading formula."""

    FREE = "free"
    PAID = "paid"
    PRACTICE = "practice"

    @classmethod
    def _missing_(cls, value: object) -> "PaymentType | None":
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized == "practise":
                return cls.PRACTICE
            for member in cls:
                if member.value == normalized:
                    return member
        return None

    @classmethod
    def parse(cls, value: object) -> "PaymentType | None":
        """Return the matching member, or None for unknown values."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None

    @property
    def earns_coins(self) -> bool:
        """Whether results on this paper count toward coins and the leaderboard."""
        return self in (PaymentType.FREE, PaymentType.PAID)


COIN_PAYMENT_TYPES = (PaymentType.FREE.value, PaymentType.PAID.value)
ALL_PAYMENT_TYPES = tuple(member.value for member in PaymentType)


def _load_json_list(raw: str | None) -> list[Any]:
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return []
    return value if isinstance(value, list) else []


class Paper(Base):
    """
    Configured assessment.
    Immutable once an attempt references it.
    """

    __tablename__ = "papers"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    paper_title: Mapped[str] = mapped_column(String(200), nullable=False)
    paper_type: Mapped[str] = mapped_column(String(50), default="", nullable=False)

    time_minutes: Mapped[int] = mapped_column(default=10, nullable=False)
    question_count: Mapped[int] = mapped_column(default=1, nullable=False)
    answers_per_question: Mapped[int] = mapped_column(default=4, nullable=False)

    payment_type: Mapped[str] = mapped_column(
        String(20), default=PaymentType.FREE.value, nullable=False, index=True
    )
    amount: Mapped[float] = mapped_column(default=0.0, nullable=False)
    attempts_allowed: Mapped[int] = mapped_column(default=1, nullable=False)

    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)
    is_published: Mapped[bool] = mapped_column(default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    __table_args__ = (
        sa.CheckConstraint(
            "attempts_allowed >= 1 AND attempts_allowed <= 3",
            name="ck_paper_attempts_allowed",
        ),
    )

    # Relationships
    questions: Mapped[list["Question"]] = relationship(
        "Question",
        back_populates="paper",
        cascade="all, delete-orphan",
        order_by="Question.question_number",
    )
    attempts: Mapped[list["Attempt"]] = relationship("Attempt", back_populates="paper")

    @property
    def payment(self) -> PaymentType | None:
        """Payment type as an enum member (None if the stored value is unknown)."""
        return PaymentType.parse(self.payment_type)

    @property
    def is_available(self) -> bool:
        """Whether students may start attempts on this paper."""
        return self.is_active and self.is_published


class Question(Base):
    """
    Single- or multi-correct question of a paper.
    """

    __tablename__ = "questions"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    paper_id: Mapped[int] = mapped_column(
        ForeignKey("papers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    question_number: Mapped[int] = mapped_column(nullable=False)
    lesson_name: Mapped[str] = mapped_column(String(200), default="", nullable=False)
    question: Mapped[str] = mapped_column(Text, nullable=False)

    answers_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    correct_indexes_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    point: Mapped[float] = mapped_column(default=5.0, nullable=False)

    explanation_text: Mapped[str] = mapped_column(Text, default="", nullable=False)
    explanation_video_url: Mapped[str] = mapped_column(String(500), default="", nullable=False)
    image_url: Mapped[str] = mapped_column(String(500), default="", nullable=False)
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)

    __table_args__ = (
        UniqueConstraint("paper_id", "question_number", name="uq_question_paper_number"),
    )

    # Relationships
    paper: Mapped["Paper"] = relationship("Paper", back_populates="questions")

    @property
    def answers(self) -> list[str]:
        """Parse answer texts from JSON."""
        return [str(item) for item in _load_json_list(self.answers_json)]

    @answers.setter
    def answers(self, value: list[str] | None) -> None:
        """Serialize answer texts to JSON."""
        self.answers_json = json.dumps(list(value), ensure_ascii=False) if value else None

    @property
    def correct_indexes(self) -> list[int]:
        """Sorted, de-duplicated correct answer indexes inside the answer list."""
        answer_count = len(self.answers)
        indexes = set()
        for item in _load_json_list(self.correct_indexes_json):
            if isinstance(item, bool) or not isinstance(item, int):
                continue
            if 0 <= item < answer_count:
                indexes.add(item)
        return sorted(indexes)

    @correct_indexes.setter
    def correct_indexes(self, value: list[int] | None) -> None:
        """Serialize correct indexes to JSON."""
        self.correct_indexes_json = json.dumps(sorted(set(value))) if value else None

    @property
    def correct_answers(self) -> list[str]:
        """Texts of the correct answers."""
        answers = self.answers
        return [answers[index] for index in self.correct_indexes]
