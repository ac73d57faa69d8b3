"""User and ProgressState database models."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import String, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from exam_api.database import Base

if TYPE_CHECKING:
    from exam_api.models.db.attempt import Attempt


class User(Base):
    """Student or administrator known to the attempt service.

    Accounts are managed by the authentication service; this table only holds
    what the attempt core needs (identity, display name, active flag).
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, index=True, nullable=False)
    display_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    role: Mapped[str] = mapped_column(String(20), default="student", nullable=False)
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    # Relationships
    attempts: Mapped[list["Attempt"]] = relationship(
        "Attempt",
        back_populates="student",
        cascade="all, delete-orphan"
    )
    progress_state: Mapped["ProgressState | None"] = relationship(
        "ProgressState",
        back_populates="student",
        cascade="all, delete-orphan",
        uselist=False,
    )

    @property
    def name(self) -> str:
        """Name shown on leaderboards."""
        return self.display_name or self.username

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}', role='{self.role}')>"


class ProgressState(Base):
    """Highest progress value ever reported for a student.

    Only ever raised, never lowered, even if attempts are later removed.
    """

    __tablename__ = "progress_states"

    student_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    high_water_mark: Mapped[float] = mapped_column(default=0.0, nullable=False)
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Relationships
    student: Mapped["User"] = relationship("User", back_populates="progress_state")

    def __repr__(self) -> str:
        return f"<ProgressState(student_id={self.student_id}, high_water_mark={self.high_water_mark})>"
