from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import Boolean, CheckConstraint, DateTime, Float, ForeignKey, Index, Integer, String, text
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from quizplay.db.models.base import Base


class GameSession(Base):
    __tablename__ = "game_sessions"
    __table_args__ = (
        CheckConstraint("mode IN ('solo','duel')", name="ck_game_sessions_mode"),
        CheckConstraint("score >= 0 AND score <= 100", name="ck_game_sessions_score_range"),
        CheckConstraint(
            "accuracy_percentage >= 0 AND accuracy_percentage <= 100",
            name="ck_game_sessions_accuracy_range",
        ),
        CheckConstraint("time_taken_seconds >= 0", name="ck_game_sessions_time_non_negative"),
        CheckConstraint(
            "(completed = false AND completed_at IS NULL) "
            "OR (completed = true AND completed_at IS NOT NULL)",
            name="ck_game_sessions_completion_consistency",
        ),
        Index("idx_game_sessions_player_started", "player_id", "started_at"),
        Index("idx_game_sessions_quiz", "quiz_id"),
    )

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    quiz_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("quizzes.id"),
        nullable=False,
    )
    player_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("profiles.id"),
        nullable=False,
    )
    mode: Mapped[str] = mapped_column(String(8), nullable=False)
    score: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    accuracy_percentage: Mapped[float] = mapped_column(Float, nullable=False, server_default=text("0"))
    time_taken_seconds: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    correct_answers: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    total_questions: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("false"))
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
