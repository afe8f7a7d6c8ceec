from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import CheckConstraint, DateTime, Index, Integer, String, Text, text
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from quizplay.db.models.base import Base


class Profile(Base):
    __tablename__ = "profiles"
    __table_args__ = (
        CheckConstraint("level >= 1", name="ck_profiles_level_positive"),
        CheckConstraint("experience_points >= 0", name="ck_profiles_xp_non_negative"),
        CheckConstraint("monthly_score >= 0", name="ck_profiles_monthly_score_non_negative"),
        CheckConstraint(
            "monthly_games_played >= 0",
            name="ck_profiles_monthly_games_non_negative",
        ),
        CheckConstraint("top_10_count >= 0", name="ck_profiles_top_10_count_non_negative"),
        Index("idx_profiles_monthly_ranking", "last_reset_month", "monthly_score"),
        Index("idx_profiles_pseudo", "pseudo"),
    )

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    pseudo: Mapped[str] = mapped_column(Text, nullable=False)
    level: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("1"))
    experience_points: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    monthly_score: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    monthly_games_played: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        server_default=text("0"),
    )
    last_reset_month: Mapped[str | None] = mapped_column(String(7), nullable=True)
    top_10_count: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
