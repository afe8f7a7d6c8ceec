from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import BigInteger, CheckConstraint, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from quizplay.db.models.base import Base


class MonthlyRanking(Base):
    __tablename__ = "monthly_rankings_history"
    __table_args__ = (
        CheckConstraint("final_rank >= 1", name="ck_monthly_rankings_rank_positive"),
        CheckConstraint("final_score >= 0", name="ck_monthly_rankings_score_non_negative"),
        CheckConstraint("month ~ '^[0-9]{4}-[0-9]{2}$'", name="ck_monthly_rankings_month_token"),
        UniqueConstraint("user_id", "month", name="uq_monthly_rankings_user_month"),
        Index("idx_monthly_rankings_month_rank", "month", "final_rank"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    user_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("profiles.id"),
        nullable=False,
    )
    month: Mapped[str] = mapped_column(String(7), nullable=False)
    final_rank: Mapped[int] = mapped_column(Integer, nullable=False)
    final_score: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
