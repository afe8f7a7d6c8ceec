from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from quizplay.db.models.monthly_rankings import MonthlyRanking


class MonthlyRankingsRepo:
    @staticmethod
    async def exists_for_month(session: AsyncSession, *, month_token: str) -> bool:
        stmt = select(MonthlyRanking.id).where(MonthlyRanking.month == month_token).limit(1)
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def create_once(
        session: AsyncSession,
        *,
        user_id: UUID,
        month_token: str,
        final_rank: int,
        final_score: int,
        created_at: datetime,
    ) -> bool:
        stmt = (
            insert(MonthlyRanking)
            .values(
                user_id=user_id,
                month=month_token,
                final_rank=final_rank,
                final_score=final_score,
                created_at=created_at,
            )
            .on_conflict_do_nothing(index_elements=[MonthlyRanking.user_id, MonthlyRanking.month])
            .returning(MonthlyRanking.id)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None
