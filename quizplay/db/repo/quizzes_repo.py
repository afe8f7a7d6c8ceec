from __future__ import annotations

from uuid import UUID

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from quizplay.db.models.quizzes import Quiz


class QuizzesRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, quiz_id: UUID) -> Quiz | None:
        return await session.get(Quiz, quiz_id)

    @staticmethod
    async def record_play(session: AsyncSession, *, quiz_id: UUID, score: int) -> int:
        stmt = (
            update(Quiz)
            .where(Quiz.id == quiz_id)
            .values(
                total_plays=Quiz.total_plays + 1,
                average_score=(Quiz.average_score * Quiz.total_plays + score) / (Quiz.total_plays + 1),
            )
        )
        result = await session.execute(stmt)
        return result.rowcount or 0
