from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from quizplay.db.models.questions import QuizQuestion


class QuestionsRepo:
    @staticmethod
    async def list_by_quiz(session: AsyncSession, quiz_id: UUID) -> list[QuizQuestion]:
        stmt = (
            select(QuizQuestion)
            .where(QuizQuestion.quiz_id == quiz_id)
            .order_by(QuizQuestion.order_index.asc(), QuizQuestion.id.asc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())
