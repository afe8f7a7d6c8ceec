from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from quizplay.db.models.game_answers import GameAnswer


class GameAnswersRepo:
    @staticmethod
    async def create_once(
        session: AsyncSession,
        *,
        session_id: UUID,
        question_id: UUID,
        user_answer: str,
        is_correct: bool,
        time_taken_seconds: int,
        points_earned: int,
        answered_at: datetime,
    ) -> bool:
        stmt = (
            insert(GameAnswer)
            .values(
                session_id=session_id,
                question_id=question_id,
                user_answer=user_answer,
                is_correct=is_correct,
                time_taken_seconds=time_taken_seconds,
                points_earned=points_earned,
                answered_at=answered_at,
            )
            .on_conflict_do_nothing(index_elements=[GameAnswer.session_id, GameAnswer.question_id])
            .returning(GameAnswer.id)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None
