from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from quizplay.db.models.game_sessions import GameSession


class GameSessionsRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, session_id: UUID) -> GameSession | None:
        return await session.get(GameSession, session_id)

    @staticmethod
    async def get_by_id_for_update(session: AsyncSession, session_id: UUID) -> GameSession | None:
        stmt = select(GameSession).where(GameSession.id == session_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def create(session: AsyncSession, *, game_session: GameSession) -> GameSession:
        session.add(game_session)
        await session.flush()
        return game_session

    @staticmethod
    async def get_scores_by_ids(
        session: AsyncSession,
        *,
        session_ids: list[UUID],
    ) -> dict[UUID, int]:
        if not session_ids:
            return {}
        stmt = select(GameSession.id, GameSession.score).where(GameSession.id.in_(session_ids))
        result = await session.execute(stmt)
        return {session_id: int(score) for session_id, score in result.all()}
