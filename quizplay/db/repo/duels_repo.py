from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from quizplay.db.models.duels import Duel


class DuelsRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, duel_id: UUID) -> Duel | None:
        return await session.get(Duel, duel_id)

    @staticmethod
    async def get_by_id_for_update(session: AsyncSession, duel_id: UUID) -> Duel | None:
        stmt = select(Duel).where(Duel.id == duel_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def create(session: AsyncSession, *, duel: Duel) -> Duel:
        session.add(duel)
        await session.flush()
        return duel

    @staticmethod
    async def mark_in_progress(session: AsyncSession, *, duel_id: UUID, started_at: datetime) -> int:
        stmt = (
            update(Duel)
            .where(Duel.id == duel_id, Duel.status == "pending")
            .values(status="in_progress", started_at=started_at)
        )
        result = await session.execute(stmt)
        return result.rowcount or 0
