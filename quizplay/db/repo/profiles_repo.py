from __future__ import annotations

from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from quizplay.db.models.profiles import Profile


class ProfilesRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, profile_id: UUID) -> Profile | None:
        return await session.get(Profile, profile_id)

    @staticmethod
    async def get_by_id_for_update(session: AsyncSession, profile_id: UUID) -> Profile | None:
        stmt = select(Profile).where(Profile.id == profile_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_top_by_monthly_score(
        session: AsyncSession,
        *,
        month_token: str,
        limit: int,
    ) -> list[tuple[UUID, int]]:
        resolved_limit = max(1, int(limit))
        stmt = (
            select(Profile.id, Profile.monthly_score)
            .where(
                Profile.last_reset_month == month_token,
            )
            .order_by(Profile.monthly_score.desc(), Profile.id.asc())
            .limit(resolved_limit)
        )
        result = await session.execute(stmt)
        return [(profile_id, int(score)) for profile_id, score in result.all()]

    @staticmethod
    async def increment_top10_count(session: AsyncSession, profile_id: UUID) -> int:
        stmt = (
            update(Profile)
            .where(Profile.id == profile_id)
            .values(top_10_count=Profile.top_10_count + 1)
        )
        result = await session.execute(stmt)
        return result.rowcount or 0
