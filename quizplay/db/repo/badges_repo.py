from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from quizplay.db.models.badges import Badge
from quizplay.db.models.user_badges import UserBadge


class BadgesRepo:
    @staticmethod
    async def list_by_requirement_threshold(
        session: AsyncSession,
        *,
        requirement_type: str,
        max_value: int,
    ) -> list[Badge]:
        stmt = (
            select(Badge)
            .where(
                Badge.requirement_type == requirement_type,
                Badge.requirement_value <= max_value,
            )
            .order_by(Badge.requirement_value.asc(), Badge.id.asc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())


class UserBadgesRepo:
    @staticmethod
    async def exists(session: AsyncSession, *, user_id: UUID, badge_id: UUID) -> bool:
        stmt = select(UserBadge.id).where(
            UserBadge.user_id == user_id,
            UserBadge.badge_id == badge_id,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def create_once(
        session: AsyncSession,
        *,
        user_id: UUID,
        badge_id: UUID,
        earned_at: datetime,
    ) -> bool:
        stmt = (
            insert(UserBadge)
            .values(user_id=user_id, badge_id=badge_id, earned_at=earned_at)
            .on_conflict_do_nothing(index_elements=[UserBadge.user_id, UserBadge.badge_id])
            .returning(UserBadge.id)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None
