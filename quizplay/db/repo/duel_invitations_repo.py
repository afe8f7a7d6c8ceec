from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from quizplay.db.models.duel_invitations import DuelInvitation


class DuelInvitationsRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, invitation_id: UUID) -> DuelInvitation | None:
        return await session.get(DuelInvitation, invitation_id)

    @staticmethod
    async def get_by_id_for_update(session: AsyncSession, invitation_id: UUID) -> DuelInvitation | None:
        stmt = select(DuelInvitation).where(DuelInvitation.id == invitation_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def create(session: AsyncSession, *, invitation: DuelInvitation) -> DuelInvitation:
        session.add(invitation)
        await session.flush()
        return invitation
