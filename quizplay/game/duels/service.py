from __future__ import annotations

from datetime import datetime, timedelta
from uuid import UUID

import structlog

from quizplay.game.duels.constants import DUEL_INVITATION_TTL_SECONDS
from quizplay.game.duels.rules import is_invitation_expired, resolve_player_slot
from quizplay.game.duels.types import (
    DuelInvitationSnapshot,
    DuelInvitationStatus,
    DuelReconciliation,
    DuelSnapshot,
    DuelStatus,
)
from quizplay.game.sessions.errors import (
    DuelInvitationAccessError,
    DuelInvitationClosedError,
    DuelInvitationExpiredError,
    DuelInvitationNotFoundError,
    DuelNotFoundError,
    QuizNotFoundError,
    SelfDuelError,
)
from quizplay.game.sessions.store import QuizStore

logger = structlog.get_logger("quizplay.game.duels.service")


async def get_duel_for_player(store: QuizStore, *, duel_id: UUID, player_id: UUID) -> DuelSnapshot:
    duel = await store.read_duel(duel_id)
    if duel is None:
        raise DuelNotFoundError
    resolve_player_slot(duel, player_id)
    return duel


async def reconcile_duel_session(
    store: QuizStore,
    *,
    duel_id: UUID,
    player_id: UUID,
    session_id: UUID,
    now_utc: datetime,
) -> DuelReconciliation:
    duel = await get_duel_for_player(store, duel_id=duel_id, player_id=player_id)
    slot = resolve_player_slot(duel, player_id)

    updated = await store.attach_session_to_duel(
        duel_id,
        slot=slot,
        session_id=session_id,
        now_utc=now_utc,
    )
    attached = updated.session_id_for(slot) == session_id
    finalized_now = (
        attached and updated.status is DuelStatus.COMPLETED and updated.completed_at == now_utc
    )
    if not attached:
        logger.warning(
            "duel_session_attach_skipped",
            duel_id=str(duel_id),
            session_id=str(session_id),
            slot=slot.value,
            duel_status=updated.status.value,
            existing_session_id=str(updated.session_id_for(slot)),
        )
    elif finalized_now:
        logger.info(
            "duel_completed",
            duel_id=str(duel_id),
            winner_id=(str(updated.winner_id) if updated.winner_id is not None else None),
            player1_session_id=str(updated.player1_session_id),
            player2_session_id=str(updated.player2_session_id),
        )
    else:
        logger.info(
            "duel_session_attached",
            duel_id=str(duel_id),
            session_id=str(session_id),
            slot=slot.value,
        )
    return DuelReconciliation(duel=updated, slot=slot, attached=attached, finalized_now=finalized_now)


async def create_duel_invitation(
    store: QuizStore,
    *,
    from_user_id: UUID,
    to_user_id: UUID,
    quiz_id: UUID,
    now_utc: datetime,
) -> DuelInvitationSnapshot:
    if from_user_id == to_user_id:
        raise SelfDuelError
    if await store.load_quiz(quiz_id) is None:
        raise QuizNotFoundError

    invitation = await store.create_duel_invitation(
        from_user_id=from_user_id,
        to_user_id=to_user_id,
        quiz_id=quiz_id,
        created_at=now_utc,
        expires_at=now_utc + timedelta(seconds=DUEL_INVITATION_TTL_SECONDS),
    )
    logger.info(
        "duel_invitation_created",
        invitation_id=str(invitation.invitation_id),
        from_user_id=str(from_user_id),
        to_user_id=str(to_user_id),
        quiz_id=str(quiz_id),
    )
    return invitation


async def _get_pending_invitation_for_invitee(
    store: QuizStore,
    *,
    invitation_id: UUID,
    player_id: UUID,
    now_utc: datetime,
) -> DuelInvitationSnapshot:
    invitation = await store.read_duel_invitation(invitation_id)
    if invitation is None:
        raise DuelInvitationNotFoundError
    if invitation.to_user_id != player_id:
        raise DuelInvitationAccessError
    if is_invitation_expired(invitation, now_utc=now_utc):
        await store.close_duel_invitation(
            invitation_id,
            status=DuelInvitationStatus.EXPIRED,
            now_utc=now_utc,
        )
        raise DuelInvitationExpiredError
    if invitation.status is not DuelInvitationStatus.PENDING:
        raise DuelInvitationClosedError
    return invitation


async def accept_duel_invitation(
    store: QuizStore,
    *,
    invitation_id: UUID,
    player_id: UUID,
    now_utc: datetime,
) -> DuelSnapshot:
    await _get_pending_invitation_for_invitee(
        store,
        invitation_id=invitation_id,
        player_id=player_id,
        now_utc=now_utc,
    )
    duel = await store.accept_duel_invitation(invitation_id, now_utc=now_utc)
    if duel is None:
        raise DuelInvitationClosedError

    logger.info(
        "duel_invitation_accepted",
        invitation_id=str(invitation_id),
        duel_id=str(duel.duel_id),
        quiz_id=str(duel.quiz_id),
    )
    return duel


async def decline_duel_invitation(
    store: QuizStore,
    *,
    invitation_id: UUID,
    player_id: UUID,
    now_utc: datetime,
) -> None:
    await _get_pending_invitation_for_invitee(
        store,
        invitation_id=invitation_id,
        player_id=player_id,
        now_utc=now_utc,
    )
    closed = await store.close_duel_invitation(
        invitation_id,
        status=DuelInvitationStatus.DECLINED,
        now_utc=now_utc,
    )
    if not closed:
        raise DuelInvitationClosedError
    logger.info("duel_invitation_declined", invitation_id=str(invitation_id))
