from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from uuid import UUID

from quizplay.game.duels.types import (
    DUEL_OPEN_STATUSES,
    DuelInvitationSnapshot,
    DuelInvitationStatus,
    DuelSlot,
    DuelSnapshot,
    DuelStatus,
)
from quizplay.game.sessions.errors import DuelAccessError


def resolve_player_slot(duel: DuelSnapshot, player_id: UUID) -> DuelSlot:
    if duel.player1_id == player_id:
        return DuelSlot.PLAYER1
    if duel.player2_id == player_id:
        return DuelSlot.PLAYER2
    raise DuelAccessError


def decide_duel_winner(
    *,
    player1_id: UUID,
    player1_score: int,
    player2_id: UUID,
    player2_score: int,
) -> UUID | None:
    if player1_score > player2_score:
        return player1_id
    if player2_score > player1_score:
        return player2_id
    return None


def apply_session_attachment(
    duel: DuelSnapshot,
    *,
    slot: DuelSlot,
    session_id: UUID,
    session_scores: dict[UUID, int],
    now_utc: datetime,
) -> DuelSnapshot:
    """Returns the duel after ``slot`` receives ``session_id``.

    Callers hold the duel's critical section. ``session_scores`` must hold the
    normalized score of every session already attached plus ``session_id``.
    Finished duels and already-filled slots are returned unchanged.
    """
    if duel.status not in DUEL_OPEN_STATUSES:
        return duel
    if duel.session_id_for(slot) is not None:
        return duel

    if slot is DuelSlot.PLAYER1:
        updated = replace(duel, player1_session_id=session_id, status=DuelStatus.IN_PROGRESS)
    else:
        updated = replace(duel, player2_session_id=session_id, status=DuelStatus.IN_PROGRESS)
    if updated.started_at is None:
        updated = replace(updated, started_at=now_utc)

    if updated.player1_session_id is None or updated.player2_session_id is None:
        return updated

    winner_id = decide_duel_winner(
        player1_id=updated.player1_id,
        player1_score=session_scores[updated.player1_session_id],
        player2_id=updated.player2_id,
        player2_score=session_scores[updated.player2_session_id],
    )
    return replace(
        updated,
        status=DuelStatus.COMPLETED,
        winner_id=winner_id,
        completed_at=now_utc,
    )


def is_invitation_expired(invitation: DuelInvitationSnapshot, *, now_utc: datetime) -> bool:
    return invitation.status is DuelInvitationStatus.PENDING and invitation.expires_at <= now_utc


def build_duel_from_invitation(
    invitation: DuelInvitationSnapshot,
    *,
    duel_id: UUID,
    now_utc: datetime,
) -> DuelSnapshot:
    return DuelSnapshot(
        duel_id=duel_id,
        quiz_id=invitation.quiz_id,
        player1_id=invitation.from_user_id,
        player2_id=invitation.to_user_id,
        status=DuelStatus.PENDING,
        created_at=now_utc,
    )
