from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID


class DuelStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


DUEL_OPEN_STATUSES: frozenset[DuelStatus] = frozenset({DuelStatus.PENDING, DuelStatus.IN_PROGRESS})


class DuelSlot(str, Enum):
    PLAYER1 = "player1"
    PLAYER2 = "player2"


class DuelInvitationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    EXPIRED = "expired"


@dataclass(frozen=True, slots=True)
class DuelSnapshot:
    duel_id: UUID
    quiz_id: UUID
    player1_id: UUID
    player2_id: UUID
    status: DuelStatus
    player1_session_id: UUID | None = None
    player2_session_id: UUID | None = None
    winner_id: UUID | None = None
    created_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None

    def session_id_for(self, slot: DuelSlot) -> UUID | None:
        return self.player1_session_id if slot is DuelSlot.PLAYER1 else self.player2_session_id


@dataclass(frozen=True, slots=True)
class DuelInvitationSnapshot:
    invitation_id: UUID
    from_user_id: UUID
    to_user_id: UUID
    quiz_id: UUID
    status: DuelInvitationStatus
    created_at: datetime
    expires_at: datetime
    duel_id: UUID | None = None
    responded_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class DuelReconciliation:
    duel: DuelSnapshot
    slot: DuelSlot
    attached: bool
    finalized_now: bool
