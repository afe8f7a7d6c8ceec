"""Persistence contract consumed by the quiz-session engine.

Implementations: ``quizplay.db.store.SqlQuizStore`` for Postgres. Every
write either succeeds or raises ``PersistenceError``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from quizplay.game.badges.types import Badge
from quizplay.game.duels.types import (
    DuelInvitationSnapshot,
    DuelInvitationStatus,
    DuelSlot,
    DuelSnapshot,
)
from quizplay.game.progression.types import PlayerProgress, RankedPlayer
from quizplay.game.questions.types import Question, QuizConfig
from quizplay.game.sessions.types import AnswerRecord, SessionCompletionStats, SessionMode


class QuizStore(Protocol):
    async def load_quiz(self, quiz_id: UUID) -> QuizConfig | None: ...

    async def load_questions(self, quiz_id: UUID) -> list[Question]: ...

    async def create_session(
        self,
        *,
        quiz_id: UUID,
        player_id: UUID,
        mode: SessionMode,
        started_at: datetime,
    ) -> UUID: ...

    async def append_answer(self, session_id: UUID, answer: AnswerRecord) -> None: ...

    async def complete_session(
        self,
        session_id: UUID,
        *,
        stats: SessionCompletionStats,
        completed_at: datetime,
    ) -> None: ...

    async def record_quiz_play(self, quiz_id: UUID, *, score: int) -> None: ...

    async def read_duel(self, duel_id: UUID) -> DuelSnapshot | None: ...

    async def mark_duel_started(self, duel_id: UUID, *, started_at: datetime) -> bool: ...

    async def attach_session_to_duel(
        self,
        duel_id: UUID,
        *,
        slot: DuelSlot,
        session_id: UUID,
        now_utc: datetime,
    ) -> DuelSnapshot:
        """Sets ``slot`` and finalizes the duel if the other slot is filled.

        Must run as one critical section scoped to the duel record.
        """
        ...

    async def create_duel_invitation(
        self,
        *,
        from_user_id: UUID,
        to_user_id: UUID,
        quiz_id: UUID,
        created_at: datetime,
        expires_at: datetime,
    ) -> DuelInvitationSnapshot: ...

    async def read_duel_invitation(self, invitation_id: UUID) -> DuelInvitationSnapshot | None: ...

    async def accept_duel_invitation(
        self,
        invitation_id: UUID,
        *,
        now_utc: datetime,
    ) -> DuelSnapshot | None:
        """Creates the duel and marks the invitation accepted, only while it is pending."""
        ...

    async def close_duel_invitation(
        self,
        invitation_id: UUID,
        *,
        status: DuelInvitationStatus,
        now_utc: datetime,
    ) -> bool: ...

    async def read_player_progress(self, player_id: UUID) -> PlayerProgress | None: ...

    async def write_player_progress(self, progress: PlayerProgress, *, now_utc: datetime) -> None: ...

    async def read_top10_by_monthly_score(self, *, month_token: str) -> list[RankedPlayer]: ...

    async def has_monthly_ranking_snapshot(self, month_token: str) -> bool: ...

    async def write_monthly_ranking_snapshot(
        self,
        *,
        player_id: UUID,
        month_token: str,
        rank: int,
        score: int,
        recorded_at: datetime,
    ) -> bool: ...

    async def increment_top10_count(self, player_id: UUID) -> None: ...

    async def find_badges_by_level_threshold(self, level: int) -> list[Badge]: ...

    async def has_badge(self, player_id: UUID, badge_id: UUID) -> bool: ...

    async def grant_badge(self, player_id: UUID, badge_id: UUID, *, earned_at: datetime) -> bool: ...
