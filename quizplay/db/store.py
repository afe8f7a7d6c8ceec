from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from uuid import UUID, uuid4

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from quizplay.db.models.duel_invitations import DuelInvitation
from quizplay.db.models.duels import Duel
from quizplay.db.models.game_sessions import GameSession
from quizplay.db.models.profiles import Profile
from quizplay.db.models.questions import QuizQuestion
from quizplay.db.models.quizzes import Quiz
from quizplay.db.repo.badges_repo import BadgesRepo, UserBadgesRepo
from quizplay.db.repo.duel_invitations_repo import DuelInvitationsRepo
from quizplay.db.repo.duels_repo import DuelsRepo
from quizplay.db.repo.game_answers_repo import GameAnswersRepo
from quizplay.db.repo.game_sessions_repo import GameSessionsRepo
from quizplay.db.repo.monthly_rankings_repo import MonthlyRankingsRepo
from quizplay.db.repo.profiles_repo import ProfilesRepo
from quizplay.db.repo.questions_repo import QuestionsRepo
from quizplay.db.repo.quizzes_repo import QuizzesRepo
from quizplay.game.badges.types import BADGE_REQUIREMENT_LEVEL, Badge
from quizplay.game.duels.rules import apply_session_attachment, build_duel_from_invitation
from quizplay.game.duels.types import (
    DuelInvitationSnapshot,
    DuelInvitationStatus,
    DuelSlot,
    DuelSnapshot,
    DuelStatus,
)
from quizplay.game.progression.constants import MONTHLY_RANKING_SIZE
from quizplay.game.progression.types import PlayerProgress, RankedPlayer
from quizplay.game.questions.types import Question, QuestionType, QuizConfig
from quizplay.game.sessions.errors import DuelNotFoundError, PersistenceError, PlayerNotFoundError
from quizplay.game.sessions.types import AnswerRecord, SessionCompletionStats, SessionMode

logger = structlog.get_logger("quizplay.db.store")


def _quiz_from_model(quiz: Quiz) -> QuizConfig:
    return QuizConfig(
        quiz_id=quiz.id,
        title=quiz.title,
        time_limit_seconds=quiz.time_limit_seconds,
        randomize_questions=quiz.randomize_questions,
        randomize_answers=quiz.randomize_answers,
        is_public=quiz.is_public,
        is_global=quiz.is_global,
        total_plays=quiz.total_plays,
        average_score=quiz.average_score,
    )


def _question_from_model(question: QuizQuestion) -> Question:
    return Question(
        question_id=question.id,
        quiz_id=question.quiz_id,
        text=question.question_text,
        question_type=QuestionType(question.question_type),
        correct_answer=question.correct_answer,
        options=tuple(question.options or ()),
        option_images=tuple(question.option_images or ()),
        accepted_answers=tuple(question.correct_answers or ()),
        points=question.points,
        order_index=question.order_index,
        complement_if_wrong=question.complement_if_wrong,
    )


def _duel_from_model(duel: Duel) -> DuelSnapshot:
    return DuelSnapshot(
        duel_id=duel.id,
        quiz_id=duel.quiz_id,
        player1_id=duel.player1_id,
        player2_id=duel.player2_id,
        status=DuelStatus(duel.status),
        player1_session_id=duel.player1_session_id,
        player2_session_id=duel.player2_session_id,
        winner_id=duel.winner_id,
        created_at=duel.created_at,
        started_at=duel.started_at,
        completed_at=duel.completed_at,
    )


def _invitation_from_model(invitation: DuelInvitation) -> DuelInvitationSnapshot:
    return DuelInvitationSnapshot(
        invitation_id=invitation.id,
        from_user_id=invitation.from_user_id,
        to_user_id=invitation.to_user_id,
        quiz_id=invitation.quiz_id,
        status=DuelInvitationStatus(invitation.status),
        created_at=invitation.created_at,
        expires_at=invitation.expires_at,
        duel_id=invitation.duel_id,
        responded_at=invitation.responded_at,
    )


def _progress_from_model(profile: Profile) -> PlayerProgress:
    return PlayerProgress(
        player_id=profile.id,
        experience_points=profile.experience_points,
        level=profile.level,
        monthly_score=profile.monthly_score,
        monthly_games_played=profile.monthly_games_played,
        last_reset_month=profile.last_reset_month,
        top_10_count=profile.top_10_count,
    )


class SqlQuizStore:
    """Postgres-backed store. Each call runs in its own transaction."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
        if session_factory is None:
            from quizplay.db.session import SessionLocal

            session_factory = SessionLocal
        self._session_factory = session_factory

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_factory.begin() as session:
                yield session
        except (SQLAlchemyError, OSError, asyncio.TimeoutError) as exc:
            logger.warning("quiz_store_operation_failed", error_type=type(exc).__name__)
            raise PersistenceError(str(exc)) from exc

    async def load_quiz(self, quiz_id: UUID) -> QuizConfig | None:
        async with self._transaction() as session:
            quiz = await QuizzesRepo.get_by_id(session, quiz_id)
            return _quiz_from_model(quiz) if quiz is not None else None

    async def load_questions(self, quiz_id: UUID) -> list[Question]:
        async with self._transaction() as session:
            questions = await QuestionsRepo.list_by_quiz(session, quiz_id)
            return [_question_from_model(question) for question in questions]

    async def create_session(
        self,
        *,
        quiz_id: UUID,
        player_id: UUID,
        mode: SessionMode,
        started_at: datetime,
    ) -> UUID:
        async with self._transaction() as session:
            game_session = await GameSessionsRepo.create(
                session,
                game_session=GameSession(
                    id=uuid4(),
                    quiz_id=quiz_id,
                    player_id=player_id,
                    mode=mode.value,
                    completed=False,
                    started_at=started_at,
                ),
            )
            return game_session.id

    async def append_answer(self, session_id: UUID, answer: AnswerRecord) -> None:
        async with self._transaction() as session:
            created = await GameAnswersRepo.create_once(
                session,
                session_id=session_id,
                question_id=answer.question_id,
                user_answer=answer.user_answer,
                is_correct=answer.is_correct,
                time_taken_seconds=answer.time_taken_seconds,
                points_earned=answer.points_earned,
                answered_at=answer.answered_at,
            )
        if not created:
            logger.debug(
                "game_answer_already_recorded",
                session_id=str(session_id),
                question_id=str(answer.question_id),
            )

    async def complete_session(
        self,
        session_id: UUID,
        *,
        stats: SessionCompletionStats,
        completed_at: datetime,
    ) -> None:
        async with self._transaction() as session:
            game_session = await GameSessionsRepo.get_by_id_for_update(session, session_id)
            if game_session is None:
                raise PersistenceError(f"game session {session_id} does not exist")
            if game_session.completed:
                return

            game_session.score = stats.score
            game_session.accuracy_percentage = stats.accuracy_percentage
            game_session.time_taken_seconds = stats.time_taken_seconds
            game_session.correct_answers = stats.correct_answers
            game_session.total_questions = stats.total_questions
            game_session.completed = True
            game_session.completed_at = completed_at

    async def record_quiz_play(self, quiz_id: UUID, *, score: int) -> None:
        async with self._transaction() as session:
            await QuizzesRepo.record_play(session, quiz_id=quiz_id, score=score)

    async def read_duel(self, duel_id: UUID) -> DuelSnapshot | None:
        async with self._transaction() as session:
            duel = await DuelsRepo.get_by_id(session, duel_id)
            return _duel_from_model(duel) if duel is not None else None

    async def mark_duel_started(self, duel_id: UUID, *, started_at: datetime) -> bool:
        async with self._transaction() as session:
            updated_rows = await DuelsRepo.mark_in_progress(
                session,
                duel_id=duel_id,
                started_at=started_at,
            )
            return updated_rows > 0

    async def attach_session_to_duel(
        self,
        duel_id: UUID,
        *,
        slot: DuelSlot,
        session_id: UUID,
        now_utc: datetime,
    ) -> DuelSnapshot:
        async with self._transaction() as session:
            duel = await DuelsRepo.get_by_id_for_update(session, duel_id)
            if duel is None:
                raise DuelNotFoundError

            current = _duel_from_model(duel)
            session_ids = [
                attached_id
                for attached_id in (current.player1_session_id, current.player2_session_id, session_id)
                if attached_id is not None
            ]
            session_scores = await GameSessionsRepo.get_scores_by_ids(session, session_ids=session_ids)
            updated = apply_session_attachment(
                current,
                slot=slot,
                session_id=session_id,
                session_scores=session_scores,
                now_utc=now_utc,
            )
            if updated == current:
                return current

            duel.player1_session_id = updated.player1_session_id
            duel.player2_session_id = updated.player2_session_id
            duel.status = updated.status.value
            duel.winner_id = updated.winner_id
            duel.started_at = updated.started_at
            duel.completed_at = updated.completed_at
            await session.flush()
            return updated

    async def create_duel_invitation(
        self,
        *,
        from_user_id: UUID,
        to_user_id: UUID,
        quiz_id: UUID,
        created_at: datetime,
        expires_at: datetime,
    ) -> DuelInvitationSnapshot:
        async with self._transaction() as session:
            invitation = await DuelInvitationsRepo.create(
                session,
                invitation=DuelInvitation(
                    id=uuid4(),
                    from_user_id=from_user_id,
                    to_user_id=to_user_id,
                    quiz_id=quiz_id,
                    status=DuelInvitationStatus.PENDING.value,
                    created_at=created_at,
                    expires_at=expires_at,
                ),
            )
            return _invitation_from_model(invitation)

    async def read_duel_invitation(self, invitation_id: UUID) -> DuelInvitationSnapshot | None:
        async with self._transaction() as session:
            invitation = await DuelInvitationsRepo.get_by_id(session, invitation_id)
            return _invitation_from_model(invitation) if invitation is not None else None

    async def accept_duel_invitation(
        self,
        invitation_id: UUID,
        *,
        now_utc: datetime,
    ) -> DuelSnapshot | None:
        async with self._transaction() as session:
            invitation = await DuelInvitationsRepo.get_by_id_for_update(session, invitation_id)
            if invitation is None or invitation.status != DuelInvitationStatus.PENDING.value:
                return None
            if invitation.expires_at <= now_utc:
                return None

            snapshot = build_duel_from_invitation(
                _invitation_from_model(invitation),
                duel_id=uuid4(),
                now_utc=now_utc,
            )
            await DuelsRepo.create(
                session,
                duel=Duel(
                    id=snapshot.duel_id,
                    quiz_id=snapshot.quiz_id,
                    player1_id=snapshot.player1_id,
                    player2_id=snapshot.player2_id,
                    status=snapshot.status.value,
                    created_at=now_utc,
                ),
            )
            invitation.status = DuelInvitationStatus.ACCEPTED.value
            invitation.duel_id = snapshot.duel_id
            invitation.responded_at = now_utc
            await session.flush()
            return snapshot

    async def close_duel_invitation(
        self,
        invitation_id: UUID,
        *,
        status: DuelInvitationStatus,
        now_utc: datetime,
    ) -> bool:
        async with self._transaction() as session:
            invitation = await DuelInvitationsRepo.get_by_id_for_update(session, invitation_id)
            if invitation is None or invitation.status != DuelInvitationStatus.PENDING.value:
                return False
            invitation.status = status.value
            invitation.responded_at = now_utc
            await session.flush()
            return True

    async def read_player_progress(self, player_id: UUID) -> PlayerProgress | None:
        async with self._transaction() as session:
            profile = await ProfilesRepo.get_by_id(session, player_id)
            return _progress_from_model(profile) if profile is not None else None

    async def write_player_progress(self, progress: PlayerProgress, *, now_utc: datetime) -> None:
        async with self._transaction() as session:
            profile = await ProfilesRepo.get_by_id_for_update(session, progress.player_id)
            if profile is None:
                raise PlayerNotFoundError
            profile.experience_points = progress.experience_points
            profile.level = progress.level
            profile.monthly_score = progress.monthly_score
            profile.monthly_games_played = progress.monthly_games_played
            profile.last_reset_month = progress.last_reset_month
            profile.updated_at = now_utc

    async def read_top10_by_monthly_score(self, *, month_token: str) -> list[RankedPlayer]:
        async with self._transaction() as session:
            rows = await ProfilesRepo.list_top_by_monthly_score(
                session,
                month_token=month_token,
                limit=MONTHLY_RANKING_SIZE,
            )
            return [RankedPlayer(player_id=player_id, monthly_score=score) for player_id, score in rows]

    async def has_monthly_ranking_snapshot(self, month_token: str) -> bool:
        async with self._transaction() as session:
            return await MonthlyRankingsRepo.exists_for_month(session, month_token=month_token)

    async def write_monthly_ranking_snapshot(
        self,
        *,
        player_id: UUID,
        month_token: str,
        rank: int,
        score: int,
        recorded_at: datetime,
    ) -> bool:
        async with self._transaction() as session:
            return await MonthlyRankingsRepo.create_once(
                session,
                user_id=player_id,
                month_token=month_token,
                final_rank=rank,
                final_score=score,
                created_at=recorded_at,
            )

    async def increment_top10_count(self, player_id: UUID) -> None:
        async with self._transaction() as session:
            await ProfilesRepo.increment_top10_count(session, player_id)

    async def find_badges_by_level_threshold(self, level: int) -> list[Badge]:
        async with self._transaction() as session:
            badges = await BadgesRepo.list_by_requirement_threshold(
                session,
                requirement_type=BADGE_REQUIREMENT_LEVEL,
                max_value=level,
            )
            return [
                Badge(
                    badge_id=badge.id,
                    name=badge.name,
                    requirement_type=badge.requirement_type,
                    requirement_value=badge.requirement_value,
                    description=badge.description,
                    icon=badge.icon,
                )
                for badge in badges
            ]

    async def has_badge(self, player_id: UUID, badge_id: UUID) -> bool:
        async with self._transaction() as session:
            return await UserBadgesRepo.exists(session, user_id=player_id, badge_id=badge_id)

    async def grant_badge(self, player_id: UUID, badge_id: UUID, *, earned_at: datetime) -> bool:
        async with self._transaction() as session:
            return await UserBadgesRepo.create_once(
                session,
                user_id=player_id,
                badge_id=badge_id,
                earned_at=earned_at,
            )
