"""Session controller: one player, one play-through of one quiz.

Phases::

    IDLE -> LOADING -> AWAITING_ANSWER(0) -> SCORED(0) -> AWAITING_ANSWER(1) -> ...
         -> SCORED(last) -> COMPLETING -> COMPLETED

Every entry point acts only in the phase that accepts it and is a no-op
otherwise. The phase changes before the first ``await`` of a transition, so a
re-entrant call made while a store call is pending sees the new phase. This is
what keeps session creation, answer recording and completion side effects to
at most one run each.
"""

from __future__ import annotations

import asyncio
import random
import time
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import TypeVar
from uuid import UUID

import structlog

from quizplay.game.badges.service import grant_level_badges
from quizplay.game.duels.service import get_duel_for_player, reconcile_duel_session
from quizplay.game.progression.service import apply_session_progression
from quizplay.game.questions.loader import load_question_set
from quizplay.game.questions.types import DEFAULT_TIME_LIMIT_SECONDS, Question, QuestionSet, QuizConfig
from quizplay.game.sessions.errors import (
    DuelAccessError,
    EmptyAnswerError,
    GameSessionError,
    InvalidAnswerOptionError,
    PersistenceError,
    SessionCompletionError,
)
from quizplay.game.sessions.evaluator import evaluate_answer, normalize_answer, round_half_up
from quizplay.game.sessions.scoring import build_answer_review, compute_completion_stats
from quizplay.game.sessions.store import QuizStore
from quizplay.game.sessions.types import (
    AnswerOutcome,
    AnswerRecord,
    AnswerReview,
    CompletionResult,
    SessionMode,
    SessionPhase,
)

logger = structlog.get_logger("quizplay.game.sessions.controller")

COUNTDOWN_TICK_SECONDS = 1.0

T = TypeVar("T")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class QuizSessionController:
    def __init__(
        self,
        store: QuizStore,
        *,
        quiz_id: UUID,
        player_id: UUID,
        mode: SessionMode = SessionMode.SOLO,
        duel_id: UUID | None = None,
        training_mode: bool = False,
        question_count: int | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = _utc_now,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if mode is SessionMode.DUEL and duel_id is None:
            raise ValueError("duel sessions need a duel_id")
        if mode is SessionMode.DUEL and training_mode:
            raise ValueError("training mode cannot be played as a duel")

        self._store = store
        self._quiz_id = quiz_id
        self._player_id = player_id
        self._mode = mode
        self._duel_id = duel_id
        self._training_mode = training_mode
        self._question_count = question_count
        self._rng = rng
        self._clock = clock
        self._now = now
        self._sleep = sleep

        self._phase = SessionPhase.IDLE
        self._question_set: QuestionSet | None = None
        self._session_id: UUID | None = None
        self._question_index = 0
        self._question_started_at = 0.0
        self._next_tick_at = 0.0
        self._time_left = 0
        self._answers: list[AnswerRecord] = []
        self._raw_score = 0
        self._completion: CompletionResult | None = None
        self._log = logger.bind(
            quiz_id=str(quiz_id),
            player_id=str(player_id),
            mode=mode.value,
            training_mode=training_mode,
        )

    @property
    def phase(self) -> SessionPhase:
        return self._phase

    @property
    def session_id(self) -> UUID | None:
        return self._session_id

    @property
    def quiz(self) -> QuizConfig | None:
        return self._question_set.quiz if self._question_set is not None else None

    @property
    def questions(self) -> tuple[Question, ...]:
        return self._question_set.questions if self._question_set is not None else ()

    @property
    def question_index(self) -> int:
        return self._question_index

    @property
    def current_question(self) -> Question | None:
        if self._phase not in (SessionPhase.AWAITING_ANSWER, SessionPhase.SCORED):
            return None
        return self.questions[self._question_index]

    @property
    def is_timed(self) -> bool:
        return not self._training_mode

    @property
    def time_limit_seconds(self) -> int:
        quiz = self.quiz
        return quiz.effective_time_limit_seconds if quiz is not None else DEFAULT_TIME_LIMIT_SECONDS

    @property
    def time_left(self) -> int:
        return self._time_left

    @property
    def answers(self) -> tuple[AnswerRecord, ...]:
        return tuple(self._answers)

    @property
    def raw_score(self) -> int:
        return self._raw_score

    @property
    def completion(self) -> CompletionResult | None:
        return self._completion

    async def start(self) -> bool:
        if self._phase is not SessionPhase.IDLE:
            self._log.debug("quiz_session_start_suppressed", phase=self._phase.value)
            return False

        self._phase = SessionPhase.LOADING
        started = False
        try:
            question_set = await load_question_set(
                self._store,
                quiz_id=self._quiz_id,
                training_mode=self._training_mode,
                question_count=self._question_count,
                rng=self._rng,
            )
            if self._mode is SessionMode.DUEL:
                assert self._duel_id is not None
                duel = await get_duel_for_player(
                    self._store,
                    duel_id=self._duel_id,
                    player_id=self._player_id,
                )
                if duel.quiz_id != self._quiz_id:
                    raise DuelAccessError

            session_id = None
            if not self._training_mode:
                session_id = await self._store.create_session(
                    quiz_id=self._quiz_id,
                    player_id=self._player_id,
                    mode=self._mode,
                    started_at=self._now(),
                )
            started = True
        finally:
            if not started:
                self._phase = SessionPhase.IDLE

        self._question_set = question_set
        self._session_id = session_id
        if session_id is not None:
            self._log = self._log.bind(session_id=str(session_id))
        if self._mode is SessionMode.DUEL:
            assert self._duel_id is not None
            self._log = self._log.bind(duel_id=str(self._duel_id))
            await self._run_effect(
                "duel_start",
                self._store.mark_duel_started(self._duel_id, started_at=self._now()),
            )

        self._log.info("quiz_session_started", questions_total=len(question_set.questions))
        self._enter_question(0)
        return True

    async def submit_answer(
        self,
        answer: str,
        *,
        question_index: int | None = None,
    ) -> AnswerOutcome | None:
        if self._phase is not SessionPhase.AWAITING_ANSWER or (
            question_index is not None and question_index != self._question_index
        ):
            self._log.debug(
                "quiz_answer_submit_suppressed",
                phase=self._phase.value,
                question_index=self._question_index,
                requested_index=question_index,
            )
            return None

        question = self.questions[self._question_index]
        if not answer.strip():
            raise EmptyAnswerError
        if question.is_choice and question.options:
            allowed = {normalize_answer(option) for option in question.options}
            if normalize_answer(answer) not in allowed:
                raise InvalidAnswerOptionError

        index = self._question_index
        elapsed_seconds = self._elapsed_seconds()
        evaluation = evaluate_answer(
            question,
            answer,
            elapsed_seconds=elapsed_seconds,
            time_limit_seconds=self.time_limit_seconds,
        )
        record = AnswerRecord(
            question_id=question.question_id,
            user_answer=answer,
            is_correct=evaluation.is_correct,
            time_taken_seconds=elapsed_seconds,
            points_earned=evaluation.points_earned,
            answered_at=self._now(),
        )
        self._record_answer(record)
        await self._persist_answer(record)

        return AnswerOutcome(
            record=record,
            question_index=index,
            correct_answer=question.correct_answer,
            accepted_answers=question.accepted_answers,
            complement_if_wrong=question.complement_if_wrong,
            is_last_question=index == len(self.questions) - 1,
        )

    async def tick(self) -> None:
        """One countdown step; a no-op unless a timed question is awaiting an answer."""
        if self._phase is not SessionPhase.AWAITING_ANSWER or not self.is_timed:
            return

        self._time_left = max(0, self._time_left - 1)
        if self._time_left > 0:
            return

        index = self._question_index
        question = self.questions[index]
        record = AnswerRecord(
            question_id=question.question_id,
            user_answer="",
            is_correct=False,
            time_taken_seconds=self._elapsed_seconds(),
            points_earned=0,
            answered_at=self._now(),
        )
        self._record_answer(record)
        self._log.info("quiz_question_timed_out", question_index=index)
        await self._persist_answer(record)
        await self.advance(from_index=index)

    async def run_countdown(self) -> None:
        """Ticks once per second until play ends. Schedule it after ``start()``.

        The cadence restarts with every question, so the first tick of a question
        lands one full second after it is shown.
        """
        if not self.is_timed:
            return
        while self._phase in (SessionPhase.AWAITING_ANSWER, SessionPhase.SCORED):
            delay = self._next_tick_at - self._clock()
            if delay > 0:
                await self._sleep(delay)
                continue
            self._next_tick_at += COUNTDOWN_TICK_SECONDS
            await self.tick()

    async def advance(self, *, from_index: int | None = None) -> bool:
        if self._phase is not SessionPhase.SCORED or (
            from_index is not None and from_index != self._question_index
        ):
            self._log.debug(
                "quiz_advance_suppressed",
                phase=self._phase.value,
                question_index=self._question_index,
                requested_index=from_index,
            )
            return False

        if self._question_index < len(self.questions) - 1:
            self._enter_question(self._question_index + 1)
            return True

        await self.complete()
        return True

    async def complete(self) -> CompletionResult | None:
        if self._phase in (SessionPhase.COMPLETING, SessionPhase.COMPLETED):
            self._log.debug("quiz_session_complete_suppressed", phase=self._phase.value)
            return self._completion
        if self._phase is not SessionPhase.SCORED or self._question_index != len(self.questions) - 1:
            self._log.warning(
                "quiz_session_complete_rejected",
                phase=self._phase.value,
                question_index=self._question_index,
                answers_total=len(self._answers),
            )
            return None

        self._phase = SessionPhase.COMPLETING
        completed_at = self._now()
        stats = compute_completion_stats(
            self._answers,
            total_questions=len(self.questions),
            raw_score=self._raw_score,
        )
        result = CompletionResult(
            session_id=self._session_id,
            training_mode=self._training_mode,
            stats=stats,
            completed_at=completed_at,
        )

        if not self._training_mode:
            assert self._session_id is not None
            written = False
            try:
                await self._store.complete_session(
                    self._session_id,
                    stats=stats,
                    completed_at=completed_at,
                )
                written = True
            except (PersistenceError, OSError) as exc:
                self._log.error("quiz_session_complete_failed", exc_info=exc)
                raise SessionCompletionError from exc
            finally:
                if not written:
                    self._phase = SessionPhase.SCORED
            await self._run_completion_effects(result)

        self._completion = result
        self._phase = SessionPhase.COMPLETED
        self._log.info(
            "quiz_session_completed",
            score=stats.score,
            accuracy_percentage=stats.accuracy_percentage,
            correct_answers=stats.correct_answers,
            total_questions=stats.total_questions,
            time_taken_seconds=stats.time_taken_seconds,
            xp_gained=result.xp_gained,
            failed_effects=result.failed_effects,
        )
        return result

    def review(self) -> list[AnswerReview]:
        return build_answer_review(self.questions, self._answers)

    def _enter_question(self, index: int) -> None:
        self._question_index = index
        self._question_started_at = self._clock()
        self._next_tick_at = self._question_started_at + COUNTDOWN_TICK_SECONDS
        self._time_left = self.time_limit_seconds if self.is_timed else 0
        self._phase = SessionPhase.AWAITING_ANSWER

    def _elapsed_seconds(self) -> int:
        return max(0, round_half_up(self._clock() - self._question_started_at))

    def _record_answer(self, record: AnswerRecord) -> None:
        self._answers.append(record)
        self._raw_score += record.points_earned
        self._phase = SessionPhase.SCORED

    async def _persist_answer(self, record: AnswerRecord) -> None:
        if self._training_mode or self._session_id is None:
            return
        try:
            await self._store.append_answer(self._session_id, record)
        except (PersistenceError, OSError) as exc:
            # The in-memory answer list stays authoritative for the summary.
            self._log.warning(
                "quiz_answer_save_failed",
                question_id=str(record.question_id),
                exc_info=exc,
            )

    async def _run_effect(
        self,
        name: str,
        effect: Awaitable[T],
        result: CompletionResult | None = None,
    ) -> T | None:
        try:
            return await effect
        except (GameSessionError, OSError) as exc:
            if result is not None:
                result.failed_effects.append(name)
            self._log.warning("quiz_session_effect_failed", effect=name, exc_info=exc)
            return None

    async def _run_completion_effects(self, result: CompletionResult) -> None:
        assert self._session_id is not None and self._question_set is not None
        quiz = self._question_set.quiz
        completed_at = result.completed_at

        if self._mode is SessionMode.DUEL:
            assert self._duel_id is not None
            result.duel = await self._run_effect(
                "duel",
                reconcile_duel_session(
                    self._store,
                    duel_id=self._duel_id,
                    player_id=self._player_id,
                    session_id=self._session_id,
                    now_utc=completed_at,
                ),
                result,
            )

        result.progression = await self._run_effect(
            "progression",
            apply_session_progression(
                self._store,
                player_id=self._player_id,
                quiz=quiz,
                normalized_score=result.stats.score,
                training_mode=self._training_mode,
                now_utc=completed_at,
            ),
            result,
        )

        await self._run_effect(
            "quiz_stats",
            self._store.record_quiz_play(quiz.quiz_id, score=result.stats.score),
            result,
        )

        progression = result.progression
        if progression is not None and progression.eligible and progression.level is not None:
            granted = await self._run_effect(
                "badges",
                grant_level_badges(
                    self._store,
                    player_id=self._player_id,
                    level=progression.level,
                    now_utc=completed_at,
                ),
                result,
            )
            result.granted_badge_ids = granted or ()
