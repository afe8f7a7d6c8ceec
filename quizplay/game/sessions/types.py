from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from uuid import UUID

from quizplay.game.duels.types import DuelReconciliation
from quizplay.game.progression.types import ProgressionResult
from quizplay.game.questions.types import Question


class SessionMode(str, Enum):
    SOLO = "solo"
    DUEL = "duel"


class SessionPhase(str, Enum):
    IDLE = "IDLE"
    LOADING = "LOADING"
    AWAITING_ANSWER = "AWAITING_ANSWER"
    SCORED = "SCORED"
    COMPLETING = "COMPLETING"
    COMPLETED = "COMPLETED"


@dataclass(frozen=True, slots=True)
class AnswerEvaluation:
    is_correct: bool
    points_earned: int


@dataclass(frozen=True, slots=True)
class AnswerRecord:
    question_id: UUID
    user_answer: str
    is_correct: bool
    time_taken_seconds: int
    points_earned: int
    answered_at: datetime

    @property
    def timed_out(self) -> bool:
        return self.user_answer == ""


@dataclass(frozen=True, slots=True)
class AnswerOutcome:
    record: AnswerRecord
    question_index: int
    correct_answer: str
    accepted_answers: tuple[str, ...]
    complement_if_wrong: str | None
    is_last_question: bool


@dataclass(frozen=True, slots=True)
class SessionCompletionStats:
    score: int
    accuracy_percentage: float
    time_taken_seconds: int
    correct_answers: int
    total_questions: int


@dataclass(frozen=True, slots=True)
class AnswerReview:
    question: Question
    answer: AnswerRecord | None

    @property
    def is_correct(self) -> bool:
        return self.answer is not None and self.answer.is_correct


@dataclass(slots=True)
class CompletionResult:
    session_id: UUID | None
    training_mode: bool
    stats: SessionCompletionStats
    completed_at: datetime
    progression: ProgressionResult | None = None
    duel: DuelReconciliation | None = None
    granted_badge_ids: tuple[UUID, ...] = ()
    failed_effects: list[str] = field(default_factory=list)

    @property
    def xp_gained(self) -> int:
        return self.progression.earned_xp if self.progression is not None else 0
