from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from uuid import UUID

DEFAULT_TIME_LIMIT_SECONDS = 30
DEFAULT_QUESTION_POINTS = 100


class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "mcq"
    SINGLE_ANSWER = "single_answer"
    TEXT_FREE = "text_free"
    MAP_CLICK = "map_click"
    TRUE_FALSE = "true_false"


CHOICE_QUESTION_TYPES: frozenset[QuestionType] = frozenset(
    {QuestionType.MULTIPLE_CHOICE, QuestionType.TRUE_FALSE}
)


@dataclass(frozen=True, slots=True)
class Question:
    question_id: UUID
    quiz_id: UUID
    text: str
    question_type: QuestionType
    correct_answer: str
    options: tuple[str, ...] = ()
    option_images: tuple[str | None, ...] = ()
    accepted_answers: tuple[str, ...] = ()
    points: int = DEFAULT_QUESTION_POINTS
    order_index: int = 0
    complement_if_wrong: str | None = None

    @property
    def is_choice(self) -> bool:
        return self.question_type in CHOICE_QUESTION_TYPES


@dataclass(frozen=True, slots=True)
class QuizConfig:
    quiz_id: UUID
    title: str
    time_limit_seconds: int | None = None
    randomize_questions: bool = False
    randomize_answers: bool = False
    is_public: bool = False
    is_global: bool = False
    total_plays: int = 0
    average_score: float = 0.0

    @property
    def effective_time_limit_seconds(self) -> int:
        if self.time_limit_seconds is None or self.time_limit_seconds <= 0:
            return DEFAULT_TIME_LIMIT_SECONDS
        return self.time_limit_seconds

    @property
    def grants_progression(self) -> bool:
        return self.is_public or self.is_global


@dataclass(frozen=True, slots=True)
class QuestionSet:
    quiz: QuizConfig
    questions: tuple[Question, ...]
