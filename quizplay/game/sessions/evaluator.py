"""Answer evaluation and per-answer scoring.

Everything here is pure: no store access, no clock, no logging.
"""

from __future__ import annotations

import math

from quizplay.game.questions.types import DEFAULT_TIME_LIMIT_SECONDS, Question
from quizplay.game.sessions.types import AnswerEvaluation

SPEED_BONUS_MAX = 0.5


def round_half_up(value: float) -> int:
    """Rounds .5 away from zero for positive values (``round`` uses banker's rounding)."""
    return math.floor(value + 0.5)


def normalize_answer(value: str) -> str:
    return value.strip().casefold()


def is_answer_correct(question: Question, submitted_answer: str) -> bool:
    normalized = normalize_answer(submitted_answer)
    if not normalized:
        return False
    candidates = (question.correct_answer, *question.accepted_answers)
    return any(normalized == normalize_answer(candidate) for candidate in candidates)


def speed_bonus(*, elapsed_seconds: float, time_limit_seconds: int) -> float:
    effective_limit = time_limit_seconds if time_limit_seconds > 0 else DEFAULT_TIME_LIMIT_SECONDS
    remaining_ratio = 1 - max(0.0, float(elapsed_seconds)) / effective_limit
    return max(0.0, remaining_ratio) * SPEED_BONUS_MAX


def compute_points(*, base_points: int, elapsed_seconds: float, time_limit_seconds: int) -> int:
    bonus = speed_bonus(elapsed_seconds=elapsed_seconds, time_limit_seconds=time_limit_seconds)
    return round_half_up(base_points * (1 + bonus))


def evaluate_answer(
    question: Question,
    submitted_answer: str,
    *,
    elapsed_seconds: float,
    time_limit_seconds: int,
) -> AnswerEvaluation:
    if not is_answer_correct(question, submitted_answer):
        return AnswerEvaluation(is_correct=False, points_earned=0)
    return AnswerEvaluation(
        is_correct=True,
        points_earned=compute_points(
            base_points=question.points,
            elapsed_seconds=elapsed_seconds,
            time_limit_seconds=time_limit_seconds,
        ),
    )
