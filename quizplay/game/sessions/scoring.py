from __future__ import annotations

from collections.abc import Sequence

from quizplay.game.questions.types import Question
from quizplay.game.sessions.evaluator import round_half_up
from quizplay.game.sessions.types import AnswerRecord, AnswerReview, SessionCompletionStats

MAX_NORMALIZED_SCORE = 100
NORMALIZATION_POINTS_PER_QUESTION = 150


def normalize_session_score(*, raw_score: int, total_questions: int) -> int:
    if total_questions <= 0:
        return 0
    ratio = raw_score / (total_questions * NORMALIZATION_POINTS_PER_QUESTION)
    return min(MAX_NORMALIZED_SCORE, round_half_up(ratio * 100))


def compute_completion_stats(
    answers: Sequence[AnswerRecord],
    *,
    total_questions: int,
    raw_score: int,
) -> SessionCompletionStats:
    correct_answers = sum(1 for answer in answers if answer.is_correct)
    accuracy = (correct_answers / total_questions * 100) if total_questions > 0 else 0.0
    return SessionCompletionStats(
        score=normalize_session_score(raw_score=raw_score, total_questions=total_questions),
        accuracy_percentage=accuracy,
        time_taken_seconds=sum(answer.time_taken_seconds for answer in answers),
        correct_answers=correct_answers,
        total_questions=total_questions,
    )


def build_answer_review(
    questions: Sequence[Question],
    answers: Sequence[AnswerRecord],
) -> list[AnswerReview]:
    answers_by_question = {answer.question_id: answer for answer in answers}
    return [
        AnswerReview(question=question, answer=answers_by_question.get(question.question_id))
        for question in questions
    ]
