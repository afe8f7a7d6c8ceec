from __future__ import annotations

import random
from dataclasses import replace
from uuid import UUID

import structlog

from quizplay.game.questions.types import Question, QuestionSet
from quizplay.game.sessions.errors import EmptyQuizError, QuizNotFoundError
from quizplay.game.sessions.store import QuizStore

logger = structlog.get_logger("quizplay.game.questions.loader")


def shuffle_options(question: Question, rng: random.Random) -> Question:
    if not question.is_choice or len(question.options) < 2:
        return question

    # Images travel with their option; correctness is matched by value later.
    images = question.option_images
    if len(images) != len(question.options):
        images = (None,) * len(question.options)
    paired = list(zip(question.options, images))
    rng.shuffle(paired)
    return replace(
        question,
        options=tuple(option for option, _ in paired),
        option_images=(
            tuple(image for _, image in paired) if question.option_images else question.option_images
        ),
    )


def prepare_questions(
    questions: list[Question],
    *,
    randomize_questions: bool,
    randomize_answers: bool,
    training_mode: bool,
    question_count: int | None,
    rng: random.Random,
) -> tuple[Question, ...]:
    ordered = sorted(questions, key=lambda question: question.order_index)
    if randomize_questions or training_mode:
        rng.shuffle(ordered)
    if question_count is not None and question_count > 0:
        ordered = ordered[:question_count]
    if randomize_answers:
        ordered = [shuffle_options(question, rng) for question in ordered]
    return tuple(ordered)


async def load_question_set(
    store: QuizStore,
    *,
    quiz_id: UUID,
    training_mode: bool = False,
    question_count: int | None = None,
    rng: random.Random | None = None,
) -> QuestionSet:
    quiz = await store.load_quiz(quiz_id)
    if quiz is None:
        raise QuizNotFoundError

    questions = await store.load_questions(quiz_id)
    if not questions:
        logger.warning("quiz_has_no_questions", quiz_id=str(quiz_id))
        raise EmptyQuizError

    prepared = prepare_questions(
        questions,
        randomize_questions=quiz.randomize_questions,
        randomize_answers=quiz.randomize_answers,
        training_mode=training_mode,
        question_count=question_count,
        rng=rng or random.Random(),
    )
    return QuestionSet(quiz=quiz, questions=prepared)
