"""
Terminal play-through of one quiz against the configured database.
Run: python scripts/play_session.py --quiz-id <uuid> --player-id <uuid> [--training --questions 5]
"""

from __future__ import annotations

import argparse
import asyncio
from uuid import UUID

from quizplay.core.config import get_settings
from quizplay.core.logging import configure_logging
from quizplay.db.session import dispose_engine
from quizplay.db.store import SqlQuizStore
from quizplay.game.questions.types import Question
from quizplay.game.sessions.controller import QuizSessionController
from quizplay.game.sessions.errors import (
    EmptyAnswerError,
    GameSessionError,
    InvalidAnswerOptionError,
    SessionCompletionError,
)
from quizplay.game.sessions.types import AnswerOutcome, CompletionResult, SessionMode, SessionPhase


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Play a quiz session from the terminal.")
    parser.add_argument("--quiz-id", type=UUID, required=True)
    parser.add_argument("--player-id", type=UUID, required=True)
    parser.add_argument("--mode", choices=[mode.value for mode in SessionMode], default=SessionMode.SOLO.value)
    parser.add_argument("--duel-id", type=UUID)
    parser.add_argument("--training", action="store_true", help="untimed, nothing is saved")
    parser.add_argument("--questions", type=int, help="question count in training mode")
    args = parser.parse_args()
    if args.mode == SessionMode.DUEL.value and args.duel_id is None:
        parser.error("--duel-id is required with --mode duel")
    if args.questions is not None and not args.training:
        parser.error("--questions only applies with --training")
    return args


def _print_question(index: int, total: int, question: Question, time_left: int | None) -> None:
    timer = f" ({time_left}s)" if time_left is not None else ""
    print(f"\n[{index + 1}/{total}]{timer} {question.text}")  # noqa: T201
    for position, option in enumerate(question.options, start=1):
        print(f"  {position}. {option}")  # noqa: T201


def _resolve_answer(raw_answer: str, question: Question) -> str:
    stripped = raw_answer.strip()
    if question.options and stripped.isdigit():
        position = int(stripped)
        if 1 <= position <= len(question.options):
            return question.options[position - 1]
    return raw_answer


def _print_outcome(outcome: AnswerOutcome) -> None:
    record = outcome.record
    if record.is_correct:
        print(f"correct, +{record.points_earned} points in {record.time_taken_seconds}s")  # noqa: T201
        return
    print(f"wrong, the answer was: {outcome.correct_answer}")  # noqa: T201
    if outcome.complement_if_wrong:
        print(outcome.complement_if_wrong)  # noqa: T201


def _print_summary(controller: QuizSessionController, result: CompletionResult) -> None:
    stats = result.stats
    print(  # noqa: T201
        f"\nscore={stats.score} correct={stats.correct_answers}/{stats.total_questions} "
        f"accuracy={stats.accuracy_percentage:.0f}% time={stats.time_taken_seconds}s "
        f"xp=+{result.xp_gained}"
    )
    if result.progression is not None and result.progression.leveled_up:
        print(f"level up: {result.progression.level}")  # noqa: T201
    if result.duel is not None and result.duel.finalized_now:
        winner_id = result.duel.duel.winner_id
        print("duel finished: draw" if winner_id is None else f"duel finished: winner {winner_id}")  # noqa: T201
    if result.granted_badge_ids:
        print(f"new badges: {len(result.granted_badge_ids)}")  # noqa: T201
    for review in controller.review():
        mark = "+" if review.is_correct else "-"
        given = review.answer.user_answer if review.answer is not None else ""
        print(f" {mark} {review.question.text} -> {given or '(no answer)'}")  # noqa: T201


async def _play(controller: QuizSessionController) -> int:
    countdown = asyncio.create_task(controller.run_countdown())
    try:
        while controller.phase is not SessionPhase.COMPLETED:
            if controller.phase is SessionPhase.SCORED:
                await controller.advance()
                continue
            if controller.phase is not SessionPhase.AWAITING_ANSWER:
                await asyncio.sleep(0.1)
                continue

            index = controller.question_index
            question = controller.questions[index]
            _print_question(
                index,
                len(controller.questions),
                question,
                controller.time_left if controller.is_timed else None,
            )
            raw_answer = await asyncio.to_thread(input, "> ")
            if controller.phase is not SessionPhase.AWAITING_ANSWER or controller.question_index != index:
                print("time is up")  # noqa: T201
                continue
            try:
                outcome = await controller.submit_answer(
                    _resolve_answer(raw_answer, question),
                    question_index=index,
                )
            except (EmptyAnswerError, InvalidAnswerOptionError):
                print("please pick one of the options" if question.options else "please type an answer")  # noqa: T201
                continue
            if outcome is not None:
                _print_outcome(outcome)
    except SessionCompletionError:
        print("could not save the session result, try again later")  # noqa: T201
        return 1
    finally:
        countdown.cancel()

    if controller.completion is not None:
        _print_summary(controller, controller.completion)
    return 0


async def _run() -> int:
    args = _parse_args()
    configure_logging(get_settings().log_level, json_output=False)

    controller = QuizSessionController(
        SqlQuizStore(),
        quiz_id=args.quiz_id,
        player_id=args.player_id,
        mode=SessionMode(args.mode),
        duel_id=args.duel_id,
        training_mode=args.training,
        question_count=args.questions,
    )
    try:
        try:
            await controller.start()
        except GameSessionError as exc:
            print(f"play_session: cannot start ({type(exc).__name__})")  # noqa: T201
            return 1
        return await _play(controller)
    finally:
        await dispose_engine()


def main() -> int:
    return asyncio.run(_run())


if __name__ == "__main__":
    raise SystemExit(main())
