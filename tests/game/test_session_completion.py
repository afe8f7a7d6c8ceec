from __future__ import annotations

import asyncio
import random
from datetime import datetime, timezone

import pytest

from quizplay.game.duels.types import DuelStatus
from quizplay.game.sessions.controller import QuizSessionController
from quizplay.game.sessions.errors import DuelAccessError, SessionCompletionError
from quizplay.game.sessions.types import SessionMode, SessionPhase
from tests.game.store_fixtures import FakeClock, FakeNow, InMemoryQuizStore, no_sleep

UTC = timezone.utc
NOW_UTC = datetime(2024, 6, 15, 12, 0, tzinfo=UTC)


def _controller(store: InMemoryQuizStore, *, quiz_id, player_id, **kwargs) -> QuizSessionController:
    return QuizSessionController(
        store,
        quiz_id=quiz_id,
        player_id=player_id,
        rng=random.Random(0),
        clock=FakeClock(),
        now=FakeNow(NOW_UTC),
        sleep=no_sleep,
        **kwargs,
    )


async def _answer_all_but_last_advance(controller: QuizSessionController, answers: list[str]) -> None:
    for index, answer in enumerate(answers):
        await controller.submit_answer(answer)
        if index < len(answers) - 1:
            await controller.advance()


async def _play(controller: QuizSessionController, answers: list[str]) -> None:
    await controller.start()
    await _answer_all_but_last_advance(controller, answers)
    await controller.advance()


@pytest.mark.asyncio
async def test_completion_persists_stats_and_applies_every_effect_once() -> None:
    store = InMemoryQuizStore()
    quiz = store.add_quiz(question_total=3)
    player = store.add_player(experience_points=995, level=1, last_reset_month="2024-06")
    level_two = store.add_badge(requirement_value=2)
    store.add_badge(requirement_value=5)
    controller = _controller(store, quiz_id=quiz.quiz_id, player_id=player.player_id)

    await _play(controller, ["answer 0", "answer 1", "answer 2"])

    result = controller.completion
    assert controller.phase is SessionPhase.COMPLETED
    assert result is not None
    assert result.session_id == controller.session_id
    assert result.completed_at == NOW_UTC
    assert result.stats.score == 100
    assert result.stats.accuracy_percentage == 100.0
    assert result.stats.correct_answers == 3
    assert result.stats.total_questions == 3
    assert result.failed_effects == []

    game_session = store.sessions[controller.session_id]
    assert game_session.completed is True
    assert game_session.completed_at == NOW_UTC
    assert game_session.score == 100

    assert result.xp_gained == 10
    assert result.progression.level == 2
    assert result.progression.leveled_up is True
    assert store.players[player.player_id].experience_points == 1005
    assert store.players[player.player_id].monthly_score == 100
    assert result.granted_badge_ids == (level_two.badge_id,)
    assert set(store.user_badges) == {(player.player_id, level_two.badge_id)}

    stored_quiz = store.quizzes[quiz.quiz_id]
    assert stored_quiz.total_plays == 1
    assert stored_quiz.average_score == 100.0


@pytest.mark.asyncio
async def test_concurrent_completion_triggers_run_side_effects_once() -> None:
    store = InMemoryQuizStore()
    quiz = store.add_quiz(question_total=2)
    player = store.add_player(experience_points=990)
    store.add_badge(requirement_value=2)
    controller = _controller(store, quiz_id=quiz.quiz_id, player_id=player.player_id)
    await controller.start()
    await _answer_all_but_last_advance(controller, ["answer 0", "answer 1"])

    results = await asyncio.gather(
        controller.complete(),
        controller.complete(),
        controller.advance(),
    )

    assert results[0] is controller.completion
    assert results[1] is None
    assert results[2] is False
    assert store.calls["complete_session"] == 1
    assert store.calls["write_player_progress"] == 1
    assert store.calls["record_quiz_play"] == 1
    assert store.calls["grant_badge"] == 1
    assert len(store.user_badges) == 1
    assert store.players[player.player_id].monthly_games_played == 1


@pytest.mark.asyncio
async def test_completion_after_completed_returns_same_result_without_effects() -> None:
    store = InMemoryQuizStore()
    quiz = store.add_quiz(question_total=1)
    player = store.add_player()
    controller = _controller(store, quiz_id=quiz.quiz_id, player_id=player.player_id)
    await _play(controller, ["answer 0"])
    first = controller.completion

    again = await controller.complete()

    assert again is first
    assert await controller.advance() is False
    assert store.calls["complete_session"] == 1
    assert store.calls["write_player_progress"] == 1


@pytest.mark.asyncio
async def test_failed_completion_write_skips_effects_and_allows_retry() -> None:
    store = InMemoryQuizStore()
    quiz = store.add_quiz(question_total=2)
    player = store.add_player()
    controller = _controller(store, quiz_id=quiz.quiz_id, player_id=player.player_id)
    await controller.start()
    await _answer_all_but_last_advance(controller, ["answer 0", "answer 1"])
    store.fail_on("complete_session")

    with pytest.raises(SessionCompletionError):
        await controller.advance()

    assert controller.phase is SessionPhase.SCORED
    assert controller.completion is None
    assert store.calls["read_player_progress"] == 0
    assert store.calls["record_quiz_play"] == 0
    assert store.sessions[controller.session_id].completed is False

    store.failures.clear()
    result = await controller.complete()

    assert result is not None
    assert controller.phase is SessionPhase.COMPLETED
    assert store.calls["complete_session"] == 2
    assert store.calls["write_player_progress"] == 1
    assert store.sessions[controller.session_id].completed is True


@pytest.mark.parametrize(
    ("failure", "raised"),
    [
        (ConnectionRefusedError("connection refused"), SessionCompletionError),
        (RuntimeError("driver crashed"), RuntimeError),
    ],
)
@pytest.mark.asyncio
async def test_unexpected_completion_write_failure_leaves_session_retryable(
    failure: Exception, raised: type[Exception]
) -> None:
    store = InMemoryQuizStore()
    quiz = store.add_quiz(question_total=2)
    player = store.add_player()
    controller = _controller(store, quiz_id=quiz.quiz_id, player_id=player.player_id)
    await controller.start()
    await _answer_all_but_last_advance(controller, ["answer 0", "answer 1"])
    store.fail_on("complete_session", failure)

    with pytest.raises(raised):
        await controller.advance()

    assert controller.phase is SessionPhase.SCORED
    assert controller.completion is None

    store.failures.clear()
    result = await controller.complete()

    assert result is not None
    assert controller.phase is SessionPhase.COMPLETED
    assert store.calls["complete_session"] == 2
    assert store.sessions[controller.session_id].completed is True



@pytest.mark.asyncio
async def test_progression_failure_is_reported_but_other_effects_still_run() -> None:
    store = InMemoryQuizStore()
    quiz = store.add_quiz(question_total=1)
    player = store.add_player(experience_points=995)
    store.add_badge(requirement_value=2)
    controller = _controller(store, quiz_id=quiz.quiz_id, player_id=player.player_id)
    store.fail_on("write_player_progress")

    await _play(controller, ["answer 0"])

    result = controller.completion
    assert controller.phase is SessionPhase.COMPLETED
    assert result.failed_effects == ["progression"]
    assert result.progression is None
    assert result.xp_gained == 0
    assert result.granted_badge_ids == ()
    assert store.quizzes[quiz.quiz_id].total_plays == 1
    assert store.players[player.player_id].experience_points == 995


@pytest.mark.asyncio
async def test_private_quiz_updates_play_stats_without_progression() -> None:
    store = InMemoryQuizStore()
    quiz = store.add_quiz(question_total=2, is_public=False, is_global=False)
    player = store.add_player(experience_points=995, last_reset_month="2024-05")
    store.add_badge(requirement_value=1)
    controller = _controller(store, quiz_id=quiz.quiz_id, player_id=player.player_id)

    await _play(controller, ["answer 0", "wrong"])

    result = controller.completion
    assert result.progression.eligible is False
    assert result.xp_gained == 0
    assert result.granted_badge_ids == ()
    assert store.calls["write_player_progress"] == 0
    assert store.calls["find_badges_by_level_threshold"] == 0
    assert store.players[player.player_id].last_reset_month == "2024-05"
    assert store.quizzes[quiz.quiz_id].total_plays == 1
    assert store.quizzes[quiz.quiz_id].average_score == result.stats.score


@pytest.mark.asyncio
async def test_monthly_rollover_through_session_completion() -> None:
    store = InMemoryQuizStore()
    quiz = store.add_quiz(question_total=1)
    rival = store.add_player(monthly_score=900, monthly_games_played=9, last_reset_month="2024-05")
    player = store.add_player(monthly_score=400, monthly_games_played=4, last_reset_month="2024-05")
    controller = _controller(store, quiz_id=quiz.quiz_id, player_id=player.player_id)

    await _play(controller, ["answer 0"])

    result = controller.completion
    assert result.progression.rolled_over is True
    assert result.progression.month_token == "2024-06"
    assert [(entry.player_id, entry.final_rank, entry.final_score) for entry in result.progression.ranking_snapshot] == [
        (rival.player_id, 1, 900),
        (player.player_id, 2, 400),
    ]
    stored = store.players[player.player_id]
    assert stored.monthly_score == result.stats.score
    assert stored.monthly_games_played == 1
    assert stored.last_reset_month == "2024-06"
    assert stored.top_10_count == 1
    assert store.players[rival.player_id].monthly_score == 900


@pytest.mark.asyncio
async def test_duel_sessions_reconcile_into_winner_regardless_of_finish_order() -> None:
    store = InMemoryQuizStore()
    quiz = store.add_quiz(question_total=3)
    inviter = store.add_player()
    invitee = store.add_player()
    duel = store.add_duel(quiz_id=quiz.quiz_id, player1_id=inviter.player_id, player2_id=invitee.player_id)
    inviter_controller = _controller(
        store,
        quiz_id=quiz.quiz_id,
        player_id=inviter.player_id,
        mode=SessionMode.DUEL,
        duel_id=duel.duel_id,
    )
    invitee_controller = _controller(
        store,
        quiz_id=quiz.quiz_id,
        player_id=invitee.player_id,
        mode=SessionMode.DUEL,
        duel_id=duel.duel_id,
    )

    await invitee_controller.start()
    assert store.duels[duel.duel_id].status is DuelStatus.IN_PROGRESS
    await _answer_all_but_last_advance(invitee_controller, ["answer 0", "answer 1", "answer 2"])
    await invitee_controller.advance()

    first = invitee_controller.completion.duel
    assert first.attached is True
    assert first.finalized_now is False
    assert store.duels[duel.duel_id].player2_session_id == invitee_controller.session_id

    await _play(inviter_controller, ["answer 0", "wrong", "wrong"])

    second = inviter_controller.completion.duel
    assert second.finalized_now is True
    final = store.duels[duel.duel_id]
    assert final.status is DuelStatus.COMPLETED
    assert final.winner_id == invitee.player_id
    assert final.completed_at == NOW_UTC
    assert final.player1_session_id == inviter_controller.session_id
    assert store.sessions[inviter_controller.session_id].mode is SessionMode.DUEL


@pytest.mark.asyncio
async def test_simultaneous_duel_finishes_finalize_exactly_once() -> None:
    store = InMemoryQuizStore()
    quiz = store.add_quiz(question_total=2)
    first_player = store.add_player()
    second_player = store.add_player()
    duel = store.add_duel(
        quiz_id=quiz.quiz_id,
        player1_id=first_player.player_id,
        player2_id=second_player.player_id,
    )
    controllers = [
        _controller(
            store,
            quiz_id=quiz.quiz_id,
            player_id=player.player_id,
            mode=SessionMode.DUEL,
            duel_id=duel.duel_id,
        )
        for player in (first_player, second_player)
    ]
    for controller in controllers:
        await controller.start()
        await _answer_all_but_last_advance(controller, ["answer 0", "answer 1"])

    await asyncio.gather(*(controller.advance() for controller in controllers))

    outcomes = [controller.completion.duel for controller in controllers]
    assert sorted(outcome.finalized_now for outcome in outcomes) == [False, True]
    final = store.duels[duel.duel_id]
    assert final.status is DuelStatus.COMPLETED
    assert final.winner_id is None
    assert {final.player1_session_id, final.player2_session_id} == {
        controller.session_id for controller in controllers
    }


@pytest.mark.asyncio
async def test_duel_start_rejects_non_participant() -> None:
    store = InMemoryQuizStore()
    quiz = store.add_quiz()
    player1 = store.add_player()
    player2 = store.add_player()
    outsider = store.add_player()
    duel = store.add_duel(quiz_id=quiz.quiz_id, player1_id=player1.player_id, player2_id=player2.player_id)
    controller = _controller(
        store,
        quiz_id=quiz.quiz_id,
        player_id=outsider.player_id,
        mode=SessionMode.DUEL,
        duel_id=duel.duel_id,
    )

    with pytest.raises(DuelAccessError):
        await controller.start()

    assert controller.phase is SessionPhase.IDLE
    assert store.sessions == {}


@pytest.mark.asyncio
async def test_duel_reconciliation_failure_is_tolerated_after_completion() -> None:
    store = InMemoryQuizStore()
    quiz = store.add_quiz(question_total=1)
    player1 = store.add_player()
    player2 = store.add_player()
    duel = store.add_duel(quiz_id=quiz.quiz_id, player1_id=player1.player_id, player2_id=player2.player_id)
    controller = _controller(
        store,
        quiz_id=quiz.quiz_id,
        player_id=player1.player_id,
        mode=SessionMode.DUEL,
        duel_id=duel.duel_id,
    )
    store.fail_on("attach_session_to_duel")

    await _play(controller, ["answer 0"])

    result = controller.completion
    assert controller.phase is SessionPhase.COMPLETED
    assert result.duel is None
    assert result.failed_effects == ["duel"]
    assert result.progression.eligible is True
    assert store.sessions[controller.session_id].completed is True
