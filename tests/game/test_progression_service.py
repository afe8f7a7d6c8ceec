from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

import pytest

from quizplay.game.progression.service import apply_session_progression, record_monthly_ranking
from quizplay.game.sessions.errors import PlayerNotFoundError
from tests.game.store_fixtures import InMemoryQuizStore

UTC = timezone.utc
JUNE_UTC = datetime(2024, 6, 2, 9, 0, tzinfo=UTC)


@pytest.mark.asyncio
async def test_rollover_snapshots_closing_month_before_reset() -> None:
    store = InMemoryQuizStore()
    quiz = store.add_quiz()
    player = store.add_player(monthly_score=320, monthly_games_played=5, last_reset_month="2024-05")
    others = [
        store.add_player(monthly_score=score, last_reset_month="2024-05")
        for score in (900, 800, 100)
    ]
    stale = store.add_player(monthly_score=5000, last_reset_month="2024-04")

    result = await apply_session_progression(
        store,
        player_id=player.player_id,
        quiz=quiz,
        normalized_score=70,
        training_mode=False,
        now_utc=JUNE_UTC,
    )

    assert result.eligible is True
    assert result.rolled_over is True
    assert result.month_token == "2024-06"
    assert result.earned_xp == 7
    assert [(entry.final_rank, entry.final_score) for entry in result.ranking_snapshot] == [
        (1, 900),
        (2, 800),
        (3, 320),
        (4, 100),
    ]
    assert result.ranking_snapshot[2].player_id == player.player_id
    assert all(entry.month_token == "2024-05" for entry in result.ranking_snapshot)
    assert (stale.player_id, "2024-05") not in store.rankings

    stored = store.players[player.player_id]
    assert stored.monthly_score == 70
    assert stored.monthly_games_played == 1
    assert stored.last_reset_month == "2024-06"
    assert stored.top_10_count == 1
    assert all(store.players[other.player_id].top_10_count == 1 for other in others)
    assert store.players[stale.player_id].top_10_count == 0


@pytest.mark.asyncio
async def test_second_rollover_for_same_month_skips_snapshot() -> None:
    store = InMemoryQuizStore()
    quiz = store.add_quiz()
    first = store.add_player(monthly_score=400, last_reset_month="2024-05")
    second = store.add_player(monthly_score=600, last_reset_month="2024-05")

    for player in (first, second):
        await apply_session_progression(
            store,
            player_id=player.player_id,
            quiz=quiz,
            normalized_score=50,
            training_mode=False,
            now_utc=JUNE_UTC,
        )

    assert store.calls["write_monthly_ranking_snapshot"] == 2
    assert store.rankings[(second.player_id, "2024-05")].rank == 1
    assert store.rankings[(first.player_id, "2024-05")].rank == 2
    assert store.players[second.player_id].top_10_count == 1
    assert store.players[second.player_id].last_reset_month == "2024-06"


@pytest.mark.asyncio
async def test_snapshot_keeps_only_top_ten() -> None:
    store = InMemoryQuizStore()
    players = [store.add_player(monthly_score=100 + index, last_reset_month="2024-05") for index in range(12)]

    entries = await record_monthly_ranking(store, month_token="2024-05", now_utc=JUNE_UTC)

    assert len(entries) == 10
    assert [entry.final_rank for entry in entries] == list(range(1, 11))
    assert entries[0].player_id == players[-1].player_id
    assert {players[0].player_id, players[1].player_id}.isdisjoint(entry.player_id for entry in entries)
    assert all(entry.newly_recorded for entry in entries)
    assert all(row.recorded_at == JUNE_UTC for row in store.rankings.values())

    again = await record_monthly_ranking(store, month_token="2024-05", now_utc=JUNE_UTC)
    assert again == ()
    assert len(store.rankings) == 10


@pytest.mark.asyncio
async def test_ineligible_sessions_leave_progress_untouched() -> None:
    store = InMemoryQuizStore()
    public_quiz = store.add_quiz()
    private_quiz = store.add_quiz(is_public=False)
    player = store.add_player(experience_points=10, last_reset_month="2024-05")

    training = await apply_session_progression(
        store,
        player_id=player.player_id,
        quiz=public_quiz,
        normalized_score=90,
        training_mode=True,
        now_utc=JUNE_UTC,
    )
    private = await apply_session_progression(
        store,
        player_id=player.player_id,
        quiz=private_quiz,
        normalized_score=90,
        training_mode=False,
        now_utc=JUNE_UTC,
    )

    for result in (training, private):
        assert result.eligible is False
        assert result.earned_xp == 0
        assert result.level is None
    assert store.calls["read_player_progress"] == 0
    assert store.players[player.player_id].experience_points == 10


@pytest.mark.asyncio
async def test_global_quiz_grants_progression_even_when_not_public() -> None:
    store = InMemoryQuizStore()
    quiz = store.add_quiz(is_public=False, is_global=True)
    player = store.add_player(last_reset_month="2024-06")

    result = await apply_session_progression(
        store,
        player_id=player.player_id,
        quiz=quiz,
        normalized_score=40,
        training_mode=False,
        now_utc=JUNE_UTC,
    )

    assert result.eligible is True
    assert result.rolled_over is False
    assert store.players[player.player_id].monthly_score == 40


@pytest.mark.asyncio
async def test_missing_player_raises() -> None:
    store = InMemoryQuizStore()
    quiz = store.add_quiz()

    with pytest.raises(PlayerNotFoundError):
        await apply_session_progression(
            store,
            player_id=uuid4(),
            quiz=quiz,
            normalized_score=40,
            training_mode=False,
            now_utc=JUNE_UTC,
        )
