from __future__ import annotations

from datetime import datetime, timezone

import pytest

from quizplay.game.badges.service import grant_level_badges
from tests.game.store_fixtures import InMemoryQuizStore

NOW_UTC = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_grants_every_reached_level_badge_once() -> None:
    store = InMemoryQuizStore()
    player = store.add_player(level=3)
    level_one = store.add_badge(requirement_value=1)
    level_three = store.add_badge(requirement_value=3)
    store.add_badge(requirement_value=4)
    store.add_badge(requirement_value=1, requirement_type="streak")

    granted = await grant_level_badges(store, player_id=player.player_id, level=3, now_utc=NOW_UTC)

    assert granted == (level_one.badge_id, level_three.badge_id)
    assert store.user_badges == {
        (player.player_id, level_one.badge_id): NOW_UTC,
        (player.player_id, level_three.badge_id): NOW_UTC,
    }


@pytest.mark.asyncio
async def test_already_held_badges_are_skipped() -> None:
    store = InMemoryQuizStore()
    player = store.add_player(level=2)
    held = store.add_badge(requirement_value=1)
    new = store.add_badge(requirement_value=2)
    store.user_badges[(player.player_id, held.badge_id)] = datetime(2024, 1, 1, tzinfo=timezone.utc)

    granted = await grant_level_badges(store, player_id=player.player_id, level=2, now_utc=NOW_UTC)
    repeat = await grant_level_badges(store, player_id=player.player_id, level=2, now_utc=NOW_UTC)

    assert granted == (new.badge_id,)
    assert repeat == ()
    assert store.calls["grant_badge"] == 1
    assert store.user_badges[(player.player_id, held.badge_id)] == datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_no_matching_badges_grants_nothing() -> None:
    store = InMemoryQuizStore()
    player = store.add_player()
    store.add_badge(requirement_value=5)

    assert await grant_level_badges(store, player_id=player.player_id, level=1, now_utc=NOW_UTC) == ()
    assert store.user_badges == {}
