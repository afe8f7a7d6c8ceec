from __future__ import annotations

from datetime import datetime
from uuid import UUID

import structlog

from quizplay.game.badges.types import BADGE_REQUIREMENT_LEVEL
from quizplay.game.sessions.store import QuizStore

logger = structlog.get_logger("quizplay.game.badges.service")


async def grant_level_badges(
    store: QuizStore,
    *,
    player_id: UUID,
    level: int,
    now_utc: datetime,
) -> tuple[UUID, ...]:
    badges = await store.find_badges_by_level_threshold(level)
    granted: list[UUID] = []
    for badge in badges:
        if badge.requirement_type != BADGE_REQUIREMENT_LEVEL or badge.requirement_value > level:
            continue
        if await store.has_badge(player_id, badge.badge_id):
            continue
        if await store.grant_badge(player_id, badge.badge_id, earned_at=now_utc):
            granted.append(badge.badge_id)

    if granted:
        logger.info(
            "level_badges_granted",
            player_id=str(player_id),
            level=level,
            badge_ids=[str(badge_id) for badge_id in granted],
        )
    return tuple(granted)
