from __future__ import annotations

from datetime import datetime
from uuid import UUID

import structlog

from quizplay.game.progression.constants import MONTHLY_RANKING_SIZE
from quizplay.game.progression.rules import apply_session_result
from quizplay.game.progression.time import month_token
from quizplay.game.progression.types import MonthlyRankingEntry, ProgressionResult
from quizplay.game.questions.types import QuizConfig
from quizplay.game.sessions.errors import PlayerNotFoundError
from quizplay.game.sessions.store import QuizStore

logger = structlog.get_logger("quizplay.game.progression.service")


async def record_monthly_ranking(
    store: QuizStore,
    *,
    month_token: str,
    now_utc: datetime,
) -> tuple[MonthlyRankingEntry, ...]:
    """Writes the closing top-10 for ``month_token`` once.

    Reads the leaderboard before any caller writes new-month counters.
    """
    if await store.has_monthly_ranking_snapshot(month_token):
        logger.debug("monthly_ranking_already_recorded", month_token=month_token)
        return ()

    top_players = await store.read_top10_by_monthly_score(month_token=month_token)
    entries: list[MonthlyRankingEntry] = []
    for rank, player in enumerate(top_players[:MONTHLY_RANKING_SIZE], start=1):
        inserted = await store.write_monthly_ranking_snapshot(
            player_id=player.player_id,
            month_token=month_token,
            rank=rank,
            score=player.monthly_score,
            recorded_at=now_utc,
        )
        if inserted:
            await store.increment_top10_count(player.player_id)
        entries.append(
            MonthlyRankingEntry(
                player_id=player.player_id,
                month_token=month_token,
                final_rank=rank,
                final_score=player.monthly_score,
                newly_recorded=inserted,
            )
        )

    logger.info(
        "monthly_ranking_recorded",
        month_token=month_token,
        players_total=len(entries),
        new_rows_total=sum(1 for entry in entries if entry.newly_recorded),
    )
    return tuple(entries)


def _ineligible_result() -> ProgressionResult:
    return ProgressionResult(
        eligible=False,
        earned_xp=0,
        level=None,
        leveled_up=False,
        month_token=None,
        rolled_over=False,
    )


async def apply_session_progression(
    store: QuizStore,
    *,
    player_id: UUID,
    quiz: QuizConfig,
    normalized_score: int,
    training_mode: bool,
    now_utc: datetime,
) -> ProgressionResult:
    if training_mode or not quiz.grants_progression:
        return _ineligible_result()

    progress = await store.read_player_progress(player_id)
    if progress is None:
        raise PlayerNotFoundError

    current_month = month_token(now_utc)
    update = apply_session_result(
        progress,
        normalized_score=normalized_score,
        current_month=current_month,
    )

    ranking_snapshot: tuple[MonthlyRankingEntry, ...] = ()
    if update.rollover_from_month is not None:
        ranking_snapshot = await record_monthly_ranking(
            store,
            month_token=update.rollover_from_month,
            now_utc=now_utc,
        )

    await store.write_player_progress(update.progress, now_utc=now_utc)

    rolled_over = progress.last_reset_month != current_month
    logger.info(
        "player_progression_applied",
        player_id=str(player_id),
        quiz_id=str(quiz.quiz_id),
        earned_xp=update.earned_xp,
        level=update.progress.level,
        leveled_up=update.leveled_up,
        month_token=current_month,
        rolled_over=rolled_over,
    )
    return ProgressionResult(
        eligible=True,
        earned_xp=update.earned_xp,
        level=update.progress.level,
        leveled_up=update.leveled_up,
        month_token=current_month,
        rolled_over=rolled_over,
        ranking_snapshot=ranking_snapshot,
    )
