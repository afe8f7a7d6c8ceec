from __future__ import annotations

from datetime import datetime, timezone

import structlog

from quizplay.core.config import get_settings
from quizplay.db.store import SqlQuizStore
from quizplay.game.progression.service import record_monthly_ranking
from quizplay.game.progression.time import month_token, previous_month_token
from quizplay.workers.asyncio_runner import run_async_job
from quizplay.workers.celery_app import RANKINGS_QUEUE, celery_app

logger = structlog.get_logger("quizplay.workers.tasks.monthly_rankings")
settings = get_settings()

SWEEP_INTERVAL_SECONDS = max(60, int(settings.monthly_ranking_sweep_interval_seconds))


async def run_monthly_ranking_sweep_async(*, now_utc: datetime | None = None) -> dict[str, object]:
    """Snapshots last month's top 10 when no rollover has done it yet.

    Player counters are left alone; each player still resets on their own next play.
    """
    resolved_now = now_utc or datetime.now(timezone.utc)
    closed_month = previous_month_token(month_token(resolved_now))

    entries = await record_monthly_ranking(
        SqlQuizStore(),
        month_token=closed_month,
        now_utc=resolved_now,
    )
    result: dict[str, object] = {
        "month_token": closed_month,
        "players_total": len(entries),
        "new_rows_total": sum(1 for entry in entries if entry.newly_recorded),
    }
    logger.info("monthly_ranking_sweep_processed", **result)
    return result


@celery_app.task(name="quizplay.workers.tasks.monthly_rankings.run_monthly_ranking_sweep")
def run_monthly_ranking_sweep() -> dict[str, object]:
    return run_async_job(run_monthly_ranking_sweep_async())


celery_app.conf.beat_schedule = celery_app.conf.beat_schedule or {}
celery_app.conf.beat_schedule.update(
    {
        "monthly-ranking-sweep-hourly": {
            "task": "quizplay.workers.tasks.monthly_rankings.run_monthly_ranking_sweep",
            "schedule": float(SWEEP_INTERVAL_SECONDS),
            "options": {"queue": RANKINGS_QUEUE},
        },
    }
)
