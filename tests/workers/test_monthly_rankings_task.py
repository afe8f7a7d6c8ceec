from datetime import datetime, timezone
from uuid import uuid4

import pytest

from quizplay.game.progression.types import MonthlyRankingEntry
from quizplay.workers.celery_app import RANKINGS_QUEUE, celery_app
from quizplay.workers.tasks import monthly_rankings


def test_run_monthly_ranking_sweep_task_wrapper(monkeypatch) -> None:
    async def fake_async() -> dict[str, object]:
        return {"month_token": "2024-05", "players_total": 10, "new_rows_total": 0}

    monkeypatch.setattr(monthly_rankings, "run_monthly_ranking_sweep_async", fake_async)

    result = monthly_rankings.run_monthly_ranking_sweep()
    assert result == {"month_token": "2024-05", "players_total": 10, "new_rows_total": 0}


@pytest.mark.asyncio
async def test_sweep_records_previous_month(monkeypatch) -> None:
    calls: list[dict[str, object]] = []
    store = object()

    async def fake_record(store_arg, *, month_token: str, now_utc: datetime):
        calls.append({"store": store_arg, "month_token": month_token, "now_utc": now_utc})
        return (
            MonthlyRankingEntry(
                player_id=uuid4(), month_token=month_token, final_rank=1, final_score=90, newly_recorded=True
            ),
            MonthlyRankingEntry(
                player_id=uuid4(), month_token=month_token, final_rank=2, final_score=80, newly_recorded=False
            ),
        )

    monkeypatch.setattr(monthly_rankings, "SqlQuizStore", lambda: store)
    monkeypatch.setattr(monthly_rankings, "record_monthly_ranking", fake_record)
    now_utc = datetime(2025, 1, 1, 0, 30, tzinfo=timezone.utc)

    result = await monthly_rankings.run_monthly_ranking_sweep_async(now_utc=now_utc)

    assert result == {"month_token": "2024-12", "players_total": 2, "new_rows_total": 1}
    assert calls == [{"store": store, "month_token": "2024-12", "now_utc": now_utc}]


def test_sweep_is_scheduled_on_beat() -> None:
    entry = celery_app.conf.beat_schedule["monthly-ranking-sweep-hourly"]

    assert entry["task"] == "quizplay.workers.tasks.monthly_rankings.run_monthly_ranking_sweep"
    assert entry["schedule"] >= 60.0
    assert entry["options"] == {"queue": RANKINGS_QUEUE}
