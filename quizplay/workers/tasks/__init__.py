from quizplay.workers.tasks.monthly_rankings import run_monthly_ranking_sweep

__all__ = [
    "run_monthly_ranking_sweep",
]
