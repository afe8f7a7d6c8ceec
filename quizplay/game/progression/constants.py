from __future__ import annotations

XP_PER_LEVEL = 1000
XP_SCORE_DIVISOR = 10
MONTHLY_RANKING_SIZE = 10
LEADERBOARD_TIMEZONE = "UTC"
MONTH_TOKEN_FORMAT = "%Y-%m"
