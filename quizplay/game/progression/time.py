from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

from quizplay.game.progression.constants import LEADERBOARD_TIMEZONE, MONTH_TOKEN_FORMAT


def month_token(now_utc: datetime) -> str:
    """Returns the leaderboard month (``YYYY-MM``) that ``now_utc`` falls in."""
    return now_utc.astimezone(ZoneInfo(LEADERBOARD_TIMEZONE)).strftime(MONTH_TOKEN_FORMAT)


def previous_month_token(token: str) -> str:
    year, month = (int(part) for part in token.split("-"))
    if month == 1:
        return f"{year - 1:04d}-12"
    return f"{year:04d}-{month - 1:02d}"
