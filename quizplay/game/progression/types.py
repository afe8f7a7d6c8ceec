from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(slots=True)
class PlayerProgress:
    player_id: UUID
    experience_points: int
    level: int
    monthly_score: int
    monthly_games_played: int
    last_reset_month: str | None
    top_10_count: int = 0


@dataclass(frozen=True, slots=True)
class RankedPlayer:
    player_id: UUID
    monthly_score: int


@dataclass(frozen=True, slots=True)
class MonthlyRankingEntry:
    player_id: UUID
    month_token: str
    final_rank: int
    final_score: int
    newly_recorded: bool


@dataclass(frozen=True, slots=True)
class ProgressionUpdate:
    progress: PlayerProgress
    earned_xp: int
    leveled_up: bool
    rollover_from_month: str | None


@dataclass(frozen=True, slots=True)
class ProgressionResult:
    eligible: bool
    earned_xp: int
    level: int | None
    leveled_up: bool
    month_token: str | None
    rolled_over: bool
    ranking_snapshot: tuple[MonthlyRankingEntry, ...] = ()
