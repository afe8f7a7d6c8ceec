from __future__ import annotations

from dataclasses import replace

from quizplay.game.progression.constants import XP_PER_LEVEL, XP_SCORE_DIVISOR
from quizplay.game.progression.types import PlayerProgress, ProgressionUpdate
from quizplay.game.sessions.evaluator import round_half_up


def earned_experience(normalized_score: int) -> int:
    return round_half_up(normalized_score / XP_SCORE_DIVISOR)


def level_for_experience(experience_points: int) -> int:
    return experience_points // XP_PER_LEVEL + 1


def apply_session_result(
    progress: PlayerProgress,
    *,
    normalized_score: int,
    current_month: str,
) -> ProgressionUpdate:
    earned_xp = earned_experience(normalized_score)
    new_xp = progress.experience_points + earned_xp
    new_level = level_for_experience(new_xp)

    rollover_from_month = None
    if progress.last_reset_month == current_month:
        monthly_score = progress.monthly_score + normalized_score
        monthly_games_played = progress.monthly_games_played + 1
    else:
        monthly_score = normalized_score
        monthly_games_played = 1
        rollover_from_month = progress.last_reset_month

    updated = replace(
        progress,
        experience_points=new_xp,
        level=new_level,
        monthly_score=monthly_score,
        monthly_games_played=monthly_games_played,
        last_reset_month=current_month,
    )
    return ProgressionUpdate(
        progress=updated,
        earned_xp=earned_xp,
        leveled_up=new_level > progress.level,
        rollover_from_month=rollover_from_month,
    )


def next_quiz_play_stats(*, total_plays: int, average_score: float, score: int) -> tuple[int, float]:
    new_total_plays = total_plays + 1
    return new_total_plays, (average_score * total_plays + score) / new_total_plays
