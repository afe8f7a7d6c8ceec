from __future__ import annotations

from sqlalchemy import CheckConstraint, UniqueConstraint

from quizplay.db.models import (  # noqa: F401
    Badge,
    Duel,
    DuelInvitation,
    GameAnswer,
    GameSession,
    MonthlyRanking,
    Profile,
    Quiz,
    QuizQuestion,
    UserBadge,
)
from quizplay.db.models.base import Base


def _names(table_name: str, kind: type) -> set[str]:
    table = Base.metadata.tables[table_name]
    return {constraint.name for constraint in table.constraints if isinstance(constraint, kind)}


def test_all_engine_tables_registered() -> None:
    assert set(Base.metadata.tables) == {
        "profiles",
        "quizzes",
        "questions",
        "game_sessions",
        "game_answers",
        "duels",
        "duel_invitations",
        "badges",
        "user_badges",
        "monthly_rankings_history",
    }


def test_write_once_unique_constraints_present() -> None:
    assert "uq_game_answers_session_question" in _names("game_answers", UniqueConstraint)
    assert "uq_monthly_rankings_user_month" in _names("monthly_rankings_history", UniqueConstraint)
    assert "uq_user_badges_user_badge" in _names("user_badges", UniqueConstraint)


def test_critical_check_constraints_present() -> None:
    duel_checks = _names("duels", CheckConstraint)
    assert "ck_duels_status" in duel_checks
    assert "ck_duels_completed_has_both_sessions" in duel_checks
    assert "ck_duels_winner_is_participant" in duel_checks

    session_checks = _names("game_sessions", CheckConstraint)
    assert "ck_game_sessions_score_range" in session_checks
    assert "ck_game_sessions_completion_consistency" in session_checks

    assert "ck_duel_invitations_distinct_users" in _names("duel_invitations", CheckConstraint)
    assert "ck_monthly_rankings_month_token" in _names("monthly_rankings_history", CheckConstraint)


def test_ranking_lookup_indexes_present() -> None:
    profile_indexes = {index.name for index in Base.metadata.tables["profiles"].indexes}
    assert "idx_profiles_monthly_ranking" in profile_indexes

    ranking_indexes = {index.name for index in Base.metadata.tables["monthly_rankings_history"].indexes}
    assert "idx_monthly_rankings_month_rank" in ranking_indexes
