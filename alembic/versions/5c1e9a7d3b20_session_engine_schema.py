"""session_engine_schema

Revision ID: 5c1e9a7d3b20
Revises:
Create Date: 2026-10-19 09:30:00.000000
"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "5c1e9a7d3b20"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "profiles",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("pseudo", sa.Text(), nullable=False),
        sa.Column("level", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("experience_points", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("monthly_score", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("monthly_games_played", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("last_reset_month", sa.String(7), nullable=True),
        sa.Column("top_10_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("level >= 1", name="ck_profiles_level_positive"),
        sa.CheckConstraint("experience_points >= 0", name="ck_profiles_xp_non_negative"),
        sa.CheckConstraint("monthly_score >= 0", name="ck_profiles_monthly_score_non_negative"),
        sa.CheckConstraint("monthly_games_played >= 0", name="ck_profiles_monthly_games_non_negative"),
        sa.CheckConstraint("top_10_count >= 0", name="ck_profiles_top_10_count_non_negative"),
    )
    op.create_index("idx_profiles_monthly_ranking", "profiles", ["last_reset_month", "monthly_score"])
    op.create_index("idx_profiles_pseudo", "profiles", ["pseudo"])

    op.create_table(
        "quizzes",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("creator_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("is_global", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("time_limit_seconds", sa.Integer(), nullable=True),
        sa.Column("randomize_questions", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("randomize_answers", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("total_plays", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("average_score", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("total_plays >= 0", name="ck_quizzes_total_plays_non_negative"),
        sa.CheckConstraint(
            "time_limit_seconds IS NULL OR time_limit_seconds > 0",
            name="ck_quizzes_time_limit_positive",
        ),
        sa.ForeignKeyConstraint(["creator_id"], ["profiles.id"]),
    )
    op.create_index("idx_quizzes_creator", "quizzes", ["creator_id"])
    op.create_index("idx_quizzes_visibility_plays", "quizzes", ["is_public", "is_global", "total_plays"])

    op.create_table(
        "questions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("quiz_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("question_text", sa.Text(), nullable=False),
        sa.Column("question_type", sa.String(16), nullable=False),
        sa.Column("correct_answer", sa.Text(), nullable=False),
        sa.Column("correct_answers", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("options", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("option_images", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("complement_if_wrong", sa.Text(), nullable=True),
        sa.Column("points", sa.Integer(), nullable=False, server_default=sa.text("100")),
        sa.Column("order_index", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint(
            "question_type IN ('mcq','single_answer','text_free','map_click','true_false')",
            name="ck_questions_question_type",
        ),
        sa.CheckConstraint("points >= 0", name="ck_questions_points_non_negative"),
        sa.ForeignKeyConstraint(["quiz_id"], ["quizzes.id"], ondelete="CASCADE"),
    )
    op.create_index("idx_questions_quiz_order", "questions", ["quiz_id", "order_index"])

    op.create_table(
        "game_sessions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("quiz_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("player_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("mode", sa.String(8), nullable=False),
        sa.Column("score", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("accuracy_percentage", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("time_taken_seconds", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("correct_answers", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("total_questions", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("mode IN ('solo','duel')", name="ck_game_sessions_mode"),
        sa.CheckConstraint("score >= 0 AND score <= 100", name="ck_game_sessions_score_range"),
        sa.CheckConstraint(
            "accuracy_percentage >= 0 AND accuracy_percentage <= 100",
            name="ck_game_sessions_accuracy_range",
        ),
        sa.CheckConstraint("time_taken_seconds >= 0", name="ck_game_sessions_time_non_negative"),
        sa.CheckConstraint(
            "(completed = false AND completed_at IS NULL) "
            "OR (completed = true AND completed_at IS NOT NULL)",
            name="ck_game_sessions_completion_consistency",
        ),
        sa.ForeignKeyConstraint(["quiz_id"], ["quizzes.id"]),
        sa.ForeignKeyConstraint(["player_id"], ["profiles.id"]),
    )
    op.create_index("idx_game_sessions_player_started", "game_sessions", ["player_id", "started_at"])
    op.create_index("idx_game_sessions_quiz", "game_sessions", ["quiz_id"])

    op.create_table(
        "game_answers",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("session_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("question_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_answer", sa.Text(), nullable=False),
        sa.Column("is_correct", sa.Boolean(), nullable=False),
        sa.Column("time_taken_seconds", sa.Integer(), nullable=False),
        sa.Column("points_earned", sa.Integer(), nullable=False),
        sa.Column("answered_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("time_taken_seconds >= 0", name="ck_game_answers_time_non_negative"),
        sa.CheckConstraint("points_earned >= 0", name="ck_game_answers_points_non_negative"),
        sa.ForeignKeyConstraint(["session_id"], ["game_sessions.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["question_id"], ["questions.id"]),
        sa.UniqueConstraint("session_id", "question_id", name="uq_game_answers_session_question"),
    )
    op.create_index("idx_game_answers_session", "game_answers", ["session_id"])

    op.create_table(
        "duels",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("quiz_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("player1_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("player2_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("player1_session_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("player2_session_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("winner_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "status IN ('pending','in_progress','completed','cancelled')",
            name="ck_duels_status",
        ),
        sa.CheckConstraint("player1_id != player2_id", name="ck_duels_distinct_players"),
        sa.CheckConstraint(
            "status != 'completed' "
            "OR (player1_session_id IS NOT NULL AND player2_session_id IS NOT NULL "
            "AND completed_at IS NOT NULL)",
            name="ck_duels_completed_has_both_sessions",
        ),
        sa.CheckConstraint(
            "winner_id IS NULL OR winner_id = player1_id OR winner_id = player2_id",
            name="ck_duels_winner_is_participant",
        ),
        sa.ForeignKeyConstraint(["quiz_id"], ["quizzes.id"]),
        sa.ForeignKeyConstraint(["player1_id"], ["profiles.id"]),
        sa.ForeignKeyConstraint(["player2_id"], ["profiles.id"]),
        sa.ForeignKeyConstraint(["player1_session_id"], ["game_sessions.id"]),
        sa.ForeignKeyConstraint(["player2_session_id"], ["game_sessions.id"]),
        sa.ForeignKeyConstraint(["winner_id"], ["profiles.id"]),
    )
    op.create_index("idx_duels_player1_status", "duels", ["player1_id", "status"])
    op.create_index("idx_duels_player2_status", "duels", ["player2_id", "status"])

    op.create_table(
        "duel_invitations",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("from_user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("to_user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("quiz_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("duel_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("responded_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "status IN ('pending','accepted','declined','expired')",
            name="ck_duel_invitations_status",
        ),
        sa.CheckConstraint("from_user_id != to_user_id", name="ck_duel_invitations_distinct_users"),
        sa.ForeignKeyConstraint(["from_user_id"], ["profiles.id"]),
        sa.ForeignKeyConstraint(["to_user_id"], ["profiles.id"]),
        sa.ForeignKeyConstraint(["quiz_id"], ["quizzes.id"]),
        sa.ForeignKeyConstraint(["duel_id"], ["duels.id"]),
    )
    op.create_index(
        "idx_duel_invitations_to_status",
        "duel_invitations",
        ["to_user_id", "status", "created_at"],
    )
    op.create_index(
        "idx_duel_invitations_from_status",
        "duel_invitations",
        ["from_user_id", "status", "created_at"],
    )

    op.create_table(
        "badges",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("icon", sa.Text(), nullable=True),
        sa.Column("requirement_type", sa.String(32), nullable=False),
        sa.Column("requirement_value", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("requirement_value >= 0", name="ck_badges_requirement_value_non_negative"),
    )
    op.create_index("idx_badges_requirement", "badges", ["requirement_type", "requirement_value"])

    op.create_table(
        "user_badges",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("badge_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("earned_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"]),
        sa.ForeignKeyConstraint(["badge_id"], ["badges.id"]),
        sa.UniqueConstraint("user_id", "badge_id", name="uq_user_badges_user_badge"),
    )

    op.create_table(
        "monthly_rankings_history",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("month", sa.String(7), nullable=False),
        sa.Column("final_rank", sa.Integer(), nullable=False),
        sa.Column("final_score", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("final_rank >= 1", name="ck_monthly_rankings_rank_positive"),
        sa.CheckConstraint("final_score >= 0", name="ck_monthly_rankings_score_non_negative"),
        sa.CheckConstraint("month ~ '^[0-9]{4}-[0-9]{2}$'", name="ck_monthly_rankings_month_token"),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"]),
        sa.UniqueConstraint("user_id", "month", name="uq_monthly_rankings_user_month"),
    )
    op.create_index(
        "idx_monthly_rankings_month_rank",
        "monthly_rankings_history",
        ["month", "final_rank"],
    )


def downgrade() -> None:
    op.drop_index("idx_monthly_rankings_month_rank", table_name="monthly_rankings_history")
    op.drop_table("monthly_rankings_history")
    op.drop_table("user_badges")
    op.drop_index("idx_badges_requirement", table_name="badges")
    op.drop_table("badges")
    op.drop_index("idx_duel_invitations_from_status", table_name="duel_invitations")
    op.drop_index("idx_duel_invitations_to_status", table_name="duel_invitations")
    op.drop_table("duel_invitations")
    op.drop_index("idx_duels_player2_status", table_name="duels")
    op.drop_index("idx_duels_player1_status", table_name="duels")
    op.drop_table("duels")
    op.drop_index("idx_game_answers_session", table_name="game_answers")
    op.drop_table("game_answers")
    op.drop_index("idx_game_sessions_quiz", table_name="game_sessions")
    op.drop_index("idx_game_sessions_player_started", table_name="game_sessions")
    op.drop_table("game_sessions")
    op.drop_index("idx_questions_quiz_order", table_name="questions")
    op.drop_table("questions")
    op.drop_index("idx_quizzes_visibility_plays", table_name="quizzes")
    op.drop_index("idx_quizzes_creator", table_name="quizzes")
    op.drop_table("quizzes")
    op.drop_index("idx_profiles_pseudo", table_name="profiles")
    op.drop_index("idx_profiles_monthly_ranking", table_name="profiles")
    op.drop_table("profiles")
