"""Initial schema: users, stats, progress logs, strategies, badges.

Revision ID: 001_initial_schema
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

from alembic import op

revision: str = "001_initial_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- Users ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id VARCHAR(36) PRIMARY KEY,
            email VARCHAR(320) UNIQUE NOT NULL,
            password VARCHAR(256) NOT NULL,
            first_name VARCHAR(50),
            last_name VARCHAR(50),
            role VARCHAR(16) NOT NULL DEFAULT 'patient',
            is_active BOOLEAN NOT NULL DEFAULT true,
            points INTEGER NOT NULL DEFAULT 0,
            level INTEGER NOT NULL DEFAULT 1,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            last_login_at TIMESTAMPTZ
        )
    """)

    # --- User Stats (one row per user) ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_stats (
            id VARCHAR(36) PRIMARY KEY,
            user_id VARCHAR(36) UNIQUE NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            exercises_completed INTEGER NOT NULL DEFAULT 0,
            total_duration INTEGER NOT NULL DEFAULT 0,
            current_streak INTEGER NOT NULL DEFAULT 0,
            longest_streak INTEGER NOT NULL DEFAULT 0,
            average_craving INTEGER NOT NULL DEFAULT 0,
            last_activity_date DATE,
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CHECK (longest_streak >= current_streak)
        )
    """)

    # --- Craving Entries ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS craving_entries (
            id VARCHAR(36) PRIMARY KEY,
            user_id VARCHAR(36) NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            intensity INTEGER NOT NULL CHECK (intensity BETWEEN 0 AND 10),
            triggers JSON NOT NULL DEFAULT '[]',
            emotions JSON NOT NULL DEFAULT '[]',
            notes TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_craving_entries_user_time
        ON craving_entries(user_id, created_at DESC)
    """)

    # --- Exercise Sessions ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS exercise_sessions (
            id VARCHAR(36) PRIMARY KEY,
            user_id VARCHAR(36) NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            exercise_id VARCHAR(64) NOT NULL,
            duration INTEGER NOT NULL DEFAULT 0,
            completed BOOLEAN NOT NULL DEFAULT false,
            craving_before INTEGER,
            craving_after INTEGER,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_exercise_sessions_user_time
        ON exercise_sessions(user_id, created_at DESC)
    """)

    # --- Beck Analyses ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS beck_analyses (
            id VARCHAR(36) PRIMARY KEY,
            user_id VARCHAR(36) NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            situation TEXT,
            automatic_thoughts TEXT,
            emotions TEXT,
            emotion_intensity INTEGER,
            rational_response TEXT,
            new_feeling TEXT,
            new_intensity INTEGER,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # --- Anti-Craving Strategies ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS anti_craving_strategies (
            id VARCHAR(36) PRIMARY KEY,
            user_id VARCHAR(36) NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            context VARCHAR(16) NOT NULL,
            exercise TEXT NOT NULL,
            effort VARCHAR(16) NOT NULL,
            duration INTEGER NOT NULL CHECK (duration > 0),
            craving_before INTEGER NOT NULL CHECK (craving_before BETWEEN 0 AND 10),
            craving_after INTEGER NOT NULL CHECK (craving_after BETWEEN 0 AND 10),
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_strategies_user_time
        ON anti_craving_strategies(user_id, created_at DESC)
    """)

    # --- User Badges ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_badges (
            id VARCHAR(36) PRIMARY KEY,
            user_id VARCHAR(36) NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            badge_type VARCHAR(64) NOT NULL,
            earned_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT user_badges_user_id_badge_type_key UNIQUE (user_id, badge_type)
        )
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS user_badges CASCADE")
    op.execute("DROP TABLE IF EXISTS anti_craving_strategies CASCADE")
    op.execute("DROP TABLE IF EXISTS beck_analyses CASCADE")
    op.execute("DROP TABLE IF EXISTS exercise_sessions CASCADE")
    op.execute("DROP TABLE IF EXISTS craving_entries CASCADE")
    op.execute("DROP TABLE IF EXISTS user_stats CASCADE")
    op.execute("DROP TABLE IF EXISTS users CASCADE")
