"""Initial schema — users, girls, data entries, settings, onboarding, achievements, leaderboards.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19
"""

from collections.abc import Sequence

from alembic import op

revision: str = "001_initial_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.execute('CREATE EXTENSION IF NOT EXISTS "pgcrypto"')

    # --- Users ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            session_token VARCHAR(64) UNIQUE,
            auth_provider_id VARCHAR(128),
            email VARCHAR(320),
            subscription_tier VARCHAR(16) NOT NULL DEFAULT 'free'
                CHECK (subscription_tier IN ('free', 'premium', 'lifetime')),
            is_anonymous BOOLEAN NOT NULL DEFAULT true,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # --- Girls ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS girls (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            name VARCHAR(128) NOT NULL,
            age INTEGER NOT NULL CHECK (age >= 18),
            nationality VARCHAR(64) NOT NULL,
            ethnicity VARCHAR(64),
            hair_color VARCHAR(32),
            location_city VARCHAR(128),
            location_country VARCHAR(128),
            rating DOUBLE PRECISION NOT NULL CHECK (rating >= 0 AND rating <= 10),
            is_active BOOLEAN NOT NULL DEFAULT true,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS idx_girls_user ON girls(user_id)")
    op.execute("CREATE INDEX IF NOT EXISTS idx_girls_created ON girls(user_id, created_at DESC)")

    # --- Data Entries ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS data_entries (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            girl_id UUID NOT NULL REFERENCES girls(id) ON DELETE CASCADE,
            date DATE NOT NULL,
            amount_spent NUMERIC(10, 2) NOT NULL DEFAULT 0 CHECK (amount_spent >= 0),
            duration_minutes INTEGER NOT NULL DEFAULT 0 CHECK (duration_minutes >= 0),
            number_of_nuts INTEGER NOT NULL DEFAULT 0 CHECK (number_of_nuts >= 0),
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS idx_data_entries_user ON data_entries(user_id)")
    op.execute("CREATE INDEX IF NOT EXISTS idx_data_entries_girl ON data_entries(girl_id)")
    op.execute("CREATE INDEX IF NOT EXISTS idx_data_entries_date ON data_entries(user_id, date DESC)")

    # --- User Settings ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_settings (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id UUID UNIQUE NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            display_name VARCHAR(64) NOT NULL DEFAULT 'CPN User',
            avatar_url TEXT,
            theme VARCHAR(16) NOT NULL DEFAULT 'dark',
            accent_color VARCHAR(16) NOT NULL DEFAULT 'yellow',
            compact_mode BOOLEAN NOT NULL DEFAULT false,
            animations_enabled BOOLEAN NOT NULL DEFAULT true,
            date_format VARCHAR(16) NOT NULL DEFAULT 'MM/DD/YYYY',
            time_format VARCHAR(8) NOT NULL DEFAULT '12h',
            week_start VARCHAR(8) NOT NULL DEFAULT 'monday',
            privacy_settings JSONB NOT NULL DEFAULT '{}',
            notification_settings JSONB NOT NULL DEFAULT '{}',
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # --- Onboarding ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS onboarding_state (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id UUID UNIQUE NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            current_step INTEGER NOT NULL DEFAULT 1,
            completed_steps JSONB NOT NULL DEFAULT '[]',
            onboarding_data JSONB NOT NULL DEFAULT '{}',
            is_completed BOOLEAN NOT NULL DEFAULT false,
            completed_at TIMESTAMPTZ,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # --- Achievements ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS achievements (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            achievement_type VARCHAR(64) NOT NULL,
            achievement_id VARCHAR(64) NOT NULL,
            tier VARCHAR(16) NOT NULL,
            title VARCHAR(128) NOT NULL,
            description TEXT NOT NULL DEFAULT '',
            icon VARCHAR(32) NOT NULL DEFAULT '',
            points INTEGER NOT NULL DEFAULT 0,
            unlocked_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT achievements_user_achievement_key UNIQUE (user_id, achievement_id)
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS idx_achievements_user ON achievements(user_id, unlocked_at DESC)")

    op.execute("""
        CREATE TABLE IF NOT EXISTS achievement_progress (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            achievement_type VARCHAR(64) NOT NULL,
            current_value DOUBLE PRECISION NOT NULL DEFAULT 0,
            target_value DOUBLE PRECISION NOT NULL DEFAULT 0,
            last_checked TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT achievement_progress_user_type_key UNIQUE (user_id, achievement_type)
        )
    """)

    # --- Leaderboards ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS leaderboard_groups (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            name VARCHAR(64) NOT NULL,
            created_by UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            invite_token VARCHAR(16) UNIQUE NOT NULL,
            is_private BOOLEAN NOT NULL DEFAULT true,
            member_count INTEGER NOT NULL DEFAULT 0,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS leaderboard_memberships (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            group_id UUID NOT NULL REFERENCES leaderboard_groups(id) ON DELETE CASCADE,
            user_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            username VARCHAR(64) NOT NULL,
            stats_cache JSONB NOT NULL DEFAULT '{}',
            joined_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            last_updated TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT leaderboard_memberships_group_user_key UNIQUE (group_id, user_id)
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS idx_memberships_group ON leaderboard_memberships(group_id)")
    op.execute("CREATE INDEX IF NOT EXISTS idx_memberships_user ON leaderboard_memberships(user_id)")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS leaderboard_memberships CASCADE")
    op.execute("DROP TABLE IF EXISTS leaderboard_groups CASCADE")
    op.execute("DROP TABLE IF EXISTS achievement_progress CASCADE")
    op.execute("DROP TABLE IF EXISTS achievements CASCADE")
    op.execute("DROP TABLE IF EXISTS onboarding_state CASCADE")
    op.execute("DROP TABLE IF EXISTS user_settings CASCADE")
    op.execute("DROP TABLE IF EXISTS data_entries CASCADE")
    op.execute("DROP TABLE IF EXISTS girls CASCADE")
    op.execute("DROP TABLE IF EXISTS users CASCADE")
