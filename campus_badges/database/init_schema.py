import logging

from campus_badges.database.db_manager import DBManager

logger = logging.getLogger(__name__)


def init_schema(db: DBManager):
    '''Create the database schema if it doesn't already exist.'''

    # --- BADGES TABLE ---
    db.execute(
        '''
        CREATE TABLE IF NOT EXISTS badges (
            id BIGSERIAL PRIMARY KEY,
            name VARCHAR(100) NOT NULL UNIQUE,
            description VARCHAR(500) NOT NULL,
            icon TEXT NOT NULL,
            category TEXT NOT NULL,
            rarity TEXT NOT NULL,
            requirement_type TEXT NOT NULL,
            requirement_target INTEGER NOT NULL CHECK (requirement_target >= 1),
            requirement_timeframe TEXT DEFAULT NULL,
            requirement_conditions JSONB DEFAULT NULL,
            is_active BOOLEAN NOT NULL DEFAULT TRUE,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
        '''
    )

    # --- USER BADGES TABLE ---
    # The (user_id, badge_id) constraint is what keeps racing awards exactly-once
    db.execute(
        '''
        CREATE TABLE IF NOT EXISTS user_badges (
            id BIGSERIAL PRIMARY KEY,
            user_id TEXT NOT NULL,
            badge_id BIGINT NOT NULL REFERENCES badges(id) ON DELETE CASCADE,
            earned_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            progress JSONB NOT NULL,
            is_displayed BOOLEAN NOT NULL DEFAULT TRUE,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_user_badges_user_badge UNIQUE (user_id, badge_id)
        )
        '''
    )

    # --- USER STATS TABLE (written by the pin/friend/auth subsystems) ---
    db.execute(
        '''
        CREATE TABLE IF NOT EXISTS user_stats (
            user_id TEXT PRIMARY KEY,
            pins_created INTEGER NOT NULL DEFAULT 0,
            pins_visited INTEGER NOT NULL DEFAULT 0,
            friends_count INTEGER NOT NULL DEFAULT 0,
            reports_made INTEGER NOT NULL DEFAULT 0,
            locations_explored INTEGER NOT NULL DEFAULT 0,
            libraries_visited INTEGER NOT NULL DEFAULT 0,
            cafes_visited INTEGER NOT NULL DEFAULT 0,
            restaurants_visited INTEGER NOT NULL DEFAULT 0,
            login_streak INTEGER NOT NULL DEFAULT 0,
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
        '''
    )

    # --- MIGRATIONS TABLE ---
    db.execute(
        '''
        CREATE TABLE IF NOT EXISTS migrations (
            id BIGSERIAL PRIMARY KEY,
            filename TEXT NOT NULL UNIQUE,
            applied_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
        '''
    )

    # --- INDEXES ---
    db.execute(
        'CREATE INDEX IF NOT EXISTS idx_badges_requirement_type '
        'ON badges(requirement_type, is_active);'
    )
    db.execute(
        'CREATE INDEX IF NOT EXISTS idx_badges_category ON badges(category, rarity);'
    )
    db.execute(
        'CREATE INDEX IF NOT EXISTS idx_user_badges_user_id ON user_badges(user_id);'
    )
    logger.debug('Schema statements executed')
