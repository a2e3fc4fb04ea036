"""Habit tables for the remote database"""
import logging
from habit_engine.db.connection import db

logger = logging.getLogger(__name__)

SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS habit_categories (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        name TEXT NOT NULL,
        color TEXT NOT NULL,
        created_at TIMESTAMPTZ DEFAULT now()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS habits (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        category_id TEXT NOT NULL REFERENCES habit_categories(id),
        title TEXT NOT NULL,
        frequency_type TEXT NOT NULL CHECK (frequency_type IN ('daily', 'custom')),
        frequency_days INTEGER[],
        created_at TIMESTAMPTZ DEFAULT now()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS habit_completions (
        id BIGSERIAL PRIMARY KEY,
        habit_id TEXT NOT NULL REFERENCES habits(id),
        user_id TEXT NOT NULL,
        date DATE NOT NULL,
        completed BOOLEAN NOT NULL,
        created_at TIMESTAMPTZ DEFAULT now(),
        UNIQUE (habit_id, date)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_habit_completions_user_date ON habit_completions (user_id, date)",
)


async def init_habit_schema() -> None:
    """
    Create habit tables if they don't exist.

    Safe to call multiple times.
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            for statement in SCHEMA_STATEMENTS:
                await cur.execute(statement)
            await conn.commit()
    logger.info("Habit schema ready")
