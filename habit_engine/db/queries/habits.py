"""Habit, category and completion database queries"""
import logging
from typing import Optional
from datetime import date
from habit_engine.db.connection import db
from habit_engine.models.habit import (
    CustomFrequency,
    DailyFrequency,
    Habit,
    HabitCategory,
    HabitCompletion,
    HabitUpdate,
)
from habit_engine.models.summary import CompletionRecord

logger = logging.getLogger(__name__)


def _frequency_columns(frequency) -> tuple[str, Optional[list[int]]]:
    """Map a frequency to (frequency_type, frequency_days) columns"""
    if isinstance(frequency, CustomFrequency):
        return "custom", sorted(frequency.specific_days)
    return "daily", None


def _habit_from_row(row: dict, completions: list[HabitCompletion]) -> Habit:
    if row["frequency_type"] == "custom":
        frequency = CustomFrequency(specific_days=set(row["frequency_days"] or []))
    else:
        frequency = DailyFrequency()
    return Habit(
        id=str(row["id"]),
        title=row["title"],
        category_id=str(row["category_id"]),
        frequency=frequency,
        completions=completions,
    )


# Category operations
async def fetch_habit_categories(user_id: str) -> list[HabitCategory]:
    """Get all categories for user with nested habits and completions"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                "SELECT id, name, color FROM habit_categories WHERE user_id = %s ORDER BY created_at",
                (user_id,)
            )
            category_rows = await cur.fetchall()

            await cur.execute(
                """
                SELECT id, category_id, title, frequency_type, frequency_days
                FROM habits
                WHERE user_id = %s
                ORDER BY created_at
                """,
                (user_id,)
            )
            habit_rows = await cur.fetchall()

            await cur.execute(
                """
                SELECT habit_id, date, completed
                FROM habit_completions
                WHERE user_id = %s
                ORDER BY date
                """,
                (user_id,)
            )
            completion_rows = await cur.fetchall()

    completions_by_habit: dict[str, list[HabitCompletion]] = {}
    for row in completion_rows:
        completions_by_habit.setdefault(str(row["habit_id"]), []).append(
            HabitCompletion(date=row["date"], completed=row["completed"])
        )

    habits_by_category: dict[str, list[Habit]] = {}
    for row in habit_rows:
        habit = _habit_from_row(row, completions_by_habit.get(str(row["id"]), []))
        habits_by_category.setdefault(habit.category_id, []).append(habit)

    categories = [
        HabitCategory(
            id=str(row["id"]),
            name=row["name"],
            color=row["color"],
            habits=habits_by_category.get(str(row["id"]), []),
        )
        for row in category_rows
    ]
    logger.debug(f"Fetched {len(categories)} categories, {len(habit_rows)} habits for user {user_id}")
    return categories


async def create_habit_category(user_id: str, category: HabitCategory) -> None:
    """Create new habit category"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                INSERT INTO habit_categories (id, user_id, name, color)
                VALUES (%s, %s, %s, %s)
                """,
                (category.id, user_id, category.name, category.color)
            )
            await conn.commit()
    logger.info(f"Created habit category: {category.name} for user {user_id}")


async def create_habit_categories(user_id: str, categories: list[HabitCategory]) -> None:
    """Create several categories in one transaction (all or none)"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            for category in categories:
                await cur.execute(
                    """
                    INSERT INTO habit_categories (id, user_id, name, color)
                    VALUES (%s, %s, %s, %s)
                    """,
                    (category.id, user_id, category.name, category.color)
                )
            await conn.commit()
    logger.info(f"Created {len(categories)} habit categories for user {user_id}")


# Habit operations
async def create_habit(user_id: str, habit: Habit) -> None:
    """Create new habit"""
    frequency_type, frequency_days = _frequency_columns(habit.frequency)
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                INSERT INTO habits (id, user_id, category_id, title, frequency_type, frequency_days)
                VALUES (%s, %s, %s, %s, %s, %s)
                """,
                (habit.id, user_id, habit.category_id, habit.title, frequency_type, frequency_days)
            )
            await conn.commit()
    logger.info(f"Created habit: {habit.title} for user {user_id}")


async def delete_habit(user_id: str, habit_id: str) -> bool:
    """
    Delete a habit and its completions

    Args:
        user_id: User ID for security check
        habit_id: Habit to delete

    Returns:
        True if deleted, False if not found
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            # Completions first (foreign key)
            await cur.execute(
                "DELETE FROM habit_completions WHERE habit_id = %s AND user_id = %s",
                (habit_id, user_id)
            )
            await cur.execute(
                "DELETE FROM habits WHERE id = %s AND user_id = %s RETURNING id",
                (habit_id, user_id)
            )
            result = await cur.fetchone()
            await conn.commit()

    if result:
        logger.info(f"Deleted habit {habit_id} for user {user_id}")
        return True
    logger.warning(f"Habit {habit_id} not found for user {user_id}")
    return False


async def update_habit(user_id: str, habit_id: str, update: HabitUpdate) -> bool:
    """
    Update a habit's title and/or frequency

    Returns:
        True if updated, False if not found or nothing to update
    """
    assignments = []
    params: list = []
    if update.title is not None:
        assignments.append("title = %s")
        params.append(update.title)
    if update.frequency is not None:
        frequency_type, frequency_days = _frequency_columns(update.frequency)
        assignments.append("frequency_type = %s")
        assignments.append("frequency_days = %s")
        params.extend([frequency_type, frequency_days])

    if not assignments:
        return False

    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                f"UPDATE habits SET {', '.join(assignments)} WHERE id = %s AND user_id = %s RETURNING id",
                (*params, habit_id, user_id)
            )
            result = await cur.fetchone()
            await conn.commit()

    return result is not None


# Completion operations
async def upsert_habit_completion(user_id: str, habit_id: str, completion: HabitCompletion) -> None:
    """Insert or update the single completion record for (habit, date)"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                INSERT INTO habit_completions (habit_id, user_id, date, completed)
                VALUES (%s, %s, %s, %s)
                ON CONFLICT (habit_id, date) DO UPDATE SET
                    completed = EXCLUDED.completed
                """,
                (habit_id, user_id, completion.date, completion.completed)
            )
            await conn.commit()
    logger.debug(
        f"Saved completion for habit {habit_id} on {completion.date_key}: {completion.completed}"
    )


async def get_completion_records(
    user_id: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
) -> list[CompletionRecord]:
    """
    Get completions in a date range joined with habit and category metadata

    Args:
        user_id: User ID
        start_date: Inclusive lower bound (optional)
        end_date: Inclusive upper bound (optional)

    Returns:
        Records ordered by date
    """
    query = """
        SELECT c.id, c.date, c.completed,
               h.id AS habit_id, h.title AS habit_title,
               cat.id AS category_id, cat.name AS category_name, cat.color AS category_color
        FROM habit_completions c
        LEFT JOIN habits h ON h.id = c.habit_id
        LEFT JOIN habit_categories cat ON cat.id = h.category_id
        WHERE c.user_id = %s
    """
    params: list = [user_id]
    if start_date is not None:
        query += " AND c.date >= %s"
        params.append(start_date)
    if end_date is not None:
        query += " AND c.date <= %s"
        params.append(end_date)
    query += " ORDER BY c.date, c.id"

    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(query, tuple(params))
            rows = await cur.fetchall()

    return [
        CompletionRecord(
            id=str(row["id"]),
            date=row["date"],
            completed=row["completed"],
            habit_id=row["habit_id"],
            habit_title=row["habit_title"],
            category_id=row["category_id"],
            category_name=row["category_name"],
            category_color=row["category_color"],
        )
        for row in rows
    ]
