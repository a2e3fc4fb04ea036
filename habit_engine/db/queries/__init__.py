"""
Database queries - Re-export all functions.

Module organization:
- habits.py: Habit categories, habits, completions, export range queries

All imports like 'from habit_engine.db.queries import create_habit' resolve here.
"""

from habit_engine.db.queries.habits import (
    fetch_habit_categories,
    create_habit_category,
    create_habit_categories,
    create_habit,
    delete_habit,
    update_habit,
    upsert_habit_completion,
    get_completion_records,
)

__all__ = [
    "fetch_habit_categories",
    "create_habit_category",
    "create_habit_categories",
    "create_habit",
    "delete_habit",
    "update_habit",
    "upsert_habit_completion",
    "get_completion_records",
]
