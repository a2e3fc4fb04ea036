"""
Service Layer Package

Business logic services that sit between callers (UI, scripts) and the
data access layer (database queries, local cache).

Core Services:
- HabitService: session start, weekly reset, habit mutations with
  best-effort remote mirroring, heatmap, export and quarterly summary
"""

from habit_engine.services.habit_service import HabitService, default_categories, DEFAULT_CATEGORIES

__all__ = [
    "HabitService",
    "default_categories",
    "DEFAULT_CATEGORIES",
]
