"""
Habit tracking core

Pure scheduling, mutation and aggregation logic:
- Schedule evaluation (which days a habit is due)
- In-memory completion store with weekly reset
- Calendar heatmap aggregation
- Quarterly summaries
"""

from habit_engine.tracking.schedule import is_scheduled, is_completed, is_weekly_complete, scheduled_days
from habit_engine.tracking.store import CompletionStore, ToggleResult
from habit_engine.tracking.calendar import build_aggregates, weekly_tracker_stats
from habit_engine.tracking.summary import quarterly_summary

__all__ = [
    "is_scheduled",
    "is_completed",
    "is_weekly_complete",
    "scheduled_days",
    "CompletionStore",
    "ToggleResult",
    "build_aggregates",
    "weekly_tracker_stats",
    "quarterly_summary",
]
