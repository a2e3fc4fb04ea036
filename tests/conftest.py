"""Global test fixtures and utilities for habit-engine tests"""
import pytest
from datetime import date, timedelta

from habit_engine.cache.local_cache import LocalCache
from habit_engine.models.habit import (
    CustomFrequency,
    DailyFrequency,
    Habit,
    HabitCategory,
    HabitCompletion,
)
from habit_engine.models.session import UserSession
from habit_engine.tracking import CompletionStore
from habit_engine.utils.datetime_helpers import current_week_dates, today_in_timezone


# ============================================================================
# Session Fixtures
# ============================================================================

@pytest.fixture
def test_user_id():
    """Standard test user ID"""
    return "123456789"


@pytest.fixture
def user_session(test_user_id):
    """Authenticated session in UTC"""
    return UserSession(user_id=test_user_id, timezone="UTC")


@pytest.fixture
def anonymous_session():
    """Session without a logged-in user"""
    return UserSession(timezone="UTC")


@pytest.fixture
def local_cache(tmp_path, test_user_id):
    """Local cache rooted in a temp directory"""
    return LocalCache(test_user_id, data_path=tmp_path)


# ============================================================================
# Calendar Fixtures
# ============================================================================

@pytest.fixture
def today():
    """Today in UTC (matches the test sessions)"""
    return today_in_timezone("UTC")


@pytest.fixture
def this_week(today):
    """Sunday..Saturday of the current week"""
    return current_week_dates(today=today)


@pytest.fixture
def fixed_week():
    """Sunday 2024-01-07 .. Saturday 2024-01-13"""
    start = date(2024, 1, 7)
    return [start + timedelta(days=i) for i in range(7)]


# ============================================================================
# Habit Data Fixtures
# ============================================================================

@pytest.fixture
def habit_factory():
    """Factory for habits with optional completions"""
    def _create(
        habit_id="habit-1",
        title="Drink water",
        category_id="health",
        days=None,
        completed_on=(),
        incomplete_on=(),
    ):
        frequency = DailyFrequency() if days is None else CustomFrequency(specific_days=set(days))
        completions = [HabitCompletion(date=d, completed=True) for d in completed_on]
        completions += [HabitCompletion(date=d, completed=False) for d in incomplete_on]
        return Habit(
            id=habit_id,
            title=title,
            category_id=category_id,
            frequency=frequency,
            completions=completions,
        )

    return _create


@pytest.fixture
def sample_categories(habit_factory):
    """Health (daily habit) and Productivity (Mon/Wed/Fri habit)"""
    return [
        HabitCategory(
            id="health",
            name="Health",
            color="#4ade80",
            habits=[habit_factory(habit_id="water", title="Drink water", category_id="health")],
        ),
        HabitCategory(
            id="productivity",
            name="Productivity",
            color="#60a5fa",
            habits=[
                habit_factory(
                    habit_id="review",
                    title="Weekly review",
                    category_id="productivity",
                    days=[1, 3, 5],
                )
            ],
        ),
        HabitCategory(id="personal", name="Personal", color="#f472b6"),
    ]


@pytest.fixture
def store(sample_categories):
    """CompletionStore preloaded with the sample categories"""
    return CompletionStore(sample_categories)
