"""Unit tests for Completion Store (habit_engine/tracking/store.py)"""
import pytest
from datetime import datetime, timedelta
from pydantic import ValidationError as PydanticValidationError

from habit_engine.exceptions import NotFoundError, ValidationError
from habit_engine.models.habit import CustomFrequency, DailyFrequency, HabitCategory, HabitCreate, HabitUpdate
from habit_engine.tracking.store import CompletionStore, ToggleResult


# ============================================================================
# Category / Habit Creation Tests
# ============================================================================

def test_add_category_generates_id():
    store = CompletionStore()

    first = store.add_category("Health", "#4ade80")
    second = store.add_category("Health", "#4ade80")

    assert first.id != second.id
    assert first.habits == []
    assert [c.id for c in store.categories] == [first.id, second.id]


def test_add_category_with_explicit_id():
    store = CompletionStore()

    category = store.add_category("Reading", "#123456", category_id="reading")

    assert store.find_category("reading") is category


def test_add_habit_attaches_to_category(store):
    habit = store.add_habit("personal", HabitCreate(title="Journal"))

    personal = store.find_category("personal")
    assert personal.habits[-1].id == habit.id
    assert habit.category_id == "personal"
    assert habit.completions == []
    assert isinstance(habit.frequency, DailyFrequency)


def test_add_habit_ids_are_unique(store):
    ids = {store.add_habit("personal", HabitCreate(title=f"Habit {i}")).id for i in range(20)}

    assert len(ids) == 20


def test_add_habit_copies_frequency(store):
    data = HabitCreate(title="Gym", frequency=CustomFrequency(specific_days={1, 3}))
    habit = store.add_habit("health", data)

    data.frequency.specific_days.add(6)

    assert habit.frequency.specific_days == {1, 3}


def test_add_habit_unknown_category(store):
    with pytest.raises(NotFoundError) as exc_info:
        store.add_habit("missing", HabitCreate(title="Orphan"))

    assert exc_info.value.record_type == "Category"
    assert exc_info.value.record_id == "missing"


# ============================================================================
# toggle_completion Tests
# ============================================================================

def test_first_toggle_creates_completed_record(store, today):
    result = store.toggle_completion("water", today, today=today)

    assert isinstance(result, ToggleResult)
    assert result.completed is True
    assert result.date_key == today.isoformat()
    habit = store.find_habit("water")
    assert len(habit.completions) == 1
    assert habit.completions[0].completed is True


def test_toggle_flips_in_place(store, today):
    """Test repeated toggles flip one record instead of adding new ones"""
    states = [store.toggle_completion("water", today, today=today).completed for _ in range(4)]

    assert states == [True, False, True, False]
    assert len(store.find_habit("water").completions) == 1


def test_toggle_twice_restores_state(habit_factory, today):
    """Test double toggle is a no-op on completion state"""
    yesterday = today - timedelta(days=1)
    habit = habit_factory(completed_on=[yesterday])
    store = CompletionStore()
    store.add_category("Health", "#4ade80", category_id="health")
    store.find_category("health").habits.append(habit)

    store.toggle_completion(habit.id, yesterday, today=today)
    store.toggle_completion(habit.id, yesterday, today=today)

    completion = store.find_habit(habit.id).find_completion(yesterday.isoformat())
    assert completion.completed is True


def test_toggle_many_days_one_record_each(store, today):
    days = [today - timedelta(days=i) for i in range(10)]
    for day in days + days[:5]:
        store.toggle_completion("water", day, today=today)

    completions = store.find_habit("water").completions
    assert len(completions) == 10
    assert len({c.date for c in completions}) == 10
    assert sum(1 for c in completions if c.completed) == 5


def test_toggle_accepts_datetime(store, today):
    """Test time of day is dropped when toggling"""
    late = datetime(today.year, today.month, today.day, 23, 45)

    result = store.toggle_completion("water", late, today=today)

    assert result.date_key == today.isoformat()
    assert store.find_habit("water").completions[0].date == today


def test_toggle_unknown_habit(store, today):
    with pytest.raises(NotFoundError) as exc_info:
        store.toggle_completion("missing", today, today=today)

    assert exc_info.value.record_type == "Habit"


def test_toggle_result_is_a_copy(store, today):
    result = store.toggle_completion("water", today, today=today)

    result.habit.completions.clear()

    assert len(store.find_habit("water").completions) == 1


def test_weekly_completion_reached_on_last_due_day(store, fixed_week):
    """Test Mon/Wed/Fri habit reaches weekly completion on the third toggle"""
    monday, wednesday, friday = fixed_week[1], fixed_week[3], fixed_week[5]

    assert store.toggle_completion("review", monday, today=friday).weekly_completion_reached is False
    assert store.toggle_completion("review", wednesday, today=friday).weekly_completion_reached is False
    assert store.toggle_completion("review", friday, today=friday).weekly_completion_reached is True


def test_weekly_completion_lost_when_unchecked(store, fixed_week):
    monday, wednesday, friday = fixed_week[1], fixed_week[3], fixed_week[5]
    for day in (monday, wednesday, friday):
        store.toggle_completion("review", day, today=friday)

    result = store.toggle_completion("review", wednesday, today=friday)

    assert result.completed is False
    assert result.weekly_completion_reached is False


def test_weekly_completion_not_reached_from_previous_week(store, fixed_week):
    """Test completing a past week does not report the current week as done"""
    monday, wednesday, friday = fixed_week[1], fixed_week[3], fixed_week[5]
    next_saturday = fixed_week[6] + timedelta(days=7)

    for day in (monday, wednesday):
        store.toggle_completion("review", day, today=next_saturday)
    result = store.toggle_completion("review", friday, today=next_saturday)

    assert result.completed is True
    assert result.weekly_completion_reached is False


# ============================================================================
# delete_habit Tests
# ============================================================================

def test_delete_habit_removes_completions(store, today):
    """Test deleting a habit with five completions leaves no trace"""
    for i in range(5):
        store.toggle_completion("water", today - timedelta(days=i), today=today)

    removed = store.delete_habit("water")

    assert removed.id == "water"
    assert len(removed.completions) == 5
    assert all(h.id != "water" for h in store.all_habits())
    with pytest.raises(NotFoundError):
        store.toggle_completion("water", today, today=today)


def test_delete_habit_twice(store):
    store.delete_habit("water")

    with pytest.raises(NotFoundError):
        store.delete_habit("water")


def test_delete_habit_keeps_other_habits(store):
    store.delete_habit("water")

    assert [h.id for h in store.all_habits()] == ["review"]
    assert store.find_category("health").habits == []


# ============================================================================
# update_habit Tests
# ============================================================================

def test_update_habit_title_and_frequency(store):
    habit = store.update_habit(
        "water",
        HabitUpdate(title="Drink more water", frequency=CustomFrequency(specific_days={0, 6})),
    )

    assert habit.title == "Drink more water"
    assert habit.frequency.specific_days == {0, 6}
    assert habit.id == "water"
    assert habit.category_id == "health"


def test_update_habit_partial(store):
    habit = store.update_habit("review", HabitUpdate(title="Plan the week"))

    assert habit.title == "Plan the week"
    assert habit.frequency.specific_days == {1, 3, 5}


def test_update_habit_keeps_completions(store, today):
    store.toggle_completion("water", today, today=today)

    habit = store.update_habit("water", HabitUpdate(frequency=CustomFrequency(specific_days={2})))

    assert len(habit.completions) == 1


def test_update_habit_rejects_identity_fields():
    with pytest.raises(PydanticValidationError):
        HabitUpdate(category_id="productivity")


def test_update_unknown_habit(store):
    with pytest.raises(NotFoundError):
        store.update_habit("missing", HabitUpdate(title="x"))


# ============================================================================
# clear_current_week_completions Tests
# ============================================================================

def test_clear_current_week_only(store, fixed_week):
    """Test only completions inside the current Sunday-Saturday week are removed"""
    wednesday = fixed_week[3]
    before = fixed_week[0] - timedelta(days=1)
    after = fixed_week[6] + timedelta(days=1)
    for day in (before, fixed_week[0], wednesday, fixed_week[6], after):
        store.toggle_completion("water", day, today=wednesday)
    store.toggle_completion("review", fixed_week[1], today=wednesday)

    removed = store.clear_current_week_completions(today=wednesday)

    assert removed == 4
    remaining = sorted(c.date for c in store.find_habit("water").completions)
    assert remaining == [before, after]
    assert store.find_habit("review").completions == []


def test_clear_current_week_nothing_to_clear(store, fixed_week):
    assert store.clear_current_week_completions(today=fixed_week[2]) == 0


# ============================================================================
# Snapshot Tests
# ============================================================================

def test_snapshot_is_independent(store, today):
    snapshot = store.snapshot()

    store.toggle_completion("water", today, today=today)
    snapshot[0].habits.clear()

    assert snapshot[0].habits == []
    assert len(store.find_habit("water").completions) == 1


def test_replace_all(store):
    store.replace_all([])

    assert store.categories == []
    assert store.all_habits() == []


def test_toggle_invalid_date_string(store):
    with pytest.raises(ValidationError):
        store.toggle_completion("water", "not-a-date")


def test_delete_habit_removes_from_owning_category(habit_factory):
    """Test deletion uses the category the habit is stored under"""
    misfiled = habit_factory(habit_id="h1", category_id="work")
    health = HabitCategory.model_construct(id="health", name="Health", color="#4ade80", habits=[misfiled])
    work = HabitCategory(id="work", name="Work", color="#60a5fa")
    store = CompletionStore([health, work])

    removed = store.delete_habit("h1")

    assert removed.id == "h1"
    assert store.all_habits() == []
    assert health.habits == []
