"""Habit, category and completion models"""
from typing import Annotated, Literal, Optional, Union
from datetime import date as dt_date
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _validate_weekdays(v: set[int]) -> set[int]:
    for day in v:
        if day < 0 or day > 6:
            raise ValueError(
                f"Invalid day: {day}. Days must be 0-6 (Sunday=0, Saturday=6)"
            )
    return v


class DailyFrequency(BaseModel):
    """Habit is due every day"""
    type: Literal["daily"] = "daily"


class CustomFrequency(BaseModel):
    """Habit is due on specific weekdays (0 = Sunday)"""
    type: Literal["custom"] = "custom"
    # Empty means "never due"; the editing boundary requires at least one day
    specific_days: set[int] = Field(default_factory=set)

    @field_validator('specific_days')
    @classmethod
    def validate_days(cls, v: set[int]) -> set[int]:
        """Ensure days are 0-6 (Sunday-Saturday)"""
        return _validate_weekdays(v)


Frequency = Annotated[Union[DailyFrequency, CustomFrequency], Field(discriminator="type")]


def _require_selected_days(frequency: Optional[Union[DailyFrequency, CustomFrequency]]) -> None:
    if isinstance(frequency, CustomFrequency) and not frequency.specific_days:
        raise ValueError("Custom frequency must select at least one day")


class HabitCompletion(BaseModel):
    """Completion state of a habit on one calendar day"""
    date: dt_date
    completed: bool

    @property
    def date_key(self) -> str:
        return self.date.isoformat()


class Habit(BaseModel):
    """A tracked habit owned by one category"""
    id: str
    title: str = Field(min_length=1, max_length=200)
    category_id: str
    frequency: Frequency = Field(default_factory=DailyFrequency)
    completions: list[HabitCompletion] = Field(default_factory=list)

    @model_validator(mode='after')
    def validate_unique_completion_dates(self) -> 'Habit':
        """At most one completion record per date"""
        seen: set[dt_date] = set()
        for completion in self.completions:
            if completion.date in seen:
                raise ValueError(
                    f"Duplicate completion for {completion.date_key} on habit '{self.id}'"
                )
            seen.add(completion.date)
        return self

    def find_completion(self, date_key: str) -> Optional[HabitCompletion]:
        """Completion record for a day key, if any"""
        for completion in self.completions:
            if completion.date_key == date_key:
                return completion
        return None


class HabitCategory(BaseModel):
    """User-defined group of habits"""
    id: str
    name: str = Field(min_length=1, max_length=100)
    color: str
    habits: list[Habit] = Field(default_factory=list)

    @model_validator(mode='after')
    def validate_habit_ownership(self) -> 'HabitCategory':
        """Every habit must point back at this category"""
        for habit in self.habits:
            if habit.category_id != self.id:
                raise ValueError(
                    f"Habit '{habit.id}' has category_id '{habit.category_id}' "
                    f"but belongs to category '{self.id}'"
                )
        return self


class HabitCreate(BaseModel):
    """Fields supplied when creating a habit"""
    title: str = Field(min_length=1, max_length=200)
    frequency: Frequency = Field(default_factory=DailyFrequency)

    @field_validator('title')
    @classmethod
    def validate_title(cls, v: str) -> str:
        trimmed = v.strip()
        if not trimmed:
            raise ValueError("Habit title cannot be empty or only whitespace")
        return trimmed

    @model_validator(mode='after')
    def validate_frequency(self) -> 'HabitCreate':
        _require_selected_days(self.frequency)
        return self


class HabitUpdate(BaseModel):
    """Partial update; id and category_id can never be changed"""
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    frequency: Optional[Frequency] = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        trimmed = v.strip()
        if not trimmed:
            raise ValueError("Habit title cannot be empty or only whitespace")
        return trimmed

    @model_validator(mode='after')
    def validate_frequency(self) -> 'HabitUpdate':
        _require_selected_days(self.frequency)
        return self
