"""Derived calendar aggregation models (never persisted)"""
from datetime import date as dt_date
from pydantic import BaseModel, Field


class CategoryCompletionData(BaseModel):
    """Scheduled vs completed habits of one category on one day"""
    category_id: str
    color: str
    scheduled_count: int = Field(ge=0)
    completed_count: int = Field(ge=0)


class CalendarDayAggregate(BaseModel):
    """One heatmap cell: all included categories on one day"""
    date: dt_date
    total_completed_count: int = Field(ge=0)
    completion_percentage: float = Field(ge=0.0, le=100.0)
    per_category: list[CategoryCompletionData] = Field(default_factory=list)

    @property
    def total_scheduled_count(self) -> int:
        return sum(data.scheduled_count for data in self.per_category)


class WeekDayStats(BaseModel):
    """Weekly tracker strip entry"""
    date: dt_date
    total_habits: int
    completed_habits: int
    progress: float
