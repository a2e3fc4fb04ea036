"""Export and summary models"""
from typing import Optional
from datetime import date as dt_date
from pydantic import BaseModel, Field


class CompletionRecord(BaseModel):
    """Completion joined with its habit and category metadata"""
    id: Optional[str] = None
    date: dt_date
    completed: bool
    habit_id: Optional[str] = None
    habit_title: Optional[str] = None
    category_id: Optional[str] = None
    category_name: Optional[str] = None
    category_color: Optional[str] = None


class CategoryBreakdown(BaseModel):
    """Completion stats of one category name"""
    total: int = 0
    completed: int = 0
    rate: float = 0.0


class QuarterlySummary(BaseModel):
    """Completion-rate statistics for one calendar quarter"""
    period: str  # "Q1 2024"
    start_date: dt_date
    end_date: dt_date
    total_habits: int = 0
    total_completions: int = 0
    completion_rate: float = 0.0
    # Keyed by category name; categories sharing a name merge
    category_breakdown: dict[str, CategoryBreakdown] = Field(default_factory=dict)
