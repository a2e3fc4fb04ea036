"""Summary Reporter - quarterly completion-rate statistics"""
from typing import Iterable
import logging

from habit_engine.models.summary import CategoryBreakdown, CompletionRecord, QuarterlySummary
from habit_engine.utils.datetime_helpers import quarter_date_range

logger = logging.getLogger(__name__)


def quarterly_summary(records: Iterable[CompletionRecord], year: int, quarter: int) -> QuarterlySummary:
    """
    Summarize completion records that fall in a calendar quarter

    Habits with no record in the quarter are not counted in total_habits.
    The breakdown is keyed by category name, so categories that share a
    name are merged.

    Args:
        records: Completion records with category metadata
        year: Calendar year
        quarter: 1-4

    Returns:
        QuarterlySummary

    Raises:
        ValidationError: If quarter is not 1-4
    """
    start, end = quarter_date_range(year, quarter)
    in_range = [record for record in records if start <= record.date <= end]

    total_completions = sum(1 for record in in_range if record.completed)
    summary = QuarterlySummary(
        period=f"Q{quarter} {year}",
        start_date=start,
        end_date=end,
        total_habits=len({record.habit_id for record in in_range if record.habit_id is not None}),
        total_completions=total_completions,
        completion_rate=(total_completions / len(in_range)) * 100 if in_range else 0.0,
    )

    for record in in_range:
        if not (record.category_id and record.category_name):
            continue
        breakdown = summary.category_breakdown.setdefault(record.category_name, CategoryBreakdown())
        breakdown.total += 1
        if record.completed:
            breakdown.completed += 1

    for breakdown in summary.category_breakdown.values():
        breakdown.rate = (breakdown.completed / breakdown.total) * 100

    logger.info(
        f"Summary {summary.period}: {len(in_range)} records, "
        f"{summary.total_habits} habits, rate={summary.completion_rate:.1f}%"
    )
    return summary
