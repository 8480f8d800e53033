"""
Click analytics: pure rollups over the click event log.
"""

from .aggregator import (
    SortKey,
    tool_rollups,
    category_rollups,
    daily_series,
    sort_rollups,
)

__all__ = [
    "SortKey",
    "tool_rollups",
    "category_rollups",
    "daily_series",
    "sort_rollups",
]
