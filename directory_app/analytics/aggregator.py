"""
Click analytics rollups.

Every function here is pure: the same click log, tools, categories and
`now` always give the same result. Inputs are any objects exposing the
model attributes (ORM rows or plain records):

- events:     tool_id, user_id, clicked_at
- tools:      id, name, url, category_id
- categories: id, name

All-time counts are taken from the event log, never from Tool.clicks_count.
"""

from collections import defaultdict
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence

from directory_app.schemas.analytics import (
    CategoryRollup,
    ChartSlice,
    DailyClicks,
    DashboardTotals,
    ToolBar,
    ToolRollup,
)

ALL_CATEGORIES = "all"


class SortKey(str, Enum):
    """Administrator-selectable orderings of the per-tool table."""
    TOTAL = "total"
    RECENT = "recent"
    USERS = "users"


_SORT_FIELDS = {
    SortKey.TOTAL: "clicks_count",
    SortKey.RECENT: "clicks_last_30_days",
    SortKey.USERS: "unique_users",
}


def as_utc(moment: datetime) -> datetime:
    """SQLite hands timestamps back naive; they were written as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def window_start(now: datetime, days: int = 30) -> datetime:
    return as_utc(now) - timedelta(days=days)


def tool_rollups(
    events: Iterable,
    tools: Sequence,
    categories: Sequence,
    now: datetime,
    days: int = 30,
    uncategorized: str = "Uncategorized",
) -> List[ToolRollup]:
    """Per-tool all-time, trailing-window and unique-user counts, in tool order."""
    since = window_start(now, days)
    total: Dict[str, int] = defaultdict(int)
    recent: Dict[str, int] = defaultdict(int)
    users: Dict[str, set] = defaultdict(set)

    for event in events:
        total[event.tool_id] += 1
        if as_utc(event.clicked_at) >= since:
            recent[event.tool_id] += 1
        if event.user_id:
            users[event.tool_id].add(event.user_id)

    names = {category.id: category.name for category in categories}
    return [
        ToolRollup(
            id=tool.id,
            name=tool.name,
            url=tool.url,
            category_id=tool.category_id if tool.category_id in names else None,
            category=names.get(tool.category_id, uncategorized),
            clicks_count=total[tool.id],
            clicks_last_30_days=recent[tool.id],
            unique_users=len(users[tool.id]),
        )
        for tool in tools
    ]


def category_rollups(
    rollups: Sequence[ToolRollup],
    categories: Sequence,
) -> List[CategoryRollup]:
    """Sum tool rollups per category, busiest category first."""
    result = []
    for category in categories:
        members = [r for r in rollups if r.category_id == category.id]
        result.append(CategoryRollup(
            id=category.id,
            name=category.name,
            total_clicks=sum(r.clicks_count for r in members),
            recent_clicks=sum(r.clicks_last_30_days for r in members),
            tool_count=len(members),
        ))
    return sorted(result, key=lambda c: c.total_clicks, reverse=True)


def daily_series(events: Iterable, now: datetime, days: int = 30) -> List[DailyClicks]:
    """
    Dense per-day click counts for the trailing window.

    Always `days` points, oldest first, ending with today's UTC date;
    days without clicks are present with count 0.
    """
    today = as_utc(now).date()
    counts: Dict[date, int] = {
        today - timedelta(days=offset): 0 for offset in range(days)
    }
    for event in events:
        day = as_utc(event.clicked_at).date()
        if day in counts:
            counts[day] += 1
    return [DailyClicks(date=day, count=counts[day]) for day in sorted(counts)]


def filter_by_category(rollups: Sequence[ToolRollup], category: Optional[str]) -> List[ToolRollup]:
    if not category or category == ALL_CATEGORIES:
        return list(rollups)
    return [r for r in rollups if r.category == category]


def sort_rollups(rollups: Sequence[ToolRollup], key: SortKey = SortKey.TOTAL) -> List[ToolRollup]:
    """Descending by the chosen count; ties keep input order (sorted is stable)."""
    field = _SORT_FIELDS[SortKey(key)]
    return sorted(rollups, key=lambda r: getattr(r, field), reverse=True)


def totals(rollups: Sequence[ToolRollup], category_count: int) -> DashboardTotals:
    return DashboardTotals(
        total_clicks=sum(r.clicks_count for r in rollups),
        recent_clicks=sum(r.clicks_last_30_days for r in rollups),
        tool_count=len(rollups),
        category_count=category_count,
    )


def pie_slices(categories: Sequence[CategoryRollup]) -> List[ChartSlice]:
    """Share of all-time clicks per category; empty categories are left out."""
    return [
        ChartSlice(name=c.name, value=c.total_clicks)
        for c in categories
        if c.total_clicks > 0
    ]


def top_tools(rollups: Sequence[ToolRollup], limit: int = 10) -> List[ToolBar]:
    ranked = sort_rollups(rollups, SortKey.TOTAL)[:limit]
    return [
        ToolBar(name=r.name, total_clicks=r.clicks_count, recent_clicks=r.clicks_last_30_days)
        for r in ranked
    ]
