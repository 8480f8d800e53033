from pydantic import BaseModel
from typing import List, Optional
from datetime import date


class ToolRollup(BaseModel):
    id: str
    name: str
    url: str
    category_id: Optional[str] = None
    category: str
    clicks_count: int
    clicks_last_30_days: int
    unique_users: int


class CategoryRollup(BaseModel):
    id: str
    name: str
    total_clicks: int
    recent_clicks: int
    tool_count: int


class DailyClicks(BaseModel):
    date: date
    count: int


class ChartSlice(BaseModel):
    name: str
    value: int


class ToolBar(BaseModel):
    name: str
    total_clicks: int
    recent_clicks: int


class DashboardTotals(BaseModel):
    total_clicks: int
    recent_clicks: int
    tool_count: int
    category_count: int


class Dashboard(BaseModel):
    """Everything the admin dashboard renders, computed from the click log."""
    totals: DashboardTotals
    category: str
    sort: str
    tools: List[ToolRollup]
    categories: List[CategoryRollup]
    daily: List[DailyClicks]
    pie: List[ChartSlice]
    top_tools: List[ToolBar]
