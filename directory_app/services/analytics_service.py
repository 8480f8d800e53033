from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from directory_app.analytics import aggregator
from directory_app.analytics.aggregator import SortKey
from directory_app.auth.identity import IdentityProvider
from directory_app.config import settings
from directory_app.errors import ValidationError
from directory_app.models.category import Category
from directory_app.models.click import ClickEvent
from directory_app.models.tool import Tool
from directory_app.schemas.analytics import Dashboard
from directory_app.services.store import store_operation


class AnalyticsService:
    """
    Admin dashboard.

    Reads the full click log, tools and categories, then delegates every
    number to the pure functions in directory_app.analytics.aggregator.
    """

    def __init__(self, db: Session, identity: IdentityProvider):
        self.db = db
        self.identity = identity

    async def get_dashboard(
        self,
        actor_id: Optional[str],
        category: str = aggregator.ALL_CATEGORIES,
        sort: str = SortKey.TOTAL.value,
        now: Optional[datetime] = None,
    ) -> Dashboard:
        self.identity.require_admin(actor_id, "view analytics")
        try:
            sort_key = SortKey(sort)
        except ValueError:
            allowed = ", ".join(key.value for key in SortKey)
            raise ValidationError("sort", f"Sort must be one of: {allowed}") from None

        now = now or datetime.now(timezone.utc)
        days = settings.analytics_window_days

        with store_operation(self.db, "load analytics"):
            tools = self.db.query(Tool).order_by(Tool.clicks_count.desc(), Tool.name).all()
            categories = self.db.query(Category).order_by(Category.name).all()
            events = self.db.query(ClickEvent).order_by(ClickEvent.clicked_at.desc()).all()

        rollups = aggregator.tool_rollups(
            events, tools, categories, now,
            days=days,
            uncategorized=settings.uncategorized_label,
        )
        by_category = aggregator.category_rollups(rollups, categories)
        table = aggregator.sort_rollups(
            aggregator.filter_by_category(rollups, category), sort_key
        )

        return Dashboard(
            totals=aggregator.totals(rollups, category_count=len(categories)),
            category=category or aggregator.ALL_CATEGORIES,
            sort=sort_key.value,
            tools=table,
            categories=by_category,
            daily=aggregator.daily_series(events, now, days=days),
            pie=aggregator.pie_slices(by_category),
            top_tools=aggregator.top_tools(table, limit=settings.top_tools_limit),
        )
