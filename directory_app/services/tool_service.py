import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from directory_app.auth.identity import IdentityProvider
from directory_app.cache.strategies import CacheStrategy, tool_url_key
from directory_app.config import settings
from directory_app.errors import NotFoundError, ValidationError
from directory_app.models.category import Category
from directory_app.models.click import ClickEvent
from directory_app.models.favorite import Favorite
from directory_app.models.tool import Tool
from directory_app.schemas.tool import ReconcileResponse, ToolCreate, ToolUpdate
from directory_app.services.store import store_operation
from directory_app.services.validation import validate_tool

logger = logging.getLogger(__name__)


class ToolService:
    """
    Tool CRUD, click-through destination lookups and counter reconciliation.

    The cache is optional; when present it holds tool_id -> url for the
    redirect path and is invalidated on every edit or delete.
    """

    def __init__(
        self,
        db: Session,
        identity: IdentityProvider,
        cache: Optional[CacheStrategy] = None,
    ):
        self.db = db
        self.identity = identity
        self.cache = cache

    async def list_tools(self) -> List[Tool]:
        """Tools ordered by name, the catalog's default order."""
        with store_operation(self.db, "list tools"):
            return self.db.query(Tool).order_by(Tool.name).all()

    async def get_tool(self, tool_id: str) -> Optional[Tool]:
        with store_operation(self.db, "get tool"):
            return self.db.query(Tool).filter(Tool.id == tool_id).first()

    async def create_tool(self, actor_id: Optional[str], data: ToolCreate) -> Tool:
        self.identity.require_admin(actor_id, "add tools")
        name, url = validate_tool(data.name, data.url, data.category_id)

        with store_operation(self.db, "create tool"):
            self._ensure_category(data.category_id)
            tool = Tool(
                name=name,
                description=(data.description or "").strip(),
                url=url,
                icon=data.icon or None,
                category_id=data.category_id,
                clicks_count=0,
            )
            self.db.add(tool)
            self.db.commit()
            self.db.refresh(tool)

        logger.info("Tool %s created by %s", tool.id, actor_id)
        return tool

    async def update_tool(self, actor_id: Optional[str], tool_id: str, data: ToolUpdate) -> Tool:
        """Replace the editable fields; clicks_count is never touched here."""
        self.identity.require_admin(actor_id, "edit tools")
        name, url = validate_tool(data.name, data.url, data.category_id)

        with store_operation(self.db, "update tool"):
            tool = self._get_or_404(tool_id)
            self._ensure_category(data.category_id)
            tool.name = name
            tool.description = (data.description or "").strip()
            tool.url = url
            tool.icon = data.icon or None
            tool.category_id = data.category_id
            self.db.commit()
            self.db.refresh(tool)

        if self.cache:
            await self.cache.delete(tool_url_key(tool_id))
        return tool

    async def delete_tool(self, actor_id: Optional[str], tool_id: str) -> None:
        """Remove a tool and its favorites. Its click events stay in the log."""
        self.identity.require_admin(actor_id, "delete tools")

        with store_operation(self.db, "delete tool"):
            tool = self._get_or_404(tool_id)
            self.db.query(Favorite).filter(Favorite.tool_id == tool_id).delete(
                synchronize_session=False
            )
            self.db.delete(tool)
            self.db.commit()

        if self.cache:
            await self.cache.delete(tool_url_key(tool_id))
        logger.info("Tool %s deleted by %s", tool_id, actor_id)

    async def get_destination(self, tool_id: str) -> Optional[str]:
        """
        Outbound URL for a click-through, using Cache-Aside.

        1. Check cache
        2. On miss, read the tool from the store
        3. Populate cache for next time
        """
        cache_key = tool_url_key(tool_id)
        if self.cache:
            cached_url = await self.cache.get(cache_key)
            if cached_url:
                return cached_url

        tool = await self.get_tool(tool_id)
        if not tool:
            return None

        if self.cache:
            await self.cache.set(cache_key, tool.url, ttl=settings.cache_ttl)
        return tool.url

    async def reconcile_click_counts(self, actor_id: Optional[str]) -> ReconcileResponse:
        """Rewrite every cached clicks_count with the count from the click log."""
        self.identity.require_admin(actor_id, "reconcile click counts")

        with store_operation(self.db, "reconcile click counts"):
            counts = dict(
                self.db.query(ClickEvent.tool_id, func.count(ClickEvent.id))
                .group_by(ClickEvent.tool_id)
                .all()
            )
            tools = self.db.query(Tool).populate_existing().all()
            corrected = 0
            for tool in tools:
                actual = counts.get(tool.id, 0)
                if tool.clicks_count != actual:
                    logger.info(
                        "Tool %s clicks_count %s -> %s", tool.id, tool.clicks_count, actual
                    )
                    tool.clicks_count = actual
                    corrected += 1
            self.db.commit()

        return ReconcileResponse(tools_checked=len(tools), tools_corrected=corrected)

    def _get_or_404(self, tool_id: str) -> Tool:
        tool = self.db.query(Tool).filter(Tool.id == tool_id).first()
        if tool is None:
            raise NotFoundError("Tool not found", detail=f"tool_id={tool_id}")
        return tool

    def _ensure_category(self, category_id: str):
        if self.db.query(Category.id).filter(Category.id == category_id).first() is None:
            raise ValidationError("category_id", "Selected category does not exist")
