from typing import Dict, Optional

from sqlalchemy.orm import Session

from directory_app.auth.identity import Actor
from directory_app.catalog.state import (
    CatalogState,
    counts_reconciled,
    favorite_toggled,
    tool_clicked,
)
from directory_app.catalog.view import build_catalog_view
from directory_app.errors import NotFoundError
from directory_app.models.category import Category
from directory_app.models.favorite import Favorite
from directory_app.models.tool import Tool
from directory_app.schemas.catalog import CatalogView
from directory_app.schemas.tool import ToolOpenResponse
from directory_app.services.favorite_service import FavoriteService
from directory_app.services.store import store_operation


class CatalogService:
    """
    Loads catalog records for the actor and runs them through CatalogState.

    Every response is rendered from a state snapshot: clicks pass through
    tool_clicked, favorite changes through favorite_toggled, and counters
    read back from the store through counts_reconciled.
    """

    def __init__(self, db: Session):
        self.db = db

    async def load_state(self, actor: Actor) -> CatalogState:
        with store_operation(self.db, "load catalog state"):
            tools = self.db.query(Tool).order_by(Tool.name).all()
            favorites = self._favorite_ids(actor)
        return CatalogState.from_records(tools, favorites)

    async def persisted_counts(self) -> Dict[str, int]:
        """Current clicks_count of every tool, straight from the store."""
        with store_operation(self.db, "read click counts"):
            rows = self.db.query(Tool.id, Tool.clicks_count).all()
        return {row.id: row.clicks_count or 0 for row in rows}

    async def get_catalog(
        self,
        actor: Actor,
        query: str = "",
        selected: Optional[str] = None,
    ) -> CatalogView:
        state = await self.load_state(actor)
        return await self.render(actor, state, query, selected)

    async def open_tool(self, actor: Actor, tool_id: str) -> ToolOpenResponse:
        """
        Prepare the response for a tool being opened.

        The click itself is recorded separately (background); the count
        returned here is the optimistic one, persisted + this click.
        """
        with store_operation(self.db, "open tool"):
            tool = self.db.query(Tool).filter(Tool.id == tool_id).first()
        if tool is None:
            raise NotFoundError("Tool not found", detail=f"tool_id={tool_id}")

        state = tool_clicked(await self.load_state(actor), tool_id)
        return ToolOpenResponse(
            tool_id=tool_id,
            url=tool.url,
            clicks_count=state.displayed(tool_id),
        )

    async def set_favorite(
        self,
        actor: Actor,
        tool_id: str,
        is_favorite: bool,
        favorite_service: FavoriteService,
        query: str = "",
        selected: Optional[str] = None,
    ) -> CatalogView:
        """
        Star or unstar a tool from the catalog and return the refreshed view.

        The snapshot taken before the write is moved forward with
        favorite_toggled, then reconciled with the counters the store holds
        now, so clicks recorded meanwhile show up in the same response.
        """
        state = await self.load_state(actor)
        if is_favorite:
            change = await favorite_service.add_favorite(actor.user_id, tool_id)
        else:
            change = await favorite_service.remove_favorite(actor.user_id, tool_id)

        state = favorite_toggled(state, tool_id, change.is_favorite)
        state = counts_reconciled(state, await self.persisted_counts())
        return await self.render(actor, state, query, selected)

    async def render(
        self,
        actor: Actor,
        state: CatalogState,
        query: str = "",
        selected: Optional[str] = None,
    ) -> CatalogView:
        with store_operation(self.db, "load catalog"):
            categories = self.db.query(Category).order_by(Category.name).all()
            tools = self.db.query(Tool).order_by(Tool.name).all()

        return build_catalog_view(
            categories=categories,
            tools=tools,
            favorite_ids=state.favorites,
            query=query,
            selected=selected,
            authenticated=actor.is_authenticated,
            clicks=state.displayed_counts(),
        )

    def _favorite_ids(self, actor: Actor) -> frozenset:
        if not actor.is_authenticated:
            return frozenset()
        rows = self.db.query(Favorite.tool_id).filter(Favorite.user_id == actor.user_id).all()
        return frozenset(row.tool_id for row in rows)
