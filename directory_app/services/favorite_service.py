import logging
from typing import List, Optional, Set

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from directory_app.auth.identity import IdentityProvider
from directory_app.errors import NotFoundError
from directory_app.models.favorite import Favorite
from directory_app.models.tool import Tool
from directory_app.schemas.favorite import FavoriteChange
from directory_app.services.store import store_operation

logger = logging.getLogger(__name__)


class FavoriteService:
    """
    Per-user favorites.

    Adding an existing favorite and removing a missing one both succeed
    without changing anything (changed=False).
    """

    def __init__(self, db: Session, identity: IdentityProvider):
        self.db = db
        self.identity = identity

    async def favorite_ids(self, user_id: Optional[str]) -> Set[str]:
        """Tool ids favorited by user_id; empty for anonymous callers."""
        if not user_id:
            return set()
        with store_operation(self.db, "list favorites"):
            rows = self.db.query(Favorite.tool_id).filter(Favorite.user_id == user_id).all()
        return {row.tool_id for row in rows}

    async def list_favorites(self, actor_id: Optional[str]) -> List[str]:
        actor = self.identity.require_user(actor_id, "view favorites")
        return sorted(await self.favorite_ids(actor.user_id))

    async def add_favorite(self, actor_id: Optional[str], tool_id: str) -> FavoriteChange:
        actor = self.identity.require_user(actor_id, "save favorites")

        with store_operation(self.db, "add favorite"):
            if self.db.query(Tool.id).filter(Tool.id == tool_id).first() is None:
                raise NotFoundError("Tool not found", detail=f"tool_id={tool_id}")
            if self._find(actor.user_id, tool_id) is not None:
                return FavoriteChange(tool_id=tool_id, is_favorite=True, changed=False)
            self.db.add(Favorite(user_id=actor.user_id, tool_id=tool_id))
            try:
                self.db.commit()
            except IntegrityError:
                # A concurrent request stored the same favorite first
                self.db.rollback()
                logger.info("Favorite %s for %s already stored", tool_id, actor.user_id)
                return FavoriteChange(tool_id=tool_id, is_favorite=True, changed=False)

        return FavoriteChange(tool_id=tool_id, is_favorite=True, changed=True)

    async def remove_favorite(self, actor_id: Optional[str], tool_id: str) -> FavoriteChange:
        actor = self.identity.require_user(actor_id, "remove favorites")

        with store_operation(self.db, "remove favorite"):
            favorite = self._find(actor.user_id, tool_id)
            if favorite is None:
                return FavoriteChange(tool_id=tool_id, is_favorite=False, changed=False)
            self.db.delete(favorite)
            self.db.commit()

        return FavoriteChange(tool_id=tool_id, is_favorite=False, changed=True)

    def _find(self, user_id: str, tool_id: str) -> Optional[Favorite]:
        return self.db.query(Favorite).filter(
            Favorite.user_id == user_id,
            Favorite.tool_id == tool_id,
        ).first()
