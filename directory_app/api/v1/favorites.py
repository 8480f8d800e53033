from typing import Optional

from fastapi import APIRouter, Depends

from directory_app.dependencies import get_actor_id, get_favorite_service
from directory_app.schemas.favorite import FavoriteChange, FavoriteList
from directory_app.services.favorite_service import FavoriteService

router = APIRouter(prefix="/favorites", tags=["favorites"])


@router.get("/", response_model=FavoriteList)
async def list_favorites(
    actor_id: Optional[str] = Depends(get_actor_id),
    favorite_service: FavoriteService = Depends(get_favorite_service),
):
    tool_ids = await favorite_service.list_favorites(actor_id)
    return FavoriteList(user_id=actor_id, tool_ids=tool_ids)


@router.put("/{tool_id}", response_model=FavoriteChange)
async def add_favorite(
    tool_id: str,
    actor_id: Optional[str] = Depends(get_actor_id),
    favorite_service: FavoriteService = Depends(get_favorite_service),
):
    """Favorite a tool; repeating the call changes nothing"""
    return await favorite_service.add_favorite(actor_id, tool_id)


@router.delete("/{tool_id}", response_model=FavoriteChange)
async def remove_favorite(
    tool_id: str,
    actor_id: Optional[str] = Depends(get_actor_id),
    favorite_service: FavoriteService = Depends(get_favorite_service),
):
    """Unfavorite a tool; removing a missing favorite is not an error"""
    return await favorite_service.remove_favorite(actor_id, tool_id)
