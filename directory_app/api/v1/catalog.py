from typing import Optional

from fastapi import APIRouter, Depends, Query

from directory_app.auth.identity import Actor
from directory_app.dependencies import get_actor, get_catalog_service, get_favorite_service
from directory_app.schemas.catalog import CatalogView
from directory_app.services.catalog_service import CatalogService
from directory_app.services.favorite_service import FavoriteService

router = APIRouter(prefix="/catalog", tags=["catalog"])


@router.get("/", response_model=CatalogView)
async def get_catalog(
    q: str = Query("", description="Search in tool names and descriptions"),
    category: Optional[str] = Query(None, description="Bucket: a category name, 'All Tools' or 'My Favorites'"),
    actor: Actor = Depends(get_actor),
    catalog_service: CatalogService = Depends(get_catalog_service),
):
    """Browsable catalog for the caller, filtered by bucket and search text"""
    return await catalog_service.get_catalog(actor, query=q, selected=category)


@router.put("/favorites/{tool_id}", response_model=CatalogView)
async def star_tool(
    tool_id: str,
    q: str = Query(""),
    category: Optional[str] = Query(None),
    actor: Actor = Depends(get_actor),
    catalog_service: CatalogService = Depends(get_catalog_service),
    favorite_service: FavoriteService = Depends(get_favorite_service),
):
    """Favorite a tool and return the refreshed catalog"""
    return await catalog_service.set_favorite(
        actor, tool_id, True, favorite_service, query=q, selected=category
    )


@router.delete("/favorites/{tool_id}", response_model=CatalogView)
async def unstar_tool(
    tool_id: str,
    q: str = Query(""),
    category: Optional[str] = Query(None),
    actor: Actor = Depends(get_actor),
    catalog_service: CatalogService = Depends(get_catalog_service),
    favorite_service: FavoriteService = Depends(get_favorite_service),
):
    """Unfavorite a tool and return the refreshed catalog"""
    return await catalog_service.set_favorite(
        actor, tool_id, False, favorite_service, query=q, selected=category
    )
