from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from directory_app.dependencies import get_actor_id, get_category_service
from directory_app.schemas.category import (
    CategoryCreate,
    CategoryDeletion,
    CategoryResponse,
    CategoryUpdate,
)
from directory_app.services.category_service import CategoryService

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("/", response_model=List[CategoryResponse])
async def list_categories(
    category_service: CategoryService = Depends(get_category_service),
):
    return await category_service.list_categories()


@router.post("/", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    data: CategoryCreate,
    actor_id: Optional[str] = Depends(get_actor_id),
    category_service: CategoryService = Depends(get_category_service),
):
    """Add a category (admin only)"""
    return await category_service.create_category(actor_id, data)


@router.put("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: str,
    data: CategoryUpdate,
    actor_id: Optional[str] = Depends(get_actor_id),
    category_service: CategoryService = Depends(get_category_service),
):
    """Edit a category (admin only)"""
    return await category_service.update_category(actor_id, category_id, data)


@router.delete("/{category_id}", response_model=CategoryDeletion)
async def delete_category(
    category_id: str,
    confirm: Optional[bool] = Query(
        None,
        description="Required when tools use the category: true moves them to uncategorized, false cancels",
    ),
    actor_id: Optional[str] = Depends(get_actor_id),
    category_service: CategoryService = Depends(get_category_service),
):
    """
    Delete a category (admin only).

    Without confirm, a category still used by tools answers 409 with the
    number of dependent tools and is left in place.
    """
    return await category_service.delete_category(actor_id, category_id, confirm=confirm)
