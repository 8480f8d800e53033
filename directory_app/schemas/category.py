from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime


class CategoryBase(BaseModel):
    name: str = Field(..., description="Display name, at most 50 characters")
    description: Optional[str] = Field(None, description="Optional description, at most 500 characters")


class CategoryCreate(CategoryBase):
    pass


class CategoryUpdate(CategoryBase):
    pass


class CategoryResponse(CategoryBase):
    id: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CategoryDeletion(BaseModel):
    """Outcome of a delete request: "deleted" or "cancelled"."""
    category_id: str
    state: str
    reassigned_tools: int = 0
