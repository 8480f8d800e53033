from pydantic import BaseModel, Field
from typing import List, Optional


class CatalogTool(BaseModel):
    id: str
    name: str
    description: str
    url: str
    icon: Optional[str] = None
    category_id: Optional[str] = None
    category: str = Field(..., description="Category name, or the uncategorized label")
    clicks_count: int
    is_favorite: bool = False


class CatalogBucket(BaseModel):
    name: str
    count: int = Field(..., description="Tools in this bucket matching the current query")


class CatalogView(BaseModel):
    selected: str
    query: str
    buckets: List[CatalogBucket]
    tools: List[CatalogTool]
