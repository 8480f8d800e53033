from pydantic import BaseModel
from typing import List


class FavoriteList(BaseModel):
    user_id: str
    tool_ids: List[str]


class FavoriteChange(BaseModel):
    tool_id: str
    is_favorite: bool
    changed: bool
