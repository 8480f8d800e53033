from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime


class ToolBase(BaseModel):
    name: str = Field(..., description="Tool name")
    description: str = Field("", description="Short description shown in the catalog")
    url: str = Field(..., description="Absolute URL of the external tool")
    icon: Optional[str] = Field(None, description="Icon URL or symbolic icon name")
    category_id: Optional[str] = Field(None, description="Category the tool is listed under")


class ToolCreate(ToolBase):
    pass


class ToolUpdate(ToolBase):
    pass


class ToolResponse(ToolBase):
    """Serializes the SQLAlchemy Tool model (from_attributes)."""
    id: str
    clicks_count: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ToolOpenResponse(BaseModel):
    """Returned when a tool is opened; clicks_count is the optimistic value."""
    tool_id: str
    url: str
    clicks_count: int


class ReconcileResponse(BaseModel):
    tools_checked: int
    tools_corrected: int
