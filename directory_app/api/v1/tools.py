from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Request, status

from directory_app.auth.identity import Actor
from directory_app.dependencies import (
    get_actor,
    get_actor_id,
    get_catalog_service,
    get_click_recorder,
    get_tool_service,
)
from directory_app.schemas.tool import (
    ReconcileResponse,
    ToolCreate,
    ToolOpenResponse,
    ToolResponse,
    ToolUpdate,
)
from directory_app.services.catalog_service import CatalogService
from directory_app.services.click_recorder import ClickRecorder
from directory_app.services.tool_service import ToolService

router = APIRouter(prefix="/tools", tags=["tools"])


@router.get("/", response_model=List[ToolResponse])
async def list_tools(tool_service: ToolService = Depends(get_tool_service)):
    return await tool_service.list_tools()


@router.post("/", response_model=ToolResponse, status_code=status.HTTP_201_CREATED)
async def create_tool(
    data: ToolCreate,
    actor_id: Optional[str] = Depends(get_actor_id),
    tool_service: ToolService = Depends(get_tool_service),
):
    """Add a tool (admin only)"""
    return await tool_service.create_tool(actor_id, data)


@router.post("/reconcile", response_model=ReconcileResponse)
async def reconcile_click_counts(
    actor_id: Optional[str] = Depends(get_actor_id),
    tool_service: ToolService = Depends(get_tool_service),
):
    """Recompute every tool's clicks_count from the click log (admin only)"""
    return await tool_service.reconcile_click_counts(actor_id)


@router.put("/{tool_id}", response_model=ToolResponse)
async def update_tool(
    tool_id: str,
    data: ToolUpdate,
    actor_id: Optional[str] = Depends(get_actor_id),
    tool_service: ToolService = Depends(get_tool_service),
):
    """Edit a tool (admin only)"""
    return await tool_service.update_tool(actor_id, tool_id, data)


@router.delete("/{tool_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tool(
    tool_id: str,
    actor_id: Optional[str] = Depends(get_actor_id),
    tool_service: ToolService = Depends(get_tool_service),
):
    """Delete a tool (admin only); its click history is kept"""
    await tool_service.delete_tool(actor_id, tool_id)


@router.post("/{tool_id}/open", response_model=ToolOpenResponse)
async def open_tool(
    tool_id: str,
    request: Request,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(get_actor),
    catalog_service: CatalogService = Depends(get_catalog_service),
    recorder: ClickRecorder = Depends(get_click_recorder),
):
    """
    Open a tool from the catalog.

    Returns the destination and the optimistic click count right away;
    the click is stored in the background.
    """
    opened = await catalog_service.open_tool(actor, tool_id)
    background_tasks.add_task(
        recorder.record_click,
        tool_id,
        actor.user_id,
        request.headers.get("referer"),
        request.headers.get("user-agent"),
    )
    return opened
