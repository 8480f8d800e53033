from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Request, status
from fastapi.responses import RedirectResponse

from directory_app.dependencies import get_actor_id, get_click_recorder, get_tool_service
from directory_app.errors import NotFoundError
from directory_app.services.click_recorder import ClickRecorder
from directory_app.services.tool_service import ToolService

router = APIRouter(tags=["redirect"])


@router.get("/go/{tool_id}")
async def open_tool_redirect(
    tool_id: str,
    request: Request,
    background_tasks: BackgroundTasks,
    actor_id: Optional[str] = Depends(get_actor_id),
    tool_service: ToolService = Depends(get_tool_service),
    recorder: ClickRecorder = Depends(get_click_recorder),
):
    """
    Redirect to the tool's URL and record the click.

    Flow:
    1. Look up the destination (cache-aside)
    2. Schedule click recording to run after the response is sent
    3. Redirect immediately; a failed recording never affects the user
    """
    url = await tool_service.get_destination(tool_id)
    if not url:
        raise NotFoundError("Tool not found", detail=f"tool_id={tool_id}")

    background_tasks.add_task(
        recorder.record_click,
        tool_id,
        actor_id,
        request.headers.get("referer"),
        request.headers.get("user-agent"),
    )
    return RedirectResponse(url=url, status_code=status.HTTP_302_FOUND)
