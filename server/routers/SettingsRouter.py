"""Settings router: per-user chat preferences."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from server.dependencies.auth import get_current_user_id, verify_api_key
from shared.models.settings import UserSettingsUpdate

router = APIRouter(prefix="/settings", tags=["Settings"], dependencies=[Depends(verify_api_key)])


@router.get("")
async def handle_get_settings(request: Request, user_id: str = Depends(get_current_user_id)) -> JSONResponse:
    settings = await request.app.state.settings_service.get_settings(user_id)
    return JSONResponse(content=settings.model_dump(mode="json", by_alias=True, exclude_none=True))


@router.post("")
async def handle_update_settings(
    request: Request,
    body: UserSettingsUpdate,
    user_id: str = Depends(get_current_user_id),
) -> JSONResponse:
    settings = await request.app.state.settings_service.update_settings(user_id, body)
    return JSONResponse(content=settings.model_dump(mode="json", by_alias=True, exclude_none=True))
