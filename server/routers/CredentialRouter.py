"""API key router: lets a user store, check and remove their Gemini API key."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from server.dependencies.auth import get_current_user_id, verify_api_key
from server.models.requests import ApiKeyRequest
from server.models.responses import ApiKeyStatusResponse, SuccessResponse

router = APIRouter(prefix="/user/api-key", tags=["Settings"], dependencies=[Depends(verify_api_key)])


@router.get("")
async def handle_get_api_key_status(request: Request, user_id: str = Depends(get_current_user_id)) -> JSONResponse:
    has_key = await request.app.state.credential_service.has_api_key(user_id)
    return JSONResponse(content=ApiKeyStatusResponse(has_api_key=has_key).model_dump(by_alias=True))


@router.post("")
async def handle_set_api_key(
    request: Request,
    body: ApiKeyRequest,
    user_id: str = Depends(get_current_user_id),
) -> JSONResponse:
    await request.app.state.credential_service.set_api_key(user_id, body.api_key)
    return JSONResponse(content=SuccessResponse(message="API key saved successfully").model_dump())


@router.delete("")
async def handle_delete_api_key(request: Request, user_id: str = Depends(get_current_user_id)) -> JSONResponse:
    await request.app.state.credential_service.clear_api_key(user_id)
    return JSONResponse(content=SuccessResponse(message="API key removed successfully").model_dump())
