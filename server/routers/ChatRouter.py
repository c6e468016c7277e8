"""Chat router: grounded chat turns and the model catalogue."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from server.dependencies.auth import get_current_user_id, verify_api_key
from shared.models.chat import ChatTurnRequest

router = APIRouter(dependencies=[Depends(verify_api_key)])


@router.post("/chat", tags=["Chat"])
async def handle_chat(
    request: Request,
    body: ChatTurnRequest,
    user_id: str = Depends(get_current_user_id),
) -> JSONResponse:
    """Answer a message from the selected stores and persist both sides of the turn.

    Returns:
        JSONResponse: {"text", "citations"?, "conversationId"}.
    """
    client = await request.app.state.credential_service.get_client(user_id)
    result = await request.app.state.retrieval_session.run_turn(user_id, client, body)
    return JSONResponse(content=result.model_dump(mode="json", by_alias=True, exclude_none=True))


@router.get("/models", tags=["Chat"])
async def handle_list_models(request: Request) -> JSONResponse:
    registry = request.app.state.model_registry
    return JSONResponse(content={
        "default": registry.get_default().public_id,
        "models": [model.model_dump(mode="json", by_alias=True) for model in registry.list_models()],
    })
