"""Conversation router: history listing, replay, renaming and deletion."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from server.dependencies.auth import get_current_user_id, verify_api_key
from server.models.requests import ConversationTitleRequest
from server.models.responses import ConversationDetailResponse, SuccessResponse
from shared.errors.app_errors import NotFoundError

DEFAULT_TITLE = "New Conversation"

router = APIRouter(prefix="/conversations", tags=["Conversations"], dependencies=[Depends(verify_api_key)])


@router.get("")
async def handle_list_conversations(request: Request, user_id: str = Depends(get_current_user_id)) -> JSONResponse:
    conversations = await request.app.state.conversation_store.list_conversations(user_id)
    return JSONResponse(content=[c.model_dump(mode="json", by_alias=True) for c in conversations])


@router.post("")
async def handle_create_conversation(
    request: Request,
    body: ConversationTitleRequest,
    user_id: str = Depends(get_current_user_id),
) -> JSONResponse:
    conversation = await request.app.state.conversation_store.create_conversation(user_id, body.title or DEFAULT_TITLE)
    return JSONResponse(content=conversation.model_dump(mode="json", by_alias=True))


@router.get("/{conversation_id}")
async def handle_get_conversation(
    request: Request,
    conversation_id: str,
    user_id: str = Depends(get_current_user_id),
) -> JSONResponse:
    """Return a conversation with its messages in creation order.

    Raises:
        NotFoundError: If the conversation does not exist for this user.
    """
    store = request.app.state.conversation_store
    conversation = await store.find_conversation(conversation_id, user_id)
    if conversation is None:
        raise NotFoundError("Conversation not found")

    detail = ConversationDetailResponse(
        **conversation.model_dump(),
        messages=await store.list_messages(conversation_id),
    )
    return JSONResponse(content=detail.model_dump(mode="json", by_alias=True, exclude_none=True))


@router.patch("/{conversation_id}")
async def handle_rename_conversation(
    request: Request,
    conversation_id: str,
    body: ConversationTitleRequest,
    user_id: str = Depends(get_current_user_id),
) -> JSONResponse:
    await request.app.state.conversation_store.rename_conversation(conversation_id, user_id, body.title or DEFAULT_TITLE)
    return JSONResponse(content=SuccessResponse().model_dump(exclude_none=True))


@router.delete("/{conversation_id}")
async def handle_delete_conversation(
    request: Request,
    conversation_id: str,
    user_id: str = Depends(get_current_user_id),
) -> JSONResponse:
    await request.app.state.conversation_store.delete_conversation(conversation_id, user_id)
    return JSONResponse(content=SuccessResponse().model_dump(exclude_none=True))
