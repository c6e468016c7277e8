"""Store router: file search store management and file uploads."""

import asyncio

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse

from server.dependencies.auth import get_current_user_id, verify_api_key
from server.models.requests import CreateStoreRequest
from server.models.responses import OperationStatusResponse, SuccessResponse
from shared.models.ingestion import UploadedFile

DISCONNECT_CHECK_SECONDS = 1.0

router = APIRouter(tags=["Stores"], dependencies=[Depends(verify_api_key)])


async def _watch_disconnect(request: Request, cancel_event: asyncio.Event) -> None:
    """Set cancel_event as soon as the client hangs up."""
    while not cancel_event.is_set():
        if await request.is_disconnected():
            request.app.state.logging.warning("Client disconnected during upload, stopping ingestion polling.")
            cancel_event.set()
            return
        await asyncio.sleep(DISCONNECT_CHECK_SECONDS)


@router.get("/stores")
async def handle_list_stores(request: Request, user_id: str = Depends(get_current_user_id)) -> JSONResponse:
    client = await request.app.state.credential_service.get_client(user_id)
    stores = await request.app.state.store_service.list_stores(client)
    return JSONResponse(content=[s.model_dump(by_alias=True) for s in stores])


@router.post("/stores")
async def handle_create_store(
    request: Request,
    body: CreateStoreRequest,
    user_id: str = Depends(get_current_user_id),
) -> JSONResponse:
    client = await request.app.state.credential_service.get_client(user_id)
    store = await request.app.state.store_service.create_store(client, body.display_name)
    return JSONResponse(content=store.model_dump(by_alias=True))


@router.get("/stores/{store_id:path}/files")
async def handle_list_files(request: Request, store_id: str, user_id: str = Depends(get_current_user_id)) -> JSONResponse:
    client = await request.app.state.credential_service.get_client(user_id)
    documents = await request.app.state.store_service.list_documents(client, store_id)
    return JSONResponse(content=[d.model_dump(by_alias=True, exclude_none=True) for d in documents])


@router.delete("/stores/{store_id:path}/files/{document_name:path}")
async def handle_delete_file(
    request: Request,
    store_id: str,
    document_name: str,
    force: bool = False,
    user_id: str = Depends(get_current_user_id),
) -> JSONResponse:
    client = await request.app.state.credential_service.get_client(user_id)
    await request.app.state.store_service.delete_document(client, document_name, force=force)
    return JSONResponse(content=SuccessResponse().model_dump(exclude_none=True))


@router.post("/stores/{store_id:path}/upload")
async def handle_upload(
    request: Request,
    store_id: str,
    file: UploadFile | None = File(default=None),
    display_name: str | None = Form(default=None, alias="displayName"),
    chunking_config: str | None = Form(default=None, alias="chunkingConfig"),
    custom_metadata: str | None = Form(default=None, alias="customMetadata"),
    user_id: str = Depends(get_current_user_id),
) -> JSONResponse:
    """Upload a file into a store and wait until it is indexed.

    Polling stops early if the client disconnects; the returned job then has
    status "error" and still carries the operation name.

    Returns:
        JSONResponse: {"fileName", "displayName", "status", "error"?, "operationName"?, "errorKind"?}.
    """
    client = await request.app.state.credential_service.get_client(user_id)
    controller = request.app.state.ingestion_controller

    uploaded = None
    if file is not None:
        uploaded = UploadedFile(
            file_name=file.filename or "",
            content=await file.read(),
            mime_type=file.content_type or "application/octet-stream",
        )

    cancel_event = asyncio.Event()
    watcher = asyncio.create_task(_watch_disconnect(request, cancel_event))
    try:
        job = await controller.ingest(
            client,
            store_id,
            uploaded,
            display_name,
            chunking=controller.parse_chunking_config(chunking_config),
            custom_metadata=controller.parse_custom_metadata(custom_metadata),
            cancel_event=cancel_event,
        )
    finally:
        watcher.cancel()

    return JSONResponse(content=job.model_dump(mode="json", by_alias=True, exclude_none=True, exclude={"store_id"}))


@router.get("/stores/{store_id:path}")
async def handle_get_store(request: Request, store_id: str, user_id: str = Depends(get_current_user_id)) -> JSONResponse:
    client = await request.app.state.credential_service.get_client(user_id)
    store = await request.app.state.store_service.get_store(client, store_id)
    return JSONResponse(content=store.model_dump(by_alias=True))


@router.delete("/stores/{store_id:path}")
async def handle_delete_store(
    request: Request,
    store_id: str,
    force: bool = False,
    user_id: str = Depends(get_current_user_id),
) -> JSONResponse:
    client = await request.app.state.credential_service.get_client(user_id)
    await request.app.state.store_service.delete_store(client, store_id, force=force)
    return JSONResponse(content=SuccessResponse().model_dump(exclude_none=True))


@router.get("/operations/{operation_name:path}")
async def handle_get_operation(
    request: Request,
    operation_name: str,
    user_id: str = Depends(get_current_user_id),
) -> JSONResponse:
    """Query an indexing operation out-of-band, e.g. after an upload timed out."""
    client = await request.app.state.credential_service.get_client(user_id)
    operation = await request.app.state.ingestion_controller.get_operation_status(client, operation_name)
    response = OperationStatusResponse(
        operation_name=operation.name or operation_name,
        done=operation.done,
        error=operation.error_message,
    )
    return JSONResponse(content=response.model_dump(by_alias=True, exclude_none=True))
