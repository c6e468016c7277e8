"""FastAPI application entry point for the file search chat service."""

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shared.logging.logging_setup import setup_logging
from shared.helper.HelperConfig import HelperConfig
from shared.errors.app_errors import AppError
from shared.security.CredentialVault import CredentialVault
from shared.clients.llm.LLMClientManager import LLMClientManager
from shared.clients.llm.ModelRegistry import ModelRegistry
from shared.persistence.memory.ConversationStoreMemory import ConversationStoreMemory
from shared.persistence.memory.UserStoreMemory import UserStoreMemory
from services.file_ingestion.IngestionController import IngestionController
from server.core.CitationAggregator import CitationAggregator
from server.core.CredentialService import CredentialService
from server.core.RetrievalSession import RetrievalSession
from server.core.SettingsService import SettingsService
from server.core.StoreService import StoreService
from server.routers.ChatRouter import router as chat_router
from server.routers.ConversationRouter import router as conversation_router
from server.routers.CredentialRouter import router as credential_router
from server.routers.SettingsRouter import router as settings_router
from server.routers.StoreRouter import router as store_router

logging = setup_logging()
app_version = os.getenv("APP_VERSION", "unknown")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # when the app starts
    app.state.logging = logging
    app.state.helper_config = HelperConfig(logger=logging)

    # fails fast on a missing or malformed ENCRYPTION_KEY / DEFAULT_MODEL
    vault = CredentialVault(helper_config=app.state.helper_config)
    app.state.model_registry = ModelRegistry(helper_config=app.state.helper_config)

    app.state.client_pool = LLMClientManager(helper_config=app.state.helper_config)
    app.state.conversation_store = ConversationStoreMemory()
    app.state.user_store = UserStoreMemory()

    app.state.credential_service = CredentialService(
        helper_config=app.state.helper_config,
        vault=vault,
        user_store=app.state.user_store,
        client_pool=app.state.client_pool,
    )
    app.state.settings_service = SettingsService(
        helper_config=app.state.helper_config,
        user_store=app.state.user_store,
        model_registry=app.state.model_registry,
    )
    app.state.retrieval_session = RetrievalSession(
        helper_config=app.state.helper_config,
        conversation_store=app.state.conversation_store,
        model_registry=app.state.model_registry,
        citation_aggregator=CitationAggregator(),
    )
    app.state.ingestion_controller = IngestionController(helper_config=app.state.helper_config)
    app.state.store_service = StoreService(helper_config=app.state.helper_config)

    logging.info(
        "Service ready: default model %s, %d models registered.",
        app.state.model_registry.get_default().public_id,
        len(app.state.model_registry.list_models()),
    )

    # while the app is running...
    yield

    # when the app shuts down, close all pooled provider clients
    logging.info("Shutting down, closing all clients...")
    await app.state.client_pool.close()


app = FastAPI(
    title="filesearch_chat",
    description=(
        "Retrieval-augmented chat over Gemini File Search stores. "
        "Users upload documents into stores and chat with a model that answers "
        "from those stores and cites its sources."
    ),
    version=app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    """Translate application errors into {"error": message} responses."""
    if exc.status_code >= 500:
        logging.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    else:
        logging.warning("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


app.include_router(chat_router)
app.include_router(credential_router)
app.include_router(settings_router)
app.include_router(conversation_router)
app.include_router(store_router)


if __name__ == "__main__":
    import uvicorn

    logging.info(
        "Starting filesearch_chat API Server v%s from root dir: %s on port 8000...",
        app_version,
        os.environ.get("ROOT_DIR", os.getcwd()),
    )
    uvicorn.run(app, host="0.0.0.0", port=8000)
