"""Pydantic models for conversations, messages and chat turns."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class Citation(BaseModel):
    """A source the generated answer was grounded in.

    Two citations are the same source when their file_name matches exactly.
    """

    model_config = ConfigDict(populate_by_name=True)

    file_name: str = Field(alias="fileName")
    snippet: str | None = None


class Message(BaseModel):
    """A single persisted chat message. Never mutated after creation."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    conversation_id: str = Field(alias="conversationId")
    role: MessageRole
    content: str
    citations: list[Citation] | None = None
    created_at: datetime = Field(alias="createdAt")


class Conversation(BaseModel):
    """A user's conversation thread."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    user_id: str = Field(alias="userId")
    title: str
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")


class ChatTurnRequest(BaseModel):
    """Incoming chat turn as sent by the UI.

    Emptiness of message and store_ids is checked by RetrievalSession so that the
    rejection happens as a ValidationError before anything is persisted.
    """

    model_config = ConfigDict(populate_by_name=True)

    message: str = ""
    store_ids: list[str] = Field(default_factory=list, alias="storeNames")
    instructions: str | None = None
    metadata_filter: str | None = Field(default=None, alias="metadataFilter")
    model_public_id: str | None = Field(default=None, alias="model")
    conversation_id: str | None = Field(default=None, alias="conversationId")


class ChatTurnResponse(BaseModel):
    """Result of a chat turn. citations is None when the answer cited nothing."""

    model_config = ConfigDict(populate_by_name=True)

    text: str
    citations: list[Citation] | None = None
    conversation_id: str = Field(alias="conversationId")


class RetrievalToolConfig(BaseModel):
    """Retrieval scope for one generation call."""

    store_ids: list[str]
    metadata_filter: str | None = None
