from pydantic import BaseModel, ConfigDict, Field

from shared.models.chat import Conversation, Message


class ApiKeyStatusResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    has_api_key: bool = Field(alias="hasApiKey")


class SuccessResponse(BaseModel):
    success: bool = True
    message: str | None = None


class ConversationDetailResponse(Conversation):
    messages: list[Message] = []


class OperationStatusResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    operation_name: str = Field(alias="operationName")
    done: bool
    error: str | None = None
