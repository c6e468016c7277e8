from pydantic import BaseModel, ConfigDict, Field


class ApiKeyRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    api_key: str = Field(default="", alias="apiKey")


class CreateStoreRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    display_name: str = Field(default="", alias="displayName")


class ConversationTitleRequest(BaseModel):
    title: str | None = None
