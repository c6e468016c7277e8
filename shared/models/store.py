"""Pydantic models for provider-managed file search stores."""

from pydantic import BaseModel, ConfigDict, Field


class FileSearchStore(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    display_name: str = Field(default="", alias="displayName")


class StoreDocument(BaseModel):
    """A document indexed inside a file search store."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    display_name: str = Field(default="", alias="displayName")
    size_bytes: str | None = Field(default=None, alias="sizeBytes")
    mime_type: str | None = Field(default=None, alias="mimeType")
