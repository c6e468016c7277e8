"""Pydantic models for file uploads and the ingestion state machine."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class IngestionStatus(str, Enum):
    UPLOADING = "uploading"
    INDEXING = "indexing"
    READY = "ready"
    ERROR = "error"


class IngestionErrorKind(str, Enum):
    """Why a job ended in IngestionStatus.ERROR."""

    UPLOAD_FAILED = "upload_failed"
    INDEXING_FAILED = "indexing_failed"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"


class ChunkingConfig(BaseModel):
    """Simplified chunking request as submitted by the UI."""

    model_config = ConfigDict(populate_by_name=True)

    max_tokens_per_chunk: int | None = Field(default=None, alias="maxTokensPerChunk")
    max_overlap_tokens: int | None = Field(default=None, alias="maxOverlapTokens")


class CustomMetadataEntry(BaseModel):
    """A custom metadata entry attached to an uploaded document."""

    model_config = ConfigDict(populate_by_name=True)

    key: str
    string_value: str | None = Field(default=None, alias="stringValue")
    # bool keeps JSON true/false from being read as 1.0/0.0
    numeric_value: bool | float | str | None = Field(default=None, alias="numericValue")


class UploadedFile(BaseModel):
    """File bytes plus the metadata needed to forward them to the provider."""

    file_name: str
    content: bytes
    mime_type: str = "application/octet-stream"


class Operation(BaseModel):
    """A provider long-running operation as returned by upload and operations.get."""

    name: str | None = None
    done: bool = False
    error_message: str | None = None


class IngestionJob(BaseModel):
    """State of one upload. Terminal states are READY and ERROR."""

    model_config = ConfigDict(populate_by_name=True)

    file_name: str = Field(alias="fileName")
    display_name: str = Field(alias="displayName")
    store_id: str = Field(alias="storeName")
    status: IngestionStatus = IngestionStatus.UPLOADING
    operation_name: str | None = Field(default=None, alias="operationName")
    error: str | None = None
    error_kind: IngestionErrorKind | None = Field(default=None, alias="errorKind")

    def is_terminal(self) -> bool:
        return self.status in (IngestionStatus.READY, IngestionStatus.ERROR)
