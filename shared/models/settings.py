"""Per-user chat preferences."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from shared.models.ingestion import ChunkingConfig, CustomMetadataEntry


class UserSettings(BaseModel):
    """Stored preferences of one user. Created with these defaults on first read."""

    model_config = ConfigDict(populate_by_name=True)

    global_instructions: str = Field(default="", alias="globalInstructions")
    default_model: str = Field(default="gemini-2.5-flash", alias="defaultModel")
    prefer_shorter_answers: bool = Field(default=False, alias="preferShorterAnswers")
    enable_citations: bool = Field(default=True, alias="enableCitations")
    show_advanced_controls: bool = Field(default=False, alias="showAdvancedControls")
    theme: Literal["light", "dark"] = "light"
    default_chunking: ChunkingConfig | None = Field(default=None, alias="defaultChunking")
    default_metadata_presets: list[CustomMetadataEntry] | None = Field(default=None, alias="defaultMetadataPresets")


class UserSettingsUpdate(BaseModel):
    """Partial update. Only the fields present in the request are applied."""

    model_config = ConfigDict(populate_by_name=True)

    global_instructions: str | None = Field(default=None, alias="globalInstructions")
    default_model: str | None = Field(default=None, alias="defaultModel")
    prefer_shorter_answers: bool | None = Field(default=None, alias="preferShorterAnswers")
    enable_citations: bool | None = Field(default=None, alias="enableCitations")
    show_advanced_controls: bool | None = Field(default=None, alias="showAdvancedControls")
    theme: Literal["light", "dark"] | None = None
    default_chunking: ChunkingConfig | None = Field(default=None, alias="defaultChunking")
    default_metadata_presets: list[CustomMetadataEntry] | None = Field(default=None, alias="defaultMetadataPresets")
