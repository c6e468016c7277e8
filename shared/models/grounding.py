"""Decoded generation results and their grounding metadata.

The provider returns loosely typed JSON for grounding chunks. Each chunk is
decoded into either a DocumentChunk or a WebChunk; anything else is dropped.
"""

from typing import Literal, Union

from pydantic import BaseModel


class DocumentChunk(BaseModel):
    """A chunk retrieved from one of the selected file search stores."""

    kind: Literal["document"] = "document"
    title: str | None = None
    uri: str | None = None
    snippet: str | None = None


class WebChunk(BaseModel):
    """A chunk retrieved from a web search result."""

    kind: Literal["web"] = "web"
    title: str | None = None
    uri: str | None = None


GroundingChunk = Union[DocumentChunk, WebChunk]


def _opt_str(value) -> str | None:
    """Return value if it is a non-empty string, otherwise None."""
    return value if isinstance(value, str) and value else None


def decode_grounding_chunk(raw) -> GroundingChunk | None:
    """Decode one raw grounding chunk from the provider response.

    Args:
        raw: The raw chunk, expected to be a dict with either a "retrievedContext"
            or a "web" entry.

    Returns:
        GroundingChunk | None: The decoded chunk, or None if the shape is unknown.
    """
    if not isinstance(raw, dict):
        return None

    context = raw.get("retrievedContext")
    if isinstance(context, dict):
        return DocumentChunk(
            title=_opt_str(context.get("title")),
            uri=_opt_str(context.get("documentUri")) or _opt_str(context.get("uri")),
            snippet=_opt_str(context.get("snippet")) or _opt_str(context.get("text")),
        )

    web = raw.get("web")
    if isinstance(web, dict):
        return WebChunk(title=_opt_str(web.get("title")), uri=_opt_str(web.get("uri")))

    return None


class GenerationResult(BaseModel):
    """The parts of a generateContent response the chat turn needs."""

    text: str = ""
    grounding_chunks: list[GroundingChunk] = []
