"""Turns the grounding metadata of a generation result into a citation list."""

from shared.models.chat import Citation
from shared.models.grounding import DocumentChunk, GenerationResult, GroundingChunk, WebChunk

UNKNOWN_DOCUMENT_SOURCE = "Unknown source"
UNKNOWN_WEB_SOURCE = "Web source"


class CitationAggregator:
    """Extracts and deduplicates citations from grounding chunks.

    Citations are deduplicated by exact file name, keeping the order in which
    sources first appear. A later duplicate only contributes its snippet, and
    only when the kept citation has none.
    """

    def extract(self, result: GenerationResult) -> list[Citation]:
        citations = [self._to_citation(chunk) for chunk in result.grounding_chunks]
        return self._deduplicate(citations)

    ##########################################
    ############### HELPERS ##################
    ##########################################

    def _to_citation(self, chunk: GroundingChunk) -> Citation:
        if isinstance(chunk, DocumentChunk):
            file_name = chunk.title
            if not file_name and chunk.uri:
                # "fileSearchStores/abc/documents/report-pdf" -> "report-pdf"
                file_name = chunk.uri.split("/")[-1]
            return Citation(file_name=file_name or UNKNOWN_DOCUMENT_SOURCE, snippet=chunk.snippet)

        if isinstance(chunk, WebChunk):
            return Citation(file_name=chunk.title or chunk.uri or UNKNOWN_WEB_SOURCE, snippet=chunk.uri)

        raise TypeError(f"Unsupported grounding chunk type: {type(chunk).__name__}")

    def _deduplicate(self, citations: list[Citation]) -> list[Citation]:
        unique: dict[str, Citation] = {}
        for citation in citations:
            kept = unique.get(citation.file_name)
            if kept is None:
                unique[citation.file_name] = citation.model_copy()
            elif citation.snippet and not kept.snippet:
                kept.snippet = citation.snippet
        return list(unique.values())
