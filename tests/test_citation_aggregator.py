from server.core.CitationAggregator import CitationAggregator
from shared.models.chat import Citation
from shared.models.grounding import DocumentChunk, GenerationResult, WebChunk


def _extract(*chunks) -> list[Citation]:
    return CitationAggregator().extract(GenerationResult(text="", grounding_chunks=list(chunks)))


def test_duplicates_keep_first_occurrence_and_backfill_snippet():
    citations = _extract(
        DocumentChunk(title="report.pdf"),
        DocumentChunk(title="report.pdf", snippet="revenue grew"),
        DocumentChunk(title="notes.md", snippet="intro"),
    )
    assert citations == [
        Citation(file_name="report.pdf", snippet="revenue grew"),
        Citation(file_name="notes.md", snippet="intro"),
    ]


def test_later_duplicate_does_not_overwrite_snippet():
    citations = _extract(
        DocumentChunk(title="a.pdf", snippet="first"),
        DocumentChunk(title="a.pdf", snippet="second"),
    )
    assert citations == [Citation(file_name="a.pdf", snippet="first")]


def test_document_name_falls_back_to_last_uri_segment():
    citations = _extract(DocumentChunk(uri="fileSearchStores/s1/documents/quarterly-report"))
    assert citations[0].file_name == "quarterly-report"


def test_document_without_title_or_uri():
    assert _extract(DocumentChunk(snippet="x"))[0] == Citation(file_name="Unknown source", snippet="x")


def test_web_chunks():
    citations = _extract(
        WebChunk(title="Example", uri="https://example.com/a"),
        WebChunk(uri="https://example.com/b"),
        WebChunk(),
    )
    assert citations == [
        Citation(file_name="Example", snippet="https://example.com/a"),
        Citation(file_name="https://example.com/b", snippet="https://example.com/b"),
        Citation(file_name="Web source", snippet=None),
    ]


def test_file_names_are_unique():
    citations = _extract(*[DocumentChunk(title=f"doc-{i % 3}") for i in range(10)])
    names = [c.file_name for c in citations]
    assert names == ["doc-0", "doc-1", "doc-2"]


def test_no_chunks():
    assert _extract() == []


def test_input_is_not_mutated():
    first = DocumentChunk(title="a.pdf")
    _extract(first, DocumentChunk(title="a.pdf", snippet="later"))
    assert first.snippet is None


def test_file_name_identity_is_case_sensitive():
    citations = _extract(DocumentChunk(title="A.pdf"), DocumentChunk(title="a.pdf"), DocumentChunk(title="A.pdf"))
    assert [c.file_name for c in citations] == ["A.pdf", "a.pdf"]


def test_doc_doc_web_example():
    citations = _extract(
        DocumentChunk(title="A.pdf", snippet=""),
        DocumentChunk(title="A.pdf", snippet="found here"),
        WebChunk(title="B", uri="https://b.example.com/page"),
    )
    assert citations == [
        Citation(file_name="A.pdf", snippet="found here"),
        Citation(file_name="B", snippet="https://b.example.com/page"),
    ]
