"""Tests for the Gemini REST client against a mocked transport."""

import json

import httpx
import pytest

from shared.clients.llm.gemini.LLMClientGemini import LLMClientGemini
from shared.errors.app_errors import ProviderError
from shared.models.chat import RetrievalToolConfig
from shared.models.grounding import DocumentChunk, WebChunk
from shared.models.ingestion import ChunkingConfig, CustomMetadataEntry, UploadedFile

API_KEY = "AIzaSyTestKey0000000000000000000000000"


class Recorder:
    """Collects requests and answers them from a list of canned responses."""

    def __init__(self, *responses: httpx.Response):
        self.requests: list[httpx.Request] = []
        self._responses = list(responses)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._responses.pop(0)


async def _booted(helper_config, recorder: Recorder) -> LLMClientGemini:
    client = LLMClientGemini(helper_config=helper_config, api_key=API_KEY)
    await client.boot(transport=httpx.MockTransport(recorder))
    return client


class TestGenerate:
    async def test_request_shape(self, helper_config):
        recorder = Recorder(httpx.Response(200, json={"candidates": []}))
        client = await _booted(helper_config, recorder)

        await client.do_generate(
            model="gemini-2.5-flash",
            contents=[{"role": "user", "content": "hello"}],
            retrieval=RetrievalToolConfig(store_ids=["fileSearchStores/a"], metadata_filter='year > 2020'),
        )

        request = recorder.requests[0]
        assert request.method == "POST"
        assert request.url.path == "/v1beta/models/gemini-2.5-flash:generateContent"
        assert request.headers["x-goog-api-key"] == API_KEY
        body = json.loads(request.content)
        assert body["contents"] == [{"role": "user", "parts": [{"text": "hello"}]}]
        assert body["tools"] == [
            {"fileSearch": {"fileSearchStoreNames": ["fileSearchStores/a"], "metadataFilter": "year > 2020"}}
        ]
        await client.close()

    async def test_metadata_filter_omitted_when_empty(self, helper_config):
        recorder = Recorder(httpx.Response(200, json={}))
        client = await _booted(helper_config, recorder)

        await client.do_generate(
            model="m",
            contents=[{"role": "user", "content": "q"}],
            retrieval=RetrievalToolConfig(store_ids=["s"]),
        )

        body = json.loads(recorder.requests[0].content)
        assert body["tools"] == [{"fileSearch": {"fileSearchStoreNames": ["s"]}}]
        await client.close()

    async def test_decodes_text_and_grounding(self, helper_config):
        response = {
            "candidates": [{
                "content": {"parts": [
                    {"text": "thinking...", "thought": True},
                    {"text": "The answer "},
                    {"text": "is 42."},
                ]},
                "groundingMetadata": {"groundingChunks": [
                    {"retrievedContext": {"title": "guide.pdf", "uri": "stores/x/guide.pdf", "text": "excerpt"}},
                    {"web": {"title": "Example", "uri": "https://example.com"}},
                    {"somethingElse": {}},
                ]},
            }]
        }
        client = await _booted(helper_config, Recorder(httpx.Response(200, json=response)))

        result = await client.do_generate("m", [{"role": "user", "content": "q"}], RetrievalToolConfig(store_ids=["s"]))

        assert result.text == "The answer is 42."
        assert result.grounding_chunks == [
            DocumentChunk(title="guide.pdf", uri="stores/x/guide.pdf", snippet="excerpt"),
            WebChunk(title="Example", uri="https://example.com"),
        ]
        await client.close()

    async def test_error_message_is_taken_from_envelope(self, helper_config):
        error = {"error": {"code": 400, "message": "API key not valid.", "status": "INVALID_ARGUMENT"}}
        client = await _booted(helper_config, Recorder(httpx.Response(400, json=error)))

        with pytest.raises(ProviderError) as exc_info:
            await client.do_generate("m", [{"role": "user", "content": "q"}], RetrievalToolConfig(store_ids=["s"]))

        assert exc_info.value.message == "API key not valid."
        assert exc_info.value.upstream_status == 400
        await client.close()

    async def test_request_before_boot_fails(self, helper_config):
        client = LLMClientGemini(helper_config=helper_config, api_key=API_KEY)
        with pytest.raises(ProviderError, match="boot"):
            await client.do_request(endpoint="/v1beta/models")


class TestUpload:
    async def test_multipart_body(self, helper_config):
        recorder = Recorder(httpx.Response(200, json={"name": "operations/op-1", "done": False}))
        client = await _booted(helper_config, recorder)
        file = UploadedFile(file_name="notes.txt", content=b"hello world", mime_type="text/plain")

        operation = await client.do_upload_to_store(
            store_id="fileSearchStores/abc",
            file=file,
            display_name="Notes",
            chunking_config=client.build_chunking_config(ChunkingConfig(max_tokens_per_chunk=200)),
            custom_metadata=client.build_custom_metadata([
                CustomMetadataEntry(key="year", numeric_value=2024.0),
                CustomMetadataEntry(key="author", string_value="Ada"),
            ]),
        )

        assert operation.name == "operations/op-1"
        assert not operation.done

        request = recorder.requests[0]
        assert request.url.path == "/upload/v1beta/fileSearchStores/abc:uploadToFileSearchStore"
        assert request.headers["content-type"].startswith("multipart/related; boundary=")
        assert request.headers["x-goog-upload-protocol"] == "multipart"

        metadata_part = request.content.split(b"\r\n\r\n", 1)[1].split(b"\r\n--", 1)[0]
        assert json.loads(metadata_part) == {
            "displayName": "Notes",
            "mimeType": "text/plain",
            "chunkingConfig": {"whiteSpaceConfig": {"maxTokensPerChunk": 200}},
            "customMetadata": [
                {"key": "year", "numericValue": 2024.0},
                {"key": "author", "stringValue": "Ada"},
            ],
        }
        assert b"hello world" in request.content
        await client.close()

    async def test_operation_error(self, helper_config):
        recorder = Recorder(httpx.Response(200, json={"name": "operations/op-1", "done": True, "error": {"code": 13}}))
        client = await _booted(helper_config, recorder)

        operation = await client.do_get_operation("operations/op-1")

        assert recorder.requests[0].url.path == "/v1beta/operations/op-1"
        assert operation.done
        assert operation.error_message == "Upload failed"
        await client.close()

    async def test_operation_name_is_kept_when_missing_in_response(self, helper_config):
        client = await _booted(helper_config, Recorder(httpx.Response(200, json={"done": True})))
        operation = await client.do_get_operation("operations/op-9")
        assert operation.name == "operations/op-9"
        await client.close()


class TestStores:
    async def test_list_stores_follows_pagination(self, helper_config):
        recorder = Recorder(
            httpx.Response(200, json={
                "fileSearchStores": [{"name": "fileSearchStores/a", "displayName": "A"}],
                "nextPageToken": "page-2",
            }),
            httpx.Response(200, json={"fileSearchStores": [{"name": "fileSearchStores/b", "displayName": "B"}]}),
        )
        client = await _booted(helper_config, recorder)

        stores = await client.do_list_stores()

        assert [s.name for s in stores] == ["fileSearchStores/a", "fileSearchStores/b"]
        assert "pageToken" not in recorder.requests[0].url.params
        assert recorder.requests[1].url.params["pageToken"] == "page-2"
        await client.close()

    async def test_list_documents_casts_size(self, helper_config):
        recorder = Recorder(httpx.Response(200, json={"documents": [
            {"name": "fileSearchStores/a/documents/d1", "displayName": "d1", "sizeBytes": 1024, "mimeType": "text/plain"},
        ]}))
        client = await _booted(helper_config, recorder)

        documents = await client.do_list_documents("fileSearchStores/a")

        assert recorder.requests[0].url.path == "/v1beta/fileSearchStores/a/documents"
        assert documents[0].size_bytes == "1024"
        await client.close()

    async def test_force_delete_store(self, helper_config):
        recorder = Recorder(httpx.Response(200, json={}))
        client = await _booted(helper_config, recorder)

        await client.do_delete_store("fileSearchStores/a", force=True)

        request = recorder.requests[0]
        assert request.method == "DELETE"
        assert request.url.params["force"] == "true"
        await client.close()


async def test_healthcheck(helper_config):
    recorder = Recorder(httpx.Response(200, json={"models": []}))
    client = await _booted(helper_config, recorder)

    response = await client.do_healthcheck()

    assert response.status_code == 200
    assert recorder.requests[0].url.path == "/v1beta/models"
    await client.close()


async def test_non_json_error_body(helper_config):
    client = await _booted(helper_config, Recorder(httpx.Response(503, text="upstream unavailable")))

    with pytest.raises(ProviderError, match="upstream unavailable"):
        await client.do_list_stores()
    await client.close()
