import json
import uuid

import httpx

from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.chat import RetrievalToolConfig
from shared.models.config import EnvConfig
from shared.models.grounding import GenerationResult, decode_grounding_chunk
from shared.models.ingestion import ChunkingConfig, CustomMetadataEntry, Operation, UploadedFile
from shared.models.store import FileSearchStore, StoreDocument


class LLMClientGemini(LLMClientInterface):
    """Gemini API client for File Search stores and grounded generation."""

    def __init__(self, helper_config: HelperConfig, api_key: str):
        super().__init__(helper_config=helper_config, api_key=api_key)
        self._base_url = self.get_config_val("BASE_URL", default="https://generativelanguage.googleapis.com", val_type="string")
        self._api_version = self.get_config_val("API_VERSION", default="v1beta", val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Gemini"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default="https://generativelanguage.googleapis.com"),
            EnvConfig(env_key="API_VERSION", val_type="string", default="v1beta"),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        return {"x-goog-api-key": self._api_key}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return f"/{self._api_version}/models"

    def _get_endpoint_generate(self, model: str) -> str:
        return f"/{self._api_version}/models/{model}:generateContent"

    def _get_endpoint_upload(self, store_id: str) -> str:
        return f"/upload/{self._api_version}/{store_id}:uploadToFileSearchStore"

    def _get_endpoint_stores(self) -> str:
        return f"/{self._api_version}/fileSearchStores"

    def _get_endpoint_documents(self, store_id: str) -> str:
        return f"/{self._api_version}/{store_id}/documents"

    def _get_endpoint_resource(self, name: str) -> str:
        return f"/{self._api_version}/{name}"

    ################ PAYLOAD BUILDER ##################
    def get_generate_payload(self, contents: list[dict], retrieval: RetrievalToolConfig) -> dict:
        """Build the generateContent body with a fileSearch tool.

        Args:
            contents (list[dict]): Ordered {"role", "content"} blocks.
            retrieval (RetrievalToolConfig): Stores to search and optional metadata filter.

        Returns:
            dict: {"contents": [...], "tools": [{"fileSearch": {...}}]}
        """
        file_search: dict = {"fileSearchStoreNames": list(retrieval.store_ids)}
        if retrieval.metadata_filter:
            file_search["metadataFilter"] = retrieval.metadata_filter
        return {
            "contents": [
                {"role": block["role"], "parts": [{"text": block["content"]}]}
                for block in contents
            ],
            "tools": [{"fileSearch": file_search}],
        }

    def get_upload_payload(
        self,
        file: UploadedFile,
        display_name: str,
        chunking_config: dict | None,
        custom_metadata: list[dict] | None,
    ) -> tuple[bytes, dict]:
        """Build a multipart/related body: JSON metadata part followed by the file bytes."""
        metadata: dict = {"displayName": display_name, "mimeType": file.mime_type}
        if chunking_config:
            metadata["chunkingConfig"] = chunking_config
        if custom_metadata:
            metadata["customMetadata"] = custom_metadata

        boundary = f"filesearch-{uuid.uuid4().hex}"
        body = b"".join([
            f"--{boundary}\r\n".encode(),
            b"Content-Type: application/json; charset=UTF-8\r\n\r\n",
            json.dumps(metadata).encode("utf-8"),
            f"\r\n--{boundary}\r\n".encode(),
            f"Content-Type: {file.mime_type}\r\n\r\n".encode(),
            file.content,
            f"\r\n--{boundary}--\r\n".encode(),
        ])
        headers = {
            "Content-Type": f"multipart/related; boundary={boundary}",
            "X-Goog-Upload-Protocol": "multipart",
        }
        return body, headers

    def build_chunking_config(self, chunking: ChunkingConfig) -> dict:
        white_space: dict = {}
        if chunking.max_tokens_per_chunk is not None:
            white_space["maxTokensPerChunk"] = chunking.max_tokens_per_chunk
        if chunking.max_overlap_tokens is not None:
            white_space["maxOverlapTokens"] = chunking.max_overlap_tokens
        return {"whiteSpaceConfig": white_space}

    def build_custom_metadata(self, entries: list[CustomMetadataEntry]) -> list[dict]:
        metadata: list[dict] = []
        for entry in entries:
            item: dict = {"key": entry.key}
            if entry.numeric_value is not None:
                item["numericValue"] = entry.numeric_value
            elif entry.string_value is not None:
                item["stringValue"] = entry.string_value
            metadata.append(item)
        return metadata

    ################ ERRORS ##################
    def extract_error_message(self, response: httpx.Response) -> str:
        """Gemini wraps failures as {"error": {"code", "message", "status"}}."""
        try:
            body = response.json()
        except ValueError:
            body = {}
        error = body.get("error") if isinstance(body, dict) else None
        message = error.get("message") if isinstance(error, dict) else None
        return message or super().extract_error_message(response)

    ##########################################
    ################# OTHER ##################
    ##########################################

    def extract_generation_result(self, response_data: dict) -> GenerationResult:
        """Extract answer text and grounding chunks from the first candidate.

        Text parts flagged as model thoughts are skipped.
        """
        candidates = response_data.get("candidates") or []
        candidate = candidates[0] if candidates and isinstance(candidates[0], dict) else {}

        parts = (candidate.get("content") or {}).get("parts") or []
        text = "".join(
            part["text"]
            for part in parts
            if isinstance(part, dict) and isinstance(part.get("text"), str) and not part.get("thought")
        )

        grounding = candidate.get("groundingMetadata") or {}
        chunks = []
        for raw in grounding.get("groundingChunks") or []:
            chunk = decode_grounding_chunk(raw)
            if chunk is not None:
                chunks.append(chunk)
        return GenerationResult(text=text, grounding_chunks=chunks)

    def extract_operation(self, response_data: dict) -> Operation:
        error = response_data.get("error")
        error_message = None
        if error:
            error_message = (error.get("message") if isinstance(error, dict) else None) or "Upload failed"
        return Operation(
            name=response_data.get("name"),
            done=bool(response_data.get("done", False)),
            error_message=error_message,
        )

    def extract_stores(self, response_data: dict) -> tuple[list[FileSearchStore], str | None]:
        stores = [
            FileSearchStore(name=raw.get("name") or "", display_name=raw.get("displayName") or "")
            for raw in response_data.get("fileSearchStores") or []
            if isinstance(raw, dict)
        ]
        return stores, response_data.get("nextPageToken") or None

    def extract_documents(self, response_data: dict) -> tuple[list[StoreDocument], str | None]:
        documents = [
            StoreDocument(
                name=raw.get("name") or "",
                display_name=raw.get("displayName") or "",
                size_bytes=str(raw["sizeBytes"]) if raw.get("sizeBytes") is not None else None,
                mime_type=raw.get("mimeType"),
            )
            for raw in response_data.get("documents") or []
            if isinstance(raw, dict)
        ]
        return documents, response_data.get("nextPageToken") or None
