from abc import abstractmethod

from shared.clients.ClientInterface import ClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.chat import RetrievalToolConfig
from shared.models.grounding import GenerationResult
from shared.models.ingestion import ChunkingConfig, CustomMetadataEntry, Operation, UploadedFile
from shared.models.store import FileSearchStore, StoreDocument


class LLMClientInterface(ClientInterface):
    """A retrieval + generation provider client bound to one user's API key."""

    def __init__(self, helper_config: HelperConfig, api_key: str):
        if not api_key:
            raise ValueError("A provider API key is required.")
        self._api_key = api_key
        super().__init__(helper_config=helper_config)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        return "llm"

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_generate(self, model: str) -> str:
        """Returns the endpoint path for generation requests with the given provider model id."""
        pass

    @abstractmethod
    def _get_endpoint_upload(self, store_id: str) -> str:
        """Returns the endpoint path that uploads a file straight into a store."""
        pass

    @abstractmethod
    def _get_endpoint_stores(self) -> str:
        """Returns the endpoint path for listing and creating stores."""
        pass

    @abstractmethod
    def _get_endpoint_documents(self, store_id: str) -> str:
        """Returns the endpoint path for listing the documents of a store."""
        pass

    @abstractmethod
    def _get_endpoint_resource(self, name: str) -> str:
        """Returns the endpoint path of a named resource (store, document or operation)."""
        pass

    ################ PAYLOAD BUILDER ##################
    @abstractmethod
    def get_generate_payload(self, contents: list[dict], retrieval: RetrievalToolConfig) -> dict:
        """Build the backend-specific request body for a grounded generation request.

        Args:
            contents (list[dict]): Ordered content blocks, each {"role": ..., "content": ...}.
            retrieval (RetrievalToolConfig): Stores to search and an optional metadata filter.

        Returns:
            dict: JSON-serialisable request body.
        """
        pass

    @abstractmethod
    def get_upload_payload(
        self,
        file: UploadedFile,
        display_name: str,
        chunking_config: dict | None,
        custom_metadata: list[dict] | None,
    ) -> tuple[bytes, dict]:
        """Build the backend-specific upload body.

        Returns:
            tuple[bytes, dict]: The raw body and the headers it needs (e.g. Content-Type).
        """
        pass

    @abstractmethod
    def build_chunking_config(self, chunking: ChunkingConfig) -> dict:
        """Translate a simplified chunking request into the backend's chunking strategy.

        Only the fields set on chunking are forwarded.
        """
        pass

    @abstractmethod
    def build_custom_metadata(self, entries: list[CustomMetadataEntry]) -> list[dict]:
        """Translate already coerced custom metadata entries into the backend's shape."""
        pass

    ##########################################
    ################# OTHER ##################
    ##########################################

    @abstractmethod
    def extract_generation_result(self, response_data: dict) -> GenerationResult:
        pass

    @abstractmethod
    def extract_operation(self, response_data: dict) -> Operation:
        pass

    @abstractmethod
    def extract_stores(self, response_data: dict) -> tuple[list[FileSearchStore], str | None]:
        """Returns one page of stores and the token of the next page, if any."""
        pass

    @abstractmethod
    def extract_documents(self, response_data: dict) -> tuple[list[StoreDocument], str | None]:
        """Returns one page of documents and the token of the next page, if any."""
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_generate(self, model: str, contents: list[dict], retrieval: RetrievalToolConfig) -> GenerationResult:
        """Generate an answer grounded in the given stores.

        Args:
            model (str): Provider-facing model id.
            contents (list[dict]): Ordered content blocks.
            retrieval (RetrievalToolConfig): Retrieval scope.

        Returns:
            GenerationResult: Answer text and decoded grounding chunks.

        Raises:
            ProviderError: If the request fails.
        """
        body = self.get_generate_payload(contents, retrieval)
        data = await self.do_request_json(method="POST", endpoint=self._get_endpoint_generate(model), json=body)
        return self.extract_generation_result(data)

    async def do_upload_to_store(
        self,
        store_id: str,
        file: UploadedFile,
        display_name: str,
        chunking_config: dict | None = None,
        custom_metadata: list[dict] | None = None,
    ) -> Operation:
        """Upload a file into a store and return the indexing operation."""
        content, headers = self.get_upload_payload(file, display_name, chunking_config, custom_metadata)
        data = await self.do_request_json(
            method="POST",
            endpoint=self._get_endpoint_upload(store_id),
            content=content,
            additional_headers=headers,
        )
        return self.extract_operation(data)

    async def do_get_operation(self, operation_name: str) -> Operation:
        """Fetch the current state of a long-running operation."""
        data = await self.do_request_json(method="GET", endpoint=self._get_endpoint_resource(operation_name))
        operation = self.extract_operation(data)
        if not operation.name:
            operation.name = operation_name
        return operation

    async def do_list_stores(self) -> list[FileSearchStore]:
        """List all stores, following pagination."""
        stores: list[FileSearchStore] = []
        page_token: str | None = None
        while True:
            params = {"pageToken": page_token} if page_token else None
            data = await self.do_request_json(method="GET", endpoint=self._get_endpoint_stores(), params=params)
            page, page_token = self.extract_stores(data)
            stores.extend(page)
            if not page_token:
                return stores

    async def do_create_store(self, display_name: str) -> FileSearchStore:
        data = await self.do_request_json(
            method="POST", endpoint=self._get_endpoint_stores(), json={"displayName": display_name}
        )
        stores, _ = self.extract_stores({"fileSearchStores": [data]})
        return stores[0] if stores else FileSearchStore(name="", display_name=display_name)

    async def do_get_store(self, store_id: str) -> FileSearchStore:
        data = await self.do_request_json(method="GET", endpoint=self._get_endpoint_resource(store_id))
        stores, _ = self.extract_stores({"fileSearchStores": [data]})
        return stores[0] if stores else FileSearchStore(name=store_id)

    async def do_delete_store(self, store_id: str, force: bool = False) -> None:
        params = {"force": "true"} if force else None
        await self.do_request_json(method="DELETE", endpoint=self._get_endpoint_resource(store_id), params=params)

    async def do_list_documents(self, store_id: str) -> list[StoreDocument]:
        """List all documents of a store, following pagination."""
        documents: list[StoreDocument] = []
        page_token: str | None = None
        while True:
            params = {"pageToken": page_token} if page_token else None
            data = await self.do_request_json(
                method="GET", endpoint=self._get_endpoint_documents(store_id), params=params
            )
            page, page_token = self.extract_documents(data)
            documents.extend(page)
            if not page_token:
                return documents

    async def do_delete_document(self, document_name: str, force: bool = False) -> None:
        params = {"force": "true"} if force else None
        await self.do_request_json(
            method="DELETE", endpoint=self._get_endpoint_resource(document_name), params=params
        )
