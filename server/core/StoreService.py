"""Store and document management on top of the provider client."""

from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.errors.app_errors import ProviderError, ValidationError
from shared.helper.HelperConfig import HelperConfig
from shared.models.store import FileSearchStore, StoreDocument

# provider message fragment -> message shown to the user
_FRIENDLY_DELETE_ERRORS = {
    "Cannot delete non-empty FileSearchStore": "Cannot delete store with files. Please delete all files first, or use Force Delete.",
    "Cannot delete non-empty Document": "Cannot delete file with operations in progress. Please try again.",
}


class StoreService:
    def __init__(self, helper_config: HelperConfig) -> None:
        self.logging = helper_config.get_logger()

    async def list_stores(self, client: LLMClientInterface) -> list[FileSearchStore]:
        return await client.do_list_stores()

    async def create_store(self, client: LLMClientInterface, display_name: str | None) -> FileSearchStore:
        if not display_name or not display_name.strip():
            raise ValidationError("displayName is required")
        store = await client.do_create_store(display_name.strip())
        self.logging.info("Created store %s ('%s').", store.name, store.display_name)
        return store

    async def get_store(self, client: LLMClientInterface, store_id: str) -> FileSearchStore:
        return await client.do_get_store(store_id)

    async def delete_store(self, client: LLMClientInterface, store_id: str, force: bool = False) -> None:
        try:
            await client.do_delete_store(store_id, force=force)
        except ProviderError as e:
            raise self._friendly(e)
        self.logging.info("Deleted store %s (force=%s).", store_id, force)

    async def list_documents(self, client: LLMClientInterface, store_id: str) -> list[StoreDocument]:
        return await client.do_list_documents(store_id)

    async def delete_document(self, client: LLMClientInterface, document_name: str, force: bool = False) -> None:
        try:
            await client.do_delete_document(document_name, force=force)
        except ProviderError as e:
            raise self._friendly(e)
        self.logging.info("Deleted document %s (force=%s).", document_name, force)

    def _friendly(self, error: ProviderError) -> ProviderError:
        for fragment, message in _FRIENDLY_DELETE_ERRORS.items():
            if fragment in error.message:
                return ProviderError(message, upstream_status=error.upstream_status)
        return error
