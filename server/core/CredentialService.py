"""Per-user provider API key management.

Keys are stored encrypted through the CredentialVault and decrypted only
when a provider client is needed for a request.
"""

from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.clients.llm.LLMClientManager import LLMClientManager
from shared.errors.app_errors import CredentialError, ValidationError
from shared.helper.HelperConfig import HelperConfig
from shared.persistence.UserStoreInterface import UserStoreInterface
from shared.security.CredentialVault import CredentialVault

API_KEY_PREFIX = "AIza"


class CredentialService:
    def __init__(
        self,
        helper_config: HelperConfig,
        vault: CredentialVault,
        user_store: UserStoreInterface,
        client_pool: LLMClientManager,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._vault = vault
        self._users = user_store
        self._pool = client_pool

    async def set_api_key(self, user_id: str, api_key: str) -> None:
        """Validate, encrypt and store a user's API key.

        Raises:
            ValidationError: If the key is empty or not a Gemini API key.
        """
        api_key = (api_key or "").strip()
        if not api_key:
            raise ValidationError("API key is required")
        if not api_key.startswith(API_KEY_PREFIX):
            raise ValidationError(f'Invalid API key format. Gemini API keys should start with "{API_KEY_PREFIX}"')

        await self._users.set_encrypted_api_key(user_id, self._vault.encrypt(api_key))
        self.logging.info("Stored API key for user %s.", user_id)

    async def has_api_key(self, user_id: str) -> bool:
        return bool(await self._users.get_encrypted_api_key(user_id))

    async def clear_api_key(self, user_id: str) -> None:
        await self._users.clear_encrypted_api_key(user_id)
        self.logging.info("Removed API key for user %s.", user_id)

    async def resolve_api_key(self, user_id: str) -> str:
        """Return the user's decrypted API key.

        Raises:
            CredentialError: If no key is configured or it cannot be decrypted.
        """
        encrypted = await self._users.get_encrypted_api_key(user_id)
        if not encrypted:
            raise CredentialError("Gemini API key not configured. Please add your API key in settings.")
        return self._vault.decrypt(encrypted)

    async def get_client(self, user_id: str) -> LLMClientInterface:
        """Return the pooled provider client for the user's API key."""
        return await self._pool.get_client(await self.resolve_api_key(user_id))
