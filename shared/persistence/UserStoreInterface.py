from abc import ABC, abstractmethod

from shared.models.settings import UserSettings


class UserStoreInterface(ABC):
    """Persistence for per-user data: the encrypted provider API key and chat settings."""

    @abstractmethod
    async def get_encrypted_api_key(self, user_id: str) -> str | None:
        pass

    @abstractmethod
    async def set_encrypted_api_key(self, user_id: str, encrypted_key: str) -> None:
        pass

    @abstractmethod
    async def clear_encrypted_api_key(self, user_id: str) -> None:
        pass

    @abstractmethod
    async def get_settings(self, user_id: str) -> UserSettings | None:
        """Returns the stored settings, or None if the user never had any."""
        pass

    @abstractmethod
    async def save_settings(self, user_id: str, settings: UserSettings) -> UserSettings:
        pass
