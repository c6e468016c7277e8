from shared.models.settings import UserSettings
from shared.persistence.UserStoreInterface import UserStoreInterface


class UserStoreMemory(UserStoreInterface):
    """In-process user store. API keys are held encrypted only."""

    def __init__(self) -> None:
        self._api_keys: dict[str, str] = {}
        self._settings: dict[str, UserSettings] = {}

    async def get_encrypted_api_key(self, user_id: str) -> str | None:
        return self._api_keys.get(user_id)

    async def set_encrypted_api_key(self, user_id: str, encrypted_key: str) -> None:
        self._api_keys[user_id] = encrypted_key

    async def clear_encrypted_api_key(self, user_id: str) -> None:
        self._api_keys.pop(user_id, None)

    async def get_settings(self, user_id: str) -> UserSettings | None:
        settings = self._settings.get(user_id)
        return settings.model_copy(deep=True) if settings is not None else None

    async def save_settings(self, user_id: str, settings: UserSettings) -> UserSettings:
        self._settings[user_id] = settings.model_copy(deep=True)
        return settings
