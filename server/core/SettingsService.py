"""Per-user chat settings with lazily created defaults."""

from shared.clients.llm.ModelRegistry import ModelRegistry
from shared.errors.app_errors import ValidationError
from shared.helper.HelperConfig import HelperConfig
from shared.models.settings import UserSettings, UserSettingsUpdate
from shared.persistence.UserStoreInterface import UserStoreInterface

# fields that may be reset to null; null for any other field is ignored
_CLEARABLE = {"default_chunking", "default_metadata_presets"}


class SettingsService:
    def __init__(self, helper_config: HelperConfig, user_store: UserStoreInterface, model_registry: ModelRegistry) -> None:
        self.logging = helper_config.get_logger()
        self._users = user_store
        self._models = model_registry

    async def get_settings(self, user_id: str) -> UserSettings:
        """Return the user's settings, storing the defaults on first access."""
        settings = await self._users.get_settings(user_id)
        if settings is None:
            settings = await self._users.save_settings(user_id, self._defaults())
            self.logging.info("Created default settings for user %s.", user_id)
        return settings

    async def update_settings(self, user_id: str, update: UserSettingsUpdate) -> UserSettings:
        """Apply the fields set on update to the stored settings.

        Raises:
            ValidationError: If defaultModel is not a registered model.
        """
        changes = {
            key: value
            for key, value in update.model_dump(exclude_unset=True).items()
            if value is not None or key in _CLEARABLE
        }
        if "default_model" in changes and not self._models.is_known(changes["default_model"]):
            raise ValidationError(f"Unknown model '{changes['default_model']}'")

        current = await self.get_settings(user_id)
        settings = UserSettings.model_validate({**current.model_dump(), **changes})
        await self._users.save_settings(user_id, settings)
        self.logging.debug("Updated settings for user %s: %s", user_id, ", ".join(sorted(changes)) or "-")
        return settings

    def _defaults(self) -> UserSettings:
        return UserSettings(default_model=self._models.get_default().public_id)
