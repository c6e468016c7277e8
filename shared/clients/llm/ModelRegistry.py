"""Catalogue of user-facing chat models and their provider model ids.

The public ids are what the UI offers; the provider ids are what the Gemini
API actually accepts. Keeping them apart lets the offered model names be
curated independently of what the provider currently serves.
"""

from pydantic import BaseModel, ConfigDict, Field

from shared.helper.HelperConfig import HelperConfig


class ModelPricing(BaseModel):
    model_config = ConfigDict(frozen=True)

    input: str
    output: str


class ModelDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    public_id: str = Field(alias="id")
    provider_id: str = Field(alias="providerId")
    display_name: str = Field(alias="name")
    speed: str
    context_window: str = Field(alias="contextWindow")
    pricing: ModelPricing
    description: str
    features: tuple[str, ...]


MODELS: tuple[ModelDescriptor, ...] = (
    ModelDescriptor(
        public_id="gemini-2.5-flash-lite",
        provider_id="gemini-2.5-flash-lite",
        display_name="Gemini 2.5 Flash Lite",
        speed="Ultra Fast",
        context_window="1M tokens",
        pricing=ModelPricing(input="$0.05 / 1M tokens", output="$0.20 / 1M tokens"),
        description="The most cost-effective option for simple tasks and high-volume operations.",
        features=("Lowest latency", "Lowest cost", "Good for basic queries"),
    ),
    ModelDescriptor(
        public_id="gemini-2.5-flash",
        provider_id="gemini-2.5-flash",
        display_name="Gemini 2.5 Flash",
        speed="Fast",
        context_window="1M tokens",
        pricing=ModelPricing(input="$0.075 / 1M tokens", output="$0.30 / 1M tokens"),
        description="Optimized for speed and efficiency. Best for most standard use cases.",
        features=("Fast responses", "Cost-effective", "Large context window"),
    ),
    ModelDescriptor(
        public_id="gemini-3.0-flash",
        provider_id="gemini-2.0-flash-exp",
        display_name="Gemini 3.0 Flash",
        speed="Fast",
        context_window="2M tokens",
        pricing=ModelPricing(input="$0.10 / 1M tokens", output="$0.40 / 1M tokens"),
        description="Next-generation efficiency with improved reasoning capabilities.",
        features=("Enhanced reasoning", "2M context window", "Multimodal native"),
    ),
    ModelDescriptor(
        public_id="gemini-2.5-pro",
        provider_id="gemini-1.5-pro",
        display_name="Gemini 2.5 Pro",
        speed="Moderate",
        context_window="2M tokens",
        pricing=ModelPricing(input="$1.25 / 1M tokens", output="$5.00 / 1M tokens"),
        description="Advanced reasoning and complex problem-solving capabilities.",
        features=("Advanced reasoning", "Complex queries", "Extended context"),
    ),
    ModelDescriptor(
        public_id="gemini-3.0-pro",
        provider_id="gemini-1.5-pro",  # until a 2.x pro model is generally available
        display_name="Gemini 3.0 Pro",
        speed="Deep",
        context_window="2M tokens",
        pricing=ModelPricing(input="$2.50 / 1M tokens", output="$10.00 / 1M tokens"),
        description="The most capable model for highly complex reasoning and creative tasks.",
        features=("State-of-the-art", "Best-in-class reasoning", "Complex analysis"),
    ),
)


class ModelRegistry:
    """Resolves public model ids, falling back to the configured default."""

    def __init__(self, helper_config: HelperConfig, models: tuple[ModelDescriptor, ...] = MODELS) -> None:
        self.logging = helper_config.get_logger()
        self._models = {model.public_id: model for model in models}
        self._order = [model.public_id for model in models]

        default_id = helper_config.get_string_val("DEFAULT_MODEL", default="gemini-2.5-flash")
        if default_id not in self._models:
            raise ValueError(
                f"DEFAULT_MODEL '{default_id}' is not a known model. Known models: {', '.join(self._order)}"
            )
        self._default = self._models[default_id]

    def resolve(self, public_id: str | None) -> ModelDescriptor:
        """Return the descriptor for public_id, or the default descriptor if unknown.

        Args:
            public_id (str | None): The model id as chosen in the UI.

        Returns:
            ModelDescriptor: Never raises for unknown ids.
        """
        model = self._models.get(public_id) if public_id else None
        if model is None:
            if public_id:
                self.logging.debug("Unknown model '%s', using default '%s'.", public_id, self._default.public_id)
            return self._default
        return model

    def is_known(self, public_id: str | None) -> bool:
        return public_id in self._models

    def provider_id_for(self, public_id: str | None) -> str:
        """Return only the provider-facing model id for public_id."""
        return self.resolve(public_id).provider_id

    def get_default(self) -> ModelDescriptor:
        return self._default

    def list_models(self) -> list[ModelDescriptor]:
        """Return all models in catalogue order."""
        return [self._models[public_id] for public_id in self._order]
