import pytest

from shared.clients.llm.ModelRegistry import ModelRegistry


def test_resolve_known_model(model_registry):
    model = model_registry.resolve("gemini-2.5-pro")
    assert model.public_id == "gemini-2.5-pro"
    assert model.provider_id == "gemini-1.5-pro"


def test_unknown_model_falls_back_to_default(model_registry):
    model = model_registry.resolve("unknown-model-xyz")
    assert model.public_id == "gemini-2.5-flash"


@pytest.mark.parametrize("public_id", [None, ""])
def test_missing_model_falls_back_to_default(model_registry, public_id):
    assert model_registry.resolve(public_id) == model_registry.get_default()


@pytest.mark.parametrize(
    "public_id, provider_id",
    [
        ("gemini-2.5-flash-lite", "gemini-2.5-flash-lite"),
        ("gemini-2.5-flash", "gemini-2.5-flash"),
        ("gemini-3.0-flash", "gemini-2.0-flash-exp"),
        ("gemini-3.0-pro", "gemini-1.5-pro"),
        ("not-a-model", "gemini-2.5-flash"),
    ],
)
def test_provider_id_for(model_registry, public_id, provider_id):
    assert model_registry.provider_id_for(public_id) == provider_id


def test_configured_default(helper_config, monkeypatch):
    monkeypatch.setenv("DEFAULT_MODEL", "gemini-3.0-pro")
    registry = ModelRegistry(helper_config=helper_config)
    assert registry.resolve("nope").public_id == "gemini-3.0-pro"


def test_unknown_configured_default_fails(helper_config, monkeypatch):
    monkeypatch.setenv("DEFAULT_MODEL", "gpt-4")
    with pytest.raises(ValueError, match="DEFAULT_MODEL"):
        ModelRegistry(helper_config=helper_config)


def test_list_models_keeps_catalogue_order(model_registry):
    ids = [m.public_id for m in model_registry.list_models()]
    assert ids == [
        "gemini-2.5-flash-lite",
        "gemini-2.5-flash",
        "gemini-3.0-flash",
        "gemini-2.5-pro",
        "gemini-3.0-pro",
    ]
