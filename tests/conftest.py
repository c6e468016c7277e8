"""Shared pytest fixtures.

Environment variables are set in pytest_configure so that modules reading
configuration at import time (server.api_server) see test values.
"""

import logging
import os
import tempfile

import pytest

from shared.clients.llm.ModelRegistry import ModelRegistry
from shared.clients.llm.gemini.LLMClientGemini import LLMClientGemini
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import ColorLogger
from shared.persistence.memory.ConversationStoreMemory import ConversationStoreMemory
from shared.persistence.memory.UserStoreMemory import UserStoreMemory
from shared.security.CredentialVault import CredentialVault

TEST_ENCRYPTION_KEY = "000102030405060708090a0b0c0d0e0f101112131415161718191a1b1c1d1e1f"
TEST_SERVER_API_KEY = "test-server-key"
TEST_GEMINI_KEY = "AIzaSyTestKey0000000000000000000000000"


def pytest_configure(config):
    os.environ.setdefault("ROOT_DIR", tempfile.mkdtemp(prefix="filesearch-chat-tests-"))
    os.environ["ENCRYPTION_KEY"] = TEST_ENCRYPTION_KEY
    os.environ["API_SERVER_API_KEY"] = TEST_SERVER_API_KEY
    os.environ["INGESTION_POLL_INTERVAL"] = "0"
    os.environ.pop("DEFAULT_MODEL", None)
    os.environ.pop("LLM_ENGINE", None)


@pytest.fixture
def helper_config() -> HelperConfig:
    return HelperConfig(logger=ColorLogger(logging.getLogger("tests")))


@pytest.fixture
def vault(helper_config) -> CredentialVault:
    return CredentialVault(helper_config=helper_config)


@pytest.fixture
def model_registry(helper_config) -> ModelRegistry:
    return ModelRegistry(helper_config=helper_config)


@pytest.fixture
def conversation_store() -> ConversationStoreMemory:
    return ConversationStoreMemory()


@pytest.fixture
def user_store() -> UserStoreMemory:
    return UserStoreMemory()


@pytest.fixture
def gemini_client(helper_config) -> LLMClientGemini:
    """An unbooted Gemini client; tests replace its request methods with mocks."""
    return LLMClientGemini(helper_config=helper_config, api_key=TEST_GEMINI_KEY)
