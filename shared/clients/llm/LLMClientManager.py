import httpx

from shared.helper.HelperConfig import HelperConfig
from shared.clients.llm.LLMClientInterface import LLMClientInterface


class LLMClientManager:
    """Pool of booted LLM clients, one per distinct API key.

    Built once at application start and handed to the services that need a
    provider client. Clients live until close(); there is no eviction, so the
    pool grows with the number of distinct keys seen by this process. That is
    acceptable while the number of active users per process stays small.

    No lock is taken: if two requests race to build a client for the same key,
    the first one stored wins and the other is closed again.
    """

    def __init__(self, helper_config: HelperConfig, transport: httpx.AsyncBaseTransport | None = None):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        self._transport = transport
        self._client_class = self._resolve_client_class()
        self._clients: dict[str, LLMClientInterface] = {}

    def _get_engine_from_env(self) -> str:
        """Read the LLM engine name from env configuration.

        Returns:
            str: Capitalised engine name (e.g. "Gemini").
        """
        engine = self.helper_config.get_string_val("LLM_ENGINE", default="gemini")
        return engine.strip().lower().capitalize()

    def _resolve_client_class(self) -> type[LLMClientInterface]:
        """Import the client class for the configured engine.

        Raises:
            ValueError: If the engine is unsupported or cannot be imported.
        """
        engine = self._get_engine_from_env()
        class_name = f"LLMClient{engine}"
        try:
            module = __import__(
                f"shared.clients.llm.{engine.lower()}.{class_name}",
                fromlist=[class_name],
            )
            client_class = getattr(module, class_name)
            self.logging.debug("Resolved LLM client class for engine: %s", engine)
            return client_class
        except (ImportError, AttributeError) as e:
            raise ValueError("Unsupported LLM engine '%s'. Error: %s" % (engine, e))

    async def get_client(self, api_key: str) -> LLMClientInterface:
        """Return the booted client for api_key, building it on first use.

        Args:
            api_key (str): The caller's decrypted provider API key.

        Returns:
            LLMClientInterface: A booted client bound to api_key.

        Raises:
            ValueError: If api_key is empty.
        """
        if not api_key:
            raise ValueError("A provider API key is required.")

        client = self._clients.get(api_key)
        if client is not None:
            return client

        client = self._client_class(helper_config=self.helper_config, api_key=api_key)
        await client.boot(transport=self._transport)

        existing = self._clients.setdefault(api_key, client)
        if existing is not client:
            await client.close()
            return existing

        self.logging.debug("Created %s client (pool size: %d).", client.get_engine_name(), len(self._clients))
        return client

    def size(self) -> int:
        return len(self._clients)

    async def close(self) -> None:
        """Close every pooled client."""
        clients = list(self._clients.values())
        self._clients.clear()
        for client in clients:
            await client.close()
        self.logging.info("Closed %d LLM client(s).", len(clients))
