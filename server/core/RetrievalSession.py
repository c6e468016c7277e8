"""Chat turn orchestration: persist, generate with file search, cite, persist."""

from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.clients.llm.ModelRegistry import ModelRegistry
from shared.errors.app_errors import ProviderError, ValidationError
from shared.helper.HelperConfig import HelperConfig
from shared.models.chat import (
    ChatTurnRequest,
    ChatTurnResponse,
    Conversation,
    MessageRole,
    RetrievalToolConfig,
)
from shared.persistence.ConversationStoreInterface import ConversationStoreInterface
from server.core.CitationAggregator import CitationAggregator

TITLE_MAX_CHARS = 50
INSTRUCTIONS_PREFIX = "System Instructions: "


def make_title(message: str) -> str:
    """Seed a conversation title from the first message."""
    if len(message) > TITLE_MAX_CHARS:
        return message[:TITLE_MAX_CHARS] + "..."
    return message


class RetrievalSession:
    """Runs one chat turn against the selected file search stores.

    The user's message is stored before the provider is called. If anything
    after that fails, the turn raises ProviderError and the history keeps the
    question without an answer.
    """

    def __init__(
        self,
        helper_config: HelperConfig,
        conversation_store: ConversationStoreInterface,
        model_registry: ModelRegistry,
        citation_aggregator: CitationAggregator | None = None,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._conversations = conversation_store
        self._models = model_registry
        self._citations = citation_aggregator or CitationAggregator()

    ##########################################
    ################ CORE ####################
    ##########################################

    async def run_turn(self, user_id: str, client: LLMClientInterface, request: ChatTurnRequest) -> ChatTurnResponse:
        """Execute a chat turn.

        Args:
            user_id (str): The caller.
            client (LLMClientInterface): Provider client bound to the caller's API key.
            request (ChatTurnRequest): Message, stores and optional generation settings.

        Returns:
            ChatTurnResponse: Answer text, citations (None if empty) and the conversation id.

        Raises:
            ValidationError: If the message or the store selection is empty.
            ProviderError: If generation or the follow-up persistence fails.
        """
        store_ids = self._validate(request)

        conversation = await self._resolve_conversation(user_id, request)
        await self._conversations.append_message(conversation.id, MessageRole.USER, request.message)

        try:
            contents = self._build_contents(request)
            retrieval = RetrievalToolConfig(
                store_ids=store_ids,
                metadata_filter=(request.metadata_filter or "").strip() or None,
            )
            model = self._models.provider_id_for(request.model_public_id)

            self.logging.info(
                "Generating answer: conversation=%s model=%s stores=%d message=%r",
                conversation.id, model, len(store_ids), request.message[:80],
            )
            result = await client.do_generate(model=model, contents=contents, retrieval=retrieval)

            citations = self._citations.extract(result) or None
            await self._conversations.append_message(
                conversation.id, MessageRole.ASSISTANT, result.text, citations=citations
            )
            await self._conversations.touch_conversation(conversation.id, user_id)
        except ProviderError:
            self.logging.error("Chat turn failed for conversation %s.", conversation.id)
            raise
        except Exception as e:
            self.logging.error("Chat turn failed for conversation %s: %s", conversation.id, e)
            raise ProviderError(str(e) or "Failed to generate response") from e

        self.logging.info(
            "Answer stored: conversation=%s citations=%d",
            conversation.id, len(citations or []),
        )
        return ChatTurnResponse(text=result.text, citations=citations, conversation_id=conversation.id)

    ##########################################
    ############### HELPERS ##################
    ##########################################

    def _validate(self, request: ChatTurnRequest) -> list[str]:
        """Return the de-duplicated store ids, or raise ValidationError."""
        if not request.message or not request.message.strip():
            raise ValidationError("message is required")
        store_ids = list(dict.fromkeys(s for s in request.store_ids if s))
        if not store_ids:
            raise ValidationError("At least one store name is required")
        return store_ids

    async def _resolve_conversation(self, user_id: str, request: ChatTurnRequest) -> Conversation:
        """Load the requested conversation, or start a new one.

        A conversation id that is unknown or owned by someone else is treated as
        if none was given, so a stale client does not break the chat.
        """
        if request.conversation_id:
            conversation = await self._conversations.find_conversation(request.conversation_id, user_id)
            if conversation is not None:
                return conversation
            self.logging.warning(
                "Conversation %s not found for user %s, starting a new one.", request.conversation_id, user_id
            )

        conversation = await self._conversations.create_conversation(user_id, make_title(request.message))
        self.logging.info("Created conversation %s for user %s.", conversation.id, user_id)
        return conversation

    def _build_contents(self, request: ChatTurnRequest) -> list[dict]:
        """Instructions, when given, go first so the model reads them before the question."""
        contents: list[dict] = []
        if request.instructions and request.instructions.strip():
            contents.append({"role": "user", "content": f"{INSTRUCTIONS_PREFIX}{request.instructions}"})
        contents.append({"role": "user", "content": request.message})
        return contents
