from abc import ABC, abstractmethod

from shared.models.chat import Citation, Conversation, Message, MessageRole


class ConversationStoreInterface(ABC):
    """Persistence for conversations and their append-only message history.

    Every lookup is scoped by user_id: a conversation owned by another user
    behaves exactly like one that does not exist.
    """

    @abstractmethod
    async def create_conversation(self, user_id: str, title: str) -> Conversation:
        pass

    @abstractmethod
    async def find_conversation(self, conversation_id: str, user_id: str) -> Conversation | None:
        """Returns the conversation, or None if it is absent or belongs to someone else."""
        pass

    @abstractmethod
    async def list_conversations(self, user_id: str) -> list[Conversation]:
        """Returns the user's conversations, most recently updated first."""
        pass

    @abstractmethod
    async def touch_conversation(self, conversation_id: str, user_id: str) -> None:
        """Bumps updated_at to now."""
        pass

    @abstractmethod
    async def rename_conversation(self, conversation_id: str, user_id: str, title: str) -> Conversation | None:
        pass

    @abstractmethod
    async def delete_conversation(self, conversation_id: str, user_id: str) -> bool:
        """Deletes the conversation and its messages. Returns False if nothing was deleted."""
        pass

    @abstractmethod
    async def append_message(
        self,
        conversation_id: str,
        role: MessageRole,
        content: str,
        citations: list[Citation] | None = None,
    ) -> Message:
        pass

    @abstractmethod
    async def list_messages(self, conversation_id: str) -> list[Message]:
        """Returns the messages of a conversation ordered by created_at."""
        pass
