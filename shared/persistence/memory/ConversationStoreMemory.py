"""In-process conversation store. Data is lost on restart."""

import uuid
from datetime import datetime

import pytz

from shared.models.chat import Citation, Conversation, Message, MessageRole
from shared.persistence.ConversationStoreInterface import ConversationStoreInterface


def _now() -> datetime:
    return datetime.now(pytz.utc)


class ConversationStoreMemory(ConversationStoreInterface):
    def __init__(self) -> None:
        self._conversations: dict[str, Conversation] = {}
        self._messages: dict[str, list[Message]] = {}

    async def create_conversation(self, user_id: str, title: str) -> Conversation:
        now = _now()
        conversation = Conversation(
            id=uuid.uuid4().hex,
            user_id=user_id,
            title=title,
            created_at=now,
            updated_at=now,
        )
        self._conversations[conversation.id] = conversation
        self._messages[conversation.id] = []
        return conversation

    async def find_conversation(self, conversation_id: str, user_id: str) -> Conversation | None:
        conversation = self._conversations.get(conversation_id)
        if conversation is None or conversation.user_id != user_id:
            return None
        return conversation

    async def list_conversations(self, user_id: str) -> list[Conversation]:
        owned = [c for c in self._conversations.values() if c.user_id == user_id]
        return sorted(owned, key=lambda c: c.updated_at, reverse=True)

    async def touch_conversation(self, conversation_id: str, user_id: str) -> None:
        conversation = await self.find_conversation(conversation_id, user_id)
        if conversation is not None:
            conversation.updated_at = _now()

    async def rename_conversation(self, conversation_id: str, user_id: str, title: str) -> Conversation | None:
        conversation = await self.find_conversation(conversation_id, user_id)
        if conversation is not None:
            conversation.title = title
            conversation.updated_at = _now()
        return conversation

    async def delete_conversation(self, conversation_id: str, user_id: str) -> bool:
        if await self.find_conversation(conversation_id, user_id) is None:
            return False
        del self._conversations[conversation_id]
        self._messages.pop(conversation_id, None)
        return True

    async def append_message(
        self,
        conversation_id: str,
        role: MessageRole,
        content: str,
        citations: list[Citation] | None = None,
    ) -> Message:
        if conversation_id not in self._conversations:
            raise KeyError(f"Unknown conversation '{conversation_id}'.")
        message = Message(
            id=uuid.uuid4().hex,
            conversation_id=conversation_id,
            role=role,
            content=content,
            citations=[c.model_copy() for c in citations] if citations else None,
            created_at=_now(),
        )
        self._messages[conversation_id].append(message)
        return message

    async def list_messages(self, conversation_id: str) -> list[Message]:
        # sorted() is stable, so equal timestamps keep insertion order
        return sorted(self._messages.get(conversation_id, []), key=lambda m: m.created_at)
