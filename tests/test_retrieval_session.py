"""Tests for chat turn orchestration."""

from unittest.mock import AsyncMock

import pytest

from server.core.RetrievalSession import RetrievalSession, make_title
from shared.errors.app_errors import ProviderError, ValidationError
from shared.models.chat import ChatTurnRequest, Citation, MessageRole
from shared.models.grounding import DocumentChunk, GenerationResult

USER = "user-1"


@pytest.fixture
def session(helper_config, conversation_store, model_registry) -> RetrievalSession:
    return RetrievalSession(
        helper_config=helper_config,
        conversation_store=conversation_store,
        model_registry=model_registry,
    )


@pytest.fixture
def client(gemini_client):
    gemini_client.do_generate = AsyncMock(return_value=GenerationResult(text="Answer."))
    return gemini_client


def _request(**overrides) -> ChatTurnRequest:
    values = {"message": "What is in the report?", "store_ids": ["fileSearchStores/s1"]}
    values.update(overrides)
    return ChatTurnRequest(**values)


class TestValidation:
    @pytest.mark.parametrize("message", ["", "   "])
    async def test_empty_message(self, session, client, conversation_store, message):
        with pytest.raises(ValidationError):
            await session.run_turn(USER, client, _request(message=message))
        assert await conversation_store.list_conversations(USER) == []
        client.do_generate.assert_not_awaited()

    async def test_empty_store_selection_persists_nothing(self, session, client, conversation_store):
        with pytest.raises(ValidationError):
            await session.run_turn(USER, client, _request(store_ids=[]))
        assert await conversation_store.list_conversations(USER) == []
        client.do_generate.assert_not_awaited()


class TestTurn:
    async def test_new_conversation_and_messages(self, session, client, conversation_store):
        response = await session.run_turn(USER, client, _request())

        assert response.text == "Answer."
        assert response.citations is None
        messages = await conversation_store.list_messages(response.conversation_id)
        assert [(m.role, m.content) for m in messages] == [
            (MessageRole.USER, "What is in the report?"),
            (MessageRole.ASSISTANT, "Answer."),
        ]
        assert messages[1].citations is None

    async def test_citations_are_returned_and_stored(self, session, client, conversation_store):
        client.do_generate.return_value = GenerationResult(
            text="Revenue grew.",
            grounding_chunks=[
                DocumentChunk(title="report.pdf"),
                DocumentChunk(title="report.pdf", snippet="revenue grew 10%"),
            ],
        )

        response = await session.run_turn(USER, client, _request())

        expected = [Citation(file_name="report.pdf", snippet="revenue grew 10%")]
        assert response.citations == expected
        messages = await conversation_store.list_messages(response.conversation_id)
        assert messages[-1].citations == expected

    async def test_instructions_precede_message(self, session, client):
        await session.run_turn(USER, client, _request(instructions="Answer in French."))

        contents = client.do_generate.await_args.kwargs["contents"]
        assert contents == [
            {"role": "user", "content": "System Instructions: Answer in French."},
            {"role": "user", "content": "What is in the report?"},
        ]

    async def test_retrieval_scope_and_model(self, session, client):
        await session.run_turn(
            USER,
            client,
            _request(
                store_ids=["fileSearchStores/s1", "fileSearchStores/s1", "fileSearchStores/s2"],
                metadata_filter="year > 2020",
                model_public_id="gemini-3.0-flash",
            ),
        )

        kwargs = client.do_generate.await_args.kwargs
        assert kwargs["model"] == "gemini-2.0-flash-exp"
        assert kwargs["retrieval"].store_ids == ["fileSearchStores/s1", "fileSearchStores/s2"]
        assert kwargs["retrieval"].metadata_filter == "year > 2020"

    async def test_unknown_model_uses_default(self, session, client):
        await session.run_turn(USER, client, _request(model_public_id="unknown-model-xyz"))
        assert client.do_generate.await_args.kwargs["model"] == "gemini-2.5-flash"

    async def test_continues_existing_conversation(self, session, client, conversation_store):
        first = await session.run_turn(USER, client, _request())
        second = await session.run_turn(USER, client, _request(message="Follow-up", conversation_id=first.conversation_id))

        assert second.conversation_id == first.conversation_id
        assert len(await conversation_store.list_messages(first.conversation_id)) == 4

    async def test_foreign_conversation_starts_new_one(self, session, client, conversation_store):
        other = await conversation_store.create_conversation("user-2", "theirs")

        response = await session.run_turn(USER, client, _request(conversation_id=other.id))

        assert response.conversation_id != other.id
        assert await conversation_store.list_messages(other.id) == []

    async def test_long_message_title_is_truncated(self, session, client, conversation_store):
        message = "x" * 80
        response = await session.run_turn(USER, client, _request(message=message))

        conversation = await conversation_store.find_conversation(response.conversation_id, USER)
        assert conversation.title == "x" * 50 + "..."


class TestDurability:
    async def test_provider_failure_keeps_user_message(self, session, client, conversation_store):
        client.do_generate.side_effect = ProviderError("quota exceeded", upstream_status=429)

        with pytest.raises(ProviderError, match="quota exceeded"):
            await session.run_turn(USER, client, _request())

        conversations = await conversation_store.list_conversations(USER)
        assert len(conversations) == 1
        messages = await conversation_store.list_messages(conversations[0].id)
        assert [m.role for m in messages] == [MessageRole.USER]

    async def test_unexpected_failure_is_wrapped(self, session, client):
        client.do_generate.side_effect = RuntimeError("boom")

        with pytest.raises(ProviderError, match="boom"):
            await session.run_turn(USER, client, _request())


@pytest.mark.parametrize(
    "message, title",
    [
        ("short", "short"),
        ("y" * 50, "y" * 50),
        ("y" * 51, "y" * 50 + "..."),
    ],
)
def test_make_title(message, title):
    assert make_title(message) == title
