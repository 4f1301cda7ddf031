import asyncio
from datetime import datetime, timedelta, timezone

from serenmind.models.chat import CompletionOutcome, CompletionResult, ConversationState
from serenmind.services.ai_service import FALLBACK_MESSAGES
from serenmind.services.chat_service import (
    WELCOME_ID, WELCOME_MESSAGE, Conversation, ConversationRegistry, emotion_message, record_message_metrics,
)


class ScriptedClient:
    """Answers each request after ``delays[i]`` seconds, echoing the last user text."""

    def __init__(self, delays=(), outcome=CompletionOutcome.OK):
        self.delays = list(delays)
        self.outcome = outcome
        self.requests = []

    async def generate(self, contents):
        self.requests.append(contents)
        delay = self.delays.pop(0) if self.delays else 0
        await asyncio.sleep(delay)
        if self.outcome != CompletionOutcome.OK:
            return CompletionResult(outcome=self.outcome, status_code=403)
        last = contents[-1]["parts"][0]["text"]
        return CompletionResult(outcome=CompletionOutcome.OK, text=f"reply to {last}")


class ExplodingClient:
    async def generate(self, contents):
        raise RuntimeError("boom")


def test_new_conversation_starts_with_welcome():
    conversation = Conversation("user-1")
    assert conversation.state == ConversationState.IDLE
    assert [m.id for m in conversation.messages] == [WELCOME_ID]
    assert conversation.messages[0].content == WELCOME_MESSAGE
    assert conversation.history_contents() == []


def test_send_appends_user_message_and_reply():
    async def scenario():
        conversation = Conversation("user-1")
        turn = await conversation.send("hello", ScriptedClient())
        return conversation, turn

    conversation, turn = asyncio.run(scenario())

    assert turn.outcome == "ok"
    assert turn.reply.content == "reply to hello"
    assert [m.sender for m in conversation.messages] == ["ai", "user", "ai"]
    assert conversation.state == ConversationState.IDLE


def test_sends_are_serialized():
    async def scenario():
        conversation = Conversation("user-1")
        client = ScriptedClient(delays=[0.05, 0])
        await asyncio.gather(
            conversation.send("first", client),
            conversation.send("second", client),
        )
        return conversation, client

    conversation, client = asyncio.run(scenario())

    contents = [m.content for m in conversation.messages[1:]]
    assert contents == ["first", "reply to first", "second", "reply to second"]
    # The second request carries the first exchange as history
    assert [c["parts"][0]["text"] for c in client.requests[1]] == ["first", "reply to first", "second"]


def test_history_is_limited():
    async def scenario():
        conversation = Conversation("user-1", history_limit=4)
        client = ScriptedClient()
        for i in range(4):
            await conversation.send(f"message {i}", client)
        return client

    client = asyncio.run(scenario())
    last_request = client.requests[-1]
    assert len(last_request) == 4
    assert last_request[-1] == {"role": "user", "parts": [{"text": "message 3"}]}
    assert last_request[-2]["role"] == "model"


def test_failed_request_appends_fallback():
    async def scenario():
        conversation = Conversation("user-1")
        turn = await conversation.send("hello", ScriptedClient(outcome=CompletionOutcome.ACCESS_DENIED))
        return conversation, turn

    conversation, turn = asyncio.run(scenario())

    assert turn.outcome == "access_denied"
    assert turn.reply.content == FALLBACK_MESSAGES[CompletionOutcome.ACCESS_DENIED]
    assert conversation.messages[-1].sender == "ai"
    assert conversation.state == ConversationState.IDLE


def test_unexpected_client_error_is_transient():
    async def scenario():
        return await Conversation("user-1").send("hello", ExplodingClient())

    turn = asyncio.run(scenario())
    assert turn.outcome == "transient"
    assert turn.reply.content == FALLBACK_MESSAGES[CompletionOutcome.TRANSIENT]


def test_cancel_discards_message_and_reply():
    client = ScriptedClient(delays=[10, 0])

    async def scenario():
        conversation = Conversation("user-1")
        task = asyncio.ensure_future(conversation.send("hello", client))
        await asyncio.sleep(0.01)
        assert conversation.state == ConversationState.AWAITING_REPLY
        assert conversation.busy
        assert conversation.cancel() is True
        result = await task
        assert result is None
        assert conversation.state == ConversationState.IDLE
        assert [m.sender for m in conversation.messages] == ["ai"]

        await conversation.send("hello again", client)
        return conversation

    conversation = asyncio.run(scenario())

    assert client.requests[1] == [{"role": "user", "parts": [{"text": "hello again"}]}]
    assert [m.content for m in conversation.messages[1:]] == ["hello again", "reply to hello again"]


def test_cancel_without_request_in_flight():
    assert Conversation("user-1").cancel() is False


def test_clear_restores_welcome():
    async def scenario():
        conversation = Conversation("user-1")
        await conversation.send("hello", ScriptedClient())
        conversation.clear()
        return conversation

    conversation = asyncio.run(scenario())
    assert [m.id for m in conversation.messages] == [WELCOME_ID]


def test_registry_keeps_one_conversation_per_session():
    registry = ConversationRegistry()
    first = registry.get("session-a", "user-1")
    assert registry.get("session-a", "user-1") is first
    assert registry.get("session-b", "user-1") is not first
    assert len(registry) == 2

    assert registry.drop("session-a") is True
    assert registry.drop("session-a") is False
    assert len(registry) == 1


def test_registry_drops_conversations_of_expired_sessions():
    registry = ConversationRegistry()
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    live = registry.get("session-b", "user-1", now + timedelta(hours=1))
    unbounded = registry.get("session-c", "user-2")
    expired = registry.get("session-a", "user-1", now - timedelta(minutes=1))

    assert registry.sweep(now) == 1
    assert len(registry) == 2
    assert registry.get("session-b", "user-1") is live
    assert registry.get("session-c", "user-2") is unbounded
    assert registry.get("session-a", "user-1") is not expired


def test_get_sweeps_expired_sessions():
    registry = ConversationRegistry()
    registry.get("session-a", "user-1", datetime(2000, 1, 1))
    registry.get("session-b", "user-1")

    assert len(registry) == 1


def test_emotion_message():
    assert emotion_message("Anxious") == "I'm feeling anxious today."


def test_record_message_metrics_saves_keyword_analysis(db):
    record_message_metrics("user-1", "Work has been a lot of stress")

    doc = db["mental_metrics"].find_one({"user_id": "user-1"})
    assert doc["sentiment"] == "negative"
    assert set(doc["topics"]) == {"work", "stress"}
