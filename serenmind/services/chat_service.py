import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from pymongo.errors import PyMongoError

from serenmind import config
from serenmind.models.chat import (
    ChatTurnResponse, CompletionOutcome, CompletionResult, ConversationState, Message
)
from serenmind.services.ai_service import GenerationClient, analyze_message, fallback_message
from serenmind.services.metrics_service import save_mental_metric

logger = logging.getLogger(__name__)

WELCOME_MESSAGE = "Hello! I'm SerenMind, your AI wellness companion. How are you feeling today?"
WELCOME_ID = "welcome"


def new_message(content: str, sender: str, message_id: Optional[str] = None) -> Message:
    return Message(
        id=message_id or uuid.uuid4().hex,
        content=content,
        sender=sender,
        timestamp=datetime.now(timezone.utc),
    )


def emotion_message(emotion: str) -> str:
    return f"I'm feeling {emotion.strip().lower()} today."


def record_message_metrics(user_id: str, message: str) -> None:
    """Side-channel analysis of a user message into a mental metric."""
    try:
        save_mental_metric(user_id, analyze_message(message))
    except PyMongoError as e:
        logger.warning("Could not save mental metric for %s: %s", user_id, e)


class Conversation:
    """One chat transcript and its send state machine.

    Sends are serialized: a second ``send`` waits for the first reply, so
    replies always land in send order. ``cancel`` aborts the in-flight
    request and discards both the pending user message and its reply.
    """

    def __init__(self, user_id: str, history_limit: int = config.CHAT_HISTORY_LIMIT):
        self.user_id = user_id
        self.history_limit = history_limit
        self.expires_at: Optional[datetime] = None
        self.state = ConversationState.IDLE
        self.messages: List[Message] = []
        self._lock = asyncio.Lock()
        self._inflight: Optional[asyncio.Task] = None
        self._cancel_requested = False
        self.reset()

    def reset(self) -> None:
        self.messages = [new_message(WELCOME_MESSAGE, "ai", WELCOME_ID)]

    def history_contents(self) -> List[dict]:
        contents = []
        for message in self.messages[-self.history_limit:]:
            if message.id == WELCOME_ID:
                continue
            role = "user" if message.sender == "user" else "model"
            contents.append({"role": role, "parts": [{"text": message.content}]})
        return contents

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    async def send(self, content: str, client: GenerationClient) -> Optional[ChatTurnResponse]:
        """Append the user message, wait for the reply and append it.

        Returns None when the request was cancelled before the reply arrived.
        """
        async with self._lock:
            self._cancel_requested = False
            user_message = new_message(content, "user")
            self.messages.append(user_message)
            self.state = ConversationState.SENDING
            contents = self.history_contents()

            self.state = ConversationState.AWAITING_REPLY
            self._inflight = asyncio.ensure_future(client.generate(contents))
            try:
                result = await self._inflight
            except asyncio.CancelledError:
                self.state = ConversationState.IDLE
                if self._cancel_requested:
                    # clear() may already have reset the transcript
                    if user_message in self.messages:
                        self.messages.remove(user_message)
                    logger.info("Chat request for %s cancelled, message and reply discarded", self.user_id)
                    return None
                raise
            except Exception:
                logger.exception("Unexpected error from completion client")
                result = CompletionResult(outcome=CompletionOutcome.TRANSIENT)
            finally:
                self._inflight = None

            if result.ok:
                reply = new_message(result.text, "ai")
            else:
                self.state = ConversationState.FAILED
                reply = new_message(fallback_message(result), "ai")

            self.messages.append(reply)
            self.state = ConversationState.IDLE
            return ChatTurnResponse(user_message=user_message, reply=reply, outcome=result.outcome.value)

    def cancel(self) -> bool:
        if self._inflight is None or self._inflight.done():
            return False
        self._cancel_requested = True
        self._inflight.cancel()
        return True

    def clear(self) -> None:
        self.cancel()
        self.reset()


class ConversationRegistry:
    """Conversations keyed by auth session.

    A conversation is dropped on sign-out, or on the next lookup after its
    session has expired.
    """

    def __init__(self):
        self._conversations: Dict[str, Conversation] = {}

    def get(self, session_id: str, user_id: str, expires_at: Optional[datetime] = None) -> Conversation:
        self.sweep()
        conversation = self._conversations.get(session_id)
        if conversation is None:
            conversation = Conversation(user_id)
            conversation.expires_at = expires_at
            self._conversations[session_id] = conversation
        return conversation

    def sweep(self, now: Optional[datetime] = None) -> int:
        # Session expiry times are naive UTC
        now = now or datetime.now(timezone.utc).replace(tzinfo=None)
        expired = [
            session_id for session_id, conversation in self._conversations.items()
            if conversation.expires_at is not None and conversation.expires_at <= now
        ]
        for session_id in expired:
            self.drop(session_id)
        if expired:
            logger.info("Dropped %d conversation(s) of expired sessions", len(expired))
        return len(expired)

    def drop(self, session_id: str) -> bool:
        conversation = self._conversations.pop(session_id, None)
        if conversation is None:
            return False
        conversation.cancel()
        return True

    def __len__(self) -> int:
        return len(self._conversations)


conversations = ConversationRegistry()
