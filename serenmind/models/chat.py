from enum import Enum
from typing import List, Optional, Literal
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict


class Message(BaseModel):
    id: str
    content: str
    sender: Literal["user", "ai"]
    timestamp: datetime


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=4000)
    speak: bool = False


class EmotionRequest(BaseModel):
    emotion: str = Field(..., min_length=1, max_length=40)
    speak: bool = False


class ConversationState(str, Enum):
    IDLE = "idle"
    SENDING = "sending"
    AWAITING_REPLY = "awaiting_reply"
    FAILED = "failed"


class ChatTurnResponse(BaseModel):
    user_message: Message
    reply: Message
    outcome: str


class ChatHistoryResponse(BaseModel):
    state: ConversationState
    messages: List[Message]


# --- Gemini generateContent payloads ---

class Part(BaseModel):
    text: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class Content(BaseModel):
    role: Optional[str] = None
    parts: List[Part] = []

    model_config = ConfigDict(extra="ignore")


class Candidate(BaseModel):
    content: Optional[Content] = None
    finish_reason: Optional[str] = Field(None, alias="finishReason")

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class CompletionResponse(BaseModel):
    candidates: List[Candidate] = Field(..., min_length=1)

    model_config = ConfigDict(extra="ignore")

    def first_text(self) -> Optional[str]:
        content = self.candidates[0].content
        if content is None:
            return None
        texts = [p.text for p in content.parts if p.text]
        return "".join(texts).strip() or None


class CompletionOutcome(str, Enum):
    OK = "ok"
    BAD_REQUEST = "bad_request"
    ACCESS_DENIED = "access_denied"
    TRANSIENT = "transient"
    MALFORMED = "malformed"


class CompletionResult(BaseModel):
    outcome: CompletionOutcome
    text: Optional[str] = None
    status_code: Optional[int] = None
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome == CompletionOutcome.OK


# --- Side-channel analysis payload ---

class AnalysisPayload(BaseModel):
    mood_score: float = Field(..., alias="moodScore")
    sentiment: str
    topics: List[str]

    model_config = ConfigDict(populate_by_name=True, extra="ignore")
