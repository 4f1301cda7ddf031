from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status

from serenmind.models.chat import (
    ChatHistoryResponse, ChatRequest, ChatTurnResponse, CompletionOutcome, EmotionRequest
)
from serenmind.models.user import Session
from serenmind.routers.auth_dependency import get_current_session
from serenmind.services.ai_service import get_generation_client
from serenmind.services.chat_service import (
    Conversation, conversations, emotion_message, record_message_metrics
)
from serenmind.services.speech_service import get_voice_assistant

router = APIRouter(
    prefix="/chat",
    tags=["Chatbot"],
    dependencies=[Depends(get_current_session)]
)


def get_conversation(session: Session = Depends(get_current_session)) -> Conversation:
    return conversations.get(session.jti, session.user_id, session.expires_at)


async def run_turn(
    text: str,
    speak: bool,
    conversation: Conversation,
    background_tasks: BackgroundTasks,
) -> ChatTurnResponse:
    if not text.strip():
        raise HTTPException(status_code=400, detail="Message must not be empty")

    client = get_generation_client()
    turn = await conversation.send(text.strip(), client)
    if turn is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Request was cancelled")

    if turn.outcome == CompletionOutcome.OK.value:
        background_tasks.add_task(record_message_metrics, conversation.user_id, turn.user_message.content)

    assistant = get_voice_assistant()
    if speak and assistant is not None:
        background_tasks.add_task(assistant.speak, turn.reply.content)

    return turn


@router.get("/history", response_model=ChatHistoryResponse)
async def get_chat_history(conversation: Conversation = Depends(get_conversation)):
    return ChatHistoryResponse(state=conversation.state, messages=conversation.messages)


@router.post("/send", response_model=ChatTurnResponse)
async def send_message(
    request: ChatRequest,
    background_tasks: BackgroundTasks,
    conversation: Conversation = Depends(get_conversation),
):
    return await run_turn(request.message, request.speak, conversation, background_tasks)


@router.post("/emotion", response_model=ChatTurnResponse)
async def send_emotion(
    request: EmotionRequest,
    background_tasks: BackgroundTasks,
    conversation: Conversation = Depends(get_conversation),
):
    return await run_turn(emotion_message(request.emotion), request.speak, conversation, background_tasks)


@router.post("/cancel")
async def cancel_request(conversation: Conversation = Depends(get_conversation)):
    return {"cancelled": conversation.cancel()}


@router.delete("/history", response_model=ChatHistoryResponse)
async def clear_chat_history(conversation: Conversation = Depends(get_conversation)):
    conversation.clear()
    return ChatHistoryResponse(state=conversation.state, messages=conversation.messages)
