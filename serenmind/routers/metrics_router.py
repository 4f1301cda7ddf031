import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status

from serenmind.models.metrics import WellnessMetrics
from serenmind.routers.auth_dependency import get_current_user_id
from serenmind.services.auth_service import resolve_session
from serenmind.services.metrics_service import get_wellness_metrics, open_subscription

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/metrics",
    tags=["Wellness Metrics"],
)


@router.get("", response_model=WellnessMetrics)
async def get_metrics(user_id: str = Depends(get_current_user_id)):
    return get_wellness_metrics(user_id)


def _websocket_token(websocket: WebSocket) -> Optional[str]:
    header = websocket.headers.get("authorization", "")
    if header.startswith("Bearer "):
        return header.split(" ", 1)[1].strip()
    return websocket.query_params.get("token")


@router.websocket("/ws")
async def stream_metrics(websocket: WebSocket):
    token = _websocket_token(websocket)
    session = resolve_session(token) if token else None
    if session is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    subscription = open_subscription(session.user_id, session.jti)
    # Any client message, or the disconnect, ends the stream
    receiver = asyncio.ensure_future(websocket.receive())
    receiver.add_done_callback(lambda _: subscription.close())

    try:
        async for snapshot in subscription:
            await websocket.send_json(snapshot)
        if not receiver.done():
            # Closed from the server side, e.g. on sign-out
            await websocket.close()
    except WebSocketDisconnect:
        pass
    finally:
        subscription.close()
        receiver.cancel()
        logger.info("Metrics stream closed for %s", session.user_id)
