import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from pymongo.errors import ConnectionFailure

from serenmind import config
from serenmind.config import ConfigurationError
from serenmind.models.user import Session
from serenmind.routers import auth_router
from serenmind.routers import user_router
from serenmind.routers import mood_router
from serenmind.routers import chat_router
from serenmind.routers import metrics_router
from serenmind.routers import stat_router
from serenmind.routers import recommendation_router
from serenmind.services import auth_service
from serenmind.services.ai_service import close_generation_client, report_configuration_error
from serenmind.services.chat_service import conversations
from serenmind.services.metrics_service import close_session_subscriptions

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def on_session_change(event: str, session: Session) -> None:
    if event == auth_service.SIGNED_OUT:
        conversations.drop(session.jti)
        closed = close_session_subscriptions(session.jti)
        logger.info("Session %s ended, closed %d metric stream(s)", session.jti, closed)


@asynccontextmanager
async def lifespan(app: FastAPI):
    unsubscribe = auth_service.session_events.subscribe(on_session_change)
    yield
    unsubscribe()
    await close_generation_client()


app = FastAPI(
    lifespan=lifespan,
    title="SerenMind Backend",
    description="Mood tracking, AI wellness companion and wellness metrics.",
)


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    report_configuration_error(exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": f"{exc.feature} is not configured"},
    )


@app.exception_handler(ConnectionFailure)
async def database_error_handler(request: Request, exc: ConnectionFailure):
    logger.error("Database unavailable: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Database is unavailable, please try again later"},
    )


app.include_router(auth_router.router)
app.include_router(user_router.router)
app.include_router(mood_router.router)
app.include_router(chat_router.router)
app.include_router(metrics_router.router)
app.include_router(stat_router.router)
app.include_router(recommendation_router.router)
