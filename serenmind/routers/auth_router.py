from typing import Optional

from fastapi import APIRouter, Depends, status

from serenmind.models.user import (
    GoogleSignInRequest, Session, SessionResponse, SignInRequest, SignUpRequest
)
from serenmind.routers.auth_dependency import get_current_session, get_optional_session
from serenmind.services import auth_service

router = APIRouter(
    prefix="/auth",
    tags=["Auth"],
)


def _session_response(session: Session, token: str) -> SessionResponse:
    return SessionResponse(
        access_token=token,
        user_id=session.user_id,
        is_anonymous=session.is_anonymous,
        expires_at=session.expires_at,
    )


@router.post("/sign-up", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def sign_up(request: SignUpRequest):
    session, token = auth_service.sign_up(request)
    return _session_response(session, token)


@router.post("/sign-in", response_model=SessionResponse)
async def sign_in(request: SignInRequest):
    session, token = auth_service.sign_in(request.email, request.password)
    return _session_response(session, token)


@router.post("/anonymous", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def sign_in_anonymously():
    session, token = auth_service.sign_in_anonymously()
    return _session_response(session, token)


@router.post("/google", response_model=SessionResponse)
async def sign_in_with_google(
    request: GoogleSignInRequest,
    current: Optional[Session] = Depends(get_optional_session),
):
    session, token = auth_service.sign_in_with_google(request.google_token, current)
    return _session_response(session, token)


@router.post("/sign-out", status_code=status.HTTP_204_NO_CONTENT)
async def sign_out(session: Session = Depends(get_current_session)):
    auth_service.revoke_session(session)
    return None


@router.get("/session", response_model=Session)
async def get_session(session: Session = Depends(get_current_session)):
    return session
