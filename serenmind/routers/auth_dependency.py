from fastapi import Header, HTTPException, status, Depends
from typing import Annotated, Optional

from serenmind.models.user import Session
from serenmind.services.auth_service import resolve_session


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization or not authorization.startswith("Bearer "):
        return None
    return authorization.split(" ", 1)[1].strip() or None


def get_current_session(authorization: Annotated[Optional[str], Header()] = None) -> Session:
    token = _bearer_token(authorization)
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid Authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )

    session = resolve_session(token)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session is invalid, expired or signed out",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return session


def get_optional_session(authorization: Annotated[Optional[str], Header()] = None) -> Optional[Session]:
    token = _bearer_token(authorization)
    if token is None:
        return None
    return resolve_session(token)


def get_current_user_id(session: Session = Depends(get_current_session)) -> str:
    return session.user_id
