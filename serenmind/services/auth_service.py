import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Tuple

import bcrypt
from fastapi import HTTPException, status
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token
from jose import jwt, JWTError
from pymongo.errors import DuplicateKeyError

from serenmind import config
from serenmind.db.database import (
    get_user_collection, get_session_collection, get_mood_collection, get_metrics_collection
)
from serenmind.models.user import Session, SignUpRequest

logger = logging.getLogger(__name__)

SIGNED_IN = "signed_in"
SIGNED_OUT = "signed_out"

SessionListener = Callable[[str, Session], None]


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class SessionManager:
    """Publishes "session changed" events to subscribers."""

    def __init__(self):
        self._listeners: List[SessionListener] = []

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, event: str, session: Session) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, session)
            except Exception:
                logger.exception("Session listener failed on %s", event)


session_events = SessionManager()


# ==========================================
# PASSWORDS
# ==========================================

def hash_password(password: str) -> str:
    # bcrypt only looks at the first 72 bytes
    pw_bytes = password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8")[:72], hashed_password.encode("utf-8"))
    except ValueError as e:
        logger.warning("Bcrypt verification error: %s", e)
        return False


# ==========================================
# SESSIONS
# ==========================================

def _secret() -> str:
    return config.require(config.JWT_SECRET, "JWT_SECRET", "sign-in")


def create_session(user_id: str, is_anonymous: bool = False) -> Tuple[Session, str]:
    issued_at = utcnow()
    session = Session(
        jti=uuid.uuid4().hex,
        user_id=user_id,
        is_anonymous=is_anonymous,
        issued_at=issued_at,
        expires_at=issued_at + timedelta(hours=config.JWT_EXPIRY_HOURS),
    )
    token = jwt.encode(
        {
            "user_id": user_id,
            "jti": session.jti,
            "anon": is_anonymous,
            "exp": session.expires_at.replace(tzinfo=timezone.utc),
        },
        _secret(),
        algorithm=config.JWT_ALGORITHM,
    )
    get_session_collection().insert_one({**session.model_dump(), "revoked": False})
    get_user_collection().update_one({"_id": user_id}, {"$set": {"last_active": issued_at}})

    session_events.publish(SIGNED_IN, session)
    return session, token


def verify_token(token: str) -> Optional[dict]:
    try:
        return jwt.decode(token, _secret(), algorithms=[config.JWT_ALGORITHM])
    except JWTError:
        return None


def resolve_session(token: str) -> Optional[Session]:
    payload = verify_token(token)
    if payload is None:
        return None

    user_id = payload.get("user_id")
    jti = payload.get("jti")
    if not user_id or not jti:
        return None

    doc = get_session_collection().find_one({"jti": jti})
    if doc is None or doc.get("revoked") or doc.get("user_id") != user_id:
        return None
    if doc["expires_at"] <= utcnow():
        return None
    return Session(**doc)


def revoke_session(session: Session) -> None:
    get_session_collection().update_one({"jti": session.jti}, {"$set": {"revoked": True, "revoked_at": utcnow()}})
    session_events.publish(SIGNED_OUT, session)


# ==========================================
# SIGN-UP / SIGN-IN
# ==========================================

def sign_up(request: SignUpRequest) -> Tuple[Session, str]:
    users = get_user_collection()
    if users.find_one({"email": request.email}) is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email is already registered")

    now = utcnow()
    user_id = uuid.uuid4().hex
    try:
        users.insert_one({
            "_id": user_id,
            "email": request.email,
            "name": request.name,
            "password_hash": hash_password(request.password),
            "provider": "password",
            "is_anonymous": False,
            "created_at": now,
            "last_active": now,
        })
    except DuplicateKeyError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email is already registered")

    logger.info("Created user %s", user_id)
    return create_session(user_id)


def sign_in(email: str, password: str) -> Tuple[Session, str]:
    user = get_user_collection().find_one({"email": email, "provider": "password"})
    if not user or not verify_password(password, user.get("password_hash", "")):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")
    return create_session(user["_id"])


def sign_in_anonymously() -> Tuple[Session, str]:
    now = utcnow()
    user_id = "anon-" + uuid.uuid4().hex
    get_user_collection().insert_one({
        "_id": user_id,
        "name": "Anonymous User",
        "provider": "anonymous",
        "is_anonymous": True,
        "created_at": now,
        "last_active": now,
    })
    return create_session(user_id, is_anonymous=True)


def verify_google_token(google_token: str) -> dict:
    client_id = config.require(config.GOOGLE_CLIENT_ID, "GOOGLE_CLIENT_ID", "Google sign-in")
    try:
        return id_token.verify_oauth2_token(google_token, google_requests.Request(), client_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=f"Invalid Google token: {e}")


def migrate_user_data(from_user_id: str, to_user_id: str) -> int:
    """Move an anonymous user's mood entries and metrics to another identity."""
    moved = 0
    for collection in (get_mood_collection(), get_metrics_collection()):
        result = collection.update_many({"user_id": from_user_id}, {"$set": {"user_id": to_user_id}})
        moved += result.modified_count
    get_user_collection().delete_one({"_id": from_user_id, "is_anonymous": True})
    return moved


def sign_in_with_google(google_token: str, current: Optional[Session] = None) -> Tuple[Session, str]:
    id_info = verify_google_token(google_token)

    google_user_id = id_info["sub"]
    email = id_info.get("email")
    name = id_info.get("name")
    picture = id_info.get("picture")

    users = get_user_collection()
    if email:
        other = users.find_one({"email": email, "_id": {"$ne": google_user_id}})
        if other is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Email is already registered with a password",
            )

    now = utcnow()
    update = {"provider": "google", "is_anonymous": False, "photo_url": picture, "last_active": now}
    if email:
        update["email"] = email
    users.update_one(
        {"_id": google_user_id},
        {"$set": update, "$setOnInsert": {"name": name, "created_at": now}},
        upsert=True,
    )

    if current is not None and current.is_anonymous and current.user_id != google_user_id:
        moved = migrate_user_data(current.user_id, google_user_id)
        logger.info("Linked anonymous user %s to %s (%d records)", current.user_id, google_user_id, moved)
        revoke_session(current)

    return create_session(google_user_id)
