"""
Opaque cookie sessions.

A session row carries a fixed absolute expiry. Expiry is enforced lazily when
the session is read; ``purge_expired_sessions`` is only storage hygiene.
"""
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import NamedTuple, Optional

from fastapi import Response
from sqlalchemy.orm import Session

from app.config import settings
from app.models.session import UserSession
from app.models.user import User, UserStatus
from app.utils.clock import utcnow

logger = logging.getLogger("app.sessions")

INACTIVE_STATUSES = (UserStatus.SUSPENDED, UserStatus.BANNED)


def issue_session(db: Session, user_id: str, now: Optional[datetime] = None) -> UserSession:
    now = now or utcnow()
    session = UserSession(
        id=secrets.token_urlsafe(32),
        user_id=user_id,
        expires=now + timedelta(days=settings.SESSION_EXPIRE_DAYS),
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    logger.info("session issued user_id=%s expires=%s", user_id, session.expires.isoformat())
    return session


class SessionLookup(NamedTuple):
    user: Optional[User] = None
    # owner of a session dropped because the account is SUSPENDED or BANNED
    inactive_owner: Optional[User] = None


def lookup_session(db: Session, session_id: Optional[str], now: Optional[datetime] = None) -> SessionLookup:
    """
    Resolve ``session_id`` and report why it failed when it did.

    Side effects: an expired session is deleted, and so is a session whose
    owner is SUSPENDED or BANNED.
    """
    if not session_id:
        return SessionLookup()

    session = db.query(UserSession).filter(UserSession.id == session_id).first()
    if session is None:
        return SessionLookup()

    now = now or utcnow()
    if now > session.expires:
        logger.info("session expired user_id=%s", session.user_id)
        db.delete(session)
        db.commit()
        return SessionLookup()

    user = session.user
    if user is None:
        revoke_session(db, session_id)
        return SessionLookup()

    if user.status in INACTIVE_STATUSES:
        logger.warning("session revoked for inactive user id=%s status=%s", user.id, user.status.value)
        revoke_session(db, session_id)
        return SessionLookup(inactive_owner=user)

    return SessionLookup(user=user)


def resolve_session(db: Session, session_id: Optional[str], now: Optional[datetime] = None) -> Optional[User]:
    """Return the user owning ``session_id`` or None, see ``lookup_session``."""
    return lookup_session(db, session_id, now).user


def revoke_session(db: Session, session_id: Optional[str]) -> None:
    if not session_id:
        return
    deleted = db.query(UserSession).filter(UserSession.id == session_id).delete(synchronize_session=False)
    db.commit()
    if deleted:
        logger.info("session revoked")


def purge_expired_sessions(db: Session, now: Optional[datetime] = None) -> int:
    now = now or utcnow()
    deleted = db.query(UserSession).filter(UserSession.expires < now).delete(synchronize_session=False)
    db.commit()
    logger.info("purged %d expired sessions", deleted)
    return deleted


def set_session_cookie(response: Response, session: UserSession) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=session.id,
        expires=session.expires.replace(tzinfo=timezone.utc),
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


def cleared_cookie_headers() -> dict[str, str]:
    # for HTTPException, which drops the headers of the injected Response
    response = Response()
    clear_session_cookie(response)
    return {"set-cookie": response.headers["set-cookie"]}
