"""
Single-use password reset tokens.

The raw token only travels in the emailed link; the table stores its sha256.
Issuing a token never touches older ones, so a user may hold several live
tokens at once. ``validate_reset_token`` is read-only; an expired row is
removed by the next consume attempt or by ``purge_expired_reset_tokens``.
"""
import hashlib
import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from app.config import settings
from app.models.password_reset_token import PasswordResetToken
from app.models.user import User
from app.utils.clock import utcnow
from app.utils.hashing import hash_password, verify_password

logger = logging.getLogger("app.password_reset")

INVALID = "invalid"
EXPIRED = "expired"


class ResetTokenError(Exception):
    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class PasswordReuseError(Exception):
    pass


def generate_reset_token() -> str:
    # raw token handed to the user, shown once
    return secrets.token_urlsafe(32)

def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def issue_reset_token(db: Session, user_id: str, now: Optional[datetime] = None) -> str:
    now = now or utcnow()
    raw_token = generate_reset_token()
    db.add(PasswordResetToken(
        user_id=user_id,
        token_hash=hash_token(raw_token),
        expires_at=now + timedelta(hours=settings.RESET_TOKEN_EXPIRE_HOURS),
    ))
    db.commit()
    logger.info("reset token issued user_id=%s", user_id)
    return raw_token


def _find(db: Session, token: str, lock: bool = False) -> Optional[PasswordResetToken]:
    if not token:
        return None
    q = db.query(PasswordResetToken).filter(PasswordResetToken.token_hash == hash_token(token))
    if lock:
        q = q.with_for_update()
    return q.first()


def validate_reset_token(db: Session, token: str, now: Optional[datetime] = None) -> Tuple[str, str]:
    """Return ``(user_id, email)`` for a live token, else raise ResetTokenError."""
    row = _find(db, token)
    if row is None:
        raise ResetTokenError(INVALID)

    if (now or utcnow()) > row.expires_at:
        raise ResetTokenError(EXPIRED)

    user = db.query(User).filter(User.id == row.user_id).first()
    if user is None:
        raise ResetTokenError(INVALID)
    return user.id, user.email


def consume_reset_token(db: Session, token: str, new_password: str, now: Optional[datetime] = None) -> None:
    """
    Set a new password using ``token`` and delete the token.

    Runs as one transaction over the token row. The delete row count is
    checked so that two concurrent consumers cannot both succeed.
    """
    now = now or utcnow()
    try:
        row = _find(db, token, lock=True)
        if row is None:
            raise ResetTokenError(INVALID)

        if now > row.expires_at:
            user_id = row.user_id
            db.delete(row)
            db.commit()
            logger.info("expired reset token discarded user_id=%s", user_id)
            raise ResetTokenError(EXPIRED)

        user = db.query(User).filter(User.id == row.user_id).first()
        if user is None:
            raise ResetTokenError(INVALID)

        if verify_password(new_password, user.password_hash):
            raise PasswordReuseError()

        deleted = (
            db.query(PasswordResetToken)
            .filter(PasswordResetToken.id == row.id)
            .delete(synchronize_session=False)
        )
        if deleted != 1:
            raise ResetTokenError(INVALID)

        user.password_hash = hash_password(new_password)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("password reset completed user_id=%s", user.id)


def purge_expired_reset_tokens(db: Session, now: Optional[datetime] = None) -> int:
    now = now or utcnow()
    deleted = (
        db.query(PasswordResetToken)
        .filter(PasswordResetToken.expires_at < now)
        .delete(synchronize_session=False)
    )
    db.commit()
    logger.info("purged %d expired reset tokens", deleted)
    return deleted
