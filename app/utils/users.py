import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.user import User, UserRole, UserStatus
from app.utils.hashing import hash_password

logger = logging.getLogger("app.users")


class EmailAlreadyRegistered(Exception):
    pass


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def get_user_by_id(db: Session, user_id: str) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def create_user(db: Session, email: str, password: str, name: str) -> User:
    """New accounts always start as an ACTIVE plain USER."""
    email = normalize_email(email)
    if get_user_by_email(db, email):
        raise EmailAlreadyRegistered(email)

    user = User(
        email=email,
        password_hash=hash_password(password),
        name=name.strip(),
        role=UserRole.USER,
        status=UserStatus.ACTIVE,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # lost a race with a concurrent signup for the same address
        db.rollback()
        raise EmailAlreadyRegistered(email)
    db.refresh(user)
    logger.info("user created id=%s", user.id)
    return user
