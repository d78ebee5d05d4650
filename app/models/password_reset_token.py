from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.sql import func
from app.database import Base

class PasswordResetToken(Base):
    __tablename__ = "password_resets"

    id = Column(Integer, primary_key=True)
    # no unique constraint on user_id: several live tokens per user are allowed
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # sha256 of the emailed token, raw value is never stored
    token_hash = Column(String(64), unique=True, nullable=False, index=True)

    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
