from sqlalchemy import Column, BigInteger, Integer, String, DateTime, ForeignKey, JSON
from sqlalchemy.sql import func
from app.database import Base


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)

    # actor
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)

    # USER_ROLE_CHANGED / USER_STATUS_CHANGED
    action = Column(String(64), nullable=False, index=True)
    details = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
