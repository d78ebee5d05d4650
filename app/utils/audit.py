import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from app.models.audit_log import AuditLog

logger = logging.getLogger("app.audit")

USER_ROLE_CHANGED = "USER_ROLE_CHANGED"
USER_STATUS_CHANGED = "USER_STATUS_CHANGED"


def record_audit(db: Session, actor_id: str, action: str, details: Optional[dict[str, Any]] = None) -> AuditLog:
    """Append an audit entry to the current transaction. The caller commits."""
    entry = AuditLog(user_id=actor_id, action=action, details=details or {})
    db.add(entry)
    logger.info("audit %s actor=%s details=%s", action, actor_id, entry.details)
    return entry
