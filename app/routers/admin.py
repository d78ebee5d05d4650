from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from sqlalchemy.orm import Session

from app.database import get_db
from app.utils.auth import require_admin

from app.models.audit_log import AuditLog
from app.models.user import User, UserRole, UserStatus

from app.schemas.admin_user import (
    AdminUserOut,
    AdminUserListOut,
    AdminRoleUpdateIn,
    AdminStatusUpdateIn,
    AuditLogOut,
    AuditLogListOut,
    PurgeOut,
)

from app.utils.audit import USER_ROLE_CHANGED, USER_STATUS_CHANGED, record_audit
from app.utils.password_reset import purge_expired_reset_tokens
from app.utils.sessions import purge_expired_sessions
from app.utils.users import get_user_by_id


import logging
logger = logging.getLogger("app.admin")


router = APIRouter(prefix="/api/admin", tags=["Admin"])


def _get_user_or_404(db: Session, user_id: str) -> User:
    u = get_user_by_id(db, user_id)
    if not u:
        raise HTTPException(status_code=404, detail="User not found")
    return u


@router.get("/users", response_model=AdminUserListOut)
def admin_list_users(
    db: Session = Depends(get_db),
    admin=Depends(require_admin),

    email: Optional[str] = Query(None, description="Email contains"),
    role: Optional[UserRole] = Query(None),
    status: Optional[UserStatus] = Query(None),

    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    q = db.query(User)

    if email:
        q = q.filter(User.email.icontains(email, autoescape=True))

    if role:
        q = q.filter(User.role == role)

    if status:
        q = q.filter(User.status == status)

    total = q.count()

    users = (
        q.order_by(User.created_at.desc(), User.id)
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )

    items = [AdminUserOut.model_validate(u) for u in users]
    return AdminUserListOut(items=items, total=total, page=page, page_size=page_size)


@router.get("/users/{user_id}", response_model=AdminUserOut)
def admin_get_user(
    user_id: str,
    db: Session = Depends(get_db),
    admin=Depends(require_admin),
):
    return AdminUserOut.model_validate(_get_user_or_404(db, user_id))


@router.patch("/users/{user_id}/role", response_model=AdminUserOut)
def admin_change_role(
    user_id: str,
    body: AdminRoleUpdateIn,
    db: Session = Depends(get_db),
    admin=Depends(require_admin),
):
    u = _get_user_or_404(db, user_id)

    old_role = u.role
    u.role = body.role
    record_audit(db, admin.id, USER_ROLE_CHANGED, {
        "targetUserId": u.id,
        "oldRole": old_role.value,
        "newRole": body.role.value,
    })
    db.commit()
    db.refresh(u)
    return AdminUserOut.model_validate(u)


@router.patch("/users/{user_id}/status", response_model=AdminUserOut)
def admin_change_status(
    user_id: str,
    body: AdminStatusUpdateIn,
    db: Session = Depends(get_db),
    admin=Depends(require_admin),
):
    u = _get_user_or_404(db, user_id)

    # existing sessions of a suspended/banned user are dropped lazily on their next use
    old_status = u.status
    u.status = body.status
    record_audit(db, admin.id, USER_STATUS_CHANGED, {
        "targetUserId": u.id,
        "oldStatus": old_status.value,
        "newStatus": body.status.value,
        "reason": body.reason,
    })
    db.commit()
    db.refresh(u)
    return AdminUserOut.model_validate(u)


@router.get("/audit-logs", response_model=AuditLogListOut)
def admin_list_audit_logs(
    db: Session = Depends(get_db),
    admin=Depends(require_admin),
    action: Optional[str] = Query(None),
    actor_id: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
):
    q = db.query(AuditLog)
    if action:
        q = q.filter(AuditLog.action == action)
    if actor_id:
        q = q.filter(AuditLog.user_id == actor_id)

    total = q.count()
    rows = (
        q.order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    items = [AuditLogOut.model_validate(r) for r in rows]
    return AuditLogListOut(items=items, total=total, page=page, page_size=page_size)


@router.post("/maintenance/purge-expired", response_model=PurgeOut)
def admin_purge_expired(
    db: Session = Depends(get_db),
    admin=Depends(require_admin),
):
    sessions = purge_expired_sessions(db)
    reset_tokens = purge_expired_reset_tokens(db)
    logger.info("purge by admin=%s sessions=%d reset_tokens=%d", admin.id, sessions, reset_tokens)
    return PurgeOut(sessions=sessions, reset_tokens=reset_tokens)
