
from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field

from app.models.user import UserRole, UserStatus
from app.schemas.user import UserOut


class AdminUserOut(UserOut):
    created_at: Optional[datetime] = None

class AdminUserListOut(BaseModel):
    items: list[AdminUserOut]
    total: int
    page: int
    page_size: int


class AdminRoleUpdateIn(BaseModel):
    role: UserRole


class AdminStatusUpdateIn(BaseModel):
    status: UserStatus
    reason: Optional[str] = Field(None, max_length=500)


class AuditLogOut(BaseModel):
    id: int
    user_id: str
    action: str
    details: dict[str, Any]
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)

class AuditLogListOut(BaseModel):
    items: list[AuditLogOut]
    total: int
    page: int
    page_size: int


class PurgeOut(BaseModel):
    sessions: int
    reset_tokens: int
