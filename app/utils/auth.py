
from typing import Optional

from fastapi import HTTPException, Depends, Request
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.models.user import User
from app.utils.access import AccessDecision, ResourceClass, decide_access
from app.utils.sessions import cleared_cookie_headers, lookup_session


def get_session_id(request: Request) -> Optional[str]:
    return request.cookies.get(settings.SESSION_COOKIE_NAME)

def require_role(resource: ResourceClass):
    def checker(request: Request, db: Session = Depends(get_db)) -> User:
        session_id = get_session_id(request)
        found = lookup_session(db, session_id)
        # a revoked inactive account still counts as a session: denied, not sent to login
        user = found.user or found.inactive_owner
        decision = decide_access(
            user.role if user else None,
            user.status if user else None,
            resource,
            has_session=user is not None,
        )
        if decision == AccessDecision.ALLOW:
            return user

        # presented cookie no longer maps to a session
        headers = cleared_cookie_headers() if session_id and found.user is None else None
        if decision == AccessDecision.REDIRECT_TO_LOGIN:
            raise HTTPException(status_code=401, detail="Not authenticated", headers=headers)
        raise HTTPException(status_code=403, detail="Forbidden", headers=headers)
    return checker


get_current_user = require_role(ResourceClass.USER)
require_provider = require_role(ResourceClass.PROVIDER)
require_admin = require_role(ResourceClass.ADMIN)
