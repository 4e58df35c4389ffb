from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from eventcrm.core.db import get_db
from eventcrm.core.permissions import PermissionTable, Role
from eventcrm.core.session import read_session
from eventcrm.models import User


@dataclass
class CurrentUser:
    user: User
    role: Role | None


def get_permission_table(request: Request) -> PermissionTable:
    return request.app.state.permission_table


def optional_user(request: Request, db: Session = Depends(get_db)) -> CurrentUser | None:
    user_id = read_session(request)
    if not user_id:
        return None
    user = db.query(User).filter(User.id == user_id, User.is_active.is_(True)).first()
    if not user:
        return None
    return CurrentUser(user=user, role=Role.parse(user.role))


def require_user(current: CurrentUser | None = Depends(optional_user)) -> CurrentUser:
    if current is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return current


def require_page(path: str):
    """Gate a route on access to the page that owns it."""

    def _dep(
        current: CurrentUser = Depends(require_user),
        table: PermissionTable = Depends(get_permission_table),
    ) -> CurrentUser:
        if not table.can_access(current.role, path):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient role")
        return current

    return _dep
