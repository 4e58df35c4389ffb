from fastapi import APIRouter, Depends, Query

from eventcrm.core.permissions import PermissionTable
from eventcrm.services.authz import CurrentUser, get_permission_table, optional_user, require_user

router = APIRouter(tags=["navigation"])


@router.get("/navigation")
def navigation(
    current: CurrentUser = Depends(require_user),
    table: PermissionTable = Depends(get_permission_table),
):
    return {
        "role": current.role.value if current.role else None,
        "paths": list(table.allowed_paths(current.role)),
        "home": table.redirect_target(current.role),
    }


@router.get("/navigation/check")
def check_navigation(
    path: str = Query(..., min_length=1),
    current: CurrentUser | None = Depends(optional_user),
    table: PermissionTable = Depends(get_permission_table),
):
    role = current.role if current else None
    allowed = table.admits(role, path)
    return {
        "path": path,
        "allowed": allowed,
        "redirect_to": None if allowed else table.redirect_target(role),
    }


@router.get("/health-check")
def health_check():
    return {"status": "ok"}
