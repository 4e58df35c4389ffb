import logging

from fastapi import APIRouter, Depends, Form, HTTPException, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from eventcrm.core.db import get_db
from eventcrm.core.permissions import PermissionTable, Role
from eventcrm.core.security import verify_password
from eventcrm.core.session import clear_session, set_session
from eventcrm.models import User
from eventcrm.services.authz import get_permission_table

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

WELCOME_PATH = "/welcome"


@router.post("/login")
def login(
    email: str = Form(...),
    password: str = Form(...),
    db: Session = Depends(get_db),
    table: PermissionTable = Depends(get_permission_table),
):
    user = db.query(User).filter(User.email == email.lower().strip(), User.is_active.is_(True)).first()
    if not user or not verify_password(password, user.password_hash):
        logger.info("Rejected login for %s", email.lower().strip())
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    role = Role.parse(user.role)
    target = table.redirect_target(role) if role else WELCOME_PATH
    response = RedirectResponse(url=target, status_code=status.HTTP_303_SEE_OTHER)
    set_session(response, user.id)
    return response


@router.post("/logout")
def logout():
    response = RedirectResponse(url="/login", status_code=status.HTTP_303_SEE_OTHER)
    clear_session(response)
    return response
