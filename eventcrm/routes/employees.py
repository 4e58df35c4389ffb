from fastapi import APIRouter, Body, Depends, HTTPException, status
from sqlalchemy.orm import Session

from eventcrm.core.db import get_db
from eventcrm.routes.common import validation_failed
from eventcrm.services.authz import CurrentUser, require_page
from eventcrm.services.employees import EmployeeForm, employee_row, list_employees, upsert_employee
from eventcrm.services.forms import validate

PAGE = "/employees"

router = APIRouter(prefix="/api/employees", tags=["employees"])


@router.get("")
def employees(ctx: CurrentUser = Depends(require_page(PAGE)), db: Session = Depends(get_db)):
    return [employee_row(e) for e in list_employees(db)]


@router.post("")
def save_employee(
    payload: dict = Body(...),
    ctx: CurrentUser = Depends(require_page(PAGE)),
    db: Session = Depends(get_db),
):
    outcome = validate(EmployeeForm, payload)
    if not outcome.ok:
        return validation_failed(outcome.errors)
    try:
        employee = upsert_employee(db, outcome.value)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    db.commit()
    db.refresh(employee)
    return employee_row(employee)
