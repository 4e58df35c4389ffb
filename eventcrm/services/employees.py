import logging
from enum import Enum
from typing import Any

from pydantic import Field, field_validator
from sqlalchemy.orm import Session

from eventcrm.models import Employee
from eventcrm.services.forms import FormModel, check_email, or_unset, strip_undefined

logger = logging.getLogger(__name__)


class EmployeeStatus(str, Enum):
    ACTIVE = "Ativo"
    INACTIVE = "Inativo"


class EmployeeForm(FormModel):
    id: int | None = None
    name: str = Field(min_length=1, max_length=120)
    email: str = Field(min_length=1, max_length=255)
    role: str = Field(min_length=1, max_length=60)
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    technician_category_id: str | None = Field(None, max_length=60)
    user_id: int | None = None
    cost_per_day: float | None = Field(None, ge=0)

    @field_validator("status", mode="before")
    @classmethod
    def _default_status(cls, value: Any) -> Any:
        return value or EmployeeStatus.ACTIVE

    @field_validator("technician_category_id", "user_id", "cost_per_day", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        return None if value == "" else value

    @field_validator("email")
    @classmethod
    def _valid_email(cls, value: str) -> str:
        return check_email(value)


def employee_to_payload(form: EmployeeForm) -> dict[str, Any]:
    """Column values for an insert or a full update of an employee.

    Optional references are sent as ``None`` so an edit can clear them;
    ``cost_per_day`` is only written when the form carries one.
    """
    return strip_undefined(
        {
            "name": form.name,
            "email": form.email,
            "role": form.role,
            "status": form.status.value,
            "technician_category": form.technician_category_id,
            "user_id": form.user_id,
            "cost_per_day": or_unset(form.cost_per_day),
        }
    )


def employee_row(employee: Employee) -> dict[str, Any]:
    return {
        "id": employee.id,
        "name": employee.name,
        "email": employee.email,
        "role": employee.role,
        "status": employee.status,
        "technician_category": employee.technician_category,
        "user_id": employee.user_id,
        "cost_per_day": employee.cost_per_day,
    }


def list_employees(db: Session) -> list[Employee]:
    return db.query(Employee).order_by(Employee.name.asc()).all()


def upsert_employee(db: Session, form: EmployeeForm) -> Employee:
    payload = employee_to_payload(form)
    if form.id is not None:
        employee = db.query(Employee).filter(Employee.id == form.id).first()
        if not employee:
            raise LookupError(f"employee {form.id} not found")
        for column, value in payload.items():
            setattr(employee, column, value)
        logger.info("Updated employee %s", employee.id)
    else:
        employee = Employee(**payload)
        db.add(employee)
        db.flush()
        logger.info("Created employee %s", employee.id)
    return employee
