"""Mapping between the "Novo Cliente" form and the ``clients`` table.

Only columns listed in ``CLIENT_COLUMNS`` ever reach storage. The form's
``roleOrDepartment`` field is UI-only and has no column, so it is dropped
on the way in and comes back empty on the way out.
"""

import logging
from enum import Enum
from typing import Any

from pydantic import Field, ValidationError, field_validator

from eventcrm.services.forms import (
    FormModel,
    MappingError,
    UNSET,
    blank_if_none,
    check_email,
    normalize_phone,
    or_unset,
    row_value,
    strip_undefined,
)

logger = logging.getLogger(__name__)

CLIENT_COLUMNS = (
    "id",
    "name",
    "email",
    "phone",
    "company",
    "nif",
    "sector",
    "lifecycle_stage",
    "notes",
    "created_at",
    "updated_at",
)


class LifecycleStage(str, Enum):
    LEAD = "Lead"
    OPPORTUNITY = "Oportunidade"
    ACTIVE = "Cliente Ativo"
    LOST = "Cliente Perdido"


_OPTIONAL_TEXT = ("company", "email", "phone", "nif", "sector", "role_or_department", "notes")


class ClientForm(FormModel):
    full_name: str = Field(min_length=1, max_length=255)
    company: str = Field("", max_length=255)
    email: str = Field("", max_length=255)
    phone: str = Field("", max_length=50)
    nif: str = Field("", max_length=50)
    sector: str = Field("", max_length=255)
    lifecycle_stage: LifecycleStage = LifecycleStage.LEAD
    role_or_department: str = Field("", max_length=255)
    notes: str = ""

    @field_validator(*_OPTIONAL_TEXT, mode="before")
    @classmethod
    def _none_to_blank(cls, value: Any) -> Any:
        return blank_if_none(value)

    @field_validator("lifecycle_stage", mode="before")
    @classmethod
    def _default_stage(cls, value: Any) -> Any:
        return value or LifecycleStage.LEAD

    @field_validator("email")
    @classmethod
    def _valid_email(cls, value: str) -> str:
        return check_email(value)


class ClientPatch(FormModel):
    """Partial edit of a client; only the keys the UI sent are applied."""

    full_name: str | None = Field(None, min_length=1, max_length=255)
    company: str | None = Field(None, max_length=255)
    email: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=50)
    nif: str | None = Field(None, max_length=50)
    sector: str | None = Field(None, max_length=255)
    lifecycle_stage: LifecycleStage | None = None
    role_or_department: str | None = None
    notes: str | None = None

    @field_validator("full_name")
    @classmethod
    def _name_not_cleared(cls, value: str | None) -> str:
        if value is None:
            raise ValueError("name cannot be cleared")
        return value

    @field_validator("lifecycle_stage", mode="before")
    @classmethod
    def _blank_stage(cls, value: Any) -> Any:
        return value or None

    @field_validator("email")
    @classmethod
    def _valid_email(cls, value: str | None) -> str | None:
        return check_email(value)


def form_to_insert_payload(form: ClientForm) -> dict[str, Any]:
    return strip_undefined(
        {
            "name": form.full_name,
            "company": or_unset(form.company),
            "email": or_unset(form.email),
            "phone": or_unset(normalize_phone(form.phone)),
            "nif": or_unset(form.nif),
            "sector": or_unset(form.sector),
            "lifecycle_stage": form.lifecycle_stage.value,
            "notes": or_unset(form.notes),
        }
    )


def form_to_update_payload(patch: ClientPatch) -> dict[str, Any]:
    sent = patch.model_fields_set
    payload: dict[str, Any] = {
        "name": patch.full_name if "full_name" in sent else UNSET,
        "phone": (normalize_phone(patch.phone) or None) if "phone" in sent else UNSET,
        "lifecycle_stage": (patch.lifecycle_stage or LifecycleStage.LEAD).value if "lifecycle_stage" in sent else UNSET,
    }
    for column in ("company", "email", "nif", "sector", "notes"):
        payload[column] = (getattr(patch, column) or None) if column in sent else UNSET
    return strip_undefined(payload)


def row_to_form(row: Any) -> ClientForm:
    data = {
        "full_name": row_value(row, "name"),
        "company": row_value(row, "company"),
        "email": row_value(row, "email"),
        "phone": row_value(row, "phone"),
        "nif": row_value(row, "nif"),
        "sector": row_value(row, "sector"),
        "lifecycle_stage": row_value(row, "lifecycle_stage"),
        "notes": row_value(row, "notes"),
    }
    try:
        return ClientForm.model_validate(data)
    except ValidationError as exc:
        logger.error("Client row %s does not fit the client form: %s", row_value(row, "id"), exc)
        raise MappingError(f"client row {row_value(row, 'id')} does not fit the client form") from exc


def client_row(client: Any) -> dict[str, Any]:
    return {column: row_value(client, column) for column in CLIENT_COLUMNS}
