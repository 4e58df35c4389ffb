"""Project (commercial event) form mapping for the ``events`` table."""

import logging
from collections.abc import Mapping
from datetime import date, time, timezone, tzinfo
from enum import Enum
from typing import Any

from pydantic import Field, ValidationError, ValidationInfo, field_validator

from eventcrm.services.forms import (
    FormModel,
    MappingError,
    UNSET,
    Validated,
    as_local,
    blank_if_none,
    combine_date_time,
    or_unset,
    row_value,
    strip_undefined,
    validate,
)

logger = logging.getLogger(__name__)


class PipelineStatus(str, Enum):
    FIRST_CONTACT = "1º Contato"
    QUOTE = "Orçamento"
    NEGOTIATION = "Negociação"
    CONFIRMED = "Confirmado"
    CANCELLED = "Cancelado"


class EventStatus(str, Enum):
    PLANNED = "Planejado"
    IN_PROGRESS = "Em Andamento"
    DONE = "Concluído"
    CANCELLED = "Cancelado"


PIPELINE_ORDER = tuple(PipelineStatus)

# Form field -> event columns derived from it.
FIELD_COLUMNS: dict[str, tuple[str, ...]] = {
    "client_id": ("client_id",),
    "name": ("name",),
    "service_ids": ("service_ids",),
    "pipeline_status": ("pipeline_status",),
    "start_date": ("start_at",),
    "start_time": ("start_at", "start_time"),
    "end_date": ("end_at",),
    "end_time": ("end_at", "end_time"),
    "responsible_id": ("responsible_id",),
    "location": ("location",),
    "estimated_value": ("estimated_value",),
    "notes": ("description",),
}

EVENT_UPDATE_FIELDS = frozenset(column for columns in FIELD_COLUMNS.values() for column in columns)


class ProjectForm(FormModel):
    client_id: int = Field(ge=1)
    name: str = Field(min_length=1, max_length=255)
    service_ids: list[str] = Field(min_length=1)
    pipeline_status: PipelineStatus = PipelineStatus.FIRST_CONTACT
    start_date: str = Field(min_length=1)
    start_time: str = ""
    end_date: str = ""
    end_time: str = ""
    responsible_id: int | None = None
    location: str = Field("", max_length=255)
    estimated_value: float | None = Field(None, ge=0)
    notes: str = ""

    @field_validator("start_time", "end_date", "end_time", "location", "notes", mode="before")
    @classmethod
    def _none_to_blank(cls, value: Any) -> Any:
        return blank_if_none(value)

    @field_validator("pipeline_status", mode="before")
    @classmethod
    def _default_status(cls, value: Any) -> Any:
        return value or PipelineStatus.FIRST_CONTACT

    @field_validator("responsible_id", "estimated_value", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        return None if value == "" else value

    @field_validator("service_ids")
    @classmethod
    def _numeric_ids(cls, value: list[str]) -> list[str]:
        for item in value:
            digits = item.strip()
            if not (digits.isascii() and digits.isdigit()):
                raise ValueError(f"service id {item!r} is not a number")
        return [item.strip() for item in value]

    @field_validator("start_date", "end_date")
    @classmethod
    def _iso_date(cls, value: str) -> str:
        if not value:
            return value
        try:
            return date.fromisoformat(value).isoformat()
        except ValueError as exc:
            raise ValueError("expected a YYYY-MM-DD date") from exc

    @field_validator("start_time", "end_time")
    @classmethod
    def _clock(cls, value: str) -> str:
        if not value:
            return value
        try:
            return time.fromisoformat(value).strftime("%H:%M")
        except ValueError as exc:
            raise ValueError("expected a HH:MM time") from exc

    @field_validator("end_date")
    @classmethod
    def _not_before_start(cls, value: str, info: ValidationInfo) -> str:
        start = info.data.get("start_date")
        if value and start and value < start:
            raise ValueError("end date is before start date")
        return value


def _clock_column(value: str, empty: Any) -> Any:
    return f"{value}:00" if value else empty


def _project_columns(form: ProjectForm, tz: tzinfo | None, empty: Any) -> dict[str, Any]:
    def blank(value: Any) -> Any:
        return empty if or_unset(value) is UNSET else value

    return {
        "client_id": form.client_id,
        "name": form.name,
        "service_ids": [int(item) for item in form.service_ids],
        "pipeline_status": form.pipeline_status.value,
        "start_at": combine_date_time(form.start_date, form.start_time, tz).astimezone(timezone.utc),
        "start_time": _clock_column(form.start_time, empty),
        "end_at": combine_date_time(form.end_date, form.end_time, tz).astimezone(timezone.utc) if form.end_date else empty,
        "end_time": _clock_column(form.end_time, empty),
        "responsible_id": blank(form.responsible_id),
        "location": blank(form.location),
        "estimated_value": blank(form.estimated_value),
        "description": blank(form.notes),
    }


def project_form_to_insert_payload(form: ProjectForm, tz: tzinfo | None = None) -> dict[str, Any]:
    payload = strip_undefined(_project_columns(form, tz, UNSET))
    payload["status"] = EventStatus.PLANNED.value
    return payload


def event_row_to_form(row: Any, tz: tzinfo | None = None) -> ProjectForm:
    start_at = row_value(row, "start_at")
    end_at = row_value(row, "end_at")
    data = {
        "client_id": row_value(row, "client_id"),
        "name": row_value(row, "name"),
        "service_ids": [str(item) for item in row_value(row, "service_ids") or []],
        "pipeline_status": row_value(row, "pipeline_status"),
        "start_date": as_local(start_at, tz).date().isoformat() if start_at else None,
        "start_time": row_value(row, "start_time"),
        "end_date": as_local(end_at, tz).date().isoformat() if end_at else None,
        "end_time": row_value(row, "end_time"),
        "responsible_id": row_value(row, "responsible_id"),
        "location": row_value(row, "location"),
        "estimated_value": row_value(row, "estimated_value"),
        "notes": row_value(row, "description"),
    }
    try:
        return ProjectForm.model_validate(data)
    except ValidationError as exc:
        logger.error("Event row %s does not fit the project form: %s", row_value(row, "id"), exc)
        raise MappingError(f"event row {row_value(row, 'id')} does not fit the project form") from exc


def _field_names() -> dict[str, str]:
    names = {}
    for name, info in ProjectForm.model_fields.items():
        names[name] = name
        if info.alias:
            names[info.alias] = name
    return names


def merge_project_form(current: ProjectForm, changes: Mapping[str, Any]) -> tuple[Validated[ProjectForm], set[str]]:
    """Apply a partial edit on top of the stored form and validate the result.

    Keys that are not form fields are ignored. Returns the validation
    outcome together with the names of the fields the edit touched.
    """
    names = _field_names()
    data = current.model_dump()
    sent = set()
    for key, value in changes.items():
        if key in names:
            data[names[key]] = value
            sent.add(names[key])
    return validate(ProjectForm, data), sent


def form_to_event_update(form: ProjectForm, changed: set[str], tz: tzinfo | None = None) -> dict[str, Any]:
    wanted = {column for name in changed for column in FIELD_COLUMNS.get(name, ())}
    columns = _project_columns(form, tz, None)
    return {column: value for column, value in columns.items() if column in wanted and column in EVENT_UPDATE_FIELDS}


EVENT_COLUMNS = (
    "id",
    "client_id",
    "responsible_id",
    "name",
    "start_at",
    "end_at",
    "start_time",
    "end_time",
    "location",
    "description",
    "status",
    "pipeline_status",
    "pipeline_rank",
    "service_ids",
    "estimated_value",
    "updated_at",
)


def event_row(event: Any) -> dict[str, Any]:
    return {column: row_value(event, column) for column in EVENT_COLUMNS}
