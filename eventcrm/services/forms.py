"""Helpers shared by the form <-> row mappers.

Forms arrive loosely shaped (whatever the UI controls produced), are
validated into pydantic models, and are then mapped onto the column
names of the destination table right before a write.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone, tzinfo
from typing import Any, Generic, TypeVar

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from eventcrm.core.config import get_settings

ModelT = TypeVar("ModelT", bound=BaseModel)

_NON_DIGITS = re.compile(r"[^0-9]")


class _Unset:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


class MappingError(RuntimeError):
    """A stored row or payload does not fit the form schema it is mapped onto."""


class FormModel(BaseModel):
    """Base for UI form shapes: camelCase on the wire, unknown keys dropped."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )


def row_value(row: Any, column: str) -> Any:
    if isinstance(row, Mapping):
        return row.get(column)
    return getattr(row, column, None)


def blank_if_none(value: Any) -> Any:
    return "" if value is None else value


def check_email(value: str | None) -> str | None:
    """Reject malformed addresses; the address itself is stored as typed."""
    if not value:
        return value
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as exc:
        raise ValueError(f"invalid email address: {exc}") from exc
    return value


@dataclass
class FieldError:
    field: str
    message: str

    def as_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


@dataclass
class Validated(Generic[ModelT]):
    value: ModelT | None = None
    errors: list[FieldError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def _field_name(loc: tuple) -> str:
    if not loc:
        return "form"
    return ".".join(str(part) for part in loc)


def collect_errors(exc: ValidationError) -> list[FieldError]:
    return [FieldError(field=_field_name(err["loc"]), message=err["msg"]) for err in exc.errors()]


def validate(model: type[ModelT], data: Any) -> Validated[ModelT]:
    try:
        return Validated(value=model.model_validate(data))
    except ValidationError as exc:
        return Validated(errors=collect_errors(exc))


def strip_undefined(obj: Mapping[str, Any]) -> dict[str, Any]:
    """Drop keys that were never set, keeping explicit ``None`` values."""
    return {key: value for key, value in obj.items() if value is not UNSET}


def or_unset(value: Any) -> Any:
    if value is None or value == "" or value == []:
        return UNSET
    return value


def normalize_phone(raw: str | None) -> str:
    if not raw:
        return ""
    return _NON_DIGITS.sub("", raw)


def _as_date(value: date | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value.strip())


def _as_time(value: time | str | None) -> time:
    if value is None or value == "":
        return time.min
    if isinstance(value, time):
        return value.replace(tzinfo=None)
    return time.fromisoformat(value.strip())


def combine_date_time(day: date | str, at: time | str | None = None, tz: tzinfo | None = None) -> datetime:
    """Merge a calendar day and a wall-clock time into one aware instant.

    A missing time means the start of that day in ``tz`` (the configured
    timezone when not given).
    """
    zone = tz or get_settings().tzinfo
    return datetime.combine(_as_date(day), _as_time(at), tzinfo=zone)


def as_local(moment: datetime, tz: tzinfo | None = None) -> datetime:
    zone = tz or get_settings().tzinfo
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(zone)


def format_time(value: time | None) -> str | None:
    if value is None:
        return None
    return value.strftime("%H:%M:%S")
