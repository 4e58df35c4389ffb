from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest
from pydantic import Field

from eventcrm.core.config import get_settings
from eventcrm.services.forms import (
    UNSET,
    FormModel,
    as_local,
    combine_date_time,
    normalize_phone,
    or_unset,
    strip_undefined,
    validate,
)

LISBON_SUMMER = timezone(timedelta(hours=1))


def test_strip_undefined_keeps_explicit_none():
    assert strip_undefined({"a": 1, "b": UNSET}) == {"a": 1}
    assert strip_undefined({"name": "João", "email": None, "phone": UNSET}) == {"name": "João", "email": None}
    assert strip_undefined({}) == {}
    assert strip_undefined({"a": UNSET, "b": UNSET}) == {}


def test_unset_is_falsy_singleton():
    assert not UNSET
    assert repr(UNSET) == "UNSET"
    assert or_unset("") is UNSET
    assert or_unset([]) is UNSET
    assert or_unset(None) is UNSET
    assert or_unset(0) == 0


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("+351 912-345 678", "351912345678"),
        ("(244) 923-456-789", "244923456789"),
        ("123.456.789", "123456789"),
        ("+1-800-FLOWERS", "1800"),
        (" ++351--123--456--789 ", "351123456789"),
        ("abc", ""),
        ("", ""),
        (None, ""),
    ],
)
def test_normalize_phone(raw, expected):
    assert normalize_phone(raw) == expected


def test_combine_date_time_with_time():
    moment = combine_date_time("2025-06-01", "18:30", LISBON_SUMMER)
    assert moment == datetime(2025, 6, 1, 18, 30, tzinfo=LISBON_SUMMER)
    assert moment.astimezone(timezone.utc).hour == 17


def test_combine_date_time_defaults_to_start_of_day():
    moment = combine_date_time(date(2025, 6, 1), None, LISBON_SUMMER)
    assert moment == datetime(2025, 6, 1, 0, 0, tzinfo=LISBON_SUMMER)
    assert combine_date_time("2025-06-01", "", timezone.utc) == datetime(2025, 6, 1, tzinfo=timezone.utc)


def test_combine_date_time_uses_configured_zone():
    moment = combine_date_time("2025-01-15", time(9, 0))
    assert moment.tzinfo is not None
    assert moment.utcoffset() == timedelta(0)


def test_missing_time_is_midnight_in_configured_zone(monkeypatch):
    monkeypatch.setattr(get_settings(), "timezone", "Europe/Lisbon")

    moment = combine_date_time("2025-06-01")
    assert moment == datetime(2025, 6, 1, 0, 0, tzinfo=ZoneInfo("Europe/Lisbon"))
    assert moment.astimezone(timezone.utc) == datetime(2025, 5, 31, 23, 0, tzinfo=timezone.utc)

    winter = combine_date_time("2025-01-15", "")
    assert winter.astimezone(timezone.utc) == datetime(2025, 1, 15, 0, 0, tzinfo=timezone.utc)


def test_as_local_treats_naive_values_as_utc():
    assert as_local(datetime(2025, 6, 1, 23, 30), LISBON_SUMMER) == datetime(2025, 6, 2, 0, 30, tzinfo=LISBON_SUMMER)


class _Sample(FormModel):
    full_name: str = Field(min_length=1)
    tags: list[str] = []
    age: int = Field(0, ge=0)


def test_validate_collects_every_field_error():
    outcome = validate(_Sample, {"fullName": "", "tags": "vip", "age": -1})
    assert not outcome.ok
    assert outcome.value is None
    assert {e.field for e in outcome.errors} == {"fullName", "tags", "age"}


def test_validate_returns_model_and_drops_unknown_keys():
    outcome = validate(_Sample, {"fullName": "  Ana  ", "tags": ["a"], "colour": "red"})
    assert outcome.ok
    assert outcome.value.full_name == "Ana"
    assert not hasattr(outcome.value, "colour")


def test_validate_reports_list_item_position():
    outcome = validate(_Sample, {"fullName": "Ana", "tags": ["ok", 3]})
    assert [e.field for e in outcome.errors] == ["tags.1"]


def test_validate_rejects_non_mapping_input():
    outcome = validate(_Sample, ["not", "a", "form"])
    assert [e.field for e in outcome.errors] == ["form"]
