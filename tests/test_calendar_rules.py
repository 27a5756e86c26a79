"""Tests for day-status resolution."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from datetime import date, datetime

import pytest

from engine.calendar_rules import contract_bounds, iter_days, parse_iso, resolve_day, to_iso
from models.resource import ContractType, Country, Resource

HOLIDAYS = {
    "FR": ["2025-01-01", "2025-05-01", "2025-07-14", "2025-12-25"],
    "PT": [],
}


def make_resource(country=Country.FR, start="", end="", overrides=None, dynamic_holidays=()):
    return Resource(
        first_name="Ada",
        last_name="Lovelace",
        contract_type=ContractType.INTERNAL,
        tjm=500,
        country=country,
        ratio_change=30,
        start_date=start,
        end_date=end,
        overrides=overrides or {},
        dynamic_holidays=tuple(dynamic_holidays),
    )


class TestDateHelpers:
    def test_to_iso_accepts_date_datetime_and_string(self):
        assert to_iso(date(2025, 1, 5)) == "2025-01-05"
        assert to_iso(datetime(2025, 1, 5, 18, 30)) == "2025-01-05"
        assert to_iso("2025-01-05") == "2025-01-05"

    def test_parse_iso_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_iso("05/01/2025")

    def test_iter_days_is_inclusive(self):
        days = list(iter_days("2025-01-01", "2025-01-31"))
        assert len(days) == 31
        assert days[0] == date(2025, 1, 1)
        assert days[-1] == date(2025, 1, 31)

    def test_unbounded_contract_uses_sentinels(self):
        start, end = contract_bounds(make_resource())
        assert start < "2025-01-01" < end


class TestResolveDay:
    def test_weekday_is_present(self):
        status = resolve_day("2025-01-06", make_resource(), HOLIDAYS)  # Monday
        assert status.value == 1
        assert status.default_value == 1
        assert not status.is_weekend
        assert not status.override_active

    def test_weekend_is_off(self):
        status = resolve_day("2025-01-04", make_resource(), HOLIDAYS)  # Saturday
        assert status.value == 0
        assert status.is_weekend

    def test_static_holiday_is_off(self):
        status = resolve_day("2025-01-01", make_resource(), HOLIDAYS)
        assert status.value == 0
        assert status.is_holiday
        assert status.default_value == 0

    def test_holiday_is_country_specific(self):
        status = resolve_day("2025-07-14", make_resource(country=Country.PT), HOLIDAYS)
        assert not status.is_holiday
        assert status.value == 1

    def test_dynamic_holiday_counts_as_holiday(self):
        resource = make_resource(dynamic_holidays=["2025-01-07"])
        status = resolve_day("2025-01-07", resource, HOLIDAYS)
        assert status.is_holiday
        assert status.value == 0

    def test_override_beats_weekend(self):
        resource = make_resource(overrides={"2025-01-04": 1})
        status = resolve_day("2025-01-04", resource, HOLIDAYS)
        assert status.value == 1
        assert status.override_active
        assert status.default_value == 0

    def test_half_day_override(self):
        resource = make_resource(overrides={"2025-01-06": 0.5})
        assert resolve_day("2025-01-06", resource, HOLIDAYS).value == 0.5

    def test_out_of_bounds_forces_zero_even_with_override(self):
        resource = make_resource(start="2025-02-01", overrides={"2025-01-06": 1})
        status = resolve_day("2025-01-06", resource, HOLIDAYS)
        assert status.out_of_bounds
        assert status.override_active
        assert status.value == 0

    def test_bounds_are_inclusive(self):
        resource = make_resource(start="2025-01-06", end="2025-01-10")
        assert resolve_day("2025-01-06", resource, HOLIDAYS).value == 1
        assert resolve_day("2025-01-10", resource, HOLIDAYS).value == 1
        assert resolve_day("2025-01-13", resource, HOLIDAYS).out_of_bounds
