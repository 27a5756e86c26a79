"""Tests for day styling and explanations."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from engine.explainer import (
    CLEAR_LABEL, STYLE_HOLIDAY, STYLE_OUT_OF_BOUNDS, STYLE_OVERRIDE, STYLE_WEEKEND, STYLE_WORKING,
    day_style, explain_day, presence_choices, presence_from_label, presence_label,
)
from models.stats import DayStatus


def make_status(value=1, default_value=1, holiday=False, weekend=False, override=False, out=False):
    return DayStatus(value, default_value, holiday, weekend, override, out)


class TestDayStyle:
    def test_working_and_weekend(self):
        assert day_style(make_status()) == STYLE_WORKING
        assert day_style(make_status(value=0, default_value=0, weekend=True)) == STYLE_WEEKEND

    def test_imported_holiday_still_shows_as_holiday(self):
        status = make_status(value=0, default_value=0, holiday=True, override=True)
        assert day_style(status) == STYLE_HOLIDAY

    def test_worked_holiday_shows_override(self):
        status = make_status(value=1, default_value=0, holiday=True, override=True)
        assert day_style(status) == STYLE_OVERRIDE

    def test_out_of_bounds_wins(self):
        status = make_status(value=0, holiday=True, override=True, out=True)
        assert day_style(status) == STYLE_OUT_OF_BOUNDS


class TestExplainDay:
    def test_steps(self):
        steps = explain_day("2025-01-04", make_status(value=1, default_value=0, weekend=True, override=True))
        assert steps[0] == "Step 1 - Default: 2025-01-04 is a weekend => Off"
        assert steps[1].startswith("Step 2 - Override: a manual value")
        assert steps[-1] == "Result: Full day (1)"

    def test_out_of_bounds_step(self):
        steps = explain_day("2024-12-31", make_status(value=0, out=True))
        assert "outside contract" in steps[2]

    def test_presence_label(self):
        assert presence_label(0.5) == "Half-day"
        assert presence_label(0.25) == "0.25"

    def test_choices_map_back_to_values(self):
        choices = presence_choices()
        assert choices[-1] == CLEAR_LABEL
        assert [presence_from_label(c) for c in choices] == [0, 0.5, 1, None]
