"""Unit tests for occurrence evaluation."""
from datetime import date, time, timedelta

import pytest

from taskcadence.core.anchor import build_rule
from taskcadence.core.errors import InvalidRuleState
from taskcadence.core.evaluator import instance_dates, is_due, upcoming_occurrences
from taskcadence.models.rule import Frequency, RecurrenceRule


def _days(start: date, end: date):
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def test_quarterly_anchor_stability():
    """Test quarterly matching depends only on the month phase."""
    rule = build_rule(1, "quarterly", today=date(2024, 2, 10), day_of_month=1, anchor_month=0)

    assert rule.start_date == date(2024, 1, 1)
    assert is_due(rule, date(2024, 4, 1))
    assert not is_due(rule, date(2024, 3, 1))
    assert not is_due(rule, date(2024, 2, 10))
    assert is_due(rule, date(2024, 7, 1))
    assert is_due(rule, date(2025, 1, 1))
    assert not is_due(rule, date(2024, 4, 2))


def test_half_yearly_matching():
    """Test half-yearly rules fire every six months."""
    rule = build_rule(1, "half_yearly", today=date(2024, 1, 1), day_of_month=15, anchor_month=2)

    assert rule.start_date == date(2024, 3, 15)
    assert is_due(rule, date(2024, 3, 15))
    assert is_due(rule, date(2024, 9, 15))
    assert is_due(rule, date(2025, 3, 15))
    assert not is_due(rule, date(2024, 6, 15))
    assert not is_due(rule, date(2023, 9, 15))


def test_quarterly_clamps_short_months():
    """Test a day-31 quarterly rule fires on the 30th in 30-day months."""
    rule = build_rule(1, "quarterly", today=date(2024, 1, 1), day_of_month=31, anchor_month=0)

    assert is_due(rule, date(2024, 1, 31))
    assert is_due(rule, date(2024, 4, 30))
    assert not is_due(rule, date(2024, 4, 29))
    assert is_due(rule, date(2024, 7, 31))
    assert not is_due(rule, date(2024, 7, 30))


def test_yearly_future_anchoring():
    """Test a passed yearly date first fires next year."""
    rule = build_rule(1, "yearly", today=date(2024, 2, 10), day_of_month=1, anchor_month=0)

    assert rule.start_date == date(2025, 1, 1)
    assert is_due(rule, date(2025, 1, 1))
    assert not is_due(rule, date(2024, 1, 1))
    assert is_due(rule, date(2026, 1, 1))
    assert not is_due(rule, date(2025, 2, 1))


def test_yearly_leap_day_clamped_in_common_years():
    """Test a Feb 29 anchor fires on Feb 28 in common years."""
    rule = RecurrenceRule(
        id=1,
        frequency=Frequency.YEARLY,
        start_date=date(2028, 2, 29),
        day_of_month=29,
        anchor_month=1,
    )
    assert is_due(rule, date(2028, 2, 29))
    assert is_due(rule, date(2029, 2, 28))
    assert not is_due(rule, date(2029, 3, 1))
    assert is_due(rule, date(2032, 2, 29))
    assert not is_due(rule, date(2032, 2, 28))


def test_monthly_clamps_to_last_day():
    """Test day 31 fires on the last day of every shorter month."""
    rule = build_rule(1, "monthly", today=date(2023, 1, 1), day_of_month=31)

    assert is_due(rule, date(2023, 2, 28))
    assert is_due(rule, date(2024, 2, 29))
    assert not is_due(rule, date(2024, 2, 28))
    assert is_due(rule, date(2024, 3, 31))
    assert not is_due(rule, date(2024, 3, 30))
    assert is_due(rule, date(2024, 4, 30))

    fired = [day for day in _days(date(2023, 1, 1), date(2023, 12, 31)) if is_due(rule, day)]
    assert len(fired) == 12


def test_monthly_not_due_before_start():
    """Test the anchor acts as a floor."""
    rule = build_rule(1, "monthly", today=date(2024, 2, 10), day_of_month=5)
    assert not is_due(rule, date(2024, 2, 5))
    assert is_due(rule, date(2024, 3, 5))


def test_weekly_exact_match():
    """Test weekly rules fire on every Monday on or after the anchor only."""
    rule = build_rule(1, "weekly", today=date(2024, 1, 3), day_of_week=0)

    assert not is_due(rule, date(2024, 1, 1))
    for day in _days(date(2024, 1, 3), date(2024, 3, 31)):
        assert is_due(rule, day) == (day.weekday() == 0)


def test_daily_due_every_day_from_start():
    """Test daily rules fire every day on or after the anchor."""
    rule = build_rule(1, "daily", today=date(2024, 5, 1), time_of_day=time(9, 30))

    assert not is_due(rule, date(2024, 4, 30))
    assert all(is_due(rule, day) for day in _days(date(2024, 5, 1), date(2024, 6, 30)))


def test_end_date_bounds_occurrences():
    """Test nothing is due after the end date."""
    rule = build_rule(
        1, "daily", today=date(2024, 1, 1), time_of_day=time(8), end_date=date(2024, 1, 10)
    )
    assert is_due(rule, date(2024, 1, 10))
    assert not is_due(rule, date(2024, 1, 11))


def test_instance_dates_across_month_boundary():
    """Test offsets are added in days across a month end."""
    rule = build_rule(
        1,
        "monthly",
        today=date(2024, 1, 1),
        day_of_month=29,
        due_date_offset=5,
        target_date_offset=10,
    )
    due_date, target_date = instance_dates(rule, date(2024, 1, 29))

    assert due_date == date(2024, 2, 3)
    assert target_date == date(2024, 2, 8)


def test_instance_dates_without_target_offset():
    """Test the target date is None when no offset is set."""
    rule = build_rule(1, "weekly", today=date(2024, 1, 1), day_of_week=0)
    due_date, target_date = instance_dates(rule, date(2024, 1, 8))

    assert due_date == date(2024, 1, 8)
    assert target_date is None


def test_instance_dates_rejects_dates_not_due():
    """Test asking for dates on a non-occurrence is an error."""
    rule = build_rule(1, "weekly", today=date(2024, 1, 1), day_of_week=0)
    with pytest.raises(ValueError):
        instance_dates(rule, date(2024, 1, 9))


def test_invalid_rule_state_raised():
    """Test a rule missing its weekday cannot be evaluated."""
    rule = RecurrenceRule(
        id="broken", frequency=Frequency.WEEKLY, start_date=date(2024, 1, 1), validate=False
    )
    with pytest.raises(InvalidRuleState) as exc_info:
        is_due(rule, date(2024, 1, 8))
    assert exc_info.value.rule_id == "broken"


def test_upcoming_occurrences():
    """Test previewing the next occurrences."""
    rule = build_rule(1, "monthly", today=date(2024, 1, 1), day_of_month=31)
    upcoming = list(upcoming_occurrences(rule, date(2024, 1, 15), limit=3))

    assert upcoming == [date(2024, 1, 31), date(2024, 2, 29), date(2024, 3, 31)]


def test_upcoming_occurrences_stops_at_end_date():
    """Test previews do not run past the end date."""
    rule = build_rule(
        1, "weekly", today=date(2024, 1, 1), day_of_week=0, end_date=date(2024, 1, 20)
    )
    upcoming = list(upcoming_occurrences(rule, date(2024, 1, 1), limit=10))

    assert upcoming == [date(2024, 1, 1), date(2024, 1, 8), date(2024, 1, 15)]


def test_unknown_frequency_is_invalid_state():
    """Test a stored rule with an unknown frequency cannot be evaluated."""
    rule = RecurrenceRule(
        id=3, frequency="fortnightly", start_date=date(2024, 1, 1), validate=False
    )
    with pytest.raises(InvalidRuleState) as exc_info:
        is_due(rule, date(2024, 1, 8))
    assert exc_info.value.rule_id == 3


@pytest.mark.parametrize(
    "frequency,fields,bad",
    [
        (Frequency.WEEKLY, {"day_of_week": 9}, "day_of_week=9"),
        (Frequency.MONTHLY, {"day_of_month": 40}, "day_of_month=40"),
        (Frequency.MONTHLY, {"week_of_month": 5, "day_of_week": 0}, "week_of_month=5"),
        (Frequency.QUARTERLY, {"day_of_month": 1, "interval": 6}, "interval=6"),
    ],
)
def test_out_of_range_stored_fields_are_invalid_state(frequency, fields, bad):
    """Test unvalidated rules with out-of-range values raise instead of never matching."""
    rule = RecurrenceRule(
        id="stored", frequency=frequency, start_date=date(2024, 1, 1), validate=False, **fields
    )
    with pytest.raises(InvalidRuleState) as exc_info:
        is_due(rule, date(2024, 1, 1))
    assert bad in str(exc_info.value)


def test_week_of_month_matching():
    """Test the Nth weekday of each month, including a fourth Friday."""
    first_monday = build_rule(1, "monthly", today=date(2024, 1, 1), week_of_month=1, day_of_week=0)
    fourth_friday = build_rule(
        2, "monthly", today=date(2024, 1, 1), week_of_month=4, day_of_week=4
    )

    due = [day for day in _days(date(2024, 1, 1), date(2024, 3, 31)) if is_due(first_monday, day)]
    assert due == [date(2024, 1, 1), date(2024, 2, 5), date(2024, 3, 4)]

    due = [day for day in _days(date(2024, 1, 1), date(2024, 3, 31)) if is_due(fourth_friday, day)]
    assert due == [date(2024, 1, 26), date(2024, 2, 23), date(2024, 3, 22)]
