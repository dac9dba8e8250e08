"""Unit tests for rule descriptions."""
from datetime import date, time

import pytest

from taskcadence.core.anchor import build_rule
from taskcadence.core.describe import describe_rule, format_offset

TODAY = date(2024, 2, 10)


def test_describe_each_frequency():
    """Test the summary text for every frequency."""
    daily = build_rule(1, "daily", today=TODAY, time_of_day=time(9, 30))
    weekly = build_rule(2, "weekly", today=TODAY, day_of_week=0)
    monthly = build_rule(3, "monthly", today=TODAY, day_of_month=31)
    quarterly = build_rule(4, "quarterly", today=TODAY, day_of_month=1, anchor_month=0)
    half = build_rule(5, "half_yearly", today=TODAY, day_of_month=15, anchor_month=3)
    yearly = build_rule(6, "yearly", today=TODAY, day_of_month=28, anchor_month=1)

    assert describe_rule(daily) == "Every day at 09:30"
    assert describe_rule(weekly) == "Every week on Monday"
    assert describe_rule(monthly) == "Every month on day 31"
    assert describe_rule(quarterly) == "Every 3 months on day 1, starting January"
    assert describe_rule(half) == "Every 6 months on day 15, starting April"
    assert describe_rule(yearly) == "Every year on 28 February"


@pytest.mark.parametrize(
    "days,expected",
    [(None, "N/A"), (0, "Same day"), (1, "1 day"), (5, "5 days"), (30, "30 days")],
)
def test_format_offset(days, expected):
    """Test offset labels."""
    assert format_offset(days) == expected


def test_describe_week_of_month():
    """Test the summary for a monthly weekday pattern."""
    rule = build_rule(7, "monthly", today=TODAY, week_of_month=3, day_of_week=2)
    assert describe_rule(rule) == "Every month on the third Wednesday"
