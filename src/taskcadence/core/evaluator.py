"""Occurrence evaluation: does a rule fire on a given day."""

from collections.abc import Iterator
from datetime import date, datetime, timedelta

from taskcadence.core.dates import as_date, clamp_day, month_distance
from taskcadence.core.errors import InvalidRuleState
from taskcadence.models.rule import Frequency, RecurrenceRule


def _check_state(rule: RecurrenceRule) -> None:
    """Raise InvalidRuleState if the rule lacks or garbles what its frequency needs."""
    freq = rule.frequency
    if not isinstance(freq, Frequency):
        raise InvalidRuleState(rule.id, f"unknown frequency {freq!r}")

    missing = []
    if rule.start_date is None:
        missing.append("start_date")
    if (freq is Frequency.WEEKLY or rule.by_weekday) and rule.day_of_week is None:
        missing.append("day_of_week")
    if freq.uses_day_of_month and not rule.by_weekday and rule.day_of_month is None:
        missing.append("day_of_month")
    if freq in (Frequency.QUARTERLY, Frequency.HALF_YEARLY) and not rule.interval:
        missing.append("interval")
    if missing:
        raise InvalidRuleState(
            rule.id, f"{freq.value} rule is missing {', '.join(missing)}"
        )

    bad = [
        f"{name}={value!r}"
        for name, value, low, high in (
            ("day_of_week", rule.day_of_week, 0, 6),
            ("day_of_month", rule.day_of_month, 1, 31),
            ("week_of_month", rule.week_of_month, 1, 4),
        )
        if value is not None and not low <= value <= high
    ]
    if rule.interval != freq.interval:
        bad.append(f"interval={rule.interval!r}")
    if bad:
        raise InvalidRuleState(
            rule.id, f"{freq.value} rule has out-of-range {', '.join(bad)}"
        )


def _day_matches(candidate: date, day_of_month: int) -> bool:
    # Short months fire on their last day instead of skipping
    return candidate.day == clamp_day(candidate.year, candidate.month, day_of_month)


def is_due(rule: RecurrenceRule, candidate_date: date | datetime) -> bool:
    """
    Decide whether ``rule`` fires on ``candidate_date``.

    Args:
        rule: A rule with a resolved anchor
        candidate_date: Calendar date to test

    Returns:
        True if an instance should exist for this date

    Raises:
        InvalidRuleState: If the rule has an unknown frequency, or is missing
            or out of range on fields its frequency requires
    """
    _check_state(rule)
    candidate = as_date(candidate_date)
    start = rule.start_date

    if candidate < start:
        return False
    if rule.end_date is not None and candidate > rule.end_date:
        return False

    freq = rule.frequency
    if freq is Frequency.DAILY:
        return True
    if freq is Frequency.WEEKLY:
        return candidate.weekday() == rule.day_of_week
    if rule.by_weekday:
        return (
            candidate.weekday() == rule.day_of_week
            and (candidate.day - 1) // 7 + 1 == rule.week_of_month
        )
    if freq is Frequency.MONTHLY:
        return _day_matches(candidate, rule.day_of_month)
    if freq in (Frequency.QUARTERLY, Frequency.HALF_YEARLY):
        months = month_distance(start, candidate)
        return (
            months >= 0
            and months % rule.interval == 0
            and _day_matches(candidate, rule.day_of_month)
        )
    if freq is Frequency.YEARLY:
        return candidate.month == start.month and _day_matches(candidate, start.day)

    raise InvalidRuleState(rule.id, f"unsupported frequency {freq!r}")


def instance_dates(
    rule: RecurrenceRule, candidate_date: date | datetime
) -> tuple[date, date | None]:
    """
    Compute the due and target dates for an instance on ``candidate_date``.

    Raises:
        ValueError: If the rule is not due on ``candidate_date``
    """
    candidate = as_date(candidate_date)
    if not is_due(rule, candidate):
        raise ValueError(f"rule {rule.id!r} is not due on {candidate.isoformat()}")

    due_date = candidate + timedelta(days=rule.due_date_offset or 0)
    target_date = None
    if rule.target_date_offset is not None:
        target_date = candidate + timedelta(days=rule.target_date_offset)
    return due_date, target_date


def upcoming_occurrences(
    rule: RecurrenceRule,
    after: date | datetime,
    limit: int = 5,
    horizon_days: int = 800,
) -> Iterator[date]:
    """Yield up to ``limit`` due dates on or after ``after`` within the horizon."""
    day = as_date(after)
    found = 0
    for _ in range(horizon_days):
        if found >= limit:
            return
        if rule.end_date is not None and day > rule.end_date:
            return
        if is_due(rule, day):
            found += 1
            yield day
        day += timedelta(days=1)
