"""Anchor resolution for recurrence rules."""

from datetime import date, datetime
from typing import Any

from taskcadence.core.dates import as_date, rolled_date
from taskcadence.core.errors import ValidationError
from taskcadence.models.rule import Frequency, RecurrenceRule


def resolve_anchor(
    frequency: Frequency | str,
    day_of_month: int | None = None,
    anchor_month: int | None = None,
    day_of_week: int | None = None,
    *,
    today: date | datetime,
) -> date:
    """
    Resolve the ``start_date`` to store for a rule.

    Daily, weekly and monthly rules are anchored on ``today``; the anchor only
    acts as a floor there. Quarterly and half-yearly rules are anchored on the
    nominated month/day of the current year, even when that has already
    passed, since only the month phase matters to them. Yearly rules are
    matched on exact month and day, so a nominated date that has passed is
    pushed into the next year.

    Args:
        frequency: Rule frequency
        day_of_month: Nominated day, 1-31
        anchor_month: Nominated month, 0-11 (January is 0)
        day_of_week: Nominated weekday, 0-6 (Monday is 0)
        today: Current date; datetimes are truncated to their date

    Returns:
        The anchor date

    Raises:
        ValidationError: If a field the frequency needs is missing or out of range
    """
    today = as_date(today)
    try:
        frequency = Frequency(frequency)
    except ValueError:
        raise ValidationError("frequency", f"unknown frequency {frequency!r}") from None

    if frequency is Frequency.WEEKLY and day_of_week is None:
        raise ValidationError("day_of_week", "required for weekly rules")

    if not frequency.uses_anchor_month:
        return today

    if day_of_month is None:
        raise ValidationError("day_of_month", f"required for {frequency.value} rules")
    if anchor_month is None:
        raise ValidationError("anchor_month", f"required for {frequency.value} rules")
    if not 1 <= day_of_month <= 31:
        raise ValidationError("day_of_month", f"must be between 1 and 31, got {day_of_month}")
    if not 0 <= anchor_month <= 11:
        raise ValidationError("anchor_month", f"must be between 0 and 11, got {anchor_month}")

    candidate = rolled_date(today.year, anchor_month + 1, day_of_month)
    if frequency is Frequency.YEARLY and candidate < today:
        candidate = rolled_date(today.year + 1, anchor_month + 1, day_of_month)
    return candidate


def build_rule(
    rule_id: Any,
    frequency: Frequency | str,
    *,
    today: date | datetime,
    **fields: Any,
) -> RecurrenceRule:
    """Resolve the anchor for ``fields`` and construct a validated rule."""
    start_date = resolve_anchor(
        frequency,
        day_of_month=fields.get("day_of_month"),
        anchor_month=fields.get("anchor_month"),
        day_of_week=fields.get("day_of_week"),
        today=today,
    )
    return RecurrenceRule(
        id=rule_id, frequency=Frequency(frequency), start_date=start_date, **fields
    )
