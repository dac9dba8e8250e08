"""Recurrence rule and task instance records."""

import dataclasses
import hashlib
from dataclasses import InitVar, dataclass, field
from datetime import date, time
from enum import Enum
from typing import Any

from taskcadence.core.errors import ValidationError


class Frequency(str, Enum):
    """Recurrence frequency enum."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    HALF_YEARLY = "half_yearly"
    YEARLY = "yearly"

    @property
    def interval(self) -> int:
        """Months between occurrences for month-phased frequencies, else 1."""
        return _INTERVALS.get(self, 1)

    @property
    def uses_day_of_month(self) -> bool:
        return self not in (Frequency.DAILY, Frequency.WEEKLY)

    @property
    def uses_anchor_month(self) -> bool:
        return self in (Frequency.QUARTERLY, Frequency.HALF_YEARLY, Frequency.YEARLY)


_INTERVALS = {Frequency.QUARTERLY: 3, Frequency.HALF_YEARLY: 6}
ALLOWED_INTERVALS = frozenset({1, 3, 6})


@dataclass(frozen=True)
class RecurrenceRule:
    """
    Immutable description of a periodic task schedule.

    ``start_date`` is the resolved anchor produced by
    :func:`taskcadence.core.anchor.resolve_anchor`; it is never the raw
    month/day the user picked. Only the fields meaningful for ``frequency``
    are kept, the rest are cleared on construction.
    """

    id: Any
    frequency: Frequency
    start_date: date
    interval: int | None = None
    time_of_day: time | None = None
    day_of_week: int | None = None
    day_of_month: int | None = None
    anchor_month: int | None = None
    week_of_month: int | None = None
    due_date_offset: int = 0
    target_date_offset: int | None = None
    end_date: date | None = None
    is_active: bool = True
    title: str = ""
    validate: InitVar[bool] = True

    def __post_init__(self, validate: bool) -> None:
        if not isinstance(self.frequency, Frequency):
            try:
                object.__setattr__(self, "frequency", Frequency(self.frequency))
            except ValueError:
                if validate:
                    raise ValidationError(
                        "frequency", f"unknown frequency {self.frequency!r}"
                    ) from None
                # Kept as stored; the evaluator rejects it per rule
                return

        if not validate:
            if self.interval is None:
                object.__setattr__(self, "interval", self.frequency.interval)
            return

        freq = self.frequency
        if self.interval is None:
            object.__setattr__(self, "interval", freq.interval)
        elif self.interval not in ALLOWED_INTERVALS:
            raise ValidationError("interval", f"must be one of 1, 3 or 6, got {self.interval}")
        elif self.interval != freq.interval:
            raise ValidationError(
                "interval", f"{freq.value} rules repeat every {freq.interval}, got {self.interval}"
            )

        if freq is Frequency.DAILY:
            _require(self.time_of_day, "time_of_day", freq)
        else:
            object.__setattr__(self, "time_of_day", None)

        if freq is Frequency.MONTHLY and self.week_of_month is not None:
            if self.day_of_month is not None:
                raise ValidationError(
                    "week_of_month", "cannot be combined with day_of_month"
                )
            _require_range(self.week_of_month, "week_of_month", freq, 1, 4)
            _require_range(self.day_of_week, "day_of_week", freq, 0, 6)
        elif freq is Frequency.WEEKLY:
            _require_range(self.day_of_week, "day_of_week", freq, 0, 6)
            object.__setattr__(self, "week_of_month", None)
        else:
            object.__setattr__(self, "day_of_week", None)
            object.__setattr__(self, "week_of_month", None)

        if not freq.uses_day_of_month:
            object.__setattr__(self, "day_of_month", None)
        elif not self.by_weekday:
            _require_range(self.day_of_month, "day_of_month", freq, 1, 31)

        if freq.uses_anchor_month:
            _require_range(self.anchor_month, "anchor_month", freq, 0, 11)
        else:
            object.__setattr__(self, "anchor_month", None)

        if self.due_date_offset is None or self.due_date_offset < 0:
            raise ValidationError("due_date_offset", "must be a non-negative number of days")
        if self.target_date_offset is not None and self.target_date_offset < 0:
            raise ValidationError("target_date_offset", "must be a non-negative number of days")
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValidationError("end_date", "must not be before start_date")

    @property
    def by_weekday(self) -> bool:
        """True for monthly rules on the Nth weekday, e.g. the first Monday."""
        return self.frequency is Frequency.MONTHLY and self.week_of_month is not None

    def with_changes(self, **changes: Any) -> "RecurrenceRule":
        """Return a validated copy with ``changes`` applied."""
        return dataclasses.replace(self, validate=True, **changes)


def _require(value: Any, name: str, freq: Frequency) -> None:
    if value is None:
        raise ValidationError(name, f"required for {freq.value} rules")


def _require_range(value: int | None, name: str, freq: Frequency, low: int, high: int) -> None:
    _require(value, name, freq)
    if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
        raise ValidationError(name, f"must be between {low} and {high}, got {value!r}")


def idempotency_key(rule_id: Any, occurrence_date: date) -> str:
    """
    Stable key identifying one rule's instance for one occurrence date.

    The id's type is part of the key, so ``1`` and ``"1"`` never collide.
    """
    raw = f"{type(rule_id).__name__}:{rule_id}:{occurrence_date.isoformat()}".encode()
    return hashlib.sha256(raw).hexdigest()


@dataclass(frozen=True)
class TaskInstance:
    """A concrete task to create for one rule on one occurrence date."""

    rule_id: Any
    occurrence_date: date
    due_date: date
    target_date: date | None = None
    idempotency_key: str = field(init=False)

    def __post_init__(self) -> None:
        key = idempotency_key(self.rule_id, self.occurrence_date)
        object.__setattr__(self, "idempotency_key", key)
