"""Human-readable rule summaries for rule detail screens."""

import calendar

from taskcadence.models.rule import Frequency, RecurrenceRule

WEEKDAYS = list(calendar.day_name)
MONTHS = list(calendar.month_name)[1:]
ORDINALS = ["first", "second", "third", "fourth"]


def describe_rule(rule: RecurrenceRule) -> str:
    """Summarize how often ``rule`` repeats, e.g. "Every week on Monday"."""
    freq = rule.frequency
    if freq is Frequency.DAILY:
        if rule.time_of_day is None:
            return "Every day"
        return f"Every day at {rule.time_of_day.strftime('%H:%M')}"
    if freq is Frequency.WEEKLY:
        return f"Every week on {WEEKDAYS[rule.day_of_week]}"
    if rule.by_weekday:
        ordinal = ORDINALS[rule.week_of_month - 1]
        return f"Every month on the {ordinal} {WEEKDAYS[rule.day_of_week]}"
    if freq is Frequency.MONTHLY:
        return f"Every month on day {rule.day_of_month}"
    if freq is Frequency.YEARLY:
        return f"Every year on {rule.start_date.day} {MONTHS[rule.start_date.month - 1]}"

    text = f"Every {rule.interval} months on day {rule.day_of_month}"
    if rule.anchor_month is not None:
        text += f", starting {MONTHS[rule.anchor_month]}"
    return text


def format_offset(days: int | None) -> str:
    """Render a due/target offset the way rule screens show it."""
    if days is None:
        return "N/A"
    if days == 0:
        return "Same day"
    return f"{days} day{'' if abs(days) == 1 else 's'}"
