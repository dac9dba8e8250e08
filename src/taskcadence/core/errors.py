"""Scheduling exceptions."""

from typing import Any


class SchedulingError(Exception):
    """Base class for recurring-task scheduling errors."""


class ValidationError(SchedulingError, ValueError):
    """A recurrence rule was built from malformed input."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field


class InvalidRuleState(SchedulingError):
    """A rule cannot be evaluated or recorded: missing, out-of-range or unknown fields."""

    def __init__(self, rule_id: Any, message: str):
        super().__init__(f"rule {rule_id!r}: {message}")
        self.rule_id = rule_id


class StoreUnavailable(SchedulingError):
    """The rule or instance store could not be reached."""


class RuleNotFound(SchedulingError, LookupError):
    """No recurring task exists with the requested id."""

    def __init__(self, rule_id: Any):
        super().__init__(f"Recurring task {rule_id!r} not found")
        self.rule_id = rule_id
