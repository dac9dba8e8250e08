"""Scheduling models."""
from taskcadence.models.records import RecurringTaskRecord, TaskInstanceRecord
from taskcadence.models.rule import Frequency, RecurrenceRule, TaskInstance

__all__ = [
    "Frequency",
    "RecurrenceRule",
    "TaskInstance",
    "RecurringTaskRecord",
    "TaskInstanceRecord",
]
