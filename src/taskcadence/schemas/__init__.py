"""Pydantic schemas for recurring task input and output."""
from taskcadence.schemas.rule import (
    RecurringTaskCreate,
    RecurringTaskResponse,
    RecurringTaskUpdate,
)

__all__ = [
    "RecurringTaskCreate",
    "RecurringTaskUpdate",
    "RecurringTaskResponse",
]
