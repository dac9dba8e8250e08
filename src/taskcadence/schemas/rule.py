"""Recurring task Pydantic schemas."""

from datetime import date, time

from pydantic import BaseModel, Field

from taskcadence.models.rule import Frequency


class RecurringTaskBase(BaseModel):
    """Base recurring task schema."""

    title: str = Field(..., min_length=1, max_length=200, description="Template title")
    frequency: Frequency = Field(..., description="Recurrence frequency")
    time_of_day: time | None = Field(None, description="Time of day, daily rules only")
    day_of_week: int | None = Field(None, description="Weekday, Monday is 0")
    day_of_month: int | None = Field(None, description="Day of month, 1-31")
    anchor_month: int | None = Field(None, description="Reference month, January is 0")
    week_of_month: int | None = Field(
        None, description="Week of the month, 1-4, with day_of_week for monthly rules"
    )
    due_date_offset: int = Field(0, description="Days from occurrence to due date")
    target_date_offset: int | None = Field(None, description="Days from occurrence to target date")
    end_date: date | None = Field(None, description="Last date an occurrence may fall on")
    is_active: bool = Field(True, description="Whether the rule is evaluated")


class RecurringTaskCreate(RecurringTaskBase):
    """Schema for creating a recurring task."""

    pass


class RecurringTaskUpdate(BaseModel):
    """Schema for updating a recurring task; unset fields are left alone."""

    title: str | None = Field(None, min_length=1, max_length=200)
    frequency: Frequency | None = None
    time_of_day: time | None = None
    day_of_week: int | None = None
    day_of_month: int | None = None
    anchor_month: int | None = None
    week_of_month: int | None = None
    due_date_offset: int | None = None
    target_date_offset: int | None = None
    end_date: date | None = None
    is_active: bool | None = None


class RecurringTaskResponse(RecurringTaskBase):
    """Schema for recurring task response."""

    id: int
    interval: int
    start_date: date
    description: str

    model_config = {"from_attributes": True}
