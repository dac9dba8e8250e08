"""Recurring task persistence models."""

from datetime import UTC, date, datetime, time

from sqlalchemy import Date, ForeignKey, String, Time, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from taskcadence.database import Base
from taskcadence.models.rule import Frequency, RecurrenceRule, TaskInstance


class RecurringTaskRecord(Base):
    """Stored recurring-task template and its recurrence rule."""

    __tablename__ = "recurring_tasks"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    frequency: Mapped[str] = mapped_column(
        String(20), nullable=False, default=Frequency.DAILY.value
    )
    interval: Mapped[int] = mapped_column(nullable=False, default=1)
    time_of_day: Mapped[time | None] = mapped_column(Time, nullable=True)
    day_of_week: Mapped[int | None] = mapped_column(nullable=True)
    day_of_month: Mapped[int | None] = mapped_column(nullable=True)
    anchor_month: Mapped[int | None] = mapped_column(nullable=True)
    week_of_month: Mapped[int | None] = mapped_column(nullable=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    due_date_offset: Mapped[int] = mapped_column(nullable=False, default=0)
    target_date_offset: Mapped[int | None] = mapped_column(nullable=True)
    is_active: Mapped[bool] = mapped_column(nullable=False, default=True, index=True)
    inserted_at: Mapped[datetime] = mapped_column(
        nullable=False, server_default=func.now(), default=lambda: datetime.now(UTC)
    )
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now(),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

    instances: Mapped[list["TaskInstanceRecord"]] = relationship(
        "TaskInstanceRecord",
        back_populates="rule",
        cascade="all, delete-orphan",
    )

    def to_rule(self) -> RecurrenceRule:
        """
        Convert to a domain rule without re-validating it.

        A corrupt column is carried through as stored; evaluating the rule
        raises InvalidRuleState for that rule alone.
        """
        return RecurrenceRule(
            id=self.id,
            title=self.title,
            frequency=self.frequency,
            interval=self.interval,
            time_of_day=self.time_of_day,
            day_of_week=self.day_of_week,
            day_of_month=self.day_of_month,
            anchor_month=self.anchor_month,
            week_of_month=self.week_of_month,
            start_date=self.start_date,
            end_date=self.end_date,
            due_date_offset=self.due_date_offset,
            target_date_offset=self.target_date_offset,
            is_active=self.is_active,
            validate=False,
        )

    def apply_rule(self, rule: RecurrenceRule) -> None:
        """Copy the rule's schedule fields onto this row."""
        self.title = rule.title
        self.frequency = rule.frequency.value
        self.interval = rule.interval
        self.time_of_day = rule.time_of_day
        self.day_of_week = rule.day_of_week
        self.day_of_month = rule.day_of_month
        self.anchor_month = rule.anchor_month
        self.week_of_month = rule.week_of_month
        self.start_date = rule.start_date
        self.end_date = rule.end_date
        self.due_date_offset = rule.due_date_offset
        self.target_date_offset = rule.target_date_offset
        self.is_active = rule.is_active

    def __repr__(self) -> str:
        return (
            f"<RecurringTaskRecord(id={self.id}, frequency={self.frequency}, "
            f"start={self.start_date})>"
        )


class TaskInstanceRecord(Base):
    """One generated task instance; unique per rule and occurrence date."""

    __tablename__ = "task_instances"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    rule_id: Mapped[int] = mapped_column(
        ForeignKey("recurring_tasks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    occurrence_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    target_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    idempotency_key: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    inserted_at: Mapped[datetime] = mapped_column(
        nullable=False, server_default=func.now(), default=lambda: datetime.now(UTC)
    )

    __table_args__ = (
        UniqueConstraint(
            "rule_id",
            "occurrence_date",
            name="idx_task_instances_rule_occurrence",
        ),
    )

    rule: Mapped["RecurringTaskRecord"] = relationship(
        "RecurringTaskRecord", back_populates="instances"
    )

    @classmethod
    def from_instance(cls, instance: TaskInstance) -> "TaskInstanceRecord":
        return cls(
            rule_id=instance.rule_id,
            occurrence_date=instance.occurrence_date,
            due_date=instance.due_date,
            target_date=instance.target_date,
            idempotency_key=instance.idempotency_key,
        )

    def to_instance(self) -> TaskInstance:
        return TaskInstance(
            rule_id=self.rule_id,
            occurrence_date=self.occurrence_date,
            due_date=self.due_date,
            target_date=self.target_date,
        )

    def __repr__(self) -> str:
        return f"<TaskInstanceRecord(rule={self.rule_id}, occurrence={self.occurrence_date})>"
