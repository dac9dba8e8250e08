"""Recurring task service: create, edit, delete and preview rules."""

import logging
from datetime import date

from sqlalchemy.orm import Session

from taskcadence.config import Settings, get_settings
from taskcadence.core.anchor import build_rule, resolve_anchor
from taskcadence.core.clock import Clock
from taskcadence.core.describe import describe_rule
from taskcadence.core.errors import RuleNotFound
from taskcadence.core.evaluator import upcoming_occurrences
from taskcadence.models.records import RecurringTaskRecord
from taskcadence.models.rule import RecurrenceRule
from taskcadence.schemas.rule import (
    RecurringTaskCreate,
    RecurringTaskResponse,
    RecurringTaskUpdate,
)

logger = logging.getLogger(__name__)

ANCHOR_FIELDS = ("frequency", "day_of_month", "anchor_month", "day_of_week", "week_of_month")


def create_rule(db: Session, payload: RecurringTaskCreate, clock: Clock) -> RecurrenceRule:
    """
    Create a recurring task with its anchor resolved against today.

    Args:
        db: Database session
        payload: Recurring task fields
        clock: Source of today's date

    Returns:
        The stored rule

    Raises:
        ValidationError: If the rule fields are malformed
    """
    fields = payload.model_dump(exclude={"frequency"})
    rule = build_rule(None, payload.frequency, today=clock.today(), **fields)

    record = RecurringTaskRecord()
    record.apply_rule(rule)
    db.add(record)
    db.commit()
    db.refresh(record)

    logger.info(
        f"Created {rule.frequency.value} recurring task {record.id} anchored {rule.start_date}"
    )
    return record.to_rule()


def get_rule(db: Session, rule_id: int) -> RecurrenceRule:
    """
    Get a recurring task by ID.

    Raises:
        RuleNotFound: If no such recurring task exists
    """
    return _get_record(db, rule_id).to_rule()


def update_rule(
    db: Session, rule_id: int, payload: RecurringTaskUpdate, clock: Clock
) -> RecurrenceRule:
    """
    Update a recurring task.

    Changing the frequency or the nominated day/month re-resolves the anchor
    against today; other edits keep the stored ``start_date``.

    Args:
        db: Database session
        rule_id: Recurring task ID
        payload: Fields to change; unset fields are left alone
        clock: Source of today's date

    Returns:
        The updated rule

    Raises:
        RuleNotFound: If no such recurring task exists
        ValidationError: If the resulting rule is malformed
    """
    record = _get_record(db, rule_id)
    current = record.to_rule()
    changes = payload.model_dump(exclude_unset=True)

    if any(name in changes and changes[name] != getattr(current, name) for name in ANCHOR_FIELDS):
        merged = {name: changes.get(name, getattr(current, name)) for name in ANCHOR_FIELDS}
        if merged["frequency"] != current.frequency:
            # Re-derive the interval for the new frequency
            changes["interval"] = None
        changes["start_date"] = resolve_anchor(
            merged["frequency"],
            day_of_month=merged["day_of_month"],
            anchor_month=merged["anchor_month"],
            day_of_week=merged["day_of_week"],
            today=clock.today(),
        )

    rule = current.with_changes(**changes)
    record.apply_rule(rule)
    db.commit()
    db.refresh(record)

    if "start_date" in changes:
        logger.info(f"Re-anchored recurring task {rule_id} to {rule.start_date}")
    return record.to_rule()


def deactivate_rule(db: Session, rule_id: int) -> RecurrenceRule:
    """Stop a recurring task from being evaluated."""
    record = _get_record(db, rule_id)
    record.is_active = False
    db.commit()
    db.refresh(record)
    return record.to_rule()


def delete_rule(db: Session, rule_id: int) -> None:
    """
    Delete a recurring task along with the instances generated from it.

    Raises:
        RuleNotFound: If no such recurring task exists
    """
    record = _get_record(db, rule_id)
    db.delete(record)
    db.commit()
    logger.info(f"Deleted recurring task {rule_id}")


def preview_occurrences(
    rule: RecurrenceRule, clock: Clock, limit: int = 5, settings: Settings | None = None
) -> list[date]:
    """Next ``limit`` occurrence dates from today, within the preview horizon."""
    if settings is None:
        settings = get_settings()
    return list(
        upcoming_occurrences(
            rule, clock.today(), limit=limit, horizon_days=settings.preview_horizon_days
        )
    )


def rule_response(rule: RecurrenceRule) -> RecurringTaskResponse:
    """Build the response schema for ``rule``."""
    return RecurringTaskResponse(
        id=rule.id,
        title=rule.title,
        frequency=rule.frequency,
        interval=rule.interval,
        time_of_day=rule.time_of_day,
        day_of_week=rule.day_of_week,
        day_of_month=rule.day_of_month,
        anchor_month=rule.anchor_month,
        week_of_month=rule.week_of_month,
        start_date=rule.start_date,
        end_date=rule.end_date,
        due_date_offset=rule.due_date_offset,
        target_date_offset=rule.target_date_offset,
        is_active=rule.is_active,
        description=describe_rule(rule),
    )


def _get_record(db: Session, rule_id: int) -> RecurringTaskRecord:
    record = db.get(RecurringTaskRecord, rule_id)
    if record is None:
        raise RuleNotFound(rule_id)
    return record
