"""Unit tests for database models."""
from datetime import date, time

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from taskcadence.core.anchor import build_rule
from taskcadence.models.records import RecurringTaskRecord, TaskInstanceRecord
from taskcadence.models.rule import Frequency, TaskInstance


def _stored_rule(db_session: Session, **fields) -> RecurringTaskRecord:
    rule = build_rule(None, fields.pop("frequency"), today=date(2024, 2, 10), **fields)
    record = RecurringTaskRecord()
    record.apply_rule(rule)
    db_session.add(record)
    db_session.commit()
    db_session.refresh(record)
    return record


def test_recurring_task_record_round_trip(db_session: Session):
    """Test a rule survives storage."""
    record = _stored_rule(
        db_session,
        frequency="quarterly",
        title="GSTR-3B filing",
        day_of_month=20,
        anchor_month=0,
        due_date_offset=3,
    )

    rule = record.to_rule()
    assert rule.id == record.id
    assert rule.title == "GSTR-3B filing"
    assert rule.frequency is Frequency.QUARTERLY
    assert rule.interval == 3
    assert rule.start_date == date(2024, 1, 20)
    assert rule.due_date_offset == 3
    assert record.inserted_at is not None


def test_daily_time_of_day_stored(db_session: Session):
    """Test time of day is persisted for daily rules."""
    record = _stored_rule(db_session, frequency="daily", time_of_day=time(7, 45))
    assert record.to_rule().time_of_day == time(7, 45)


def test_task_instance_unique_per_rule_and_day(db_session: Session):
    """Test the table rejects a second instance for the same key."""
    record = _stored_rule(db_session, frequency="monthly", day_of_month=15)
    instance = TaskInstance(
        rule_id=record.id, occurrence_date=date(2024, 3, 15), due_date=date(2024, 3, 15)
    )

    db_session.add(TaskInstanceRecord.from_instance(instance))
    db_session.commit()

    db_session.add(TaskInstanceRecord.from_instance(instance))
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()

    stored = db_session.query(TaskInstanceRecord).one()
    assert stored.to_instance() == instance
    assert stored.rule.id == record.id
