"""Rule and instance stores used by the generator."""

import logging
import threading
from collections.abc import Callable
from datetime import date
from typing import Any, Protocol

from sqlalchemy import and_, or_, select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from taskcadence.core.errors import InvalidRuleState, RuleNotFound, StoreUnavailable
from taskcadence.models.records import RecurringTaskRecord, TaskInstanceRecord
from taskcadence.models.rule import RecurrenceRule, TaskInstance, idempotency_key

logger = logging.getLogger(__name__)


class IdempotencyStore(Protocol):
    """Records which (rule, occurrence date) pairs already have an instance."""

    def has_instance(self, rule_id: Any, occurrence_date: date) -> bool: ...

    def record_instance(self, instance: TaskInstance) -> bool:
        """Atomically record ``instance``; False if its key already exists."""
        ...


class RuleStore(Protocol):
    """Supplies recurrence rules and accepts updated ones."""

    def list_active_rules(self) -> list[RecurrenceRule]: ...

    def get_rule(self, rule_id: Any) -> RecurrenceRule: ...

    def save_rule(self, rule: RecurrenceRule) -> RecurrenceRule: ...


class InMemoryInstanceStore:
    """Thread-safe idempotency store kept in process memory."""

    def __init__(self) -> None:
        self._instances: dict[str, TaskInstance] = {}
        self._lock = threading.Lock()

    def has_instance(self, rule_id: Any, occurrence_date: date) -> bool:
        with self._lock:
            return idempotency_key(rule_id, occurrence_date) in self._instances

    def record_instance(self, instance: TaskInstance) -> bool:
        with self._lock:
            if instance.idempotency_key in self._instances:
                return False
            self._instances[instance.idempotency_key] = instance
            return True

    def instances(self) -> list[TaskInstance]:
        with self._lock:
            return list(self._instances.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._instances)


class SqlAlchemyInstanceStore:
    """
    Idempotency store backed by the ``task_instances`` table.

    The unique constraint on ``(rule_id, occurrence_date)`` makes the insert
    itself the check-and-record step, so concurrent generator runs cannot
    both record the same key.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def has_instance(self, rule_id: Any, occurrence_date: date) -> bool:
        stmt = select(TaskInstanceRecord.id).where(
            TaskInstanceRecord.rule_id == rule_id,
            TaskInstanceRecord.occurrence_date == occurrence_date,
        )
        try:
            with self.session_factory() as db:
                return db.execute(stmt).first() is not None
        except OperationalError as exc:
            raise StoreUnavailable(f"Instance store unreachable: {exc}") from exc

    def record_instance(self, instance: TaskInstance) -> bool:
        """
        Insert ``instance``; False if it is already recorded.

        Raises:
            InvalidRuleState: If the insert is rejected for another reason,
                e.g. the rule row was deleted mid-run
            StoreUnavailable: If the database cannot be reached
        """
        try:
            with self.session_factory() as db:
                db.add(TaskInstanceRecord.from_instance(instance))
                try:
                    db.commit()
                except IntegrityError as exc:
                    db.rollback()
                    if not self._exists(db, instance):
                        raise InvalidRuleState(
                            instance.rule_id, f"instance rejected by the store: {exc.orig}"
                        ) from exc
                    logger.debug(f"Instance {instance.idempotency_key} already recorded")
                    return False
        except OperationalError as exc:
            raise StoreUnavailable(f"Instance store unreachable: {exc}") from exc
        return True

    @staticmethod
    def _exists(db: Session, instance: TaskInstance) -> bool:
        stmt = select(TaskInstanceRecord.id).where(
            or_(
                TaskInstanceRecord.idempotency_key == instance.idempotency_key,
                and_(
                    TaskInstanceRecord.rule_id == instance.rule_id,
                    TaskInstanceRecord.occurrence_date == instance.occurrence_date,
                ),
            )
        )
        return db.execute(stmt).first() is not None

    def list_instances(self, rule_id: Any | None = None) -> list[TaskInstance]:
        stmt = select(TaskInstanceRecord).order_by(
            TaskInstanceRecord.occurrence_date, TaskInstanceRecord.rule_id
        )
        if rule_id is not None:
            stmt = stmt.where(TaskInstanceRecord.rule_id == rule_id)
        with self.session_factory() as db:
            return [record.to_instance() for record in db.execute(stmt).scalars().all()]


class SqlAlchemyRuleStore:
    """Rule store backed by the ``recurring_tasks`` table."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def list_active_rules(self) -> list[RecurrenceRule]:
        stmt = (
            select(RecurringTaskRecord)
            .where(RecurringTaskRecord.is_active.is_(True))
            .order_by(RecurringTaskRecord.id)
        )
        try:
            with self.session_factory() as db:
                return [record.to_rule() for record in db.execute(stmt).scalars().all()]
        except OperationalError as exc:
            raise StoreUnavailable(f"Rule store unreachable: {exc}") from exc

    def get_rule(self, rule_id: Any) -> RecurrenceRule:
        with self.session_factory() as db:
            record = db.get(RecurringTaskRecord, rule_id)
            if record is None:
                raise RuleNotFound(rule_id)
            return record.to_rule()

    def save_rule(self, rule: RecurrenceRule) -> RecurrenceRule:
        """Insert or update ``rule``; returns it with its stored id."""
        with self.session_factory() as db:
            record = db.get(RecurringTaskRecord, rule.id) if rule.id is not None else None
            if record is None:
                record = RecurringTaskRecord(id=rule.id)
                db.add(record)
            record.apply_rule(rule)
            db.commit()
            db.refresh(record)
            return record.to_rule()
