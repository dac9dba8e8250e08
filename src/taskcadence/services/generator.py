"""Task instance generation for recurring rules."""

import logging
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Literal

from opentelemetry import metrics, trace

from taskcadence.core.dates import as_date
from taskcadence.core.errors import InvalidRuleState, StoreUnavailable
from taskcadence.core.evaluator import instance_dates, is_due
from taskcadence.models.rule import RecurrenceRule, TaskInstance
from taskcadence.services.stores import IdempotencyStore
from taskcadence.telemetry import create_generation_span_attributes, set_span_attributes

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)
meter = metrics.get_meter(__name__)

fired_counter = meter.create_counter(
    "taskcadence.instances.fired", description="Task instances recorded"
)
failed_counter = meter.create_counter(
    "taskcadence.rules.failed", description="Rules that failed evaluation or recording"
)

Outcome = Literal["inactive", "not_due", "fired", "duplicate", "failed"]


@dataclass
class GenerationSummary:
    """Counts from one generator run over one check date."""

    check_date: date
    evaluated: int = 0
    fired: int = 0
    duplicates: int = 0
    skipped_inactive: int = 0
    failed: list[tuple[Any, str]] = field(default_factory=list)
    instances: list[TaskInstance] = field(default_factory=list)

    def merge(self, other: "GenerationSummary") -> None:
        self.evaluated += other.evaluated
        self.fired += other.fired
        self.duplicates += other.duplicates
        self.skipped_inactive += other.skipped_inactive
        self.failed.extend(other.failed)
        self.instances.extend(other.instances)


class InstanceGenerator:
    """
    Evaluates active rules against a check date and records due instances.

    Holds no state between runs; the idempotency store is what keeps a
    repeated run for the same day from recording a second instance.
    """

    def __init__(self, store: IdempotencyStore, max_workers: int = 1):
        self.store = store
        self.max_workers = max(1, max_workers)

    def generate(
        self, rules: Iterable[RecurrenceRule], check_date: date | datetime
    ) -> list[TaskInstance]:
        """Return the instances newly recorded for ``check_date``."""
        return self.run(rules, check_date).instances

    def run(
        self, rules: Iterable[RecurrenceRule], check_date: date | datetime
    ) -> GenerationSummary:
        """
        Evaluate every rule for ``check_date`` and record due instances.

        Failures are isolated per rule: a rule in an invalid state or a store
        outage while handling one rule is logged and counted, and the rest of
        the batch still runs.

        Args:
            rules: Rules to evaluate; inactive ones are skipped
            check_date: Calendar day to generate for

        Returns:
            Summary of the run
        """
        day = as_date(check_date)
        rules = list(rules)
        summary = GenerationSummary(check_date=day)

        with tracer.start_as_current_span("taskcadence.generate") as span:
            set_span_attributes(span, **create_generation_span_attributes(day, len(rules)))

            if self.max_workers > 1 and len(rules) > 1:
                with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                    results = list(pool.map(lambda rule: self._process(rule, day), rules))
            else:
                results = [self._process(rule, day) for rule in rules]

            for rule, (outcome, payload) in zip(rules, results):
                if outcome == "inactive":
                    summary.skipped_inactive += 1
                    continue
                summary.evaluated += 1
                if outcome == "fired":
                    summary.fired += 1
                    summary.instances.append(payload)
                elif outcome == "duplicate":
                    summary.duplicates += 1
                elif outcome == "failed":
                    summary.failed.append((rule.id, payload))

            set_span_attributes(
                span,
                **create_generation_span_attributes(
                    day,
                    len(rules),
                    evaluated=summary.evaluated,
                    fired=summary.fired,
                    failed=len(summary.failed),
                ),
            )

        if summary.fired:
            fired_counter.add(summary.fired)
        if summary.failed:
            failed_counter.add(len(summary.failed))

        logger.info(
            f"Generated {summary.fired} instance(s) for {day.isoformat()}: "
            f"{summary.evaluated} evaluated, {summary.duplicates} already present, "
            f"{len(summary.failed)} failed"
        )
        return summary

    def backfill(
        self, rules: Iterable[RecurrenceRule], start: date, end: date
    ) -> GenerationSummary:
        """Run every day in ``[start, end]``; safe to repeat over the same range."""
        if end < start:
            raise ValueError("end must not be before start")

        rules = list(rules)
        total = GenerationSummary(check_date=end)
        day = start
        while day <= end:
            total.merge(self.run(rules, day))
            day += timedelta(days=1)
        return total

    def _process(self, rule: RecurrenceRule, day: date) -> tuple[Outcome, Any]:
        if not rule.is_active:
            return "inactive", None

        try:
            if not is_due(rule, day):
                return "not_due", None

            if self.store.has_instance(rule.id, day):
                return "duplicate", None

            due_date, target_date = instance_dates(rule, day)
            instance = TaskInstance(
                rule_id=rule.id,
                occurrence_date=day,
                due_date=due_date,
                target_date=target_date,
            )
            if not self.store.record_instance(instance):
                # Another run recorded the same key first
                return "duplicate", None
        except InvalidRuleState as exc:
            logger.error(f"Skipping rule {rule.id!r}: {exc}")
            return "failed", str(exc)
        except StoreUnavailable as exc:
            logger.warning(f"Store unavailable for rule {rule.id!r}, retrying next run: {exc}")
            return "failed", str(exc)

        return "fired", instance
