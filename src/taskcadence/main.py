"""Batch entrypoint: generate the day's recurring task instances."""

import argparse
import logging
import sys
from datetime import date

from taskcadence import database
from taskcadence.config import Settings, get_settings
from taskcadence.core.clock import SystemClock
from taskcadence.core.logging import setup_logging
from taskcadence.database import create_tables, init_db
from taskcadence.services.generator import GenerationSummary, InstanceGenerator
from taskcadence.services.stores import SqlAlchemyInstanceStore, SqlAlchemyRuleStore
from taskcadence.telemetry import TelemetryManager

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="taskcadence", description="Generate task instances for due recurring rules."
    )
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        default=None,
        help="Day to generate for (YYYY-MM-DD); defaults to today in the practice timezone",
    )
    parser.add_argument(
        "--until",
        type=date.fromisoformat,
        default=None,
        help="Backfill every day from --date through this day (YYYY-MM-DD)",
    )
    return parser.parse_args(argv)


def run(
    settings: Settings, check_date: date | None = None, until: date | None = None
) -> GenerationSummary:
    """
    Run one generation pass against the configured database.

    Args:
        settings: Application settings
        check_date: Day to generate for; defaults to today
        until: Last day of a backfill range starting at ``check_date``

    Returns:
        Summary of the run
    """
    logger.info(f"Starting {settings.app_name} generation run ({settings.environment})")
    init_db(settings)
    create_tables()

    session_factory = database.SessionLocal
    rules = SqlAlchemyRuleStore(session_factory).list_active_rules()
    generator = InstanceGenerator(
        SqlAlchemyInstanceStore(session_factory), max_workers=settings.generator_max_workers
    )

    if check_date is None:
        check_date = SystemClock(settings.practice_timezone).today()

    logger.info(f"Loaded {len(rules)} active recurring task(s)")
    if until is not None:
        return generator.backfill(rules, check_date, until)
    return generator.run(rules, check_date)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    setup_logging(settings)

    telemetry_manager = TelemetryManager(settings)
    telemetry_manager.setup()

    try:
        summary = run(settings, args.date, args.until)
    except Exception as exc:
        logger.error(f"Generation run failed: {exc}", exc_info=True)
        return 1
    finally:
        telemetry_manager.shutdown()

    for rule_id, reason in summary.failed:
        logger.warning(f"Rule {rule_id} failed: {reason}")
    logger.info(
        f"Run complete: {summary.evaluated} evaluated, {summary.fired} fired, "
        f"{summary.duplicates} duplicates, {summary.skipped_inactive} inactive, "
        f"{len(summary.failed)} failed"
    )
    return 0 if not summary.failed else 2


if __name__ == "__main__":
    sys.exit(main())
