"""Service layer for rule management and instance generation."""
from taskcadence.services.generator import GenerationSummary, InstanceGenerator
from taskcadence.services.rule_service import (
    create_rule,
    deactivate_rule,
    delete_rule,
    get_rule,
    preview_occurrences,
    rule_response,
    update_rule,
)
from taskcadence.services.stores import (
    IdempotencyStore,
    InMemoryInstanceStore,
    RuleStore,
    SqlAlchemyInstanceStore,
    SqlAlchemyRuleStore,
)

__all__ = [
    # Generation
    "InstanceGenerator",
    "GenerationSummary",
    # Rule service
    "create_rule",
    "get_rule",
    "update_rule",
    "deactivate_rule",
    "delete_rule",
    "preview_occurrences",
    "rule_response",
    # Stores
    "IdempotencyStore",
    "RuleStore",
    "InMemoryInstanceStore",
    "SqlAlchemyInstanceStore",
    "SqlAlchemyRuleStore",
]
