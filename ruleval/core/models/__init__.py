"""
Core data models for the rule-driven validation engine.

All models use Pydantic for runtime validation and are frozen once built.
"""

from .dataset import Dataset
from .ruleset import (
    ColumnRuleBlock,
    ColumnSpec,
    ConditionalClause,
    ConditionalRule,
    GlobalSettings,
    Ruleset,
)
from .validation_report import (
    ColumnOutcome,
    ConditionalOutcome,
    Finding,
    RuleOutcome,
    ValidationReport,
)
from .value_rule import NUMERIC_TYPES, RuleKind, ValueRule, ValueType

__all__ = [
    "GlobalSettings",
    "ColumnSpec",
    "ColumnRuleBlock",
    "ConditionalClause",
    "ConditionalRule",
    "Ruleset",
    "RuleKind",
    "ValueRule",
    "ValueType",
    "NUMERIC_TYPES",
    "Dataset",
    "Finding",
    "RuleOutcome",
    "ColumnOutcome",
    "ConditionalOutcome",
    "ValidationReport",
]
