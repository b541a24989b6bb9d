"""
Programmatic ruleset construction.

RulesetBuilder is used by the parser to assemble a Ruleset and can be used
directly (tests, embedding applications) to build rulesets without a rules
file. Both paths go through the same checks.
"""

from typing import Any

from ruleval.core.models import (
    ColumnRuleBlock,
    ColumnSpec,
    ConditionalClause,
    ConditionalRule,
    GlobalSettings,
    RuleKind,
    Ruleset,
    ValueRule,
    ValueType,
)
from ruleval.core.models.ruleset import DEFAULT_PRECISION


class RulesetBuilder:
    """
    Fluent builder for a Ruleset.

    Example:
        ruleset = RulesetBuilder() \\
            .column_names("id", "country") \\
            .require_all_columns() \\
            .add_rule("id", RuleKind.UNIQUE) \\
            .add_conditional("wales", "country", ValueRule(kind=RuleKind.EQUALS_TEXT, argument="WAL"),
                             "zipcode", ValueRule(kind=RuleKind.STARTS_WITH, argument="NP")) \\
            .build()
    """

    def __init__(self):
        self._null_values: frozenset[str] | None = None
        self._separator: str | None = None
        self._separator_set = False
        self._precision: float | None = None
        self._names: tuple[str, ...] | None = None
        self._flags = {
            "all_columns_required": False,
            "no_extra_columns_allowed": False,
            "check_column_order": False,
        }
        self._blocks: dict[str, list[ValueRule]] = {}
        self._conditionals: list[ConditionalRule] = []
        self._date_formats: tuple[str, ...] | None = None

    # Global settings

    def null_values(self, *values: str) -> "RulesetBuilder":
        if self._null_values is not None:
            raise ValueError("null values are already declared")
        self._null_values = frozenset(values)
        return self

    def thousands_separator(self, separator: str) -> "RulesetBuilder":
        if self._separator_set:
            raise ValueError("thousands separator is already declared")
        # Validate eagerly so literals parsed after this point use a good separator
        GlobalSettings(thousands_separator=separator)
        self._separator = separator
        self._separator_set = True
        return self

    def precision(self, epsilon: float) -> "RulesetBuilder":
        if self._precision is not None:
            raise ValueError("precision is already declared")
        if epsilon <= 0:
            raise ValueError(f"precision must be positive, got {epsilon}")
        self._precision = epsilon
        return self

    def date_formats(self, *names: str) -> "RulesetBuilder":
        """Restrict ``has format`` rules to a custom catalog's format names."""
        if not names:
            raise ValueError("date formats list cannot be empty")
        self._date_formats = tuple(names)
        return self

    @property
    def settings(self) -> GlobalSettings:
        """Settings declared so far."""
        return GlobalSettings(
            null_values=self._null_values or frozenset(),
            thousands_separator=self._separator,
            precision=self._precision if self._precision is not None else DEFAULT_PRECISION,
        )

    # Column specification

    def column_names(self, *names: str) -> "RulesetBuilder":
        if self._names is not None:
            raise ValueError("column names are already declared")
        if not names:
            raise ValueError("column names list cannot be empty")
        self._names = tuple(names)
        return self

    def require_all_columns(self) -> "RulesetBuilder":
        self._flags["all_columns_required"] = True
        return self

    def forbid_extra_columns(self) -> "RulesetBuilder":
        self._flags["no_extra_columns_allowed"] = True
        return self

    def check_column_order(self) -> "RulesetBuilder":
        self._flags["check_column_order"] = True
        return self

    # Value rules

    def has_block(self, column: str) -> bool:
        return column in self._blocks

    def begin_column(self, column: str) -> "RulesetBuilder":
        """Open an (initially empty) rule block for ``column``."""
        if column in self._blocks:
            raise ValueError(f"duplicate block for column '{column}'")
        self._blocks[column] = []
        return self

    def add_rule(
        self,
        column: str,
        rule: ValueRule | RuleKind,
        argument: Any = None,
        line: int | None = None,
    ) -> "RulesetBuilder":
        """
        Append a value rule to ``column``'s block (creating the block).

        Args:
            column: Column the rule applies to
            rule: A ValueRule, or a RuleKind to build one from
            argument: Rule argument when ``rule`` is a RuleKind
            line: Source line, for reporting
        """
        if isinstance(rule, RuleKind):
            rule = ValueRule(kind=rule, argument=argument, line=line)

        rules = self._blocks.setdefault(column, [])
        if rule.kind is RuleKind.TYPE_IS and any(r.kind is RuleKind.TYPE_IS for r in rules):
            raise ValueError(f"column '{column}' declares more than one value type")
        rules.append(rule)
        return self

    def add_type(self, column: str, value_type: ValueType) -> "RulesetBuilder":
        return self.add_rule(column, RuleKind.TYPE_IS, value_type)

    # Conditional rules

    def has_conditional(self, name: str) -> bool:
        return any(conditional.name == name for conditional in self._conditionals)

    def add_conditional(
        self,
        name: str,
        if_column: str,
        if_rule: ValueRule,
        then_column: str,
        then_rule: ValueRule,
        line: int | None = None,
    ) -> "RulesetBuilder":
        if self.has_conditional(name):
            raise ValueError(f"duplicate conditional rule name '{name}'")
        self._conditionals.append(
            ConditionalRule(
                name=name,
                antecedent=ConditionalClause(column=if_column, rule=if_rule),
                consequent=ConditionalClause(column=then_column, rule=then_rule),
                line=line,
            )
        )
        return self

    def build(self) -> Ruleset:
        """
        Build the immutable Ruleset.

        Raises:
            ValueError: If no column names were declared
        """
        if not self._names:
            raise ValueError("missing mandatory 'column names in [...]' declaration")

        return Ruleset(
            settings=self.settings,
            columns=ColumnSpec(names=self._names, **self._flags),
            blocks={
                column: ColumnRuleBlock(column=column, rules=tuple(rules))
                for column, rules in self._blocks.items()
            },
            conditionals=tuple(self._conditionals),
            date_formats=self._date_formats,
        )
