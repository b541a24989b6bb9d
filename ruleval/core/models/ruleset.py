"""
Ruleset models: the compiled, in-memory form of a rules file.

A Ruleset is built completely (by the parser or by RulesetBuilder) before any
evaluation starts and is never modified afterwards.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .value_rule import RuleKind, ValueRule, ValueType

DEFAULT_PRECISION = 0.001

# Characters accepted as a thousands separator
THOUSANDS_SEPARATORS = frozenset({".", ",", "_", "'", " "})


class GlobalSettings(BaseModel):
    """
    Session-wide settings that apply to every coercion.

    Attributes:
        null_values: Literal strings treated as null (exact, case-sensitive)
        thousands_separator: Digit-group separator stripped from numbers
        precision: Tolerance (epsilon) for numeric equality
    """

    model_config = ConfigDict(frozen=True)

    null_values: frozenset[str] = Field(default_factory=frozenset)
    thousands_separator: str | None = None
    precision: float = Field(DEFAULT_PRECISION, gt=0)

    @field_validator("thousands_separator")
    @classmethod
    def check_separator(cls, v):
        if v is not None and v not in THOUSANDS_SEPARATORS:
            raise ValueError(
                f"thousands separator must be one of {sorted(THOUSANDS_SEPARATORS)}, got {v!r}"
            )
        return v

    @property
    def decimal_mark(self) -> str:
        """Decimal mark implied by the thousands separator."""
        return "," if self.thousands_separator == "." else "."


class ColumnSpec(BaseModel):
    """
    Declared columns and the structural checks to run on the data header.

    Attributes:
        names: Declared column names, in expected order
        all_columns_required: Every declared column must be present
        no_extra_columns_allowed: Undeclared columns are errors
        check_column_order: Declared columns must appear in declared order
    """

    model_config = ConfigDict(frozen=True)

    names: tuple[str, ...] = Field(..., min_length=1)
    all_columns_required: bool = False
    no_extra_columns_allowed: bool = False
    check_column_order: bool = False


class ColumnRuleBlock(BaseModel):
    """Value rules declared under one ``column:`` block."""

    model_config = ConfigDict(frozen=True)

    column: str = Field(..., min_length=1)
    rules: tuple[ValueRule, ...] = ()

    @model_validator(mode="after")
    def check_single_type(self):
        """A block may declare at most one value type."""
        types = [rule for rule in self.rules if rule.kind is RuleKind.TYPE_IS]
        if len(types) > 1:
            raise ValueError(f"column '{self.column}' declares more than one value type")
        return self

    @property
    def value_type(self) -> ValueType | None:
        for rule in self.rules:
            if rule.kind is RuleKind.TYPE_IS:
                return rule.value_type
        return None


class ConditionalClause(BaseModel):
    """One side of a conditional rule: a column and a single value rule."""

    model_config = ConfigDict(frozen=True)

    column: str = Field(..., min_length=1)
    rule: ValueRule

    def describe(self) -> str:
        return f"{self.column} {self.rule.describe()}"


class ConditionalRule(BaseModel):
    """
    An if/then pair of value rules, possibly spanning two columns.

    Attributes:
        name: Unique identifier across the ruleset
        antecedent: Clause that selects the rows to check
        consequent: Clause every selected row must satisfy
        line: Line the rule was declared on (reporting only)
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    antecedent: ConditionalClause
    consequent: ConditionalClause
    line: int | None = None


class Ruleset(BaseModel):
    """
    Root of a compiled rules file.

    Attributes:
        settings: Global settings
        columns: Declared column specification
        blocks: Value rules per column, in declaration order
        conditionals: Conditional rules, in declaration order
        date_formats: Names of the date-format catalog the rules were compiled
                      against (None for the packaged catalog)
    """

    model_config = ConfigDict(frozen=True)

    settings: GlobalSettings = Field(default_factory=GlobalSettings)
    columns: ColumnSpec
    blocks: dict[str, ColumnRuleBlock] = Field(default_factory=dict)
    conditionals: tuple[ConditionalRule, ...] = ()
    date_formats: tuple[str, ...] | None = None

    @model_validator(mode="after")
    def check_identifiers(self):
        """Block keys match their columns; conditional names are unique."""
        for key, block in self.blocks.items():
            if key != block.column:
                raise ValueError(f"block key '{key}' does not match column '{block.column}'")

        seen: set[str] = set()
        for conditional in self.conditionals:
            if conditional.name in seen:
                raise ValueError(f"duplicate conditional rule name '{conditional.name}'")
            seen.add(conditional.name)
        return self

    @model_validator(mode="after")
    def check_date_formats(self):
        """``has format`` rules name formats of the compiling catalog."""
        if self.date_formats is None:
            return self
        for rule in self.all_rules():
            if rule.kind is RuleKind.FORMAT_IS and rule.argument not in self.date_formats:
                raise ValueError(f"unsupported date format '{rule.argument}'")
        return self

    def all_rules(self) -> list[ValueRule]:
        """Every value rule, blocks first, then conditional clauses."""
        rules = [rule for block in self.blocks.values() for rule in block.rules]
        for conditional in self.conditionals:
            rules.extend((conditional.antecedent.rule, conditional.consequent.rule))
        return rules

    @property
    def value_rule_count(self) -> int:
        """Number of value rules across blocks and conditional clauses."""
        return sum(len(block.rules) for block in self.blocks.values()) + 2 * len(self.conditionals)

    def declared_type(self, column: str) -> ValueType | None:
        """The value type declared in ``column``'s block, if any."""
        block = self.blocks.get(column)
        return block.value_type if block else None
