"""
ValidationReport model: the write-once outcome of evaluating a ruleset.

The report carries structured content only (counts, column names, rule
identifiers, pass/fail). Rendering it to log lines is the job of
``ruleval.observability.report_log``.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Severity = Literal["info", "warning", "error"]
Category = Literal["summary", "link", "structure", "value_rule", "conditional"]
ConditionalStatus = Literal["ok", "failed", "vacuous", "not_evaluated"]


class Finding(BaseModel):
    """
    One tagged message on the report.

    Attributes:
        severity: info, warning or error
        category: Which phase produced the finding
        message: Human-readable message
        column: Column the finding is about, if any
        rule: Rule identifier (source form or conditional name), if any
        rows: 1-based data row numbers involved, if any
    """

    model_config = ConfigDict(frozen=True)

    severity: Severity
    category: Category
    message: str
    column: str | None = None
    rule: str | None = None
    rows: tuple[int, ...] = ()


class RuleOutcome(BaseModel):
    """
    Result of one value rule over every row of its column.

    Attributes:
        rule: Rule in source form ("is unique")
        kind: Rule kind value
        line: Rules-file line of the rule
        passed_count: Rows that satisfied the rule
        failed_rows: 1-based row numbers that failed
        messages: First failure message per failing row, aligned with failed_rows
        note: Rule-level remark ("no type declared")
    """

    model_config = ConfigDict(frozen=True)

    rule: str
    kind: str
    line: int | None = None
    passed_count: int = 0
    failed_rows: tuple[int, ...] = ()
    messages: tuple[str, ...] = ()
    note: str | None = None

    @property
    def passed(self) -> bool:
        return not self.failed_rows and self.note is None

    @property
    def failed_count(self) -> int:
        return len(self.failed_rows)


class ColumnOutcome(BaseModel):
    """Value-rule results for one column."""

    model_config = ConfigDict(frozen=True)

    column: str
    rules: tuple[RuleOutcome, ...] = ()
    missing_values: int = 0

    @property
    def all_ok(self) -> bool:
        return all(outcome.passed for outcome in self.rules)

    @property
    def failed_rows(self) -> tuple[int, ...]:
        """Union of failing rows across the column's rules, sorted."""
        rows: set[int] = set()
        for outcome in self.rules:
            rows.update(outcome.failed_rows)
        return tuple(sorted(rows))

    def rule(self, description: str) -> RuleOutcome | None:
        for outcome in self.rules:
            if outcome.rule == description:
                return outcome
        return None


class ConditionalOutcome(BaseModel):
    """
    Result of one conditional rule.

    Attributes:
        name: Conditional rule name
        status: ok, failed, vacuous (no row matched) or not_evaluated
        matched_rows: Rows whose antecedent held
        failed_rows: Matched rows whose consequent failed
        note: Explanation for vacuous / not_evaluated outcomes
    """

    model_config = ConfigDict(frozen=True)

    name: str
    status: ConditionalStatus
    matched_rows: tuple[int, ...] = ()
    failed_rows: tuple[int, ...] = ()
    note: str | None = None

    @property
    def passed_rows(self) -> tuple[int, ...]:
        failed = set(self.failed_rows)
        return tuple(row for row in self.matched_rows if row not in failed)

    @property
    def all_ok(self) -> bool:
        """Vacuous outcomes count as OK; not-evaluated ones do not."""
        return self.status in ("ok", "vacuous")


class ValidationReport(BaseModel):
    """
    Complete, exhaustive result of validating a dataset.

    Attributes:
        source: Dataset source description
        row_count: Number of data rows
        column_count: Number of columns in the data header
        findings: All findings, in phase order
        columns: Value-rule outcomes per evaluated column
        conditionals: Outcomes per conditional rule
    """

    model_config = ConfigDict(frozen=True)

    source: str | None = None
    row_count: int = 0
    column_count: int = 0
    findings: tuple[Finding, ...] = ()
    columns: tuple[ColumnOutcome, ...] = ()
    conditionals: tuple[ConditionalOutcome, ...] = ()
    missing_values: dict[str, int] = Field(default_factory=dict)

    def by_severity(self, severity: Severity) -> list[Finding]:
        return [finding for finding in self.findings if finding.severity == severity]

    @property
    def errors(self) -> list[Finding]:
        return self.by_severity("error")

    @property
    def warnings(self) -> list[Finding]:
        return self.by_severity("warning")

    @property
    def infos(self) -> list[Finding]:
        return self.by_severity("info")

    @property
    def has_errors(self) -> bool:
        return any(finding.severity == "error" for finding in self.findings)

    def column(self, name: str) -> ColumnOutcome | None:
        for outcome in self.columns:
            if outcome.column == name:
                return outcome
        return None

    def conditional(self, name: str) -> ConditionalOutcome | None:
        for outcome in self.conditionals:
            if outcome.name == name:
                return outcome
        return None
