"""
Result aggregation.

Collects structural findings, link warnings, per-column and per-conditional
outcomes into a ValidationReport. Each column block and conditional rule owns
one slot, filled in any order by the evaluating workers; the report is always
assembled in declaration order.
"""

from ruleval.core.models import (
    ColumnOutcome,
    ConditionalOutcome,
    Dataset,
    Finding,
    Ruleset,
    ValidationReport,
)
from ruleval.observability.metrics import findings_total, increment_counter

# Failing rows listed in a finding message before eliding the rest
MAX_LISTED_ROWS = 10


def format_rows(rows: tuple[int, ...] | list[int]) -> str:
    """Render row numbers as "rows 2, 5, 9" with long lists elided."""
    shown = ", ".join(str(row) for row in rows[:MAX_LISTED_ROWS])
    extra = len(rows) - MAX_LISTED_ROWS
    label = "row" if len(rows) == 1 else "rows"
    if extra > 0:
        return f"{label} {shown} (+{extra} more)"
    return f"{label} {shown}"


class ResultAggregator:
    """
    Builds a ValidationReport from evaluation results.

    Example:
        aggregator = ResultAggregator(ruleset, dataset)
        aggregator.add_findings(link_ruleset(ruleset))
        aggregator.record_column(outcome)
        report = aggregator.build()
    """

    def __init__(self, ruleset: Ruleset, dataset: Dataset):
        self.ruleset = ruleset
        self.dataset = dataset
        self._findings: list[Finding] = []
        self._missing_values: dict[str, int] = {}
        self._columns: dict[str, ColumnOutcome | None] = {column: None for column in ruleset.blocks}
        self._conditionals: dict[str, ConditionalOutcome | None] = {
            conditional.name: None for conditional in ruleset.conditionals
        }

    def add_findings(self, findings: list[Finding]) -> None:
        self._findings.extend(findings)

    def set_missing_values(self, missing_values: dict[str, int]) -> None:
        self._missing_values = dict(missing_values)

    def record_column(self, outcome: ColumnOutcome) -> None:
        if outcome.column not in self._columns:
            raise KeyError(f"No rule block for column '{outcome.column}'")
        self._columns[outcome.column] = outcome

    def record_conditional(self, outcome: ConditionalOutcome) -> None:
        if outcome.name not in self._conditionals:
            raise KeyError(f"No conditional rule named '{outcome.name}'")
        self._conditionals[outcome.name] = outcome

    # Findings

    def _summary_findings(self) -> list[Finding]:
        ruleset = self.ruleset
        findings = [
            Finding(
                severity="info",
                category="summary",
                message=(
                    f"rules file OK: {len(ruleset.columns.names)} declared columns, "
                    f"{len(ruleset.blocks)} column blocks, "
                    f"{len(ruleset.conditionals)} conditional rules"
                ),
            ),
            Finding(
                severity="info",
                category="summary",
                message=f"{self.dataset.row_count} rows, {self.dataset.column_count} columns",
            ),
        ]
        for column, count in self._missing_values.items():
            findings.append(
                Finding(
                    severity="info",
                    category="summary",
                    message=f"column '{column}': {count} missing values",
                    column=column,
                )
            )
        return findings

    def _column_findings(self) -> list[Finding]:
        findings = []
        for column, outcome in self._columns.items():
            if outcome is None:
                findings.append(
                    Finding(
                        severity="warning",
                        category="value_rule",
                        message=f"column '{column}' not found in data; its rules were not evaluated",
                        column=column,
                    )
                )
                continue

            # empty blocks are reported by the linker
            if not outcome.rules:
                continue

            if outcome.all_ok:
                findings.append(
                    Finding(
                        severity="info",
                        category="value_rule",
                        message=f"column '{column}': all OK",
                        column=column,
                    )
                )
                continue

            for rule in outcome.rules:
                if rule.passed:
                    continue
                if rule.note:
                    message = f"column '{column}': rule '{rule.rule}' failed: {rule.note}"
                else:
                    message = (
                        f"column '{column}': rule '{rule.rule}' failed for "
                        f"{format_rows(rule.failed_rows)} ({rule.messages[0]})"
                    )
                findings.append(
                    Finding(
                        severity="error",
                        category="value_rule",
                        message=message,
                        column=column,
                        rule=rule.rule,
                        rows=rule.failed_rows,
                    )
                )
        return findings

    def _conditional_findings(self) -> list[Finding]:
        findings = []
        for name, outcome in self._conditionals.items():
            if outcome is None:
                continue

            if outcome.status == "ok":
                severity = "info"
                message = f"conditional rule '{name}': all OK ({len(outcome.matched_rows)} rows matched)"
            elif outcome.status == "vacuous":
                severity = "info"
                message = f"conditional rule '{name}': all OK ({outcome.note})"
            elif outcome.status == "failed":
                severity = "error"
                message = f"conditional rule '{name}' failed for {format_rows(outcome.failed_rows)}"
            else:
                severity = "warning"
                message = f"conditional rule '{name}' not evaluated: {outcome.note}"

            findings.append(
                Finding(
                    severity=severity,
                    category="conditional",
                    message=message,
                    rule=name,
                    rows=outcome.failed_rows,
                )
            )
        return findings

    def build(self) -> ValidationReport:
        """
        Assemble the report.

        Returns:
            ValidationReport with findings ordered: summary, link and
            structure findings, column results, conditional results
        """
        findings = (
            self._summary_findings()
            + self._findings
            + self._column_findings()
            + self._conditional_findings()
        )

        for finding in findings:
            increment_counter(findings_total, 1, severity=finding.severity, category=finding.category)

        return ValidationReport(
            source=self.dataset.source,
            row_count=self.dataset.row_count,
            column_count=self.dataset.column_count,
            findings=tuple(findings),
            columns=tuple(outcome for outcome in self._columns.values() if outcome is not None),
            conditionals=tuple(outcome for outcome in self._conditionals.values() if outcome is not None),
            missing_values=self._missing_values,
        )
