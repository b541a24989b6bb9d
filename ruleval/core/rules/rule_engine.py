"""
Rule engine for evaluating a ruleset against a dataset.

Evaluation runs in three phases:

1. structural checks of the data header against the declared columns,
2. value rules, column by column,
3. conditional rules, each in two passes (find the rows whose antecedent
   holds, then check the consequent on exactly those rows).

Nothing short-circuits: every resolvable column and rule is evaluated so the
report is always complete. Column blocks and conditional rules are
independent and may be evaluated on a thread pool.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable

from ruleval.core.models import (
    ColumnOutcome,
    ColumnRuleBlock,
    ConditionalOutcome,
    ConditionalRule,
    Dataset,
    Finding,
    RuleKind,
    RuleOutcome,
    Ruleset,
    ValidationReport,
    ValueRule,
    ValueType,
)
from ruleval.core.schema import CoercionFailure, DateFormatCatalog, coerce, default_catalog, is_null
from ruleval.core.validators import (
    NO_TYPE_DECLARED,
    BaseValidator,
    Cell,
    ComparisonValidator,
    DigitsValidator,
    FormatValidator,
    LengthValidator,
    MembershipValidator,
    NullValidator,
    RegexValidator,
    RequiredFieldValidator,
    SubstringValidator,
    TextEqualityValidator,
    TypeValidator,
    UniqueValidator,
    ValidationError,
)
from ruleval.observability.logger import get_logger
from ruleval.observability.metrics import (
    conditional_outcomes_total,
    dataset_rows,
    increment_counter,
    phase_duration_seconds,
    record_coercions,
    record_rule_outcome,
    track_duration,
)

from .aggregator import ResultAggregator
from .linker import link_ruleset

logger = get_logger(__name__)

NO_ROWS_MATCHED = "no rows matched condition"


class RuleEngine:
    """
    Evaluates a Ruleset against Datasets.

    The engine holds no per-evaluation state, so one instance can evaluate
    any number of datasets.
    """

    VALIDATOR_REGISTRY: dict[RuleKind, type[BaseValidator]] = {
        RuleKind.TYPE_IS: TypeValidator,
        RuleKind.FORMAT_IS: FormatValidator,
        RuleKind.REQUIRED: RequiredFieldValidator,
        RuleKind.IS_NOT_NULL: RequiredFieldValidator,
        RuleKind.IS_NULL: NullValidator,
        RuleKind.UNIQUE: UniqueValidator,
        RuleKind.MATCHES_PATTERN: RegexValidator,
        RuleKind.IN_SET: MembershipValidator,
        RuleKind.NOT_IN_SET: MembershipValidator,
        RuleKind.EQUALS_TEXT: TextEqualityValidator,
        RuleKind.NOT_EQUALS_TEXT: TextEqualityValidator,
        RuleKind.EQUALS_NUMBER: ComparisonValidator,
        RuleKind.NOT_EQUALS_NUMBER: ComparisonValidator,
        RuleKind.GREATER_THAN: ComparisonValidator,
        RuleKind.LESS_THAN: ComparisonValidator,
        RuleKind.GREATER_OR_EQUAL: ComparisonValidator,
        RuleKind.LESS_OR_EQUAL: ComparisonValidator,
        RuleKind.HAS_LENGTH: LengthValidator,
        RuleKind.MIN_LENGTH: LengthValidator,
        RuleKind.MAX_LENGTH: LengthValidator,
        RuleKind.STARTS_WITH: SubstringValidator,
        RuleKind.ENDS_WITH: SubstringValidator,
        RuleKind.INCLUDES: SubstringValidator,
        RuleKind.EXCLUDES_SUBSTRING: SubstringValidator,
        RuleKind.SIGNIFICANT_DIGITS: DigitsValidator,
        RuleKind.DECIMAL_PLACES: DigitsValidator,
    }

    def __init__(
        self,
        ruleset: Ruleset,
        catalog: DateFormatCatalog | None = None,
        max_workers: int = 1,
    ):
        """
        Initialize the rule engine.

        Args:
            ruleset: Compiled ruleset to evaluate
            catalog: Date-format catalog used for date-time coercion (defaults
                     to the catalog the ruleset was compiled against)
            max_workers: Worker threads for column and conditional evaluation
                         (1 evaluates sequentially)

        Raises:
            ValueError: If a ``has format`` rule names a format the catalog lacks
        """
        self.ruleset = ruleset
        self.settings = ruleset.settings
        if catalog is None:
            catalog = DateFormatCatalog(list(ruleset.date_formats)) if ruleset.date_formats else default_catalog()
        unsupported = sorted({
            rule.argument for rule in ruleset.all_rules()
            if rule.kind is RuleKind.FORMAT_IS and rule.argument not in catalog
        })
        if unsupported:
            raise ValueError(f"Date formats missing from catalog: {', '.join(unsupported)}")
        self.catalog = catalog
        self.max_workers = max(1, max_workers)

    def create_validator(self, column: str, rule: ValueRule) -> BaseValidator:
        """Instantiate the validator registered for ``rule.kind``."""
        validator_class = self.VALIDATOR_REGISTRY.get(rule.kind)
        if not validator_class:
            raise ValueError(f"Unknown rule kind: {rule.kind}")
        return validator_class(column, rule, self.settings, self.catalog)

    # Entry point

    def evaluate(self, dataset: Dataset) -> ValidationReport:
        """
        Evaluate the ruleset against a dataset.

        Args:
            dataset: Data to validate

        Returns:
            The complete ValidationReport
        """
        aggregator = ResultAggregator(self.ruleset, dataset)
        dataset_rows.set(dataset.row_count)

        with track_duration(phase_duration_seconds, phase="total"):
            aggregator.add_findings(link_ruleset(self.ruleset))
            aggregator.set_missing_values(self.count_missing_values(dataset))

            with track_duration(phase_duration_seconds, phase="structure"):
                aggregator.add_findings(self.check_structure(dataset.header))

            blocks = [block for block in self.ruleset.blocks.values() if dataset.has_column(block.column)]
            with track_duration(phase_duration_seconds, phase="value_rules"):
                for outcome in self._run_parallel(lambda block: self.evaluate_column(dataset, block), blocks):
                    aggregator.record_column(outcome)

            conditionals = list(self.ruleset.conditionals)
            with track_duration(phase_duration_seconds, phase="conditionals"):
                for outcome in self._run_parallel(
                    lambda conditional: self.evaluate_conditional(dataset, conditional), conditionals
                ):
                    aggregator.record_conditional(outcome)

            report = aggregator.build()

        logger.info(
            f"Evaluated {len(blocks)} columns and {len(conditionals)} conditional rules "
            f"over {dataset.row_count} rows",
            extra={
                "source": dataset.source,
                "errors": len(report.errors),
                "warnings": len(report.warnings),
            },
        )
        return report

    def _run_parallel(self, func: Callable[[Any], Any], items: list) -> list:
        """Apply ``func`` to every item; results keep the order of ``items``."""
        if self.max_workers <= 1 or len(items) <= 1:
            return [func(item) for item in items]

        results: list = [None] * len(items)
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_slot = {executor.submit(func, item): slot for slot, item in enumerate(items)}
            for future in as_completed(future_to_slot):
                results[future_to_slot[future]] = future.result()
        return results

    # Structural phase

    def check_structure(self, header: tuple[str, ...]) -> list[Finding]:
        """
        Compare the actual header with the declared columns.

        Args:
            header: Column names as they appear in the data

        Returns:
            Error findings for missing/extra columns, a warning for order
        """
        spec = self.ruleset.columns
        declared = list(dict.fromkeys(spec.names))
        actual = set(header)
        findings = []

        if spec.all_columns_required:
            for column in declared:
                if column not in actual:
                    findings.append(
                        Finding(
                            severity="error",
                            category="structure",
                            message=f"missing required column '{column}'",
                            column=column,
                        )
                    )

        if spec.no_extra_columns_allowed:
            declared_set = set(declared)
            for column in dict.fromkeys(header):
                if column not in declared_set:
                    findings.append(
                        Finding(
                            severity="error",
                            category="structure",
                            message=f"extra column '{column}' is not allowed",
                            column=column,
                        )
                    )

        if spec.check_column_order:
            present = [column for column in dict.fromkeys(header) if column in set(declared)]
            expected = [column for column in declared if column in actual]
            if present != expected:
                findings.append(
                    Finding(
                        severity="warning",
                        category="structure",
                        message=(
                            f"column order mismatch: expected {expected}, found {present}"
                        ),
                    )
                )

        return findings

    # Value-rule phase

    def build_cells(self, dataset: Dataset, column: str, value_type: ValueType | None) -> list[Cell]:
        """Null-check and coerce every cell of ``column``."""
        cells = []
        for index, row in enumerate(dataset.rows, start=1):
            raw = row.get(column)
            typed = coerce(raw, value_type, self.settings, self.catalog) if value_type else None
            cells.append(
                Cell(
                    row=index,
                    raw=raw,
                    text=raw.strip() if raw is not None else "",
                    is_null=is_null(raw, self.settings),
                    typed=typed,
                )
            )
        return cells

    def count_missing_values(self, dataset: Dataset) -> dict[str, int]:
        """Null cells per data column, in header order."""
        return {
            column: sum(1 for raw in dataset.column_values(column) if is_null(raw, self.settings))
            for column in dict.fromkeys(dataset.header)
        }

    def evaluate_rule(self, validator: BaseValidator, cells: list[Cell], typed: bool) -> RuleOutcome:
        """
        Apply one validator to every cell of a column.

        Args:
            validator: Validator for the rule
            cells: The column's cells
            typed: Whether the column declares a value type

        Returns:
            RuleOutcome with failing rows and their messages
        """
        rule = validator.rule

        if validator.requires_type and not typed:
            return RuleOutcome(
                rule=rule.describe(),
                kind=rule.kind.value,
                line=rule.line,
                failed_rows=tuple(cell.row for cell in cells),
                messages=tuple(NO_TYPE_DECLARED for _ in cells),
                note=NO_TYPE_DECLARED,
            )

        validator.prepare(cells)
        passed = 0
        failed_rows = []
        messages = []
        for cell in cells:
            try:
                validator.validate(cell)
                passed += 1
            except ValidationError as e:
                failed_rows.append(cell.row)
                messages.append(e.message)

        return RuleOutcome(
            rule=rule.describe(),
            kind=rule.kind.value,
            line=rule.line,
            passed_count=passed,
            failed_rows=tuple(failed_rows),
            messages=tuple(messages),
        )

    def evaluate_column(self, dataset: Dataset, block: ColumnRuleBlock) -> ColumnOutcome:
        """
        Evaluate every value rule of a block against its column.

        Args:
            dataset: Data containing the column
            block: The column's rule block

        Returns:
            ColumnOutcome with one RuleOutcome per rule, in block order
        """
        value_type = block.value_type
        cells = self.build_cells(dataset, block.column, value_type)

        if value_type is not None:
            failures = sum(1 for cell in cells if isinstance(cell.typed, CoercionFailure))
            nulls = sum(1 for cell in cells if cell.is_null)
            record_coercions(value_type.value, len(cells) - failures - nulls, failures, nulls)

        outcomes = []
        for rule in block.rules:
            validator = self.create_validator(block.column, rule)
            outcome = self.evaluate_rule(validator, cells, typed=value_type is not None)
            record_rule_outcome(validator.rule_type, block.column, len(cells), outcome.failed_count)
            outcomes.append(outcome)

        column_outcome = ColumnOutcome(
            column=block.column,
            rules=tuple(outcomes),
            missing_values=sum(1 for cell in cells if cell.is_null),
        )
        logger.debug(
            f"Column '{block.column}': {'all OK' if column_outcome.all_ok else 'failed'}",
            extra={"column": block.column, "failed_rows": len(column_outcome.failed_rows)},
        )
        return column_outcome

    # Conditional-rule phase

    def _holds(self, validator: BaseValidator, cell: Cell) -> bool:
        """Whether an antecedent holds; nulls and coercion failures never do."""
        if isinstance(cell.typed, CoercionFailure):
            return False
        if cell.is_null and validator.rule.kind is not RuleKind.IS_NULL:
            return False
        try:
            validator.validate(cell)
        except ValidationError:
            return False
        return True

    def evaluate_conditional(self, dataset: Dataset, conditional: ConditionalRule) -> ConditionalOutcome:
        """
        Evaluate a conditional rule with the two-pass protocol.

        Pass one collects the rows whose antecedent holds; pass two checks the
        consequent on those rows only. Other rows are skipped.

        Args:
            dataset: Data to evaluate
            conditional: The conditional rule

        Returns:
            ConditionalOutcome (ok, failed, vacuous or not_evaluated)
        """
        antecedent, consequent = conditional.antecedent, conditional.consequent

        missing = [
            column for column in dict.fromkeys((antecedent.column, consequent.column))
            if not dataset.has_column(column)
        ]
        if missing:
            outcome = ConditionalOutcome(
                name=conditional.name,
                status="not_evaluated",
                note=", ".join(f"column '{column}' not found in data" for column in missing),
            )
            increment_counter(conditional_outcomes_total, 1, status=outcome.status)
            return outcome

        # Pass one: rows where the antecedent holds
        if_type = antecedent.rule.value_type or self.ruleset.declared_type(antecedent.column)
        if_cells = self.build_cells(dataset, antecedent.column, if_type)
        if_validator = self.create_validator(antecedent.column, antecedent.rule)
        if if_validator.requires_type and if_type is None:
            matched = []
        else:
            if_validator.prepare(if_cells)
            matched = [cell.row for cell in if_cells if self._holds(if_validator, cell)]

        # Pass two: the consequent on matched rows
        then_type = consequent.rule.value_type or self.ruleset.declared_type(consequent.column)
        then_cells = self.build_cells(dataset, consequent.column, then_type)
        then_validator = self.create_validator(consequent.column, consequent.rule)
        then_validator.prepare(then_cells)

        failed = []
        for row in matched:
            try:
                then_validator.validate(then_cells[row - 1])
            except ValidationError:
                failed.append(row)

        if not matched:
            status, note = "vacuous", NO_ROWS_MATCHED
        elif failed:
            status, note = "failed", None
        else:
            status, note = "ok", None

        increment_counter(conditional_outcomes_total, 1, status=status)
        return ConditionalOutcome(
            name=conditional.name,
            status=status,
            matched_rows=tuple(matched),
            failed_rows=tuple(failed),
            note=note,
        )

    def get_rule_summary(self) -> dict[str, Any]:
        """
        Get summary of the loaded ruleset.

        Returns:
            Dictionary with rule counts by kind
        """
        counts: dict[str, int] = {}
        for block in self.ruleset.blocks.values():
            for rule in block.rules:
                counts[rule.kind.value] = counts.get(rule.kind.value, 0) + 1
        return {
            "columns": len(self.ruleset.columns.names),
            "column_blocks": len(self.ruleset.blocks),
            "conditional_rules": len(self.ruleset.conditionals),
            "rules_by_kind": counts,
        }
