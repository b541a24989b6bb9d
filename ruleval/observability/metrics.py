"""
Prometheus metrics collection for ruleval

This module provides metrics instrumentation for monitoring
rule evaluation volume, data quality, and evaluation performance.
"""
from pathlib import Path

from prometheus_client import (
    Counter,
    Histogram,
    Gauge,
    CollectorRegistry,
    generate_latest,
    write_to_textfile,
)


# Global registry for metrics
REGISTRY = CollectorRegistry()


# =======================
# EVALUATION METRICS
# =======================

# Value rules evaluated, one per rule per column
rules_evaluated_total = Counter(
    name="ruleval_rules_evaluated_total",
    documentation="Total number of value rules evaluated",
    labelnames=["rule_type", "status"],  # status: passed, failed
    registry=REGISTRY,
)

# Cells evaluated
cells_evaluated_total = Counter(
    name="ruleval_cells_evaluated_total",
    documentation="Total number of cell evaluations across all value rules",
    labelnames=["rule_type"],
    registry=REGISTRY,
)

# Phase duration histogram
phase_duration_seconds = Histogram(
    name="ruleval_phase_duration_seconds",
    documentation="Time spent in each evaluation phase in seconds",
    labelnames=["phase"],  # phase: parse, structure, value_rules, conditionals, total
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 30.0],
    registry=REGISTRY,
)

# Rows in the last evaluated dataset
dataset_rows = Gauge(
    name="ruleval_dataset_rows",
    documentation="Number of rows in the most recently evaluated dataset",
    registry=REGISTRY,
)

# =======================
# DATA QUALITY METRICS
# =======================

# Failing cells counter
rule_failures_total = Counter(
    name="ruleval_rule_failures_total",
    documentation="Total number of failing cells per rule type and column",
    labelnames=["rule_type", "column"],
    registry=REGISTRY,
)

# Type coercion successes and failures
type_coercion_total = Counter(
    name="ruleval_type_coercion_total",
    documentation="Total number of type coercion attempts",
    labelnames=["to_type", "status"],  # status: success, failure, null
    registry=REGISTRY,
)

# Conditional rule outcomes
conditional_outcomes_total = Counter(
    name="ruleval_conditional_outcomes_total",
    documentation="Total number of conditional rule outcomes by status",
    labelnames=["status"],  # status: ok, failed, vacuous, not_evaluated
    registry=REGISTRY,
)

# Report findings
findings_total = Counter(
    name="ruleval_findings_total",
    documentation="Total number of report findings",
    labelnames=["severity", "category"],
    registry=REGISTRY,
)


# =======================
# HELPER FUNCTIONS
# =======================

def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics in text format

    Returns:
        Metrics in Prometheus text format
    """
    return generate_latest(REGISTRY)


def write_metrics(path: str | Path) -> None:
    """
    Write the current metrics to a file in the text exposition format

    Args:
        path: Destination file (suitable for the node exporter textfile collector)
    """
    write_to_textfile(str(path), REGISTRY)


# =======================
# CONTEXT MANAGERS
# =======================

class track_duration:
    """
    Context manager for tracking operation duration

    Usage:
        with track_duration(phase_duration_seconds, phase="value_rules"):
            # do work
            pass
    """

    def __init__(self, histogram: Histogram, **labels):
        """
        Initialize duration tracker

        Args:
            histogram: Prometheus Histogram metric
            **labels: Label values for the metric
        """
        self.histogram = histogram
        self.labels = labels
        self.timer = None

    def __enter__(self):
        """Start timer"""
        self.timer = self.histogram.labels(**self.labels).time()
        self.timer.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Stop timer"""
        self.timer.__exit__(exc_type, exc_val, exc_tb)
        return False


def increment_counter(counter: Counter, value: float = 1.0, **labels) -> None:
    """
    Increment a counter metric

    Args:
        counter: Prometheus Counter metric
        value: Amount to increment (default: 1.0)
        **labels: Label values for the metric
    """
    if value:
        counter.labels(**labels).inc(value)


# =======================
# EVALUATION HELPERS
# =======================

def record_rule_outcome(rule_type: str, column: str, cells: int, failures: int) -> None:
    """
    Record the outcome of one value rule over a column.

    Args:
        rule_type: Validator family of the rule
        column: Column the rule was evaluated on
        cells: Number of cells evaluated
        failures: Number of failing cells
    """
    status = "failed" if failures else "passed"
    increment_counter(rules_evaluated_total, 1, rule_type=rule_type, status=status)
    increment_counter(cells_evaluated_total, cells, rule_type=rule_type)
    increment_counter(rule_failures_total, failures, rule_type=rule_type, column=column)


def record_coercions(to_type: str, success: int, failure: int, null: int) -> None:
    """
    Record coercion attempts for one column.

    Args:
        to_type: Declared value type
        success: Cells coerced successfully
        failure: Cells that did not match the type
        null: Null cells
    """
    increment_counter(type_coercion_total, success, to_type=to_type, status="success")
    increment_counter(type_coercion_total, failure, to_type=to_type, status="failure")
    increment_counter(type_coercion_total, null, to_type=to_type, status="null")
