"""
Pytest configuration and fixtures for ruleval tests

This module provides shared fixtures for unit, integration, and E2E tests.
"""
import shutil
from pathlib import Path
from typing import Generator

import pandas as pd
import pytest

from ruleval.core.models import Dataset
from ruleval.core.rules import parse_ruleset

FIXTURES_DIR = Path(__file__).parent / "fixtures"


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external services"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that read real files"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests that run the command-line interface"
    )
    config.addinivalue_line(
        "markers", "slow: Tests that take more than 5 seconds to run"
    )


# =======================
# SPARK FIXTURES
# =======================

@pytest.fixture(scope="session")
def spark_session() -> Generator:
    """
    Create a Spark session for testing with local mode

    Skips when no Java runtime is available.

    Yields:
        SparkSession configured for local testing
    """
    if shutil.which("java") is None:
        pytest.skip("Spark tests need a Java runtime")

    from pyspark.sql import SparkSession

    spark = (
        SparkSession.builder
        .appName("ruleval-test")
        .master("local[2]")
        .config("spark.sql.shuffle.partitions", "2")
        .config("spark.driver.memory", "1g")
        .config("spark.ui.enabled", "false")  # Disable UI for tests
        .getOrCreate()
    )

    # Set log level to WARN to reduce test output noise
    spark.sparkContext.setLogLevel("WARN")

    yield spark

    spark.stop()


# =======================
# DATA FIXTURES
# =======================

@pytest.fixture
def fixtures_dir() -> Path:
    """Directory holding sample rules and data files"""
    return FIXTURES_DIR


@pytest.fixture
def countries_rules_text() -> str:
    """Rules text for the countries sample"""
    return (FIXTURES_DIR / "countries.rules").read_text(encoding="utf-8")


@pytest.fixture
def countries_ruleset(countries_rules_text):
    """Parsed countries ruleset"""
    return parse_ruleset(countries_rules_text)


@pytest.fixture
def countries_dataset() -> Dataset:
    """In-memory copy of fixtures/countries.csv"""
    return Dataset(
        header=("id", "country", "zipcode", "population", "founded", "notes"),
        rows=[
            {"id": "1", "country": "WAL", "zipcode": "NP108", "population": "3.100.000",
             "founded": "1536", "notes": ""},
            {"id": "2", "country": "EGY", "zipcode": "11574", "population": "104.000.000",
             "founded": "1922", "notes": "capital Cairo"},
            {"id": "3", "country": "FRA", "zipcode": "75001", "population": "NA",
             "founded": "0843", "notes": ""},
            {"id": "3", "country": "WAL", "zipcode": "CF101", "population": "3.100.000",
             "founded": "1536", "notes": "duplicate id"},
        ],
        source="countries.csv",
    )


def make_dataset(header, *rows, source="test") -> Dataset:
    """Build a Dataset from a header and positional row tuples"""
    return Dataset(
        header=tuple(header),
        rows=[dict(zip(header, row)) for row in rows],
        source=source,
    )


@pytest.fixture
def dataset_factory():
    """Factory fixture wrapping make_dataset"""
    return make_dataset


@pytest.fixture
def countries_xlsx(tmp_path, countries_dataset) -> Path:
    """countries data written to a one-sheet workbook"""
    path = tmp_path / "countries.xlsx"
    frame = pd.DataFrame(list(countries_dataset.rows), columns=list(countries_dataset.header))
    frame.to_excel(path, sheet_name="countries", index=False)
    return path
