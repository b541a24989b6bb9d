"""
Unit tests for validation rules.

Includes property-based testing with hypothesis for validators.
"""

import re

import pytest
from hypothesis import given
from hypothesis import strategies as st

from ruleval.core.models import GlobalSettings, RuleKind, ValueRule, ValueType
from ruleval.core.schema import DateFormatCatalog, coerce, is_null
from ruleval.core.validators import (
    NO_TYPE_DECLARED,
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
from ruleval.core.validators.digits_validator import count_digits

SETTINGS = GlobalSettings(null_values=frozenset({"-", "NA"}))
DOT_GROUPED = GlobalSettings(thousands_separator=".")


def make_cell(raw, value_type=None, settings=SETTINGS, row=1):
    """Build a cell the way the rule engine does"""
    return Cell(
        row=row,
        raw=raw,
        text=raw.strip() if raw is not None else "",
        is_null=is_null(raw, settings),
        typed=coerce(raw, value_type, settings) if value_type else None,
    )


def rule(kind, argument=None):
    return ValueRule(kind=kind, argument=argument)


class TestRequiredFieldValidator:
    """Tests for RequiredFieldValidator"""

    def test_valid_required_field(self):
        """Test validation passes for present field"""
        validator = RequiredFieldValidator("name", rule(RuleKind.REQUIRED), SETTINGS)
        validator.validate(make_cell("John Doe"))  # Should not raise

    def test_missing_field_raises_error(self):
        """Test validation fails for missing field"""
        validator = RequiredFieldValidator("name", rule(RuleKind.REQUIRED), SETTINGS)

        with pytest.raises(ValidationError) as exc_info:
            validator.validate(make_cell(None))

        assert "missing" in str(exc_info.value).lower()
        assert exc_info.value.field_name == "name"
        assert exc_info.value.rule_name == "is required"

    def test_empty_string_raises_error(self):
        """Test validation fails for blank strings"""
        validator = RequiredFieldValidator("name", rule(RuleKind.IS_NOT_NULL), SETTINGS)

        with pytest.raises(ValidationError, match="missing"):
            validator.validate(make_cell("   "))

    def test_null_literal_raises_error(self):
        """Test declared null literals count as missing"""
        validator = RequiredFieldValidator("name", rule(RuleKind.IS_NOT_NULL), SETTINGS)

        with pytest.raises(ValidationError) as exc_info:
            validator.validate(make_cell("NA"))

        assert exc_info.value.message == "value 'NA' is a null literal"

    def test_almost_null_literal_passes(self):
        """Test null literals must match exactly"""
        validator = RequiredFieldValidator("name", rule(RuleKind.IS_NOT_NULL), SETTINGS)
        validator.validate(make_cell("--"))

    @given(st.text(min_size=1).filter(lambda s: s.strip() and s.strip() not in {"-", "NA"}))
    def test_property_any_nonempty_string_passes(self, value):
        """Property test: any non-blank, non-null-literal string passes"""
        validator = RequiredFieldValidator("name", rule(RuleKind.REQUIRED), SETTINGS)
        validator.validate(make_cell(value))


class TestNullValidator:
    """Tests for NullValidator"""

    @pytest.mark.parametrize("raw", [None, "", "-", " NA "])
    def test_null_passes(self, raw):
        """Test null cells satisfy is null"""
        NullValidator("c", rule(RuleKind.IS_NULL), SETTINGS).validate(make_cell(raw))

    def test_value_fails(self):
        """Test values fail is null"""
        with pytest.raises(ValidationError, match="expected null"):
            NullValidator("c", rule(RuleKind.IS_NULL), SETTINGS).validate(make_cell("x"))


class TestTypeValidator:
    """Tests for TypeValidator"""

    @pytest.mark.parametrize("raw,value_type", [
        ("42", ValueType.INTEGER),
        ("4.2", ValueType.FLOATING_POINT),
        ("1e9", ValueType.SCIENTIFIC),
        ("1+1j", ValueType.COMPLEX),
        ("False", ValueType.BOOLEAN),
        ("2020-01-31", ValueType.DATE_TIME),
        ("anything", ValueType.STRING),
    ])
    def test_valid_types(self, raw, value_type):
        """Test values of the declared type pass"""
        TypeValidator("c", rule(RuleKind.TYPE_IS, value_type), SETTINGS).validate(make_cell(raw))

    def test_invalid_coercion_raises_error(self):
        """Test validation fails when coercion fails"""
        validator = TypeValidator("age", rule(RuleKind.TYPE_IS, ValueType.INTEGER), SETTINGS)

        with pytest.raises(ValidationError) as exc_info:
            validator.validate(make_cell("abc"))

        assert "'abc'" in exc_info.value.message
        assert "integer" in exc_info.value.message

    def test_none_value_skipped(self):
        """Test nulls are not type-checked"""
        validator = TypeValidator("age", rule(RuleKind.TYPE_IS, ValueType.INTEGER), SETTINGS)
        validator.validate(make_cell("NA"))

    @given(st.integers())
    def test_property_all_integers_valid(self, value):
        """Property test: all integers pass integer type check"""
        validator = TypeValidator("c", rule(RuleKind.TYPE_IS, ValueType.INTEGER), SETTINGS)
        validator.validate(make_cell(str(value)))

    @given(st.floats(allow_nan=False, allow_infinity=False))
    def test_property_all_floats_valid(self, value):
        """Property test: all finite floats pass floating point type check"""
        validator = TypeValidator("c", rule(RuleKind.TYPE_IS, ValueType.FLOATING_POINT), SETTINGS)
        validator.validate(make_cell(repr(value)))


class TestFormatValidator:
    """Tests for FormatValidator"""

    def test_matching_format(self):
        """Test values in the named format pass"""
        validator = FormatValidator("founded", rule(RuleKind.FORMAT_IS, "YYYY"), SETTINGS)
        validator.validate(make_cell("1536"))

    def test_other_catalog_format_fails(self):
        """Test a valid date in a different format still fails"""
        validator = FormatValidator("d", rule(RuleKind.FORMAT_IS, "DD/MM/YYYY"), SETTINGS)

        with pytest.raises(ValidationError, match="does not match format 'DD/MM/YYYY'"):
            validator.validate(make_cell("2001-02-03"))

    def test_unknown_format_rejected(self):
        """Test formats must come from the catalog"""
        catalog = DateFormatCatalog(["YYYY"])

        with pytest.raises(ValueError, match="Unsupported date format"):
            FormatValidator("d", rule(RuleKind.FORMAT_IS, "YYYY-MM-DD"), SETTINGS, catalog)

    def test_null_skipped(self):
        """Test nulls are not format-checked"""
        FormatValidator("d", rule(RuleKind.FORMAT_IS, "YYYY"), SETTINGS).validate(make_cell(None))


class TestUniqueValidator:
    """Tests for UniqueValidator"""

    def _failing_rows(self, values, value_type=None):
        validator = UniqueValidator("id", rule(RuleKind.UNIQUE), SETTINGS)
        cells = [make_cell(raw, value_type, row=row) for row, raw in enumerate(values, start=1)]
        validator.prepare(cells)

        failed = []
        for cell in cells:
            try:
                validator.validate(cell)
            except ValidationError:
                failed.append(cell.row)
        return failed

    def test_all_occurrences_of_duplicates_fail(self):
        """Test every duplicate occurrence is reported"""
        assert self._failing_rows(["1", "2", "3", "3"]) == [3, 4]

    def test_nulls_ignored(self):
        """Test repeated nulls are not duplicates"""
        assert self._failing_rows(["1", None, "", "NA", "2"]) == []

    def test_typed_values_compared(self):
        """Test coerced values compare by value"""
        assert self._failing_rows(["1.0", "1", "2"], ValueType.FLOATING_POINT) == [1, 2]

    def test_untyped_values_compared_as_text(self):
        """Test untyped values compare by trimmed text"""
        assert self._failing_rows(["1.0", "1", " 1 "]) == [2, 3]

    @given(st.lists(st.text(alphabet="abc", min_size=1), max_size=20))
    def test_property_failures_are_duplicates(self, values):
        """Property test: a row fails exactly when its value occurs more than once"""
        failed = self._failing_rows(values)

        expected = [row for row, value in enumerate(values, start=1) if values.count(value) > 1]
        assert failed == expected


class TestRegexValidator:
    """Tests for RegexValidator"""

    def test_valid_pattern_match(self):
        """Test validation passes for matching pattern"""
        validator = RegexValidator("email", rule(RuleKind.MATCHES_PATTERN, re.compile(r"[^@]+@[^@]+\.\w+")), SETTINGS)
        validator.validate(make_cell("test@example.com"))

    def test_pattern_must_match_whole_value(self):
        """Test partial matches fail"""
        validator = RegexValidator("zip", rule(RuleKind.MATCHES_PATTERN, re.compile(r"\d{4}")), SETTINGS)

        with pytest.raises(ValidationError, match="does not match pattern"):
            validator.validate(make_cell("12345"))

    def test_null_fails(self):
        """Test nulls fail pattern rules"""
        validator = RegexValidator("zip", rule(RuleKind.MATCHES_PATTERN, re.compile(r".*")), SETTINGS)

        with pytest.raises(ValidationError, match="null"):
            validator.validate(make_cell("-"))

    @given(st.from_regex(r"[A-Z]{2}\d{3}", fullmatch=True))
    def test_property_generated_patterns_match(self, value):
        """Property test: generated strings match their pattern"""
        validator = RegexValidator("code", rule(RuleKind.MATCHES_PATTERN, re.compile(r"[A-Z]{2}\d{3}")), SETTINGS)
        validator.validate(make_cell(value))


class TestComparisonValidator:
    """Tests for ComparisonValidator"""

    def _validator(self, kind, bound, precision=0.001):
        settings = GlobalSettings(precision=precision)
        return ComparisonValidator("x", rule(kind, bound), settings), settings

    def test_equality_within_precision(self):
        """Test == accepts differences below precision"""
        validator, settings = self._validator(RuleKind.EQUALS_NUMBER, 100, precision=0.001)
        validator.validate(make_cell("100.0009", ValueType.FLOATING_POINT, settings))

    def test_equality_outside_precision(self):
        """Test == rejects differences at or above precision"""
        validator, settings = self._validator(RuleKind.EQUALS_NUMBER, 100, precision=0.0001)

        with pytest.raises(ValidationError, match="is not == 100"):
            validator.validate(make_cell("100.0009", ValueType.FLOATING_POINT, settings))

    def test_not_equal_uses_precision(self):
        """Test != fails for values within precision"""
        validator, settings = self._validator(RuleKind.NOT_EQUALS_NUMBER, 5)

        with pytest.raises(ValidationError):
            validator.validate(make_cell("5.0001", ValueType.FLOATING_POINT, settings))

    @pytest.mark.parametrize("kind,raw,passes", [
        (RuleKind.GREATER_THAN, "10", False),
        (RuleKind.GREATER_THAN, "11", True),
        (RuleKind.LESS_THAN, "10", False),
        (RuleKind.LESS_THAN, "9", True),
        (RuleKind.GREATER_OR_EQUAL, "10", True),
        (RuleKind.GREATER_OR_EQUAL, "9", False),
        (RuleKind.LESS_OR_EQUAL, "10", True),
        (RuleKind.LESS_OR_EQUAL, "11", False),
    ])
    def test_ordering_boundaries(self, kind, raw, passes):
        """Test strict and inclusive boundaries"""
        validator, settings = self._validator(kind, 10)
        cell = make_cell(raw, ValueType.INTEGER, settings)

        if passes:
            validator.validate(cell)
        else:
            with pytest.raises(ValidationError):
                validator.validate(cell)

    def test_inclusive_boundary_within_precision(self):
        """Test >= accepts a value just below the bound"""
        validator, settings = self._validator(RuleKind.GREATER_OR_EQUAL, 10, precision=0.01)
        validator.validate(make_cell("9.995", ValueType.FLOATING_POINT, settings))

    def test_thousands_separated_values(self):
        """Test separators are stripped before comparing"""
        validator = ComparisonValidator("population", rule(RuleKind.GREATER_THAN, 1_000_000), DOT_GROUPED)
        validator.validate(make_cell("3.100.000", ValueType.INTEGER, DOT_GROUPED))

    def test_no_type_declared(self):
        """Test comparisons need a declared type"""
        validator, settings = self._validator(RuleKind.GREATER_THAN, 1)

        with pytest.raises(ValidationError) as exc_info:
            validator.validate(make_cell("5", None, settings))

        assert exc_info.value.message == NO_TYPE_DECLARED

    def test_coercion_failure(self):
        """Test values that failed coercion fail the comparison"""
        validator, settings = self._validator(RuleKind.GREATER_THAN, 1)

        with pytest.raises(ValidationError, match="does not match declared type"):
            validator.validate(make_cell("abc", ValueType.INTEGER, settings))

    def test_non_real_types_fail(self):
        """Test complex values are not ordered"""
        validator, settings = self._validator(RuleKind.GREATER_THAN, 1)

        with pytest.raises(ValidationError, match="not a real number"):
            validator.validate(make_cell("2+1j", ValueType.COMPLEX, settings))

    def test_null_fails(self):
        """Test nulls fail comparisons"""
        validator, settings = self._validator(RuleKind.GREATER_THAN, 1)

        with pytest.raises(ValidationError, match="null"):
            validator.validate(make_cell("", ValueType.INTEGER, settings))

    @given(st.integers(min_value=11, max_value=10**9))
    def test_property_values_above_bound_pass(self, value):
        """Property test: values above the bound pass >"""
        validator, settings = self._validator(RuleKind.GREATER_THAN, 10)
        validator.validate(make_cell(str(value), ValueType.INTEGER, settings))

    @given(st.integers(min_value=-10**9, max_value=10))
    def test_property_values_at_or_below_bound_fail(self, value):
        """Property test: values at or below the bound fail >"""
        validator, settings = self._validator(RuleKind.GREATER_THAN, 10)

        with pytest.raises(ValidationError):
            validator.validate(make_cell(str(value), ValueType.INTEGER, settings))


class TestTextValidators:
    """Tests for text equality, membership, length and substrings"""

    def test_text_equality_is_case_sensitive(self):
        """Test is "s" compares exactly"""
        validator = TextEqualityValidator("c", rule(RuleKind.EQUALS_TEXT, "WAL"), SETTINGS)

        validator.validate(make_cell(" WAL "))
        with pytest.raises(ValidationError):
            validator.validate(make_cell("wal"))

    def test_text_inequality(self):
        """Test is not "s" """
        validator = TextEqualityValidator("c", rule(RuleKind.NOT_EQUALS_TEXT, "WAL"), SETTINGS)

        validator.validate(make_cell("EGY"))
        with pytest.raises(ValidationError, match="must not be"):
            validator.validate(make_cell("WAL"))

    def test_in_set_strings(self):
        """Test string items match exactly"""
        validator = MembershipValidator("c", rule(RuleKind.IN_SET, ["WAL", "EGY"]), SETTINGS)

        validator.validate(make_cell("EGY"))
        with pytest.raises(ValidationError, match="not one of the allowed values"):
            validator.validate(make_cell("FRA"))

    def test_in_set_numbers_use_precision(self):
        """Test numeric items match within precision"""
        validator = MembershipValidator("c", rule(RuleKind.IN_SET, [1, 2.5]), SETTINGS)

        validator.validate(make_cell("2.5004"))
        validator.validate(make_cell("1", ValueType.INTEGER))
        with pytest.raises(ValidationError):
            validator.validate(make_cell("2.6"))

    def test_in_set_numbers_reject_text(self):
        """Test non-numeric text never matches a numeric item"""
        validator = MembershipValidator("c", rule(RuleKind.IN_SET, [1]), SETTINGS)

        with pytest.raises(ValidationError):
            validator.validate(make_cell("one"))

    def test_not_in_set(self):
        """Test is not in [..]"""
        validator = MembershipValidator("c", rule(RuleKind.NOT_IN_SET, ["x", 0]), SETTINGS)

        validator.validate(make_cell("y"))
        with pytest.raises(ValidationError, match="excluded"):
            validator.validate(make_cell("0.0"))

    @pytest.mark.parametrize("kind,limit,raw,passes", [
        (RuleKind.HAS_LENGTH, 3, "WAL", True),
        (RuleKind.HAS_LENGTH, 3, "WALES", False),
        (RuleKind.MIN_LENGTH, 3, "AB", False),
        (RuleKind.MIN_LENGTH, 3, "ABC", True),
        (RuleKind.MAX_LENGTH, 6, "NP108", True),
        (RuleKind.MAX_LENGTH, 4, "NP108", False),
        (RuleKind.HAS_LENGTH, 3, "  WAL  ", True),
    ])
    def test_lengths(self, kind, limit, raw, passes):
        """Test lengths are measured on trimmed text"""
        validator = LengthValidator("c", rule(kind, limit), SETTINGS)
        cell = make_cell(raw)

        if passes:
            validator.validate(cell)
        else:
            with pytest.raises(ValidationError, match="length"):
                validator.validate(cell)

    @pytest.mark.parametrize("kind,part,raw,passes", [
        (RuleKind.STARTS_WITH, "NP", "NP108", True),
        (RuleKind.STARTS_WITH, "NP", "CF101", False),
        (RuleKind.ENDS_WITH, "01", "CF101", True),
        (RuleKind.ENDS_WITH, "01", "NP108", False),
        (RuleKind.INCLUDES, "Cai", "capital Cairo", True),
        (RuleKind.INCLUDES, "cai", "capital Cairo", False),
        (RuleKind.EXCLUDES_SUBSTRING, "@", "plain", True),
        (RuleKind.EXCLUDES_SUBSTRING, "@", "a@b", False),
    ])
    def test_substrings(self, kind, part, raw, passes):
        """Test substring rules"""
        validator = SubstringValidator("c", rule(kind, part), SETTINGS)
        cell = make_cell(raw)

        if passes:
            validator.validate(cell)
        else:
            with pytest.raises(ValidationError):
                validator.validate(cell)

    @pytest.mark.parametrize("validator_class,kind,argument", [
        (TextEqualityValidator, RuleKind.EQUALS_TEXT, "x"),
        (MembershipValidator, RuleKind.NOT_IN_SET, ["x"]),
        (LengthValidator, RuleKind.MAX_LENGTH, 5),
        (SubstringValidator, RuleKind.EXCLUDES_SUBSTRING, "x"),
    ])
    def test_null_fails_text_rules(self, validator_class, kind, argument):
        """Test every text rule fails on null"""
        validator = validator_class("c", rule(kind, argument), SETTINGS)

        with pytest.raises(ValidationError, match="value is null"):
            validator.validate(make_cell("NA"))


class TestDigitsValidator:
    """Tests for DigitsValidator"""

    @pytest.mark.parametrize("text,significant,places", [
        ("123", 3, 0),
        ("1.50", 3, 2),
        ("0.050", 2, 3),
        ("007", 1, 0),
        ("-12.5", 3, 1),
        ("1.5e3", 2, 0),
    ])
    def test_count_digits(self, text, significant, places):
        """Test leading zeros are not significant and trailing zeros are"""
        assert count_digits(text) == (significant, places)

    def test_significant_digits(self):
        """Test has significant digits n"""
        validator = DigitsValidator("x", rule(RuleKind.SIGNIFICANT_DIGITS, 3), SETTINGS)

        validator.validate(make_cell("1.50", ValueType.FLOATING_POINT))
        with pytest.raises(ValidationError, match="2 significant digits, expected 3"):
            validator.validate(make_cell("1.5", ValueType.FLOATING_POINT))

    def test_decimal_places_after_normalization(self):
        """Test decimal places count the normalized text"""
        validator = DigitsValidator("x", rule(RuleKind.DECIMAL_PLACES, 2), DOT_GROUPED)

        validator.validate(make_cell("1.234,50", ValueType.FLOATING_POINT, DOT_GROUPED))
        with pytest.raises(ValidationError, match="1 decimal places"):
            validator.validate(make_cell("1.234,5", ValueType.FLOATING_POINT, DOT_GROUPED))

    def test_no_type_declared(self):
        """Test digit rules need a declared type"""
        validator = DigitsValidator("x", rule(RuleKind.DECIMAL_PLACES, 2), SETTINGS)

        with pytest.raises(ValidationError, match=NO_TYPE_DECLARED):
            validator.validate(make_cell("1.00"))
