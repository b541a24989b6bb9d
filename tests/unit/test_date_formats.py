"""
Unit tests for the date-time format catalog.
"""

from datetime import datetime

import pytest

from ruleval.core.errors import ReferenceFileAccessError
from ruleval.core.schema import DateFormat, DateFormatCatalog, default_catalog


@pytest.mark.unit
class TestDateFormat:
    """Tests for a single compiled format"""

    def test_parse_full_timestamp(self):
        """Test every token is captured"""
        date_format = DateFormat("YYYY-MM-DDThh:mm:ss.fff")

        assert date_format.parse("2024-02-29T23:59:58.125") == datetime(2024, 2, 29, 23, 59, 58, 125000)

    def test_missing_components_default(self):
        """Test a year-only format fills month and day with 1"""
        assert DateFormat("YYYY").parse("1536") == datetime(1536, 1, 1)

    @pytest.mark.parametrize("text,year", [("68", 2068), ("69", 1969), ("00", 2000)])
    def test_two_digit_year_pivot(self, text, year):
        """Test YY below 69 maps to the 2000s"""
        assert DateFormat("YY").parse(text).year == year

    def test_month_abbreviation(self):
        """Test MMM accepts English month abbreviations only"""
        date_format = DateFormat("DD MMM YYYY")

        assert date_format.parse("05 Nov 1999") == datetime(1999, 11, 5)
        assert date_format.parse("05 Xyz 1999") is None

    @pytest.mark.parametrize("text", ["2023-02-29", "2023-1-05", "2023-01-05 ", "20230105"])
    def test_structural_and_calendar_rejects(self, text):
        """Test fixed-width matching and calendar validation"""
        assert DateFormat("YYYY-MM-DD").parse(text) is None

    def test_render_inverts_parse(self):
        """Test render writes the value back in the same shape"""
        date_format = DateFormat("DD.MM.YYYY hh:mm")

        assert date_format.render(datetime(2001, 2, 3, 4, 5)) == "03.02.2001 04:05"

    @pytest.mark.parametrize("name", ["", "plain text", "YYYY-YYYY", "YYYY YY", "MM MMM"])
    def test_invalid_formats(self, name):
        """Test formats must name each component once"""
        with pytest.raises(ValueError):
            DateFormat(name)


@pytest.mark.unit
class TestDateFormatCatalog:
    """Tests for catalog lookup and loading"""

    def test_first_match_wins(self):
        """Test ambiguous values take the first matching format"""
        catalog = DateFormatCatalog(["DD/MM/YYYY", "MM/DD/YYYY"])

        date_format, value = catalog.match("03/04/2001")

        assert date_format.name == "DD/MM/YYYY"
        assert value == datetime(2001, 4, 3)

    def test_later_format_used_when_first_fails_calendar(self):
        """Test calendar failures fall through to later formats"""
        catalog = DateFormatCatalog(["DD/MM/YYYY", "MM/DD/YYYY"])

        date_format, value = catalog.match("04/13/2001")

        assert date_format.name == "MM/DD/YYYY"
        assert value == datetime(2001, 4, 13)

    def test_no_match(self):
        """Test values matching no format"""
        assert DateFormatCatalog(["YYYY"]).match("2001-01") is None

    def test_lookup(self):
        """Test membership and get"""
        catalog = DateFormatCatalog(["YYYY", "YYYY-MM"])

        assert "YYYY" in catalog
        assert "MM" not in catalog
        assert catalog.names == ["YYYY", "YYYY-MM"]
        assert len(catalog) == 2
        with pytest.raises(KeyError):
            catalog.get("MM")

    def test_duplicates_rejected(self):
        """Test duplicate entries are rejected"""
        with pytest.raises(ValueError, match="Duplicate date format"):
            DateFormatCatalog(["YYYY", "YYYY"])

    def test_empty_rejected(self):
        """Test empty catalogs are rejected"""
        with pytest.raises(ValueError):
            DateFormatCatalog([])

    def test_default_catalog(self):
        """Test the packaged catalog loads and starts with ISO dates"""
        catalog = default_catalog()

        assert catalog.names[0] == "YYYY-MM-DD"
        assert "YYYY" in catalog
        assert catalog is default_catalog()

    def test_from_yaml(self, fixtures_dir):
        """Test loading a reference file"""
        catalog = DateFormatCatalog.from_yaml(fixtures_dir / "date_formats.yaml")

        assert catalog.names == ["YYYY-MM-DD", "DD/MM/YYYY", "YYYY"]

    def test_from_yaml_missing_file(self, tmp_path):
        """Test missing reference files are access failures"""
        with pytest.raises(ReferenceFileAccessError) as exc_info:
            DateFormatCatalog.from_yaml(tmp_path / "missing.yaml")

        assert "reference file" in str(exc_info.value)

    @pytest.mark.parametrize("content", [
        "date_formats: YYYY\n",
        "formats:\n  - YYYY\n",
        "date_formats: [\n",
        "date_formats:\n  - 12\n",
    ])
    def test_from_yaml_invalid_content(self, tmp_path, content):
        """Test malformed reference files are access failures"""
        path = tmp_path / "formats.yaml"
        path.write_text(content, encoding="utf-8")

        with pytest.raises(ReferenceFileAccessError):
            DateFormatCatalog.from_yaml(path)

    def test_from_yaml_not_utf8(self, tmp_path):
        """Test undecodable reference files are access failures"""
        path = tmp_path / "formats.yaml"
        path.write_bytes(b"date_formats:\n  - \xff\xfe\n")

        with pytest.raises(ReferenceFileAccessError, match="not valid UTF-8"):
            DateFormatCatalog.from_yaml(path)
