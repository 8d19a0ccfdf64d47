"""Tests for numeric version comparison and specifier parsing."""

import pytest

from versioning.compare import compare_versions, higher_version
from versioning.parser import strip_range_prefix, tokenize_rightmost_at


class TestCompareVersions:
    """Field-wise numeric comparison."""

    @pytest.mark.parametrize(
        "a, b",
        [
            ("2.10.0", "2.9.9"),
            ("10.0.0", "9.0.0"),
            ("1.0.10", "1.0.9"),
            ("1.2.0", "1.1.99"),
        ],
    )
    def test_greater_independent_of_string_length(self, a, b):
        """Numeric fields decide, not lexicographic order."""
        assert compare_versions(a, b) == 1
        assert compare_versions(b, a) == -1

    def test_equal_versions(self):
        assert compare_versions("1.2.3", "1.2.3") == 0

    def test_partial_versions_pad_with_zero(self):
        """Missing minor/patch fields count as 0."""
        assert compare_versions("1.2", "1.2.0") == 0
        assert compare_versions("2", "1.9.9") == 1

    def test_prerelease_sorts_below_release(self):
        assert compare_versions("1.0.0-beta.1", "1.0.0") == -1

    def test_unparseable_falls_back_to_numeric_fields(self):
        """Non-semver strings compare by their leading integers."""
        assert compare_versions("latest", "1.0.0") == -1


class TestHigherVersion:
    """Conflict arbitration helper."""

    def test_returns_proposed_when_higher(self):
        assert higher_version("2.10.0", "2.9.9") == "2.10.0"

    def test_returns_existing_when_higher(self):
        assert higher_version("2.9.9", "2.10.0") == "2.10.0"

    def test_existing_wins_numeric_tie(self):
        assert higher_version("1.2", "1.2.0") == "1.2.0"


class TestStripRangePrefix:
    """Range prefixes reduce to their literal base."""

    @pytest.mark.parametrize(
        "spec, expected",
        [
            ("^2.0.0", "2.0.0"),
            ("~1.2.3", "1.2.3"),
            (">=1.0.0", "1.0.0"),
            ("=3.1.4", "3.1.4"),
            ("1.0.0", "1.0.0"),
            (" ^13.7.2 ", "13.7.2"),
        ],
    )
    def test_strip(self, spec, expected):
        assert strip_range_prefix(spec) == expected


class TestTokenizeRightmostAt:
    """Splitting ``name@version`` tokens for the add command."""

    def test_name_only(self):
        assert tokenize_rightmost_at("lodash") == ("lodash", None)

    def test_name_and_version(self):
        assert tokenize_rightmost_at("lodash@4.17.21") == ("lodash", "4.17.21")

    def test_scoped_name_and_version(self):
        assert tokenize_rightmost_at("@types/node@20.1.0") == ("@types/node", "20.1.0")

    def test_scoped_name_only(self):
        assert tokenize_rightmost_at("@types/node") == ("@types/node", None)

    def test_trailing_at_means_no_version(self):
        assert tokenize_rightmost_at("lodash@") == ("lodash", None)
