"""Tests for archive format version checks."""

import pytest

from flowport.core.version_gate import check_compatibility, compare_versions, is_valid_version


class TestCompareVersions:
    """Test compare_versions."""

    @pytest.mark.parametrize(
        ("left", "right", "expected"),
        [
            ("1.0.0", "1.0.0", 0),
            ("1.10.0", "1.9.0", 1),
            ("1.0", "1.0.0", 0),
            ("2.0.0", "10.0.0", -1),
            ("0.9.9", "1.0.0", -1),
        ],
    )
    def test_numeric_comparison(self, left: str, right: str, expected: int):
        """Components compare as numbers, missing components as 0."""
        assert compare_versions(left, right) == expected

    def test_antisymmetric(self):
        """Swapping arguments negates the result."""
        assert compare_versions("1.2.3", "1.3.0") == -compare_versions("1.3.0", "1.2.3")


class TestIsValidVersion:
    """Test is_valid_version."""

    @pytest.mark.parametrize("version", ["1.0.0", "0.0.0", "12.345.6"])
    def test_accepts_three_integers(self, version: str):
        assert is_valid_version(version)

    @pytest.mark.parametrize("version", ["1.0", "1.0.0.0", "v1.0.0", "1.0.0-beta", "", "a.b.c"])
    def test_rejects_other_shapes(self, version: str):
        assert not is_valid_version(version)


class TestCheckCompatibility:
    """Test check_compatibility against the current format window."""

    def test_current_version_is_compatible(self):
        check = check_compatibility("2.0.0")

        assert check.compatible
        assert check.warning is None

    def test_minimum_version_is_compatible(self):
        assert check_compatibility("1.0.0").compatible

    def test_older_than_minimum_is_blocked(self):
        """Test that versions below the minimum fail."""
        check = check_compatibility("0.9.0")

        assert not check.compatible
        assert check.error == "Version 0.9.0 is not supported, minimum supported version is 1.0.0"

    def test_newer_version_only_warns(self):
        """Test that newer versions are accepted with a warning."""
        check = check_compatibility("3.1.0")

        assert check.compatible
        assert check.warning == "File version 3.1.0 is newer, some features may not be compatible"

    def test_invalid_format_is_blocked(self):
        check = check_compatibility("2.0")

        assert not check.compatible
        assert "x.y.z" in check.error
