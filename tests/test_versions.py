"""
Tests for version ordering (gvm_cli/versions.py).
"""

import pytest

from gvm_cli.versions import (
    compare_versions,
    normalize_version,
    numeric_key,
    sort_versions,
)


class TestCompareVersions:
    """Tests for compare_versions."""

    def test_numeric_not_lexicographic(self):
        """1.9.0 sorts before 1.10.0."""
        assert compare_versions("1.9.0", "1.10.0") == -1
        assert compare_versions("1.10.0", "1.9.0") == 1

    def test_equal_versions(self):
        assert compare_versions("1.21.3", "1.21.3") == 0

    def test_prerelease_before_release(self):
        assert compare_versions("1.22rc1", "1.22") == -1
        assert compare_versions("1.22beta1", "1.22rc1") == -1
        assert compare_versions("1.22", "1.22.1") == -1

    def test_unparseable_falls_back_to_numeric_fields(self):
        """Names packaging rejects still compare on their numeric fields."""
        assert compare_versions("1.9.x-custom", "1.10.x-custom") == -1

    def test_two_and_three_field_versions(self):
        assert compare_versions("1.21", "1.21.1") == -1
        assert compare_versions("1.2.10", "1.2.9") == 1


class TestNumericKey:
    """Tests for numeric_key."""

    @pytest.mark.parametrize("version,expected", [
        ("1.21.3", (1, 21, 3)),
        ("1.21", (1, 21, 0)),
        ("1.22rc1", (1, 22, 0)),
        ("1.2.3.4", (1, 2, 3)),
        ("abc", (0, 0, 0)),
    ])
    def test_numeric_key(self, version, expected):
        assert numeric_key(version) == expected


class TestSortVersions:
    """Tests for sort_versions."""

    def test_sorts_numerically(self):
        versions = ["1.10.0", "1.9.0", "1.2.1", "1.21.3", "1.9.10"]
        assert sort_versions(versions) == ["1.2.1", "1.9.0", "1.9.10", "1.10.0", "1.21.3"]

    def test_deduplicates(self):
        assert sort_versions(["1.21.3", "1.21.3", "1.20"]) == ["1.20", "1.21.3"]

    def test_empty(self):
        assert sort_versions([]) == []

    def test_mixed_prereleases(self):
        versions = ["1.22", "1.22rc2", "1.21.5", "1.22rc1", "1.22.1"]
        assert sort_versions(versions) == ["1.21.5", "1.22rc1", "1.22rc2", "1.22", "1.22.1"]


class TestNormalizeVersion:
    """Tests for normalize_version."""

    def test_strips_go_prefix(self):
        assert normalize_version("go1.21.3") == "1.21.3"

    def test_strips_v_prefix(self):
        assert normalize_version("v1.21.3") == "1.21.3"

    def test_leaves_plain_versions(self):
        assert normalize_version("1.21.3") == "1.21.3"
        assert normalize_version(" 1.21.3 ") == "1.21.3"

    def test_leaves_words_alone(self):
        assert normalize_version("latest") == "latest"
        assert normalize_version("gopher") == "gopher"
