"""Unit tests for utility functions."""

import pytest

from pyfstree.utils import (
    batch_size_for_limit,
    commas,
    descriptor_limit,
    is_url,
    parse_exclusion_list,
    plural,
)


class TestCommasAndPlural:
    """Tests for commas and plural functions."""

    def test_commas(self):
        """Test thousands separators."""
        assert commas(1234567) == "1,234,567"
        assert commas(999) == "999"

    def test_plural_default_suffix(self):
        """Test the default plural adds an s."""
        assert plural(1, "file") == "file"
        assert plural(0, "file") == "files"

    def test_plural_irregular(self):
        """Test an explicit plural form."""
        assert plural(3, "directory", "directories") == "directories"


class TestBatchSize:
    """Tests for descriptor-derived batch sizes."""

    @pytest.mark.parametrize(
        "limit,expected", [(1024, 205), (256, 52), (5, 1), (1, 1)]
    )
    def test_fifth_of_limit_rounded_up(self, limit, expected):
        """Test the batch size is the limit divided by five, rounded up."""
        assert batch_size_for_limit(limit) == expected

    def test_unlimited(self):
        """Test an unlimited descriptor count means unbounded batches."""
        assert batch_size_for_limit(None) is None

    def test_descriptor_limit_positive_or_none(self):
        """Test the discovered limit is usable."""
        limit = descriptor_limit()
        assert limit is None or limit > 0


class TestIsUrl:
    """Tests for is_url function."""

    @pytest.mark.parametrize(
        "value", ["http://example.com", "https://example.com/a.js", "HTTPS://X.ORG"]
    )
    def test_urls(self, value):
        """Test http and https addresses are recognized."""
        assert is_url(value)

    @pytest.mark.parametrize(
        "value", ["/home/user/file", "relative/path", "ftp://example.com", "http"]
    )
    def test_paths(self, value):
        """Test local paths and other schemes are not URLs."""
        assert not is_url(value)


class TestParseExclusionList:
    """Tests for parse_exclusion_list function."""

    def test_bracketed_list(self):
        """Test a bracketed comma-separated list."""
        assert parse_exclusion_list("[node_modules, .git]") == ["node_modules", ".git"]

    def test_plain_list(self):
        """Test an unbracketed list."""
        assert parse_exclusion_list("build,dist") == ["build", "dist"]

    def test_single_value(self):
        """Test a single fragment."""
        assert parse_exclusion_list("build") == ["build"]

    def test_empty_items_dropped(self):
        """Test empty items are ignored."""
        assert parse_exclusion_list("[ , a,,b ]") == ["a", "b"]
        assert parse_exclusion_list("[]") == []
