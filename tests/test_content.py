"""Tests for the line-level content differ."""

from pyfstree.tree import LineContentDiffer, is_binary


class TestLineContentDiffer:
    """Tests for LineContentDiffer."""

    def test_counts_changed_lines(self):
        """Test insertions and deletions are both counted."""
        diff = LineContentDiffer().diff("a\nb\nc\n", "a\nB\nc\nd\n", "old", "new")

        assert diff.changes == 3
        assert diff.text.startswith("--- old\n+++ new\n")

    def test_identical_text(self):
        """Test identical text produces no diff."""
        diff = LineContentDiffer().diff("same\n", "same\n", "old", "new")

        assert diff.changes == 0
        assert diff.text == ""

    def test_missing_trailing_newline(self):
        """Test every output line ends with a newline."""
        diff = LineContentDiffer().diff("a", "b", "old", "new")

        assert diff.changes == 2
        assert diff.text.endswith("+b\n")

    def test_header_like_content_lines(self):
        """Test content lines that look like headers are still counted."""
        diff = LineContentDiffer().diff("--x\n", "++y\n", "old", "new")

        assert diff.changes == 2

    def test_context_lines(self):
        """Test the amount of surrounding context is configurable."""
        source = "".join(f"{i}\n" for i in range(20))
        target = source.replace("10\n", "ten\n")

        narrow = LineContentDiffer(context_lines=0).diff(source, target, "a", "b")
        wide = LineContentDiffer(context_lines=3).diff(source, target, "a", "b")

        assert " 9\n" not in narrow.text
        assert " 9\n" in wide.text


class TestIsBinary:
    """Tests for is_binary function."""

    def test_text(self):
        """Test plain text with tabs and newlines is not binary."""
        assert not is_binary(b"line one\tcol\r\nline two\n")

    def test_null_byte(self):
        """Test a NUL byte marks content as binary."""
        assert is_binary(b"abc\x00def")

    def test_only_leading_bytes_checked(self):
        """Test control characters past the sample window are ignored."""
        assert not is_binary(b"a" * 200 + b"\x00")

    def test_utf8_text(self):
        """Test multi-byte UTF-8 is not binary."""
        assert not is_binary("héllo wörld".encode("utf-8"))
