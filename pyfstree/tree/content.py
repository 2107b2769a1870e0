"""Line-level content differ used for modified-file detail."""

import difflib
import re
from dataclasses import dataclass
from typing import Protocol

# Leading bytes inspected when deciding whether a file is binary
BINARY_SAMPLE_SIZE = 100

_BINARY_PATTERN = re.compile(rb"[\x00-\x08\x0b\x0e-\x1f\x7f]")


@dataclass(frozen=True)
class ContentDiff:
    """Line-level difference between two text blobs."""

    text: str
    """Unified diff output"""

    changes: int
    """Number of inserted plus deleted lines"""


class ContentDiffer(Protocol):
    """Anything that can produce a line-level diff of two text blobs."""

    def diff(
        self, source: str, target: str, source_name: str, target_name: str
    ) -> ContentDiff: ...


class LineContentDiffer:
    """Default content differ backed by ``difflib.unified_diff``."""

    def __init__(self, context_lines: int = 3):
        self.context_lines = context_lines

    def diff(
        self, source: str, target: str, source_name: str, target_name: str
    ) -> ContentDiff:
        lines = list(
            difflib.unified_diff(
                source.splitlines(keepends=True),
                target.splitlines(keepends=True),
                fromfile=source_name,
                tofile=target_name,
                n=self.context_lines,
            )
        )
        # The first two lines are the ---/+++ file headers
        changes = sum(1 for line in lines[2:] if line[:1] in ("+", "-"))
        text = "".join(line if line.endswith("\n") else f"{line}\n" for line in lines)
        return ContentDiff(text=text, changes=changes)


def is_binary(data: bytes) -> bool:
    """Check the leading bytes of some content for control characters.

    Examples:
        >>> is_binary(b"plain text\\n")
        False
        >>> is_binary(b"\\x89PNG\\r\\n\\x1a\\n\\x00")
        True
    """
    return bool(_BINARY_PATTERN.search(data[:BINARY_SAMPLE_SIZE]))
