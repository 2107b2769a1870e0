"""Entry and Tree data model shared by every tree operation.

A Tree is an arena: Entries live in one growable list in traversal order and
refer to their parent by index. Subtree completion is tracked by the
``pending_children`` counter stored on each directory Entry.
"""

import os
import stat as stat_module
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePath
from typing import Any, Optional

from ..exceptions import TreeInvariantError
from .exclusions import ExclusionFilter

ROOT_PARENT = -1


class EntryKind(str, Enum):
    """Kinds of filesystem artifacts."""

    FILE = "file"
    """Regular file (block and character devices are reported as files)"""

    DIRECTORY = "directory"
    """Directory"""

    LINK = "link"
    """Symbolic link (only reported when links are not followed)"""

    UNKNOWN = "unknown"
    """FIFO, socket or anything else"""

    @classmethod
    def from_mode(cls, mode: int) -> "EntryKind":
        """Classify an ``st_mode`` value."""
        if stat_module.S_ISDIR(mode):
            return cls.DIRECTORY
        if stat_module.S_ISLNK(mode):
            return cls.LINK
        if (
            stat_module.S_ISREG(mode)
            or stat_module.S_ISBLK(mode)
            or stat_module.S_ISCHR(mode)
        ):
            return cls.FILE
        return cls.UNKNOWN


@dataclass(frozen=True)
class EntryMetadata:
    """Stat information captured when an Entry is discovered."""

    size: int
    mode: int
    atime: float
    mtime: float

    @classmethod
    def from_stat(cls, result: os.stat_result) -> "EntryMetadata":
        return cls(
            size=result.st_size,
            mode=result.st_mode,
            atime=result.st_atime,
            mtime=result.st_mtime,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "size": self.size,
            "mode": self.mode,
            "atime": self.atime,
            "mtime": self.mtime,
        }


@dataclass
class Entry:
    """One filesystem artifact and its position in a walked tree."""

    path: str
    """Absolute path"""

    kind: EntryKind

    parent_index: int
    """Index of the parent Entry in the owning Tree (-1 for the root)"""

    metadata: EntryMetadata

    pending_children: int = 0
    """Children that have not finished the current operation yet"""

    @property
    def is_root(self) -> bool:
        return self.parent_index == ROOT_PARENT

    def as_tuple(self) -> tuple[str, EntryKind, int, int, EntryMetadata]:
        """Boundary representation ``(path, kind, parent, pending, metadata)``."""
        return (
            self.path,
            self.kind,
            self.parent_index,
            self.pending_children,
            self.metadata,
        )


@dataclass
class Tree:
    """Ordered Entry sequence produced by walking a root path.

    Index 0 is always the root. Insertion order follows traversal and carries
    no meaning; sort explicitly where determinism matters.
    """

    root_path: str
    entries: list[Entry] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self.entries)

    def __getitem__(self, index: int) -> Entry:
        return self.entries[index]

    @property
    def is_empty(self) -> bool:
        return not self.entries

    @property
    def root(self) -> Optional[Entry]:
        return self.entries[0] if self.entries else None

    @property
    def total_size(self) -> int:
        """Sum of the sizes of all file entries."""
        return sum(e.metadata.size for e in self.entries if e.kind == EntryKind.FILE)

    def add(self, entry: Entry) -> int:
        """Append an Entry and return its index."""
        self.entries.append(entry)
        return len(self.entries) - 1

    def release_child(self, index: int) -> bool:
        """Record that one child of ``entries[index]`` has finished.

        Returns:
            True when this was the last outstanding child

        Raises:
            TreeInvariantError: If the counter would drop below zero
        """
        entry = self.entries[index]
        if entry.pending_children <= 0:
            raise TreeInvariantError(
                f"Cascade counter underflow on {entry.path}", entry.path
            )
        entry.pending_children -= 1
        return entry.pending_children == 0

    def rearm(self) -> None:
        """Reset every counter to the number of children present in the Tree.

        Used by operations that replay an already completed walk.
        """
        for entry in self.entries:
            entry.pending_children = 0
        for entry in self.entries:
            if not entry.is_root:
                self.entries[entry.parent_index].pending_children += 1

    def relative_path(self, entry: Entry) -> str:
        """Path of an Entry relative to the root, with forward slashes."""
        return self.relative_path_of(entry.path)

    def relative_path_of(self, path: str) -> str:
        """Relative form of an absolute path beneath this root."""
        if path == self.root_path:
            return ""
        return PurePath(os.path.relpath(path, self.root_path)).as_posix()

    def sorted_entries(self) -> list[Entry]:
        """Entries ordered by absolute path."""
        return sorted(self.entries, key=lambda e: e.path)

    def paths(self) -> list[str]:
        """Sorted absolute paths of all entries."""
        return sorted(e.path for e in self.entries)


@dataclass(frozen=True)
class WalkOptions:
    """Context passed down a traversal instead of ambient state."""

    recursive: bool = True
    """Descend into child directories (False lists the root only)"""

    symbolic: bool = False
    """Report symbolic links as links instead of following them"""

    exclusions: ExclusionFilter = field(default_factory=ExclusionFilter)

    missing_ok: bool = False
    """Treat a vanished root as an empty tree instead of an error"""

    follow_root: bool = False
    """Resolve a root that is a symbolic link even when ``symbolic`` is set"""


@dataclass
class CopyStats:
    """Aggregate counts of a copy operation."""

    directories: int = 0
    files: int = 0
    links: int = 0
    size: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "directories": self.directories,
            "files": self.files,
            "links": self.links,
            "size": self.size,
        }


@dataclass
class RemoveStats(CopyStats):
    """Aggregate counts of a remove operation."""
