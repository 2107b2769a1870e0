"""pyfstree - Walk, copy, remove, content-hash and diff filesystem trees."""

from .engine import TreeEngine
from .exceptions import (
    TreeConfigError,
    TreeError,
    TreeInvariantError,
    TreeIOError,
    TreeNetworkError,
    TreeNotFoundError,
    TreeTypeMismatchError,
)
from .tree import (
    ContentHasher,
    DiffReport,
    EntryKind,
    Tree,
    TreeCopier,
    TreeDiffer,
    TreeRemover,
    TreeWalker,
    WalkOptions,
)

__version__ = "0.1.0"

__all__ = [
    "TreeEngine",
    "TreeWalker",
    "TreeCopier",
    "TreeRemover",
    "TreeDiffer",
    "ContentHasher",
    "Tree",
    "EntryKind",
    "WalkOptions",
    "DiffReport",
    "TreeError",
    "TreeConfigError",
    "TreeInvariantError",
    "TreeIOError",
    "TreeNetworkError",
    "TreeNotFoundError",
    "TreeTypeMismatchError",
]
