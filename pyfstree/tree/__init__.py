"""Tree engine for pyfstree: walk, copy, remove, hash and diff directory trees."""

from .content import ContentDiff, ContentDiffer, LineContentDiffer, is_binary
from .copier import TreeCopier
from .differ import DiffOp, DiffReport, DiffTag, TreeDiffer, align, prune_descendants
from .exclusions import ExclusionFilter, normalize_fragment
from .fanout import FanOut, settle
from .hasher import ContentHasher
from .models import (
    ROOT_PARENT,
    CopyStats,
    Entry,
    EntryKind,
    EntryMetadata,
    RemoveStats,
    Tree,
    WalkOptions,
)
from .remover import TreeRemover
from .walker import TreeWalker, describe_kind

__all__ = [
    "TreeWalker",
    "TreeCopier",
    "TreeRemover",
    "TreeDiffer",
    "ContentHasher",
    "describe_kind",
    "ExclusionFilter",
    "normalize_fragment",
    "FanOut",
    "settle",
    "Entry",
    "EntryKind",
    "EntryMetadata",
    "Tree",
    "WalkOptions",
    "CopyStats",
    "RemoveStats",
    "ROOT_PARENT",
    "DiffOp",
    "DiffReport",
    "DiffTag",
    "align",
    "prune_descendants",
    "ContentDiff",
    "ContentDiffer",
    "LineContentDiffer",
    "is_binary",
]
