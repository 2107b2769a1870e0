"""Structural and content comparison of two walked trees."""

import asyncio
import difflib
import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional

from .. import fsio
from ..exceptions import TreeTypeMismatchError
from .content import ContentDiff, ContentDiffer, LineContentDiffer, is_binary
from .exclusions import ExclusionFilter
from .models import Entry, EntryKind, Tree, WalkOptions
from .walker import TreeWalker

logger = logging.getLogger(__name__)

REPORTED_KINDS = (EntryKind.DIRECTORY, EntryKind.FILE, EntryKind.LINK)


class DiffTag(str, Enum):
    """Outcome of aligning one path between source and target."""

    INSERTED = "inserted"
    """Present only in the target"""

    DELETED = "deleted"
    """Present only in the source"""

    KEPT = "kept"
    """Present in both"""


@dataclass(frozen=True)
class DiffOp:
    """One aligned path and what happened to it."""

    tag: DiffTag
    path: str
    """Path relative to the compared roots, with forward slashes"""


@dataclass(frozen=True)
class DiffReport:
    """Differences between a source tree and a target tree."""

    directories: tuple[DiffOp, ...] = ()
    files: tuple[DiffOp, ...] = ()
    links: tuple[DiffOp, ...] = ()

    modified_files: tuple[str, ...] = ()
    """Files kept in both trees whose bytes differ"""

    content_diffs: Mapping[str, ContentDiff] = field(default_factory=dict)
    """Line-level detail for modified text files, when requested (read-only)"""

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "content_diffs", MappingProxyType(dict(self.content_diffs))
        )

    def ops(self, kind: EntryKind) -> tuple[DiffOp, ...]:
        """Op-list for one entry kind."""
        if kind == EntryKind.DIRECTORY:
            return self.directories
        if kind == EntryKind.FILE:
            return self.files
        if kind == EntryKind.LINK:
            return self.links
        raise ValueError(f"No op-list for kind {kind.value}")

    def paths(self, kind: EntryKind, tag: DiffTag) -> list[str]:
        return [op.path for op in self.ops(kind) if op.tag == tag]

    def inserted(self, kind: EntryKind) -> list[str]:
        return self.paths(kind, DiffTag.INSERTED)

    def deleted(self, kind: EntryKind) -> list[str]:
        return self.paths(kind, DiffTag.DELETED)

    def kept(self, kind: EntryKind) -> list[str]:
        return self.paths(kind, DiffTag.KEPT)

    @property
    def is_identical(self) -> bool:
        """True when nothing was inserted, deleted or modified."""
        if self.modified_files:
            return False
        return all(
            op.tag == DiffTag.KEPT
            for kind in REPORTED_KINDS
            for op in self.ops(kind)
        )

    def to_dict(self) -> dict[str, Any]:
        """Structured form for JSON output."""
        data: dict[str, Any] = {}
        for kind in REPORTED_KINDS:
            data[kind.value] = {
                "inserted": self.inserted(kind),
                "deleted": self.deleted(kind),
            }
        data["modified"] = list(self.modified_files)
        if self.content_diffs:
            data["content"] = {
                path: {"changes": detail.changes, "diff": detail.text}
                for path, detail in self.content_diffs.items()
            }
        return data


def _path_key(path: str) -> list[str]:
    # Component-wise order keeps each subtree contiguous ("a", "a/b", "a-1")
    return path.split("/")


def _has_ancestor(path: str, roots: set[str]) -> bool:
    parts = path.split("/")
    return any("/".join(parts[:depth]) in roots for depth in range(1, len(parts)))


def align(source: list[str], target: list[str]) -> list[DiffOp]:
    """Align two sorted path lists into Kept, Deleted and Inserted ops.

    Examples:
        >>> [(op.tag.value, op.path) for op in align(["a", "b"], ["a", "c"])]
        [('kept', 'a'), ('deleted', 'b'), ('inserted', 'c')]
    """
    matcher = difflib.SequenceMatcher(None, source, target, autojunk=False)
    ops: list[DiffOp] = []
    for opcode, i1, i2, j1, j2 in matcher.get_opcodes():
        if opcode == "equal":
            ops.extend(DiffOp(DiffTag.KEPT, path) for path in source[i1:i2])
            continue
        if opcode in ("delete", "replace"):
            ops.extend(DiffOp(DiffTag.DELETED, path) for path in source[i1:i2])
        if opcode in ("insert", "replace"):
            ops.extend(DiffOp(DiffTag.INSERTED, path) for path in target[j1:j2])
    return ops


def prune_descendants(
    ops: list[DiffOp], directory_ops: list[DiffOp]
) -> tuple[DiffOp, ...]:
    """Drop ops already implied by an inserted or deleted ancestor directory."""
    roots: dict[DiffTag, set[str]] = {DiffTag.INSERTED: set(), DiffTag.DELETED: set()}
    for op in directory_ops:
        if op.tag in roots:
            roots[op.tag].add(op.path)
    return tuple(
        op
        for op in ops
        if op.tag == DiffTag.KEPT or not _has_ancestor(op.path, roots[op.tag])
    )


class TreeDiffer:
    """Aligns two independently walked trees and reports the differences.

    Directories, files and links are aligned separately by relative path.
    Nothing is ever correlated across kinds or across names, so a moved file
    shows up as one deletion plus one insertion.

    Examples:
        >>> differ = TreeDiffer()
        >>> report = asyncio.run(differ.diff_paths("old/", "new/"))
        >>> report.deleted(EntryKind.FILE)
        ['a/2.txt']
    """

    def __init__(
        self,
        content_differ: Optional[ContentDiffer] = None,
        detail: bool = False,
    ):
        """Initialize tree differ.

        Args:
            content_differ: Line-level differ for modified files
            detail: Produce line-level diffs for modified text files
        """
        self.content_differ = content_differ or LineContentDiffer()
        self.detail = detail

    async def diff_paths(
        self,
        source: str,
        target: str,
        exclusions: Optional[ExclusionFilter] = None,
    ) -> DiffReport:
        """Walk two roots concurrently and diff them."""
        walker = TreeWalker(
            WalkOptions(
                symbolic=True,
                exclusions=exclusions or ExclusionFilter(),
                follow_root=True,
            )
        )
        source_tree, target_tree = await asyncio.gather(
            walker.walk(source), walker.walk(target)
        )
        return await self.diff_trees(source_tree, target_tree)

    async def diff_trees(self, source: Tree, target: Tree) -> DiffReport:
        """Diff two completed trees.

        Raises:
            TreeTypeMismatchError: If the roots are of different kinds
        """
        if source.root is not None and target.root is not None:
            if source.root.kind != target.root.kind:
                raise TreeTypeMismatchError(
                    f"Cannot compare {source.root.kind.value} {source.root_path} "
                    f"with {target.root.kind.value} {target.root_path}",
                    target.root_path,
                )
            if source.root.kind != EntryKind.DIRECTORY:
                return await self._diff_single(source.root, target.root)

        source_lists = self._partition(source)
        target_lists = self._partition(target)
        directory_ops = align(
            source_lists[EntryKind.DIRECTORY], target_lists[EntryKind.DIRECTORY]
        )
        file_ops = align(source_lists[EntryKind.FILE], target_lists[EntryKind.FILE])
        link_ops = align(source_lists[EntryKind.LINK], target_lists[EntryKind.LINK])

        files = prune_descendants(file_ops, directory_ops)
        modified, details = await self._compare_kept(source, target, files)
        report = DiffReport(
            directories=prune_descendants(directory_ops, directory_ops),
            files=files,
            links=prune_descendants(link_ops, directory_ops),
            modified_files=tuple(modified),
            content_diffs=details,
        )
        logger.debug(
            f"Diffed {source.root_path} against {target.root_path}: "
            f"{len(report.modified_files)} modified file(s)"
        )
        return report

    def _partition(self, tree: Tree) -> dict[EntryKind, list[str]]:
        lists: dict[EntryKind, list[str]] = {kind: [] for kind in REPORTED_KINDS}
        for entry in tree:
            if entry.is_root or entry.kind not in lists:
                continue
            lists[entry.kind].append(tree.relative_path(entry))
        for paths in lists.values():
            paths.sort(key=_path_key)
        return lists

    async def _compare_kept(
        self, source: Tree, target: Tree, ops: tuple[DiffOp, ...]
    ) -> tuple[list[str], dict[str, ContentDiff]]:
        source_files = self._index_files(source)
        target_files = self._index_files(target)
        kept = [op.path for op in ops if op.tag == DiffTag.KEPT]
        results = await asyncio.gather(
            *(
                self._compare_pair(path, source_files[path], target_files[path])
                for path in kept
            )
        )
        modified: list[str] = []
        details: dict[str, ContentDiff] = {}
        for path, (equal, detail) in zip(kept, results):
            if equal:
                continue
            modified.append(path)
            if detail is not None:
                details[path] = detail
        return modified, details

    def _index_files(self, tree: Tree) -> dict[str, Entry]:
        return {
            tree.relative_path(entry): entry
            for entry in tree
            if entry.kind == EntryKind.FILE and not entry.is_root
        }

    async def _compare_pair(
        self, name: str, source: Entry, target: Entry
    ) -> tuple[bool, Optional[ContentDiff]]:
        if not self.detail and source.metadata.size != target.metadata.size:
            return False, None
        source_data, target_data = await asyncio.gather(
            fsio.read_bytes(source.path), fsio.read_bytes(target.path)
        )
        if source_data == target_data:
            return True, None
        if not self.detail or is_binary(source_data) or is_binary(target_data):
            return False, None
        detail = self.content_differ.diff(
            source_data.decode("utf-8", errors="replace"),
            target_data.decode("utf-8", errors="replace"),
            source_name=f"source/{name}",
            target_name=f"target/{name}",
        )
        return False, detail

    async def _diff_single(self, source: Entry, target: Entry) -> DiffReport:
        if source.kind != EntryKind.FILE:
            return DiffReport()
        name = os.path.basename(source.path)
        equal, detail = await self._compare_pair(name, source, target)
        if equal:
            return DiffReport()
        details = {name: detail} if detail is not None else {}
        return DiffReport(modified_files=(name,), content_diffs=details)
