"""Synchronous facade over the asynchronous tree operations."""

import asyncio
import logging
from collections.abc import Iterable
from typing import Optional

from .tree import (
    ContentHasher,
    CopyStats,
    DiffReport,
    ExclusionFilter,
    RemoveStats,
    Tree,
    TreeCopier,
    TreeDiffer,
    TreeRemover,
    TreeWalker,
    WalkOptions,
    describe_kind,
)
from .tree.content import ContentDiffer
from .tree.hasher import ProgressCallback
from .utils import DEFAULT_HASH_ALGORITHM, is_url

logger = logging.getLogger(__name__)


class TreeEngine:
    """Runs tree operations to completion on a fresh event loop.

    Each public method blocks until its operation finishes and either
    returns the full result or raises the first error encountered.

    Examples:
        >>> engine = TreeEngine(exclusions=["node_modules"])
        >>> stats = engine.copy("project", "/tmp/project-copy")
        >>> report = engine.diff("project", "/tmp/project-copy")
        >>> report.is_identical
        True
    """

    def __init__(
        self,
        exclusions: Optional[Iterable[str]] = None,
        hash_algorithm: str = DEFAULT_HASH_ALGORITHM,
        batch_size: Optional[int] = None,
        progress_callback: Optional[ProgressCallback] = None,
        content_differ: Optional[ContentDiffer] = None,
    ):
        """Initialize tree engine.

        Args:
            exclusions: Path fragments, relative to each root, to leave out
            hash_algorithm: Digest algorithm for hashing
            batch_size: Files hashed at a time (None: from descriptor limit)
            progress_callback: Optional function(hashed, total) for hashing
            content_differ: Line-level differ for modified files
        """
        self.exclusions = ExclusionFilter(exclusions)
        self.hash_algorithm = hash_algorithm
        self.batch_size = batch_size
        self.progress_callback = progress_callback
        self.content_differ = content_differ

    def walk(
        self,
        root: str,
        recursive: bool = True,
        symbolic: bool = False,
        missing_ok: bool = False,
    ) -> Tree:
        """Walk a root path and return its Tree."""
        walker = TreeWalker(self._walk_options(recursive, symbolic, missing_ok))
        return asyncio.run(walker.walk(root))

    def list_paths(
        self, root: str, recursive: bool = True, symbolic: bool = False
    ) -> list[str]:
        """Walk a root path and return its sorted absolute paths."""
        walker = TreeWalker(self._walk_options(recursive, symbolic, False))
        return asyncio.run(walker.list_paths(root))

    def typeof(self, path: str) -> str:
        """Describe the kind of artifact at a path."""
        return asyncio.run(describe_kind(path))

    def hash(self, target: str) -> str:
        """Digest a local tree or an http(s) resource."""
        hasher = self._hasher()
        if is_url(target):
            logger.debug(f"Hashing remote resource {target}")
            return asyncio.run(hasher.hash_url(target))
        return asyncio.run(hasher.hash_tree(target, self.exclusions))

    def hash_list(self, root: str) -> dict[str, str]:
        """Digest every entry of a local tree."""
        return asyncio.run(self._hasher().hash_list(root, self.exclusions))

    def hash_string(self, text: str) -> str:
        """Digest a literal string."""
        return self._hasher().hash_string(text)

    def copy(self, source: str, destination: str) -> CopyStats:
        """Copy a tree into a destination directory."""
        return asyncio.run(TreeCopier(self.exclusions).copy(source, destination))

    def remove(self, root: str) -> RemoveStats:
        """Delete a tree leaf-first."""
        return asyncio.run(TreeRemover().remove(root))

    def diff(self, source: str, target: str, detail: bool = False) -> DiffReport:
        """Compare two trees (or two files)."""
        differ = TreeDiffer(content_differ=self.content_differ, detail=detail)
        return asyncio.run(differ.diff_paths(source, target, self.exclusions))

    def _walk_options(
        self, recursive: bool, symbolic: bool, missing_ok: bool
    ) -> WalkOptions:
        return WalkOptions(
            recursive=recursive,
            symbolic=symbolic,
            exclusions=self.exclusions,
            missing_ok=missing_ok,
        )

    def _hasher(self) -> ContentHasher:
        return ContentHasher(
            algorithm=self.hash_algorithm,
            batch_size=self.batch_size,
            progress_callback=self.progress_callback,
        )
