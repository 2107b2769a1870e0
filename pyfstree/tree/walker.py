"""Concurrent recursive directory traversal."""

import logging
import os
import stat as stat_module
from typing import Optional

from .. import fsio
from ..exceptions import TreeNotFoundError
from .fanout import FanOut, settle
from .models import ROOT_PARENT, Entry, EntryKind, EntryMetadata, Tree, WalkOptions

logger = logging.getLogger(__name__)


class TreeWalker:
    """Walks a root path and produces its complete Entry sequence.

    Every child of a directory is stat'ed concurrently. A directory records
    how many children it has when it is listed; each child that finishes
    (including excluded children) decrements that counter once, and a
    directory whose counter reaches zero completes its own parent in turn.
    The walk resolves when the root completes.

    Examples:
        >>> walker = TreeWalker(WalkOptions(exclusions=ExclusionFilter(["build"])))
        >>> tree = asyncio.run(walker.walk("/project"))
        >>> for entry in tree.sorted_entries():
        ...     print(entry.kind.value, entry.path)
    """

    def __init__(self, options: Optional[WalkOptions] = None):
        self.options = options or WalkOptions()

    async def walk(self, root: str) -> Tree:
        """Walk a root path.

        Args:
            root: File or directory to walk

        Returns:
            Tree with the root at index 0, in completion order

        Raises:
            TreeNotFoundError: If the root is missing and missing_ok is off
            TreeError: On any other stat or listing failure
        """
        root_path = os.path.abspath(root)
        tree = Tree(root_path=root_path)
        run: FanOut[Tree] = FanOut(f"walk {root_path}")
        run.spawn(self._visit(run, tree, root_path, ROOT_PARENT))
        result = await run.wait()
        logger.debug(
            f"Walked {root_path}: {len(result)} entries, {result.total_size} bytes"
        )
        return result

    async def list_paths(self, root: str) -> list[str]:
        """Walk a root path and return only its sorted absolute paths."""
        tree = await self.walk(root)
        return tree.paths()

    async def _visit(
        self, run: FanOut[Tree], tree: Tree, path: str, parent_index: int
    ) -> None:
        follow = not self.options.symbolic or (
            self.options.follow_root and parent_index == ROOT_PARENT
        )
        try:
            result = await fsio.stat(path, follow_symlinks=follow)
        except TreeNotFoundError:
            if not self.options.missing_ok:
                raise
            logger.debug(f"Skipping vanished path: {path}")
            settle(run, tree, parent_index)
            return

        kind = EntryKind.from_mode(result.st_mode)
        metadata = EntryMetadata.from_stat(result)
        descend = kind == EntryKind.DIRECTORY and (
            self.options.recursive or parent_index == ROOT_PARENT
        )
        if not descend:
            tree.add(Entry(path, kind, parent_index, metadata))
            settle(run, tree, parent_index)
            return

        try:
            names = await fsio.listdir(path)
        except TreeNotFoundError:
            if not self.options.missing_ok:
                raise
            settle(run, tree, parent_index)
            return

        index = tree.add(
            Entry(path, kind, parent_index, metadata, pending_children=len(names))
        )
        if not names:
            settle(run, tree, parent_index)
            return

        for name in names:
            child = os.path.join(path, name)
            if self.options.exclusions.matches(tree.relative_path_of(child)):
                logger.debug(f"Excluded: {child}")
                settle(run, tree, index)
            else:
                run.spawn(self._visit(run, tree, child, index))


async def describe_kind(path: str) -> str:
    """Describe the artifact at a path without following a final link.

    Returns:
        One of ``file``, ``directory``, ``symbolicLink``, ``blockDevice``,
        ``characterDevice``, ``FIFO``, ``socket``, ``unknown`` or ``missing``
    """
    try:
        mode = (await fsio.stat(path, follow_symlinks=False)).st_mode
    except TreeNotFoundError:
        return "missing"
    if stat_module.S_ISDIR(mode):
        return "directory"
    if stat_module.S_ISLNK(mode):
        return "symbolicLink"
    if stat_module.S_ISREG(mode):
        return "file"
    if stat_module.S_ISBLK(mode):
        return "blockDevice"
    if stat_module.S_ISCHR(mode):
        return "characterDevice"
    if stat_module.S_ISFIFO(mode):
        return "FIFO"
    if stat_module.S_ISSOCK(mode):
        return "socket"
    return "unknown"
