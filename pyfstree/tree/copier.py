"""Recursive copy built on the walker's traversal pattern."""

import logging
import os
import stat as stat_module
from typing import Optional

from .. import fsio
from ..exceptions import TreeError, TreeIOError
from .exclusions import ExclusionFilter
from .fanout import FanOut, settle
from .models import ROOT_PARENT, CopyStats, Entry, EntryKind, EntryMetadata, Tree

logger = logging.getLogger(__name__)


class TreeCopier:
    """Duplicates a tree into a destination root.

    A directory source has its contents replicated directly into the
    destination; a file or link source lands in ``destination/<name>``.
    Files keep their mode, access time and modification time. Symbolic links
    are recreated pointing at their resolved target.

    Errors abort the whole copy. The partially written file of the failing
    item is removed; siblings that already finished stay in place.
    """

    def __init__(self, exclusions: Optional[ExclusionFilter] = None):
        """Initialize tree copier.

        Args:
            exclusions: Fragments, relative to the source root, to skip
        """
        self.exclusions = exclusions or ExclusionFilter()

    async def copy(self, source: str, destination: str) -> CopyStats:
        """Copy a file, link or directory tree.

        Args:
            source: Artifact to copy
            destination: Directory to copy into (created when missing)

        Returns:
            Counts of directories, files and links copied plus total bytes

        Raises:
            TreeIOError: If the destination is the source or lies inside it
        """
        source_path = os.path.abspath(source)
        destination_path = os.path.abspath(destination)
        await self._refuse_overlap(source_path, destination_path)
        tree = Tree(root_path=source_path)
        stats = CopyStats()
        run: FanOut[Tree] = FanOut(f"copy {source_path}")
        run.spawn(
            self._copy_item(
                run, tree, stats, destination_path, source_path, ROOT_PARENT
            )
        )
        await run.wait()
        logger.debug(
            f"Copied {source_path} to {destination_path}: {stats.directories} dirs, "
            f"{stats.files} files, {stats.links} links, {stats.size} bytes"
        )
        return stats

    async def _copy_item(
        self,
        run: FanOut[Tree],
        tree: Tree,
        stats: CopyStats,
        destination: str,
        path: str,
        parent_index: int,
    ) -> None:
        relative = tree.relative_path_of(path)
        if self.exclusions.matches(relative):
            logger.debug(f"Excluded: {path}")
            settle(run, tree, parent_index)
            return

        result = await fsio.stat(path, follow_symlinks=False)
        kind = EntryKind.from_mode(result.st_mode)
        metadata = EntryMetadata.from_stat(result)
        is_root = parent_index == ROOT_PARENT

        if kind == EntryKind.DIRECTORY:
            target = destination
            if relative:
                target = os.path.join(destination, *relative.split("/"))
            names = await fsio.listdir(path)
            await fsio.makedirs(target)
            stats.directories += 1
            index = tree.add(
                Entry(path, kind, parent_index, metadata, pending_children=len(names))
            )
            if not names:
                settle(run, tree, parent_index)
                return
            for name in names:
                run.spawn(
                    self._copy_item(
                        run, tree, stats, destination, os.path.join(path, name), index
                    )
                )
            return

        if kind == EntryKind.UNKNOWN:
            logger.debug(f"Skipping unsupported artifact: {path}")
            settle(run, tree, parent_index)
            return

        if is_root:
            await fsio.makedirs(destination)
            target = os.path.join(destination, os.path.basename(path))
        else:
            target = os.path.join(destination, *relative.split("/"))

        if kind == EntryKind.FILE:
            await self._copy_file(path, target, metadata)
            stats.files += 1
            stats.size += metadata.size
        else:
            await self._copy_link(path, target)
            stats.links += 1
        tree.add(Entry(path, kind, parent_index, metadata))
        settle(run, tree, parent_index)

    async def _copy_file(self, path: str, target: str, metadata: EntryMetadata) -> None:
        try:
            await fsio.copy_file(
                path,
                target,
                mode=stat_module.S_IMODE(metadata.mode),
                atime=metadata.atime,
                mtime=metadata.mtime,
            )
        except TreeError:
            await self._discard_partial(target)
            raise

    async def _copy_link(self, path: str, target: str) -> None:
        raw = await fsio.readlink(path)
        resolved = os.path.normpath(os.path.join(os.path.dirname(path), raw))
        target_stat = await fsio.stat(resolved)
        await fsio.symlink(
            resolved,
            target,
            target_is_directory=stat_module.S_ISDIR(target_stat.st_mode),
        )

    async def _discard_partial(self, target: str) -> None:
        """Best-effort removal of a half-written destination file."""
        try:
            await fsio.unlink(target)
        except TreeError as e:
            logger.debug(f"Could not remove partial copy {target}: {e}")

    async def _refuse_overlap(self, source: str, destination: str) -> None:
        """Reject copies whose writes would land on the source itself."""
        result = await fsio.stat(source, follow_symlinks=False)
        real_destination = await fsio.realpath(destination)
        if stat_module.S_ISDIR(result.st_mode):
            real_source = await fsio.realpath(source)
            inside = (
                os.path.commonpath([real_source, real_destination]) == real_source
            )
        else:
            parent = await fsio.realpath(os.path.dirname(source))
            inside = parent == real_destination
        if inside:
            raise TreeIOError(
                f"Cannot copy {source} into itself: {destination}", destination
            )
