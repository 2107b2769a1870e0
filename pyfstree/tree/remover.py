"""Leaf-to-root deletion of a walked tree."""

import asyncio
import errno
import logging

from .. import fsio
from ..exceptions import TreeIOError, TreeNotFoundError
from ..utils import DEFAULT_REMOVE_RETRIES, DEFAULT_REMOVE_RETRY_DELAY
from .fanout import FanOut
from .models import ROOT_PARENT, EntryKind, RemoveStats, Tree, WalkOptions
from .walker import TreeWalker

logger = logging.getLogger(__name__)


class TreeRemover:
    """Deletes every artifact under a root, then the root itself.

    The tree is walked first without following links. Files, links and
    empty directories are deleted straight away; any other directory is
    deleted once its last child is gone.
    """

    def __init__(
        self,
        max_retries: int = DEFAULT_REMOVE_RETRIES,
        retry_delay: float = DEFAULT_REMOVE_RETRY_DELAY,
    ):
        """Initialize tree remover.

        Args:
            max_retries: Attempts for a directory that still reports entries
            retry_delay: Seconds to wait between those attempts
        """
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    async def remove(self, root: str) -> RemoveStats:
        """Remove a file, link or directory tree.

        A root that does not exist is treated as already removed.

        Returns:
            Counts of what was removed
        """
        walker = TreeWalker(WalkOptions(symbolic=True, missing_ok=True))
        tree = await walker.walk(root)
        stats = RemoveStats()
        if tree.is_empty:
            logger.debug(f"Nothing to remove at {tree.root_path}")
            return stats

        tree.rearm()
        run: FanOut[Tree] = FanOut(f"remove {tree.root_path}")
        for index, entry in enumerate(tree):
            if entry.kind == EntryKind.DIRECTORY:
                stats.directories += 1
            elif entry.kind == EntryKind.LINK:
                stats.links += 1
            elif entry.kind == EntryKind.FILE:
                stats.files += 1
                stats.size += entry.metadata.size
            if entry.kind != EntryKind.DIRECTORY or entry.pending_children == 0:
                run.spawn(self._destroy(run, tree, index))
        await run.wait()
        logger.debug(
            f"Removed {tree.root_path}: {stats.directories} dirs, {stats.files} files, "
            f"{stats.links} links"
        )
        return stats

    async def _destroy(self, run: FanOut[Tree], tree: Tree, index: int) -> None:
        entry = tree[index]
        if entry.kind == EntryKind.DIRECTORY:
            await self._rmdir(entry.path)
        else:
            try:
                await fsio.unlink(entry.path)
            except TreeNotFoundError:
                # Already gone
                pass

        if entry.parent_index == ROOT_PARENT:
            run.finish(tree)
        elif tree.release_child(entry.parent_index):
            run.spawn(self._destroy(run, tree, entry.parent_index))

    async def _rmdir(self, path: str) -> None:
        for attempt in range(self.max_retries + 1):
            try:
                await fsio.rmdir(path)
                return
            except TreeNotFoundError:
                return
            except TreeIOError as e:
                cause = e.__cause__
                if not isinstance(cause, OSError) or cause.errno not in (
                    errno.ENOTEMPTY,
                    errno.EEXIST,
                ):
                    raise
                if attempt >= self.max_retries:
                    raise
                logger.debug(f"Directory not empty yet, retrying: {path}")
                await asyncio.sleep(self.retry_delay)
