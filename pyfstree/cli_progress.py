"""CLI progress display for hashing.

This module provides a Rich-based progress bar fed by the batch progress
callback of the content hasher.
"""

from typing import Optional

from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from .tree.hasher import ProgressCallback


class HashProgressDisplay:
    """Rich-based progress display for hashing a tree.

    The bar advances once per completed batch, showing entries hashed out
    of the total number of entries in the tree.
    """

    def __init__(self) -> None:
        """Initialize the progress display."""
        self._progress: Optional[Progress] = None
        self._task: Optional[TaskID] = None

    def create_callback(self) -> ProgressCallback:
        """Create a progress callback that updates this display."""
        return self._handle_progress

    def _handle_progress(self, hashed: int, total: int) -> None:
        """Handle a batch completion from the hasher.

        Args:
            hashed: Entries hashed so far
            total: Entries in the tree
        """
        if self._progress is None or self._task is None:
            return
        self._progress.update(self._task, completed=hashed, total=total)

    def __enter__(self) -> "HashProgressDisplay":
        """Enter context manager - start progress display."""
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            transient=True,
            refresh_per_second=4,
        )
        self._progress.__enter__()
        self._task = self._progress.add_task("Hashing...", total=None)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit context manager - stop progress display."""
        if self._progress is not None:
            self._progress.__exit__(exc_type, exc_val, exc_tb)
            self._progress = None
            self._task = None
