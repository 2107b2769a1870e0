"""Exceptions raised by the filesystem tree engine."""

import errno
from typing import Optional


class TreeError(Exception):
    """Base exception for all tree engine errors."""

    def __init__(self, message: str, path: Optional[str] = None):
        """Initialize the error.

        Args:
            message: Human-readable error message
            path: Filesystem path (or URL) the error relates to, if any
        """
        super().__init__(message)
        self.path = path


class TreeNotFoundError(TreeError):
    """A root or child artifact vanished or never existed."""


class TreeIOError(TreeError):
    """Permission, device or transient I/O failure."""


class TreeTypeMismatchError(TreeError):
    """An operation found a file where it needed a directory, or vice versa."""


class TreeInvariantError(TreeError):
    """A cascade counter went negative or never reached zero.

    This always indicates a bug in the engine and is never tolerated.
    """


class TreeConfigError(TreeError):
    """Configuration file or value is invalid."""


class TreeNetworkError(TreeError):
    """Fetching a remote resource failed."""


def translate_os_error(exc: OSError, path: Optional[str] = None) -> TreeError:
    """Map an OSError onto the tree error taxonomy.

    Args:
        exc: The original operating system error
        path: Path the failing call was made against

    Returns:
        A TreeError subclass instance; callers raise it ``from exc``
    """
    path = path if path is not None else exc.filename
    message = f"{exc.strerror or exc}: {path}" if path else str(exc)
    if exc.errno == errno.ENOENT:
        return TreeNotFoundError(message, path)
    if exc.errno in (errno.ENOTDIR, errno.EISDIR):
        return TreeTypeMismatchError(message, path)
    return TreeIOError(message, path)
