"""Non-blocking wrappers over operating system filesystem primitives.

Every call is dispatched to the default executor with ``asyncio.to_thread``
so the event loop stays free while the OS works. Errors are translated into
the tree error taxonomy at this boundary.
"""

import asyncio
import hashlib
import os
import shutil
from typing import Callable, TypeVar

from .exceptions import translate_os_error
from .utils import DEFAULT_CHUNK_SIZE

T = TypeVar("T")


async def _call(func: Callable[..., T], path: str, *args, **kwargs) -> T:
    try:
        return await asyncio.to_thread(func, path, *args, **kwargs)
    except OSError as e:
        raise translate_os_error(e, path) from e


async def stat(path: str, follow_symlinks: bool = True) -> os.stat_result:
    """Stat a path, optionally without following a final symbolic link."""
    return await _call(os.stat, path, follow_symlinks=follow_symlinks)


async def listdir(path: str) -> list[str]:
    """List the names inside a directory."""
    return await _call(os.listdir, path)


async def makedirs(path: str) -> None:
    """Create a directory and any missing parents; existing ones are fine."""
    await _call(os.makedirs, path, exist_ok=True)


async def readlink(path: str) -> str:
    """Return the raw target of a symbolic link."""
    return await _call(os.readlink, path)


async def realpath(path: str) -> str:
    """Canonical path with every symbolic link resolved."""
    return await _call(os.path.realpath, path)


async def symlink(target: str, path: str, target_is_directory: bool = False) -> None:
    """Create a symbolic link at ``path`` pointing to ``target``."""

    def _symlink(link_path: str) -> None:
        os.symlink(target, link_path, target_is_directory=target_is_directory)

    await _call(_symlink, path)


async def unlink(path: str) -> None:
    """Remove a file or symbolic link."""
    await _call(os.unlink, path)


async def rmdir(path: str) -> None:
    """Remove an empty directory."""
    await _call(os.rmdir, path)


async def read_bytes(path: str) -> bytes:
    """Read a whole file into memory."""

    def _read(file_path: str) -> bytes:
        with open(file_path, "rb") as f:
            return f.read()

    return await _call(_read, path)


async def copy_file(
    source: str,
    destination: str,
    mode: int,
    atime: float,
    mtime: float,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> None:
    """Stream a file to a new location and apply its mode and timestamps.

    Args:
        source: File to read
        destination: File to create or truncate
        mode: Permission bits to apply to the copy
        atime: Access time to apply (Unix timestamp)
        mtime: Modification time to apply (Unix timestamp)
        chunk_size: Bytes per read
    """

    def _copy(src: str) -> None:
        with open(src, "rb") as reader:
            try:
                with open(destination, "wb") as writer:
                    shutil.copyfileobj(reader, writer, chunk_size)
                os.chmod(destination, mode)
                os.utime(destination, (atime, mtime))
            except OSError as e:
                raise translate_os_error(e, destination) from e

    await _call(_copy, source)


async def digest_file(
    path: str, algorithm: str, chunk_size: int = DEFAULT_CHUNK_SIZE
) -> str:
    """Digest a file's content without loading it fully into memory.

    Args:
        path: File to digest
        algorithm: Name accepted by ``hashlib.new``
        chunk_size: Bytes per read

    Returns:
        Lowercase hexadecimal digest
    """

    def _digest(file_path: str) -> str:
        digest = hashlib.new(algorithm)
        with open(file_path, "rb") as f:
            for chunk in iter(lambda: f.read(chunk_size), b""):
                digest.update(chunk)
        return digest.hexdigest()

    return await _call(_digest, path)
