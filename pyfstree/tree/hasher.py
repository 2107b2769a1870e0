"""Content-addressable digests for files, trees and remote resources."""

import asyncio
import hashlib
import logging
from typing import Callable, Optional, Union

import httpx

from .. import fsio
from ..exceptions import TreeNetworkError
from ..utils import DEFAULT_HASH_ALGORITHM, batch_size_for_limit, descriptor_limit
from .exclusions import ExclusionFilter
from .models import Entry, EntryKind, Tree, WalkOptions
from .walker import TreeWalker

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


class ContentHasher:
    """Builds digests for single files and roll-up digests for whole trees.

    Entries are sorted by path before hashing, so the tree digest is the
    same regardless of walk order or batch size. File reads are issued in
    batches sized from the process descriptor limit, each batch fully
    drained before the next starts.

    Examples:
        >>> hasher = ContentHasher()
        >>> digest = asyncio.run(hasher.hash_tree("/project"))
        >>> listing = asyncio.run(hasher.hash_list("/project"))
    """

    def __init__(
        self,
        algorithm: str = DEFAULT_HASH_ALGORITHM,
        batch_size: Optional[int] = None,
        progress_callback: Optional[ProgressCallback] = None,
        timeout: float = 30.0,
    ):
        """Initialize content hasher.

        Args:
            algorithm: Digest algorithm name accepted by hashlib
            batch_size: Files hashed at a time; discovered from the
                descriptor limit when None
            progress_callback: Optional function(hashed, total) called after
                every batch
            timeout: Request timeout in seconds for URL hashing
        """
        # Fail early on unknown algorithms
        hashlib.new(algorithm)
        self.algorithm = algorithm
        self.batch_size = batch_size
        self.progress_callback = progress_callback
        self.timeout = timeout

    def hash_string(self, text: Union[str, bytes]) -> str:
        """Digest a literal string."""
        data = text.encode("utf-8") if isinstance(text, str) else text
        return hashlib.new(self.algorithm, data).hexdigest()

    async def hash_file(self, path: str) -> str:
        """Digest a single file's content."""
        return await fsio.digest_file(path, self.algorithm)

    async def hash_url(
        self, url: str, transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> str:
        """Download an http(s) resource and digest its body.

        Args:
            url: Address to fetch
            transport: Optional httpx transport (used by tests)

        Returns:
            Lowercase hexadecimal digest of the response body

        Raises:
            TreeNetworkError: If the request fails or returns an error status
        """
        digest = hashlib.new(self.algorithm)
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                transport=transport,
            ) as client:
                async with client.stream("GET", url) as response:
                    response.raise_for_status()
                    async for chunk in response.aiter_bytes():
                        digest.update(chunk)
        except httpx.HTTPStatusError as e:
            raise TreeNetworkError(
                f"Request failed with status {e.response.status_code}: {url}", url
            ) from e
        except httpx.HTTPError as e:
            raise TreeNetworkError(f"Request failed: {e}", url) from e
        return digest.hexdigest()

    async def hash_tree(
        self,
        source: Union[Tree, str],
        exclusions: Optional[ExclusionFilter] = None,
        missing_ok: bool = False,
    ) -> str:
        """Compute the roll-up digest of a tree.

        Args:
            source: Already walked Tree, or a path to walk first
            exclusions: Fragments to leave out when walking a path
            missing_ok: Hash a vanished root as an empty tree

        Returns:
            Lowercase hexadecimal digest
        """
        entries = await self._sorted_entries(source, exclusions, missing_ok)
        digests = await self._digest_entries(entries)
        return self.hash_string("".join(digests))

    async def hash_list(
        self,
        source: Union[Tree, str],
        exclusions: Optional[ExclusionFilter] = None,
        missing_ok: bool = False,
    ) -> dict[str, str]:
        """Compute per-entry digests.

        Returns:
            Mapping of absolute path to digest, ordered by path
        """
        entries = await self._sorted_entries(source, exclusions, missing_ok)
        digests = await self._digest_entries(entries)
        return {entry.path: digest for entry, digest in zip(entries, digests)}

    def resolve_batch_size(self, total: int) -> int:
        """Number of entries hashed concurrently for a tree of this size."""
        size = self.batch_size
        if size is None:
            size = batch_size_for_limit(descriptor_limit())
        if size is None or size < 1:
            return max(total, 1)
        return size

    async def _sorted_entries(
        self,
        source: Union[Tree, str],
        exclusions: Optional[ExclusionFilter],
        missing_ok: bool,
    ) -> list[Entry]:
        if isinstance(source, Tree):
            tree = source
        else:
            walker = TreeWalker(
                WalkOptions(
                    recursive=True,
                    symbolic=True,
                    exclusions=exclusions or ExclusionFilter(),
                    missing_ok=missing_ok,
                    follow_root=True,
                )
            )
            tree = await walker.walk(source)
        return tree.sorted_entries()

    async def _digest_entries(self, entries: list[Entry]) -> list[str]:
        total = len(entries)
        size = self.resolve_batch_size(total)
        if size < total:
            logger.debug(f"Hashing {total} entries in batches of {size}")
        digests: list[str] = []
        for start in range(0, total, size):
            batch = entries[start : start + size]
            digests.extend(await asyncio.gather(*(self._digest(e) for e in batch)))
            if self.progress_callback:
                self.progress_callback(len(digests), total)
        return digests

    async def _digest(self, entry: Entry) -> str:
        if entry.kind == EntryKind.FILE:
            return await self.hash_file(entry.path)
        return self.hash_string(entry.path)
