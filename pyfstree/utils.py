"""Utility functions for the tree engine."""

import math
import re
from typing import Optional

try:
    import resource
except ImportError:  # Windows has no resource module
    resource = None  # type: ignore[assignment]

# =============================================================================
# Constants for file operations
# =============================================================================

# Chunk size for streamed reads and copies (1 MB)
DEFAULT_CHUNK_SIZE: int = 1024 * 1024

# Default digest algorithm for content hashing
DEFAULT_HASH_ALGORITHM: str = "sha512"

# Share of the descriptor limit one hashing batch may use
DESCRIPTOR_SHARE: int = 5

# Retry configuration for "directory not empty" races during removal
DEFAULT_REMOVE_RETRIES: int = 10
DEFAULT_REMOVE_RETRY_DELAY: float = 0.01  # seconds

_URL_PATTERN = re.compile(r"^https?://", re.IGNORECASE)


# =============================================================================
# Text formatting utilities
# =============================================================================


def commas(number: int) -> str:
    """Format an integer with thousands separators.

    Examples:
        >>> commas(1234567)
        '1,234,567'
        >>> commas(12)
        '12'
    """
    return f"{number:,}"


def plural(count: int, singular: str, plural_form: Optional[str] = None) -> str:
    """Pick the singular or plural noun for a count.

    Examples:
        >>> plural(1, "file")
        'file'
        >>> plural(2, "directory", "directories")
        'directories'
    """
    if count == 1:
        return singular
    return plural_form if plural_form is not None else f"{singular}s"


# =============================================================================
# Resource limits
# =============================================================================


def descriptor_limit() -> Optional[int]:
    """Return the soft open-file limit of this process.

    Returns:
        The limit, or None when it is unlimited or cannot be discovered
    """
    if resource is None:
        return None
    try:
        soft, _hard = resource.getrlimit(resource.RLIMIT_NOFILE)
    except (ValueError, OSError):
        return None
    if soft == resource.RLIM_INFINITY or soft <= 0:
        return None
    return soft


def batch_size_for_limit(limit: Optional[int]) -> Optional[int]:
    """Compute the hashing batch size for a descriptor limit.

    Args:
        limit: Open-file limit, or None when unlimited

    Returns:
        ``ceil(limit / 5)``, or None for unbounded batches

    Examples:
        >>> batch_size_for_limit(1024)
        205
        >>> batch_size_for_limit(None) is None
        True
    """
    if limit is None or limit < 1:
        return None
    return math.ceil(limit / DESCRIPTOR_SHARE)


# =============================================================================
# Address utilities
# =============================================================================


def is_url(value: str) -> bool:
    """Check if a value is an http(s) address rather than a local path.

    Examples:
        >>> is_url("https://example.com/file.js")
        True
        >>> is_url("/home/user/file.js")
        False
    """
    return bool(_URL_PATTERN.match(value))


def parse_exclusion_list(value: str) -> list[str]:
    """Split a comma-separated exclusion value into fragments.

    The value may be wrapped in a bracket pair, as in ``[node_modules, .git]``.

    Examples:
        >>> parse_exclusion_list("[node_modules, .git]")
        ['node_modules', '.git']
        >>> parse_exclusion_list("build")
        ['build']
    """
    value = value.strip()
    if value.startswith("[") and value.endswith("]"):
        value = value[1:-1]
    return [item.strip() for item in value.split(",") if item.strip()]
