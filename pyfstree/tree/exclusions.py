"""Path-prefix exclusion predicate consulted during traversal."""

from collections.abc import Iterable
from typing import Optional


def normalize_fragment(fragment: str) -> str:
    """Normalize an exclusion fragment to forward slashes without edges.

    Examples:
        >>> normalize_fragment("./node_modules/")
        'node_modules'
        >>> normalize_fragment("build\\\\cache")
        'build/cache'
    """
    fragment = fragment.strip().replace("\\", "/")
    while fragment.startswith("./"):
        fragment = fragment[2:]
    return fragment.strip("/")


class ExclusionFilter:
    """Set of path fragments, relative to the walked root, to leave out.

    A relative path is excluded when it equals a fragment or lies beneath
    one. Excluding a directory therefore prunes its whole subtree.

    Examples:
        >>> exclusions = ExclusionFilter(["node_modules", "build/tmp"])
        >>> exclusions.matches("node_modules/x.txt")
        True
        >>> exclusions.matches("node_modules_old")
        False
    """

    def __init__(self, fragments: Optional[Iterable[str]] = None):
        self.fragments: frozenset[str] = frozenset(
            f for f in (normalize_fragment(x) for x in fragments or ()) if f
        )

    def __bool__(self) -> bool:
        return bool(self.fragments)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ExclusionFilter):
            return NotImplemented
        return self.fragments == other.fragments

    def __hash__(self) -> int:
        return hash(self.fragments)

    def __repr__(self) -> str:
        return f"ExclusionFilter({sorted(self.fragments)!r})"

    def matches(self, relative_path: str) -> bool:
        """Check whether a root-relative path (forward slashes) is excluded."""
        if not self.fragments or not relative_path:
            return False
        if relative_path in self.fragments:
            return True
        # Walk up the ancestors so lookup stays a set membership test
        parts = relative_path.split("/")
        for depth in range(1, len(parts)):
            if "/".join(parts[:depth]) in self.fragments:
                return True
        return False

    def extend(self, fragments: Iterable[str]) -> "ExclusionFilter":
        """Return a new filter holding these fragments and the given ones."""
        return ExclusionFilter([*self.fragments, *fragments])
