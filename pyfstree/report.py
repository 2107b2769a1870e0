"""Text and structured rendering of tree operation results."""

from typing import Any

from rich.markup import escape

from .tree import CopyStats, DiffReport, EntryKind, RemoveStats, Tree
from .utils import commas, plural

_NOUNS = {
    EntryKind.DIRECTORY: ("directory", "directories"),
    EntryKind.LINK: ("symbolic link", "symbolic links"),
    EntryKind.FILE: ("file", "files"),
}

# Section order of the plain-text diff report
REPORT_ORDER = (EntryKind.DIRECTORY, EntryKind.LINK, EntryKind.FILE)


def _section(paths: list[str], noun: tuple[str, str], verb: str) -> list[str]:
    lines = [f"{len(paths)} {plural(len(paths), *noun)} {verb}."]
    for path in paths:
        lines.append(f"  [bold]*[/bold] {escape(path)}")
    lines.append("")
    return lines


def render_diff_report(report: DiffReport, detail: bool = False) -> list[str]:
    """Render a diff report as rich markup lines.

    Sections come in a fixed order: directories, symbolic links, files
    (deleted then inserted for each), then modified files.
    """
    lines: list[str] = []
    for kind in REPORT_ORDER:
        noun = _NOUNS[kind]
        lines.extend(_section(report.deleted(kind), noun, "[red]deleted[/red]"))
        lines.extend(
            _section(report.inserted(kind), noun, "[bold green]inserted[/bold green]")
        )
    modified = list(report.modified_files)
    lines.extend(
        _section(modified, _NOUNS[EntryKind.FILE], "[bold cyan]modified[/bold cyan]")
    )
    if detail:
        for path, content in report.content_diffs.items():
            lines.append(
                f"[bold]{escape(path)}[/bold]: {content.changes} "
                f"{plural(content.changes, 'line')} changed"
            )
            lines.extend(escape(line) for line in content.text.splitlines())
            lines.append("")
    return lines


def _counts(stats: CopyStats) -> str:
    return (
        f"{stats.directories} {plural(stats.directories, 'directory', 'directories')}, "
        f"{stats.files} {plural(stats.files, 'file')}, and "
        f"{stats.links} {plural(stats.links, 'symbolic link')} at "
        f"{commas(stats.size)} bytes"
    )


def render_copy_summary(stats: CopyStats, source: str, destination: str) -> list[str]:
    return [
        f"Copied [green]{_counts(stats)}[/green].",
        f"Copied [cyan]{escape(source)}[/cyan] to [green]{escape(destination)}[/green]",
    ]


def render_remove_summary(stats: RemoveStats, root: str) -> list[str]:
    return [
        f"Removed [red]{_counts(stats)}[/red].",
        f"Removed [cyan]{escape(root)}[/cyan]",
    ]


def tree_to_json(tree: Tree) -> list[list[Any]]:
    """Entry tuples in traversal order, ready for ``json.dumps``."""
    return [
        [path, kind.value, parent, pending, metadata.to_dict()]
        for path, kind, parent, pending, metadata in (e.as_tuple() for e in tree)
    ]
