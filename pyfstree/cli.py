"""CLI interface for pyfstree."""

import logging
from typing import Any, Optional

import click

from .cli_progress import HashProgressDisplay
from .config import config, validate_batch_size, validate_hash_algorithm
from .engine import TreeEngine
from .exceptions import TreeError
from .output import OutputFormatter
from .report import (
    render_copy_summary,
    render_diff_report,
    render_remove_summary,
    tree_to_json,
)
from .utils import is_url, parse_exclusion_list

logger = logging.getLogger(__name__)

ignore_option = click.option(
    "--ignore",
    "-i",
    multiple=True,
    help="Path fragments to leave out, e.g. \"[node_modules, .git]\" (repeatable)",
)


def collect_exclusions(ignore: tuple[str, ...]) -> list[str]:
    """Merge --ignore values with the configured default exclusions.

    Args:
        ignore: Raw values of every --ignore flag

    Returns:
        Exclusion fragments, command line first
    """
    exclusions: list[str] = []
    for value in ignore:
        exclusions.extend(parse_exclusion_list(value))
    exclusions.extend(config.default_exclusions)
    logger.debug(f"Effective exclusions: {exclusions}")
    return exclusions


@click.group()
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output in JSON format")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option()
@click.pass_context
def main(ctx: Any, quiet: bool, json: bool, verbose: bool) -> None:
    """pyfstree - Walk, copy, remove, hash and diff directory trees."""
    ctx.ensure_object(dict)
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)
    ctx.obj["verbose"] = verbose

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("pyfstree").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)


@main.command()
@click.argument("path", type=click.Path())
@click.option("--shallow", is_flag=True, help="Do not descend below the root")
@click.option(
    "--symbolic", is_flag=True, help="Record symbolic links instead of following them"
)
@click.option("--list-only", is_flag=True, help="Print sorted absolute paths only")
@ignore_option
@click.pass_context
def walk(
    ctx: Any,
    path: str,
    shallow: bool,
    symbolic: bool,
    list_only: bool,
    ignore: tuple[str, ...],
) -> None:
    """Walk PATH and print its entries.

    Prints a JSON array of entries (path, kind, parent index, pending
    children, metadata) in traversal order, or sorted paths with --list-only.
    """
    out: OutputFormatter = ctx.obj["out"]

    try:
        engine = TreeEngine(exclusions=collect_exclusions(ignore))
        if list_only:
            paths = engine.list_paths(path, recursive=not shallow, symbolic=symbolic)
            if out.json_output:
                out.output_json(paths)
            else:
                for item in paths:
                    click.echo(item)
            return

        tree = engine.walk(path, recursive=not shallow, symbolic=symbolic)
        out.output_json(tree_to_json(tree))
    except TreeError as e:
        out.error(str(e))
        ctx.exit(1)


@main.command()
@click.argument("path", type=click.Path())
@click.pass_context
def typeof(ctx: Any, path: str) -> None:
    """Print the kind of artifact at PATH.

    One of: file, directory, symbolicLink, blockDevice, characterDevice,
    FIFO, socket, unknown or missing.
    """
    out: OutputFormatter = ctx.obj["out"]

    try:
        kind = TreeEngine().typeof(path)
    except TreeError as e:
        out.error(str(e))
        ctx.exit(1)
        return

    if out.json_output:
        out.output_json({"path": path, "type": kind})
    else:
        click.echo(kind)


@main.command(name="hash")
@click.argument("target")
@click.option(
    "--list", "list_mode", is_flag=True, help="Print the digest of every entry"
)
@click.option(
    "--string", "string_mode", is_flag=True, help="Hash TARGET as a literal string"
)
@click.option(
    "--batch-size",
    "-b",
    type=int,
    default=None,
    help="Files hashed at a time (default: from the open file limit)",
)
@click.option(
    "--algorithm",
    "-a",
    default=None,
    help="Digest algorithm (default: from configuration, sha512)",
)
@ignore_option
@click.pass_context
def hash_command(
    ctx: Any,
    target: str,
    list_mode: bool,
    string_mode: bool,
    batch_size: Optional[int],
    algorithm: Optional[str],
    ignore: tuple[str, ...],
) -> None:
    """Print the content hash of TARGET.

    TARGET may be a file, a directory tree, or an http(s) URL. Trees hash
    the sorted per-entry digests, so the result does not depend on traversal
    order or batch size.
    """
    out: OutputFormatter = ctx.obj["out"]

    try:
        algorithm = validate_hash_algorithm(algorithm or config.hash_algorithm)
        if batch_size is not None:
            batch_size = validate_batch_size(batch_size)
        else:
            batch_size = config.batch_size
        exclusions = collect_exclusions(ignore)

        if string_mode:
            digest = TreeEngine(hash_algorithm=algorithm).hash_string(target)
            _print_digest(out, target, digest)
            return

        if list_mode and is_url(target):
            out.error("--list cannot be used with a URL")
            ctx.exit(1)
            return

        show_progress = not out.quiet and not out.json_output and not is_url(target)
        if show_progress:
            with HashProgressDisplay() as display:
                engine = TreeEngine(
                    exclusions=exclusions,
                    hash_algorithm=algorithm,
                    batch_size=batch_size,
                    progress_callback=display.create_callback(),
                )
                result = _run_hash(engine, target, list_mode)
        else:
            engine = TreeEngine(
                exclusions=exclusions,
                hash_algorithm=algorithm,
                batch_size=batch_size,
            )
            result = _run_hash(engine, target, list_mode)
    except TreeError as e:
        out.error(str(e))
        ctx.exit(1)
        return

    if isinstance(result, dict):
        out.output_json(result)
    else:
        _print_digest(out, target, result)


def _run_hash(engine: TreeEngine, target: str, list_mode: bool) -> Any:
    if list_mode:
        return engine.hash_list(target)
    return engine.hash(target)


def _print_digest(out: OutputFormatter, target: str, digest: str) -> None:
    if out.json_output:
        out.output_json({"target": target, "hash": digest})
    else:
        click.echo(digest)


@main.command()
@click.argument("source", type=click.Path())
@click.argument("destination", type=click.Path())
@ignore_option
@click.pass_context
def copy(ctx: Any, source: str, destination: str, ignore: tuple[str, ...]) -> None:
    """Copy the tree at SOURCE into DESTINATION.

    The contents of a directory SOURCE land directly in DESTINATION; a file
    SOURCE is copied to DESTINATION/<name>. File modes and timestamps are
    preserved and symbolic links are recreated.
    """
    out: OutputFormatter = ctx.obj["out"]

    try:
        engine = TreeEngine(exclusions=collect_exclusions(ignore))
        stats = engine.copy(source, destination)
    except TreeError as e:
        out.error(str(e))
        ctx.exit(1)
        return

    if out.json_output:
        out.output_json(
            {"source": source, "destination": destination, **stats.to_dict()}
        )
        return
    for line in render_copy_summary(stats, source, destination):
        if not out.quiet:
            out.print(line)


@main.command()
@click.argument("path", type=click.Path())
@click.pass_context
def remove(ctx: Any, path: str) -> None:
    """Delete the tree at PATH, deepest entries first.

    A missing PATH is not an error.
    """
    out: OutputFormatter = ctx.obj["out"]

    try:
        stats = TreeEngine().remove(path)
    except TreeError as e:
        out.error(str(e))
        ctx.exit(1)
        return

    if out.json_output:
        out.output_json({"path": path, **stats.to_dict()})
        return
    for line in render_remove_summary(stats, path):
        if not out.quiet:
            out.print(line)


@main.command()
@click.argument("source", type=click.Path())
@click.argument("target", type=click.Path())
@click.option(
    "--detail", "-d", is_flag=True, help="Show line-level diffs of modified files"
)
@ignore_option
@click.pass_context
def diff(
    ctx: Any, source: str, target: str, detail: bool, ignore: tuple[str, ...]
) -> None:
    """Compare the tree at SOURCE with the tree at TARGET.

    Reports inserted and deleted directories, symbolic links and files, then
    files whose contents differ. Entries below an inserted or deleted
    directory are not listed separately.
    """
    out: OutputFormatter = ctx.obj["out"]

    try:
        engine = TreeEngine(exclusions=collect_exclusions(ignore))
        report = engine.diff(source, target, detail=detail)
    except TreeError as e:
        out.error(str(e))
        ctx.exit(1)
        return

    if out.json_output:
        out.output_json(report.to_dict())
        return
    if report.is_identical:
        out.success("No differences found")
        return
    for line in render_diff_report(report, detail=detail):
        out.print(line)


@main.command(name="config")
@click.option("--show", is_flag=True, help="Show the effective configuration")
@click.option(
    "--ignore",
    "-i",
    multiple=True,
    help="Set the default exclusions (repeatable, comma-separated)",
)
@click.option("--hash-algorithm", default=None, help="Set the digest algorithm")
@click.option(
    "--batch-size",
    type=int,
    default=None,
    help="Set the hashing batch size (0 restores the open file limit)",
)
@click.pass_context
def config_command(
    ctx: Any,
    show: bool,
    ignore: tuple[str, ...],
    hash_algorithm: Optional[str],
    batch_size: Optional[int],
) -> None:
    """Show or update persistent settings.

    Settings are stored in ~/.config/pyfstree/config.json. Environment
    variables (PYFSTREE_IGNORE, PYFSTREE_HASH_ALGORITHM, PYFSTREE_BATCH_SIZE)
    take precedence over the file.
    """
    out: OutputFormatter = ctx.obj["out"]
    changed = False

    try:
        if ignore:
            exclusions: list[str] = []
            for value in ignore:
                exclusions.extend(parse_exclusion_list(value))
            config.save_default_exclusions(exclusions)
            changed = True
        if hash_algorithm is not None:
            config.save_hash_algorithm(hash_algorithm)
            changed = True
        if batch_size is not None:
            config.save_batch_size(batch_size or None)
            changed = True

        if changed:
            out.success(f"Configuration saved to {config.get_config_path()}")
        if not show and changed:
            return

        settings = config.to_dict()
    except TreeError as e:
        out.error(str(e))
        ctx.exit(1)
        return

    if out.json_output:
        out.output_json(settings)
        return
    out.print_summary(
        "pyfstree Configuration",
        [
            ("Config file", settings["config_path"]),
            (
                "Default exclusions",
                ", ".join(settings["default_exclusions"]) or "(none)",
            ),
            ("Hash algorithm", settings["hash_algorithm"]),
            (
                "Batch size",
                str(settings["batch_size"] or "from open file limit"),
            ),
        ],
    )


if __name__ == "__main__":
    main()
