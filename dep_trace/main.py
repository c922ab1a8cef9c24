"""dep-trace CLI - find why a package is installed in node_modules."""

import asyncio
import json
import logging
import sys
import time
from pathlib import Path

import click

from .console import console
from .console import err_console
from .errors import EntryPackageNotFoundError
from .logging_setup import init_logging
from .models import SearchResult
from .search import trace
from .settings import SettingsManager
from .utils import escape_markup
from .utils import format_error_message

logger = logging.getLogger(__name__)


def _warn(message: str) -> None:
    err_console.print(f"[yellow]⚠️ {escape_markup(message)}[/yellow]")


def _parse_depth(ctx: click.Context, param: click.Parameter, value: str | None) -> int | None:
    """Validate --depth/--deep; invalid values are warned about and ignored."""
    if value is None:
        return None
    try:
        depth = int(value)
    except ValueError:
        _warn(f"Ignoring invalid depth '{value}': expected a non-negative integer")
        return None
    if depth < 0:
        _warn(f"Ignoring invalid depth '{value}': expected a non-negative integer")
        return None
    return depth


def _split_names(tokens: tuple[str, ...]) -> list[str]:
    """Drop unrecognized flag tokens from the positional names."""
    names = []
    for token in tokens:
        if token.startswith("-"):
            _warn(f"Ignoring unknown option '{token}'")
            continue
        names.append(token)
    return names


def _render_results(results: list[SearchResult]) -> None:
    if not results:
        console.print("[red]Not Found[/red]")
        return

    console.print("[green]Found:[/green]")
    for result in results:
        console.print(f"[bold]Location:[/bold] [cyan]{escape_markup(result.location)}[/cyan]", soft_wrap=True)
        console.print(f"[bold]Through:[/bold] {escape_markup(' > '.join(result.through))}\n", soft_wrap=True)


@click.command(context_settings={"ignore_unknown_options": True, "help_option_names": ["-h", "--help"]})
@click.version_option(package_name="dep-trace")
@click.argument("names", nargs=-1, type=click.UNPROCESSED)
@click.option(
    "--depth",
    "--deep",
    "depth",
    metavar="N",
    default=None,
    callback=_parse_depth,
    help="Maximum fan-out scan depth (default: 5)",
)
@click.option(
    "--cwd",
    "-C",
    "cwd",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Directory to search from (default: current directory)",
)
@click.option("--cache-ttl", type=click.FloatRange(min=0), default=None, help="Filesystem cache TTL in seconds")
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.option("--log-file", type=click.Path(dir_okay=False), default=None, help="Append JSONL logs to this file")
def main(
    names: tuple[str, ...],
    depth: int | None,
    cwd: Path | None,
    cache_ttl: float | None,
    as_json: bool,
    verbose: bool,
    log_file: str | None,
):
    """Find where NAMES... resolves in the dependency tree and why.

    The last name is the package to locate; earlier names form the expected
    chain from the current package, e.g. `dep-trace webpack terser`.
    """
    init_logging(verbose=verbose, log_path=log_file)

    chain = _split_names(names)
    if not chain:
        raise click.UsageError("Provide at least one package name.")

    entry_dir = (cwd or Path.cwd()).resolve()
    config = SettingsManager(project_dir=entry_dir).build_config(max_depth=depth, cache_ttl=cache_ttl)
    logger.debug(f"Tracing {' > '.join(chain)} from {entry_dir} (max depth {config.max_depth})")

    start = time.perf_counter()
    if not as_json:
        console.print("Start scanning ...")

    try:
        results = asyncio.run(trace(entry_dir, chain, config))
    except EntryPackageNotFoundError as e:
        err_console.print(f"[red]Error:[/red] {escape_markup(format_error_message(e, include_type=False))}", soft_wrap=True)
        sys.exit(1)
    except (OSError, RecursionError) as e:
        err_console.print(f"[red]Error:[/red] {escape_markup(format_error_message(e))}", soft_wrap=True)
        sys.exit(1)
    except KeyboardInterrupt as e:
        console.print(f"\n[yellow]{escape_markup(format_error_message(e, include_type=False))}[/yellow]")
        sys.exit(130)

    elapsed_ms = round((time.perf_counter() - start) * 1000)

    if as_json:
        payload = {
            "entry": str(entry_dir),
            "chain": chain,
            "results": [result.to_dict() for result in results],
            "elapsed_ms": elapsed_ms,
        }
        click.echo(json.dumps(payload, indent=2))
        return

    _render_results(results)
    console.print(f"[dim]Cost: {elapsed_ms}ms[/dim]")


if __name__ == "__main__":
    main()
