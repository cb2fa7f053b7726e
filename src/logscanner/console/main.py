"""Command-line interface for logscanner.

``scan`` walks a directory tree, searches files with the selected
extensions for any of the given keywords and prints the matches as JSON
(or writes them to a file).  ``show-config`` prints the effective
configuration after merging defaults, the config file and options.

Standard output carries only the JSON document; progress and errors go to
standard error.
"""

from __future__ import annotations

import json
import sys
from collections import Counter
from pathlib import Path
from typing import Any, Dict, List, NoReturn, Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..config_loader import load_config, merge_config
from ..diagnostics.sink import ConsoleDiagnostics
from ..errors import ConfigurationError, LogScannerError
from ..output.writer import resolve_output_path, serialize_matches, write_output
from ..scanning.request import ScanRequest
from ..scanning.scanner import Match
from ..supervisor.manager import scan_tree


console = Console()
err_console = Console(stderr=True)


def _print_error(error: LogScannerError) -> None:
    err_console.print(f'[red]Error ({error.kind}): {escape(str(error))}[/red]', highlight=False, soft_wrap=True)


def _fail(error: LogScannerError) -> NoReturn:
    _print_error(error)
    sys.exit(1)


def _effective_config(config_path: Optional[str], **overrides: Any) -> Dict[str, Any]:
    file_cfg = load_config(Path(config_path)) if config_path else None
    return merge_config(file_cfg, overrides)


def _summary_table(matches: List[Match]) -> Table:
    table = Table(title='Matches per file')
    table.add_column('File')
    table.add_column('Matches', justify='right')
    for path, count in sorted(Counter(m.file for m in matches).items()):
        table.add_row(escape(path), str(count))
    return table


config_option = click.option(
    '--config', 'config_path', type=click.Path(exists=True, dir_okay=False), default=None,
    envvar='LOGSCANNER_CONFIG', help='Optional YAML configuration file.',
)


@click.group()
def cli() -> None:
    """logscanner CLI."""
    pass


@cli.command()
@config_option
@click.option('--start-dir', default=None, envvar='LOGSCANNER_START_DIR', help='Starting directory of the search. [default: /]')
@click.option('--ext', default=None, envvar='LOGSCANNER_EXT', help='Comma-separated file extensions to search. [default: .log,.csv]')
@click.option('--keyword', default=None, envvar='LOGSCANNER_KEYWORD', help='Comma-separated keywords to search for (required).')
@click.option('--output', default=None, envvar='LOGSCANNER_OUTPUT', help='Path to save the results; ".json" is appended if missing.')
@click.option('--workers', type=click.IntRange(min=1), default=None, envvar='LOGSCANNER_WORKERS', help='Workers to process files. [default: 8]')
@click.option('--queue-size', type=click.IntRange(min=1), default=None, envvar='LOGSCANNER_QUEUE_SIZE', help='Pending paths buffered ahead of the workers. [default: 100]')
@click.option('--quiet', is_flag=True, help='Hide per-file progress notices.')
@click.option('--summary', is_flag=True, help='Print a per-file match count table to stderr.')
def scan(
    config_path: Optional[str],
    start_dir: Optional[str],
    ext: Optional[str],
    keyword: Optional[str],
    output: Optional[str],
    workers: Optional[int],
    queue_size: Optional[int],
    quiet: bool,
    summary: bool,
) -> None:
    """Search files under the start directory for keywords."""
    try:
        cfg = _effective_config(
            config_path,
            start_dir=start_dir,
            extensions=ext,
            keywords=keyword,
            output=output,
            workers=workers,
            queue_size=queue_size,
        )
        request = ScanRequest(
            start_dir=cfg['start_dir'],
            extensions=tuple(cfg['extensions']),
            keywords=tuple(cfg['keywords']),
            workers=cfg['workers'],
            queue_size=cfg['queue_size'],
        )
    except ConfigurationError as exc:
        _fail(exc)

    err_console.print(
        f"Searching files in '{escape(request.start_dir)}' with extensions "
        f"{escape(str(list(request.extensions)))} and keywords {escape(str(list(request.keywords)))}",
        highlight=False,
        soft_wrap=True,
    )
    report = scan_tree(request, ConsoleDiagnostics(err_console, show_progress=not quiet))

    try:
        payload = serialize_matches(report.matches)
        if cfg['output']:
            written = write_output(payload, resolve_output_path(cfg['output']))
            err_console.print(f'Results written to {escape(str(written))}', highlight=False, soft_wrap=True)
        else:
            click.echo(payload)
    except LogScannerError as exc:
        _fail(exc)

    if summary:
        err_console.print(_summary_table(report.matches))

    for worker_error in report.worker_errors:
        _print_error(worker_error)
    if report.error is not None:
        _fail(report.error)
    if report.worker_errors:
        sys.exit(1)


@cli.command()
@config_option
def show_config(config_path: Optional[str]) -> None:
    """Print the effective configuration."""
    try:
        cfg = _effective_config(config_path)
    except ConfigurationError as exc:
        _fail(exc)
    console.print_json(json.dumps(cfg, indent=2))


if __name__ == '__main__':  # pragma: no cover
    cli()
