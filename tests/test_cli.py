"""Tests for the ``logscanner`` command line."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Iterator, Sequence

import pytest
from click.testing import CliRunner

from logscanner.console import main
from logscanner.errors import TraversalError
from logscanner.supervisor import manager


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def test_scan_prints_json_to_stdout(runner: CliRunner, tmp_path: Path, write_file) -> None:
    """A single matching line is printed as a JSON array."""
    path = write_file('a.log', 'hello\nERROR: disk full\nok\n')
    result = runner.invoke(main.cli, ['scan', '--start-dir', str(tmp_path), '--keyword', 'error'])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == [{'file': str(path), 'line': 2, 'text': 'ERROR: disk full'}]
    assert 'Processing file' in result.stderr
    assert 'Searching files in' in result.stderr


def test_quiet_hides_progress(runner: CliRunner, tmp_path: Path, write_file) -> None:
    write_file('a.log', 'error\n')
    result = runner.invoke(main.cli, ['scan', '--start-dir', str(tmp_path), '--keyword', 'error', '--quiet'])
    assert result.exit_code == 0
    assert 'Processing file' not in result.stderr


@pytest.mark.parametrize(
    'args',
    [
        ['--ext', ' , ', '--keyword', 'error'],
        ['--keyword', ' '],
        [],
    ],
)
def test_empty_lists_exit_before_scanning(
    runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, args: list[str]
) -> None:
    """Empty extensions or keywords are refused before any traversal."""

    def no_scan(*args, **kwargs):
        raise AssertionError('scan should not start')

    monkeypatch.setattr(main, 'scan_tree', no_scan)
    result = runner.invoke(main.cli, ['scan', '--start-dir', str(tmp_path), *args])
    assert result.exit_code == 1
    assert 'Error (config)' in result.stderr
    assert 'you must specify both extensions and keywords' in result.stderr
    assert result.stdout == ''


def test_output_file_gets_json_suffix(runner: CliRunner, tmp_path: Path, write_file) -> None:
    """``--output results`` writes ``results.json``."""
    write_file('logs/a.log', 'an error occurred\n')
    target = tmp_path / 'results'
    result = runner.invoke(
        main.cli,
        ['scan', '--start-dir', str(tmp_path / 'logs'), '--keyword', 'ERROR', '--output', str(target)],
    )
    assert result.exit_code == 0, result.output
    written = tmp_path / 'results.json'
    assert written.exists()
    assert not target.exists()
    assert json.loads(written.read_text(encoding='utf-8'))[0]['text'] == 'an error occurred'
    assert 'Results written to' in result.stderr
    assert result.stdout == ''


def test_output_write_failure_exits_nonzero(runner: CliRunner, tmp_path: Path, write_file) -> None:
    write_file('a.log', 'error\n')
    target = tmp_path / 'no' / 'such' / 'dir' / 'out'
    result = runner.invoke(
        main.cli, ['scan', '--start-dir', str(tmp_path), '--keyword', 'error', '--output', str(target)]
    )
    assert result.exit_code == 1
    assert 'Error writing to output file' in result.stderr


def test_traversal_error_emits_partial_results_and_fails(
    runner: CliRunner, tmp_path: Path, write_file, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Matches found before the walk failed are printed, then exit 1."""
    first = write_file('first.log', 'error one\n')

    def failing_discover(start_dir: str, extensions: Sequence[str]) -> Iterator[str]:
        yield str(first)
        raise TraversalError('locked: Permission denied', path='locked')

    monkeypatch.setattr(manager, 'discover_files', failing_discover)
    result = runner.invoke(main.cli, ['scan', '--start-dir', str(tmp_path), '--keyword', 'error'])

    assert result.exit_code == 1
    assert json.loads(result.stdout) == [{'file': str(first), 'line': 1, 'text': 'error one'}]
    assert 'Error (traversal)' in result.stderr


def test_unreadable_file_does_not_change_exit_code(
    runner: CliRunner, tmp_path: Path, write_file, monkeypatch: pytest.MonkeyPatch
) -> None:
    ghost = str(tmp_path / 'ghost.log')

    def ghost_discover(start_dir: str, extensions: Sequence[str]) -> Iterator[str]:
        yield ghost

    monkeypatch.setattr(manager, 'discover_files', ghost_discover)
    result = runner.invoke(main.cli, ['scan', '--start-dir', str(tmp_path), '--keyword', 'error'])
    assert result.exit_code == 0
    assert json.loads(result.stdout) == []
    assert 'Error opening the file' in result.stderr


def test_extension_filter_is_case_sensitive(runner: CliRunner, tmp_path: Path, write_file) -> None:
    write_file('data.LOG', 'error\n')
    lower = write_file('data.log', 'error\n')
    result = runner.invoke(
        main.cli, ['scan', '--start-dir', str(tmp_path), '--ext', '.log', '--keyword', 'error', '--workers', '1']
    )
    assert result.exit_code == 0
    assert [m['file'] for m in json.loads(result.stdout)] == [str(lower)]


def test_invalid_worker_count(runner: CliRunner, tmp_path: Path) -> None:
    result = runner.invoke(main.cli, ['scan', '--start-dir', str(tmp_path), '--keyword', 'x', '--workers', '0'])
    assert result.exit_code == 2


def test_config_file_and_option_precedence(runner: CliRunner, tmp_path: Path, write_file) -> None:
    """Config values apply unless an option overrides them."""
    write_file('logs/a.txt', 'fatal crash\nerror here\n')
    config = tmp_path / 'config.yml'
    config.write_text(
        f'start_dir: {json.dumps(str(tmp_path / "logs"))}\nextensions: .txt\nkeywords: fatal\n',
        encoding='utf-8',
    )
    from_file = runner.invoke(main.cli, ['scan', '--config', str(config)])
    assert from_file.exit_code == 0, from_file.output
    assert [m['line'] for m in json.loads(from_file.stdout)] == [1]

    overridden = runner.invoke(main.cli, ['scan', '--config', str(config), '--keyword', 'error'])
    assert [m['line'] for m in json.loads(overridden.stdout)] == [2]


def test_environment_variables(runner: CliRunner, tmp_path: Path, write_file) -> None:
    write_file('a.log', 'timeout reached\n')
    result = runner.invoke(
        main.cli,
        ['scan'],
        env={'LOGSCANNER_START_DIR': str(tmp_path), 'LOGSCANNER_KEYWORD': 'timeout'},
    )
    assert result.exit_code == 0, result.output
    assert len(json.loads(result.stdout)) == 1


def test_summary_table(runner: CliRunner, tmp_path: Path, write_file) -> None:
    write_file('a.log', 'error\nerror again\n')
    result = runner.invoke(
        main.cli, ['scan', '--start-dir', str(tmp_path), '--keyword', 'error', '--summary', '--quiet']
    )
    assert result.exit_code == 0
    assert 'Matches per file' in result.stderr


def test_show_config(runner: CliRunner, tmp_path: Path) -> None:
    config = tmp_path / 'config.yml'
    config.write_text('keywords: [error]\nworkers: 2\n', encoding='utf-8')
    result = runner.invoke(main.cli, ['show-config', '--config', str(config)])
    assert result.exit_code == 0, result.output
    shown = json.loads(result.stdout)
    assert shown['keywords'] == ['error']
    assert shown['workers'] == 2
    assert shown['extensions'] == ['.log', '.csv']


def test_show_config_rejects_bad_file(runner: CliRunner, tmp_path: Path) -> None:
    config = tmp_path / 'config.yml'
    config.write_text('unknown: 1\n', encoding='utf-8')
    result = runner.invoke(main.cli, ['show-config', '--config', str(config)])
    assert result.exit_code == 1
    assert 'unknown config keys' in result.stderr


def test_worker_failure_emits_results_and_fails(
    runner: CliRunner, tmp_path: Path, write_file, monkeypatch: pytest.MonkeyPatch
) -> None:
    """A file a worker crashed on makes the run exit 1 after printing."""
    good = write_file('good.log', 'error ok\n')
    write_file('bad.log', 'error never read\n')
    real_scan_file = manager.scan_file

    def crashing_scan_file(path, keywords, diagnostics=None):
        if path.endswith('bad.log'):
            raise RuntimeError('decoder exploded')
        return real_scan_file(path, keywords, diagnostics)

    monkeypatch.setattr(manager, 'scan_file', crashing_scan_file)
    result = runner.invoke(main.cli, ['scan', '--start-dir', str(tmp_path), '--keyword', 'error', '--quiet'])

    assert result.exit_code == 1
    assert json.loads(result.stdout) == [{'file': str(good), 'line': 1, 'text': 'error ok'}]
    assert 'Error (worker)' in result.stderr
    assert 'decoder exploded' in result.stderr
