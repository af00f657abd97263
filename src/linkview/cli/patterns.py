# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/linkview/cli/patterns.py

"""
Decorator patterns shared by all linkview commands.

- info_command_pattern: read-only commands that need a loaded config
- discovery_command_pattern: commands that work without a loadable config
- operation_command_pattern: commands that change the target directory

Each pattern validates --verbose/--quiet, creates the console (silenced in
--json mode), runs the handler, emits JSON when asked and maps failures to
exit codes. Handlers return a dict; a truthy 'has_errors' key makes the
command exit with code 1 after output.
"""

import functools
from pathlib import Path
from typing import Any, Callable, Optional

import typer
from rich.console import Console

from linkview.cli.json_collector import JSONCollector
from linkview.cli.utils import handle_operation_error, load_config_with_console
from linkview.system.exceptions import LinkViewError
from linkview.system.locking import LockConflictError, LockError


def _validate_mutually_exclusive_flags(verbose: bool, quiet: bool) -> None:
    if verbose and quiet:
        raise typer.BadParameter("--verbose and --quiet are mutually exclusive")


def _make_console(to_json: bool) -> Console:
    return Console(quiet=to_json)


def _finish(collector: JSONCollector, result: Any) -> Any:
    collector.capture_success(result)
    collector.output()
    if isinstance(result, dict) and result.get("has_errors"):
        raise typer.Exit(1)
    return result


def info_command_pattern(func: Callable[..., Any]) -> Callable[..., Any]:
    """Wrap a read-only handler(console, config, verbose, quiet, **kwargs)."""

    @functools.wraps(func)
    def wrapper(config_path: Optional[Path] = None, verbose: bool = False,
                quiet: bool = False, to_json: bool = False, **kwargs: Any) -> Any:
        _validate_mutually_exclusive_flags(verbose, quiet)
        console = _make_console(to_json)
        collector = JSONCollector(enabled=to_json)

        try:
            config = load_config_with_console(console, config_path, verbose=verbose)
        except typer.Exit as e:
            collector.capture_error(e)
            collector.output()
            raise

        try:
            result = func(console, config, verbose=verbose, quiet=quiet, **kwargs)
        except LinkViewError as e:
            collector.capture_error(e)
            collector.output()
            handle_operation_error(console, f"in {func.__name__}", e)
        return _finish(collector, result)

    return wrapper


def discovery_command_pattern(func: Callable[..., Any]) -> Callable[..., Any]:
    """Wrap a handler(console, config_path, verbose, quiet, **kwargs) that loads config itself."""

    @functools.wraps(func)
    def wrapper(config_path: Optional[Path] = None, verbose: bool = False,
                quiet: bool = False, to_json: bool = False, **kwargs: Any) -> Any:
        _validate_mutually_exclusive_flags(verbose, quiet)
        console = _make_console(to_json)
        collector = JSONCollector(enabled=to_json)

        try:
            result = func(console, config_path, verbose=verbose, quiet=quiet, **kwargs)
        except typer.Exit:
            raise
        except Exception as e:
            collector.capture_error(e)
            collector.output()
            handle_operation_error(console, f"in {func.__name__}", e)
        return _finish(collector, result)

    return wrapper


def operation_command_pattern(func: Callable[..., Any]) -> Callable[..., Any]:
    """Wrap a state-changing handler(console, config, verbose, quiet, **kwargs)."""

    @functools.wraps(func)
    def wrapper(config_path: Optional[Path] = None, verbose: bool = False,
                quiet: bool = False, to_json: bool = False, **kwargs: Any) -> Any:
        _validate_mutually_exclusive_flags(verbose, quiet)
        console = _make_console(to_json)
        collector = JSONCollector(enabled=to_json)

        try:
            config = load_config_with_console(console, config_path, verbose=verbose)
        except typer.Exit as e:
            collector.capture_error(e)
            collector.output()
            raise

        if kwargs.get("dry_run") and not quiet:
            console.print("[yellow]Dry run: no changes will be made[/yellow]")

        try:
            result = func(console, config, verbose=verbose, quiet=quiet, **kwargs)
        except KeyboardInterrupt as e:
            collector.capture_error(e)
            collector.output()
            console.print("\n[yellow]Interrupted[/yellow]")
            raise typer.Exit(130)
        except LockConflictError as e:
            collector.capture_error(e)
            collector.output()
            console.print(f"[yellow]![/yellow] {e}")
            raise typer.Exit(1)
        except (LinkViewError, LockError) as e:
            collector.capture_error(e)
            collector.output()
            handle_operation_error(console, f"during {func.__name__}", e)
        return _finish(collector, result)

    return wrapper
