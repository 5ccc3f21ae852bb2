"""Command-line interface: argument handling and exit codes only.

All trash semantics live in `TrashEngine`; commands translate its results
into console output and decide the process exit status.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from loguru import logger
from rich.markup import escape
import typer

from app.views import console
from core.errors import TrmError
from core.path_mapper import canonicalize
from core.services.history_filter import AllFilter, BeforeFilter, HistoryFilter, PrefixFilter
from core.services.interfaces import BatchResult, PurgePlan
from infrastructure.logging import init_logging
from infrastructure.operation_log import OperationLog
from infrastructure.settings import (
    DEFAULT_TRASH_ROOT,
    JsonSettings,
    TrashConfig,
    default_settings_path,
    resolve_config,
)
from infrastructure.trash_engine import TrashEngine
from infrastructure.utils import now_local, parse_duration

app = typer.Typer(
    help="trm - Temporary rm, a utility to reversibly remove your files",
    no_args_is_help=True,
)


@dataclass
class CliState:
    config: TrashConfig
    engine: TrashEngine
    verbose: bool


def _state(ctx: typer.Context) -> CliState:
    return ctx.obj


def _fail(ex: Exception) -> typer.Exit:
    logger.error("{}", ex)
    console.err.print(f"[red]Error:[/red] {escape(str(ex))}")
    return typer.Exit(code=1)


def _finish_batch(result: BatchResult, verbose: bool) -> None:
    console.render_batch(result, verbose)
    if result.fatal:
        raise typer.Exit(code=1)


def _cutoff(before: str) -> datetime:
    try:
        return now_local() - parse_duration(before)
    except (ValueError, OverflowError) as ex:
        raise typer.BadParameter(str(ex), param_hint="--before") from ex


@app.callback()
def _init(
    ctx: typer.Context,
    directory: str = typer.Option(
        DEFAULT_TRASH_ROOT, "--dir", "-d", help="Directory where trashed files are kept."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Display full file paths."),
    debug: bool = typer.Option(False, "--debug", help="Debug output."),
) -> None:
    try:
        settings = JsonSettings(default_settings_path())
        config = resolve_config(directory, settings)
    except (OSError, ValueError) as ex:
        raise _fail(ex) from ex
    init_logging(config.log_dir, console_level="DEBUG" if debug else None)
    logger.debug("Temporary Directory Path: {}", config.trash_root)
    engine = TrashEngine(config.trash_root, OperationLog(config.log_file))
    ctx.obj = CliState(config=config, engine=engine, verbose=verbose)


@app.command("trash")
def trash_cmd(
    ctx: typer.Context,
    files: List[str] = typer.Argument(..., help="Files to delete."),
) -> None:
    """Move files into the trash."""
    state = _state(ctx)
    try:
        result = state.engine.trash(files)
    except TrmError as ex:
        raise _fail(ex) from ex
    _finish_batch(result, state.verbose)


@app.command("list")
def list_cmd(
    ctx: typer.Context,
    dirs: Optional[List[str]] = typer.Argument(None, help="Directories to inspect."),
    all_: bool = typer.Option(False, "--all", "-a", help="List the whole trash."),
) -> None:
    """Display files trashed under the given directories (default: cwd)."""
    state = _state(ctx)
    try:
        result = state.engine.list_all() if all_ else state.engine.list_dirs(dirs)
    except TrmError as ex:
        raise _fail(ex) from ex
    console.render_listing(result, state.verbose)


@app.command("restore")
def restore_cmd(
    ctx: typer.Context,
    files: Optional[List[str]] = typer.Argument(None, help="Files to restore."),
    all_: bool = typer.Option(False, "--all", "-a", help="Restore everything in the trash."),
    listed: bool = typer.Option(
        False, "--list", "-l", help="Restore everything trashed under the given directories."
    ),
    from_trash: bool = typer.Option(
        False, "--from-trash", help="Arguments are paths inside the trash."
    ),
    use_log: bool = typer.Option(
        False, "--log", help="Use history to recover original names of renamed entries."
    ),
) -> None:
    """Recover files from the trash."""
    state = _state(ctx)
    engine = state.engine
    try:
        if all_:
            result = engine.restore_all(use_log=use_log)
        elif listed:
            listing = engine.list_dirs(files)
            console.render_listing(listing, state.verbose)
            result = engine.restore(listing.paths, from_trash=True, use_log=use_log)
        elif files:
            result = engine.restore(files, from_trash=from_trash, use_log=use_log)
        else:
            raise typer.BadParameter("give files to restore, or --all / --list")
    except TrmError as ex:
        raise _fail(ex) from ex
    _finish_batch(result, state.verbose)


@app.command("history")
def history_cmd(
    ctx: typer.Context,
    all_: bool = typer.Option(False, "--all", "-a", help="Show every record."),
    before: Optional[str] = typer.Option(
        None, "--before", "-b", help="Only records older than this duration (e.g. 2d, 3h)."
    ),
    prefix: Optional[str] = typer.Option(
        None, "--prefix", "-p", help="Directory whose files to show (default: cwd)."
    ),
) -> None:
    """Show trash and restore history."""
    state = _state(ctx)
    flt: HistoryFilter
    if all_:
        flt = AllFilter()
    elif before:
        flt = BeforeFilter(_cutoff(before))
    else:
        flt = PrefixFilter(canonicalize(prefix or ".", strict=False))
    try:
        records = state.engine.history(flt)
    except TrmError as ex:
        raise _fail(ex) from ex
    console.render_history(records)


def _ask(plan: PurgePlan) -> bool:
    console.render_purge_plan(plan)
    return typer.confirm("Proceed?", default=False)


@app.command("purge")
def purge_cmd(
    ctx: typer.Context,
    before: Optional[str] = typer.Option(
        None, "--before", "-b", help="Purge entries trashed longer ago than this duration."
    ),
    all_: bool = typer.Option(False, "--all", "-a", help="Purge everything in the history."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Do not ask for confirmation."),
) -> None:
    """Permanently delete old trash entries and drop their history."""
    state = _state(ctx)
    if all_:
        cutoff = None
    elif before:
        cutoff = _cutoff(before)
    else:
        raise typer.BadParameter("give --before DURATION or --all")
    try:
        result = state.engine.purge(cutoff, confirm=None if quiet else _ask)
    except TrmError as ex:
        raise _fail(ex) from ex
    console.render_purge_result(result)
