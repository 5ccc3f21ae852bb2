"""Console rendering of trash listings, history and purge previews."""

from __future__ import annotations

from collections.abc import Iterable
import os

from rich.columns import Columns
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from core.models import OperationKind, OperationRecord
from core.services.interfaces import BatchResult, ListResult, PurgePlan, PurgeResult
from infrastructure.utils import format_display_datetime

out = Console(highlight=False)
err = Console(stderr=True, highlight=False)


def _styled_name(path: str, only_filename: bool) -> Text:
    label = os.path.basename(path) if only_filename else path
    if os.path.islink(path):
        return Text(label, style="cyan")
    if os.path.isdir(path):
        return Text(label, style="bold blue")
    return Text(label)


def render_grid(paths: Iterable[str], only_filename: bool = True) -> None:
    """Print paths as a column grid sized to the terminal."""
    out.print(Columns([_styled_name(p, only_filename) for p in paths], padding=(0, 2)))


def render_listing(result: ListResult, verbose: bool = False) -> None:
    if not result.listings and not result.failed:
        out.print("Trash is empty")
    for directory, entries in result.listings.items():
        if not entries:
            out.print(f"No files found under {escape(directory)}")
            continue
        out.print(f"{escape(directory)}:")
        render_grid(entries, only_filename=not verbose)
    render_failures(result.failed, "Failed to read directory")


def render_failures(failed: Iterable[tuple[str, str]], prefix: str = "Failed") -> None:
    for path, reason in failed:
        err.print(f"[red]{prefix}[/red] {escape(path)}: {escape(reason)}")


def render_batch(result: BatchResult, verbose: bool = False) -> None:
    """Report a trash/restore batch; successes only when verbose."""
    if verbose:
        verb = "Trashed" if result.kind is OperationKind.TRASH else "Restored"
        for source, destination in result.moved:
            out.print(f"{verb} {escape(source)} -> {escape(destination)}")
    prefix = "Unable to trash" if result.kind is OperationKind.TRASH else "Unable to restore"
    render_failures(result.failed, prefix)


def render_history(records: list[OperationRecord]) -> None:
    if not records:
        out.print("No matching history")
        return
    table = Table(show_lines=False)
    table.add_column("Time", no_wrap=True)
    table.add_column("Operation", no_wrap=True)
    table.add_column("Source", overflow="fold")
    table.add_column("Destination", overflow="fold")
    for record in records:
        style = "red" if record.kind is OperationKind.TRASH else "green"
        when = format_display_datetime(record.timestamp)
        for i, (source, destination) in enumerate(record.pairs):
            table.add_row(
                when if i == 0 else "",
                Text(record.kind.value, style=style) if i == 0 else "",
                source,
                destination,
            )
    out.print(table)


def render_purge_plan(plan: PurgePlan) -> None:
    for path in plan.missing:
        out.print(f"[yellow]Skipping[/yellow] {escape(path)}: no longer in trash")
    for path in plan.kept:
        out.print(f"[yellow]Keeping[/yellow] {escape(path)}: trashed again since")
    if plan.to_delete:
        out.print("The following will be permanently deleted:")
        render_grid(plan.to_delete, only_filename=False)
    out.print(
        f"{len(plan.expired)} history record(s) will be dropped, {len(plan.retained)} kept."
    )


def render_purge_result(result: PurgeResult) -> None:
    if result.aborted:
        out.print("Purge cancelled, nothing changed.")
        return
    render_failures(result.failed, "Failed to delete")
    out.print(f"Purged {len(result.deleted)} item(s).")
