"""Core service result types shared by the engine and the CLI layer.

This module defines simple dataclasses describing the outcome of trash,
restore, list and purge operations. The engine fills them in; only the CLI
decides what to print and which exit status to use.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from core.models import OperationKind, OperationRecord


@dataclass
class BatchResult:
    """Outcome of a trash or restore batch.

    Attributes:
        kind: Which operation produced the batch.
        moved: Tuples of (source, destination) for successful moves.
        failed: Tuples of (path, reason) for items that were not moved.
        record: The record appended to the operation log, if any.
        fatal: True when a move failure stopped the batch early.
    """

    kind: OperationKind
    moved: list[tuple[str, str]] = field(default_factory=list)
    failed: list[tuple[str, str]] = field(default_factory=list)
    record: OperationRecord | None = None
    fatal: bool = False

    @property
    def success_count(self) -> int:
        return len(self.moved)


@dataclass
class ListResult:
    """Outcome of listing trash contents.

    Attributes:
        listings: Mirror directory -> trash paths found in it, in request order.
        failed: Tuples of (directory, reason) for unreadable directories.
    """

    listings: dict[str, list[str]] = field(default_factory=dict)
    failed: list[tuple[str, str]] = field(default_factory=list)

    @property
    def paths(self) -> list[str]:
        """All listed trash paths, flattened."""
        return [p for entries in self.listings.values() for p in entries]


@dataclass
class PurgePlan:
    """What a purge would do, computed before asking for confirmation.

    Attributes:
        to_delete: Trash paths that still exist and will be removed.
        missing: Logged trash paths that no longer exist (skipped).
        kept: Paths trashed again after the cutoff, left in place.
        expired: Records older than the cutoff (dropped from the log).
        retained: Records kept by the compacted log.
        owners: Path in `to_delete` -> the expired TRASH record that put it there.
    """

    to_delete: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)
    kept: list[str] = field(default_factory=list)
    expired: list[OperationRecord] = field(default_factory=list)
    retained: list[OperationRecord] = field(default_factory=list)
    owners: dict[str, OperationRecord] = field(default_factory=dict)


@dataclass
class PurgeResult:
    """Outcome of a purge.

    Attributes:
        plan: The plan the purge acted on.
        deleted: Trash paths removed from disk.
        failed: Tuples of (path, reason) for removals that failed.
        aborted: True when the operator declined; nothing was changed.
    """

    plan: PurgePlan
    deleted: list[str] = field(default_factory=list)
    failed: list[tuple[str, str]] = field(default_factory=list)
    aborted: bool = False
