"""Record filters used by history display and purge.

Each filter exposes `matches(record)` plus a `stop_on_mismatch` flag. When the
flag is set the log scan ends at the first record that does not match, which
is only correct because records are appended in timestamp order.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import os
from typing import Protocol

from core.models import OperationKind, OperationRecord


class HistoryFilter(Protocol):
    """Predicate over operation records."""

    stop_on_mismatch: bool

    def matches(self, record: OperationRecord) -> bool:
        """Return True if `record` should be yielded."""
        ...


@dataclass(frozen=True)
class AllFilter:
    """Matches every record."""

    stop_on_mismatch: bool = False

    def matches(self, record: OperationRecord) -> bool:  # pylint: disable=unused-argument
        return True


@dataclass(frozen=True)
class PrefixFilter:
    """Matches records touching files directly inside `directory`.

    TRASH records are matched on the parent of their sources (where the files
    came from); RESTORE records on the parent of their destinations (where the
    files went back to). Subdirectories do not match.
    """

    directory: str
    stop_on_mismatch: bool = False

    def matches(self, record: OperationRecord) -> bool:
        target = os.path.normpath(self.directory)
        paths = record.sources if record.kind is OperationKind.TRASH else record.destinations
        return any(os.path.dirname(os.path.normpath(p)) == target for p in paths)


@dataclass(frozen=True)
class BeforeFilter:
    """Matches records strictly older than `cutoff`."""

    cutoff: datetime
    stop_on_mismatch: bool = True

    def matches(self, record: OperationRecord) -> bool:
        return record.timestamp < self.cutoff
