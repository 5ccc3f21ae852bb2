"""Core domain models for trash operations and their log records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
import json
from typing import Any


class OperationKind(str, Enum):
    """Kind of a logged batch operation."""

    TRASH = "TRASH"
    RESTORE = "RESTORE"


@dataclass(frozen=True)
class OperationRecord:
    """One batch of moves, written as a single line of the operation log.

    `sources[i]` was moved to `destinations[i]`. For TRASH records the sources
    are original locations; for RESTORE records the sources are trash paths and
    the destinations are the restored locations.
    """

    sources: list[str]
    destinations: list[str]
    kind: OperationKind
    timestamp: datetime

    def __post_init__(self) -> None:
        if len(self.sources) != len(self.destinations):
            raise ValueError(
                f"sources/destinations length mismatch: {len(self.sources)} != "
                f"{len(self.destinations)}"
            )
        if not self.sources:
            raise ValueError("an operation record needs at least one path")
        if self.timestamp.tzinfo is None:
            raise ValueError("operation timestamps must be timezone-aware")

    @property
    def pairs(self) -> list[tuple[str, str]]:
        """Return (source, destination) tuples in batch order."""
        return list(zip(self.sources, self.destinations))

    def to_dict(self) -> dict[str, Any]:
        return {
            "sources": list(self.sources),
            "destinations": list(self.destinations),
            "operation": self.kind.value,
            "moved_time": self.timestamp.isoformat(),
        }

    def to_json_line(self) -> str:
        """Encode as a single JSON line (no trailing newline)."""
        return json.dumps(self.to_dict(), ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OperationRecord:
        """Build a record from a decoded log object.

        Raises:
            ValueError, TypeError, KeyError: When required fields are missing
                or have the wrong shape.
        """
        sources = data["sources"]
        destinations = data["destinations"]
        if not isinstance(sources, list) or not isinstance(destinations, list):
            raise TypeError("sources and destinations must be lists")
        if not all(isinstance(p, str) for p in sources + destinations):
            raise TypeError("paths must be strings")
        kind = OperationKind(data["operation"])
        raw_time = data["moved_time"]
        if not isinstance(raw_time, str):
            raise TypeError("moved_time must be a string")
        timestamp = datetime.fromisoformat(raw_time)
        return cls(sources=sources, destinations=destinations, kind=kind, timestamp=timestamp)

    @classmethod
    def from_json_line(cls, line: str) -> OperationRecord:
        data = json.loads(line)
        if not isinstance(data, dict):
            raise TypeError("log line is not a JSON object")
        return cls.from_dict(data)
