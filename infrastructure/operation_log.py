"""Append-only JSONL store of trash and restore batches.

Each line is one `OperationRecord`. The log serves as audit trail, undo index
and history source. Lines that fail to decode are skipped during scans so a
corrupt or foreign line never hides the rest of the history. The file is only
ever rewritten by `compact`, which purge uses to drop expired records.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
import os
from pathlib import Path

from loguru import logger

from core.errors import OperationLogError
from core.models import OperationRecord
from core.services.history_filter import AllFilter, HistoryFilter


def decode_line(line: str) -> OperationRecord | None:
    """Decode one log line; return None for blank or malformed lines."""
    text = line.strip()
    if not text:
        return None
    try:
        return OperationRecord.from_json_line(text)
    except (ValueError, TypeError, KeyError, RecursionError):
        return None


class OperationLog:
    """Line-delimited JSON log at a fixed path."""

    def __init__(self, log_path: str | Path) -> None:
        self._path = Path(log_path)

    @property
    def path(self) -> Path:
        return self._path

    def append(self, record: OperationRecord) -> None:
        """Write `record` as one line and flush it to disk before returning."""
        line = record.to_json_line()
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8", newline="\n") as f:
                f.write(line)
                f.write("\n")
                f.flush()
                os.fsync(f.fileno())
        except OSError as ex:
            raise OperationLogError(str(self._path), f"append failed: {ex}") from ex
        logger.debug(
            "Logged {} batch of {} item(s) to {}", record.kind.value, len(record.sources), self._path
        )

    def scan(self, flt: HistoryFilter | None = None) -> Iterator[OperationRecord]:
        """Yield records matching `flt` in log order.

        A filter with `stop_on_mismatch` ends the scan at the first decoded
        record it rejects.
        """
        flt = flt or AllFilter()
        if not self._path.exists():
            return
        try:
            with self._path.open("r", encoding="utf-8", errors="replace") as f:
                for lineno, line in enumerate(f, start=1):
                    record = decode_line(line)
                    if record is None:
                        if line.strip():
                            logger.debug("Skipping malformed log line {} in {}", lineno, self._path)
                        continue
                    if flt.matches(record):
                        yield record
                    elif flt.stop_on_mismatch:
                        return
        except OSError as ex:
            raise OperationLogError(str(self._path), f"read failed: {ex}") from ex

    def read_all(self) -> list[OperationRecord]:
        return list(self.scan(AllFilter()))

    def compact(self, retain: Iterable[OperationRecord]) -> None:
        """Truncate the log and rewrite exactly `retain`, preserving order.

        Not safe against a concurrent appender.
        """
        records = list(retain)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("w", encoding="utf-8", newline="\n") as f:
                for record in records:
                    f.write(record.to_json_line())
                    f.write("\n")
                f.flush()
                os.fsync(f.fileno())
        except OSError as ex:
            raise OperationLogError(str(self._path), f"compact failed: {ex}") from ex
        logger.info("Compacted operation log {} to {} record(s)", self._path, len(records))
