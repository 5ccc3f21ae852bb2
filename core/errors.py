"""Exception hierarchy for trash operations.

Batch-level failures are raised; per-item failures are reported through the
result objects in `core.services.interfaces`.
"""

from __future__ import annotations


class TrmError(Exception):
    """Base class for all trash errors."""


class PathError(TrmError):
    """A path could not be canonicalized or mapped."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class PathOutsideRootError(PathError):
    """A path expected to live under the trash root does not."""

    def __init__(self, path: str, trash_root: str) -> None:
        super().__init__(path, f"not under trash root {trash_root}")
        self.trash_root = trash_root


class TrashRootConflictError(PathError):
    """Trashing the path would move the trash root into itself."""

    def __init__(self, path: str, trash_root: str) -> None:
        super().__init__(path, f"overlaps trash root {trash_root}")
        self.trash_root = trash_root


class MoveError(TrmError):
    """Rename and the copy-then-delete fallback both failed."""

    def __init__(self, source: str, destination: str, reason: str) -> None:
        super().__init__(f"failed to move {source} to {destination}: {reason}")
        self.source = source
        self.destination = destination
        self.reason = reason


class OperationLogError(TrmError):
    """The operation log could not be opened, read or written."""

    def __init__(self, log_path: str, reason: str) -> None:
        super().__init__(f"operation log {log_path}: {reason}")
        self.log_path = log_path
        self.reason = reason
