"""Trash lifecycle: trash, restore, list, history and purge.

The engine moves files between their live location and a mirror of it under
the trash root, and records every completed batch in the operation log.

Batch policy:
    * All paths of a batch are resolved before anything moves. A path that
      cannot be resolved raises `PathError` and nothing is moved or logged.
    * A per-item problem (missing trash entry, occupied restore target) is
      recorded in the result and the batch continues.
    * A `MoveError` stops the batch. Items moved before it are still logged
      so they can be restored, and the result is flagged `fatal`.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime
import os

from loguru import logger

from core.errors import MoveError, TrashRootConflictError
from core.models import OperationKind, OperationRecord
from core.path_mapper import canonicalize, is_within, mirror, resolve_destination, unmirror
from core.services.history_filter import AllFilter, HistoryFilter
from core.services.interfaces import BatchResult, ListResult, PurgePlan, PurgeResult
from infrastructure.mover import prune_empty_parents, relocate, remove_path
from infrastructure.operation_log import OperationLog
from infrastructure.utils import now_local

ConfirmFn = Callable[[PurgePlan], bool]


class TrashEngine:
    """Coordinates moves, path mapping and the operation log."""

    def __init__(
        self,
        trash_root: str,
        log: OperationLog,
        clock: Callable[[], datetime] = now_local,
    ) -> None:
        """Create an engine.

        Args:
            trash_root: Canonical absolute trash root; must already exist.
            log: Operation log receiving one record per completed batch.
            clock: Source of timezone-aware timestamps for new records.
        """
        self.trash_root = os.path.normpath(trash_root)
        self.log = log
        self._clock = clock

    # ---------------- Trash ----------------
    def trash(self, paths: Iterable[str], cwd: str | None = None) -> BatchResult:
        """Move `paths` into the trash and log them as one TRASH record.

        Raises:
            PathError: If any path cannot be resolved or overlaps the trash root.
            OperationLogError: If the batch record cannot be written.
        """
        result = BatchResult(kind=OperationKind.TRASH)
        sources = self._resolve_trash_sources(paths, cwd, result)

        for source in sources:
            destination = resolve_destination(source, self.trash_root)
            if os.path.basename(destination) != os.path.basename(source):
                logger.debug("Name taken in trash, using {}", destination)
            try:
                relocate(source, destination)
            except MoveError as ex:
                logger.error("Trash stopped: {}", ex)
                result.failed.append((source, ex.reason))
                result.fatal = True
                break
            logger.info("Trashed {} -> {}", source, destination)
            result.moved.append((source, destination))

        self._record(result)
        return result

    def _resolve_trash_sources(
        self, paths: Iterable[str], cwd: str | None, result: BatchResult
    ) -> list[str]:
        resolved: list[str] = []
        for p in paths:
            source = canonicalize(p, cwd, strict=True)
            if is_within(source, self.trash_root) or is_within(self.trash_root, source):
                raise TrashRootConflictError(source, self.trash_root)
            if source not in resolved:
                resolved.append(source)

        # A path inside another requested directory travels with that directory.
        sources: list[str] = []
        for source in resolved:
            container = next(
                (other for other in resolved if other != source and is_within(source, other)),
                None,
            )
            if container is not None:
                result.failed.append((source, f"contained in {container}"))
                continue
            sources.append(source)
        return sources

    # ---------------- Restore ----------------
    def restore(
        self,
        paths: Iterable[str],
        from_trash: bool = False,
        use_log: bool = False,
        cwd: str | None = None,
    ) -> BatchResult:
        """Move trashed entries back and log them as one RESTORE record.

        Args:
            paths: Original-style paths, or trash paths when `from_trash`.
            from_trash: Inputs already point inside the trash root.
            use_log: Resolve targets through the operation log first, which
                recovers the original name of collision-suffixed entries.
            cwd: Base for relative inputs.

        Raises:
            PathOutsideRootError: If a trash path is not under the trash root.
            OperationLogError: If the log cannot be read or written.
        """
        by_dest, by_source = self._trash_index() if use_log else ({}, {})

        plan: list[tuple[str, str]] = []
        for p in paths:
            if from_trash:
                trash_path = canonicalize(p, cwd, strict=False)
                target = by_dest.get(trash_path) or unmirror(trash_path, self.trash_root)
            else:
                target = canonicalize(p, cwd, strict=False)
                trash_path = by_source.get(target) or mirror(target, self.trash_root)
            plan.append((trash_path, target))

        result = BatchResult(kind=OperationKind.RESTORE)
        for trash_path, target in plan:
            if not os.path.lexists(trash_path):
                logger.warning("Unable to restore {}: no such file in trash", trash_path)
                result.failed.append((trash_path, "no such file in trash"))
                continue
            if os.path.lexists(target):
                logger.warning("Unable to restore {}: {} already exists", trash_path, target)
                result.failed.append((trash_path, f"destination exists: {target}"))
                continue
            try:
                relocate(trash_path, target)
            except MoveError as ex:
                logger.error("Restore stopped: {}", ex)
                result.failed.append((trash_path, ex.reason))
                result.fatal = True
                break
            logger.info("Restored {} -> {}", trash_path, target)
            result.moved.append((trash_path, target))
            prune_empty_parents(trash_path, self.trash_root)

        self._record(result)
        return result

    def restore_all(self, use_log: bool = False) -> BatchResult:
        """Restore every file found anywhere under the trash root."""
        return self.restore(self.list_all().paths, from_trash=True, use_log=use_log)

    def _trash_index(self) -> tuple[dict[str, str], dict[str, str]]:
        """Map live trash entries to originals and back, from the log.

        Returns:
            (trash path -> original, original -> most recent trash path)
        """
        by_dest: dict[str, str] = {}
        by_source: dict[str, str] = {}
        for record in self.log.scan(AllFilter()):
            if record.kind is OperationKind.TRASH:
                for source, destination in record.pairs:
                    by_dest[destination] = source
                    by_source[source] = destination
            else:
                for trash_path, _ in record.pairs:
                    original = by_dest.pop(trash_path, None)
                    if original is not None and by_source.get(original) == trash_path:
                        del by_source[original]
        return by_dest, by_source

    # ---------------- List ----------------
    def list_dirs(self, dirs: Iterable[str] | None = None, cwd: str | None = None) -> ListResult:
        """List immediate trash children of each directory's mirror.

        Defaults to the current working directory. A directory with no mirror
        lists as empty; any other read failure is reported per directory.
        """
        requested = list(dirs or [])
        if not requested:
            requested = [cwd or os.getcwd()]

        result = ListResult()
        for d in requested:
            mirror_dir = mirror(canonicalize(d, cwd, strict=False), self.trash_root)
            try:
                names = sorted(os.listdir(mirror_dir))
            except FileNotFoundError:
                result.listings[mirror_dir] = []
                continue
            except OSError as ex:
                logger.warning("Failed to read directory {}: {}", mirror_dir, ex)
                result.failed.append((mirror_dir, ex.strerror or str(ex)))
                continue
            result.listings[mirror_dir] = [os.path.join(mirror_dir, n) for n in names]
        return result

    def list_all(self) -> ListResult:
        """Walk the whole trash root and list every restorable entry.

        Files, symlinks, empty directories and directories the log knows as
        trashed entries are listed; a listed directory is not descended into.
        """
        result = ListResult()
        live, _ = self._trash_index()

        def _on_error(ex: OSError) -> None:
            logger.warning("Failed to read directory {}: {}", ex.filename, ex)
            result.failed.append((str(ex.filename), ex.strerror or str(ex)))

        for dirpath, dirnames, filenames in os.walk(self.trash_root, onerror=_on_error):
            entries = list(filenames)
            descend = []
            for name in dirnames:
                full = os.path.join(dirpath, name)
                if os.path.islink(full) or full in live or _is_empty_dir(full):
                    entries.append(name)
                else:
                    descend.append(name)
            dirnames[:] = sorted(descend)
            if entries:
                result.listings[dirpath] = [os.path.join(dirpath, n) for n in sorted(entries)]
        return result

    # ---------------- History ----------------
    def history(self, flt: HistoryFilter | None = None) -> list[OperationRecord]:
        return list(self.log.scan(flt or AllFilter()))

    # ---------------- Purge ----------------
    def plan_purge(self, cutoff: datetime | None = None) -> PurgePlan:
        """Split the log at `cutoff` and collect trash entries to delete.

        `cutoff=None` expires every record. RESTORE records older than the
        cutoff are dropped without touching the filesystem. A trash path is
        only deleted when the record that put its current content there has
        expired; a path restored since, or trashed again after the cutoff, is
        left alone.
        """
        plan = PurgePlan()
        records = self.log.read_all()
        for record in records:
            if _expired(record, cutoff):
                plan.expired.append(record)
            else:
                plan.retained.append(record)

        owners = _live_owners(records)
        seen: set[str] = set()
        for record in plan.expired:
            if record.kind is not OperationKind.TRASH:
                continue
            for destination in record.destinations:
                if destination in seen:
                    continue
                seen.add(destination)
                owner = owners.get(destination)
                if owner is None or not os.path.lexists(destination):
                    logger.info("Skipping {}: no longer in trash", destination)
                    plan.missing.append(destination)
                elif not _expired(owner, cutoff):
                    logger.info("Keeping {}: trashed again after the cutoff", destination)
                    plan.kept.append(destination)
                else:
                    plan.to_delete.append(destination)
                    plan.owners[destination] = owner
        return plan

    def purge(self, cutoff: datetime | None = None, confirm: ConfirmFn | None = None) -> PurgeResult:
        """Permanently delete trash entries logged before `cutoff`.

        Args:
            cutoff: Records strictly older than this expire; None expires all.
            confirm: Called with the plan before anything changes; returning
                False aborts with no deletions and no log rewrite. None means
                unattended mode.

        Raises:
            OperationLogError: If the log cannot be read or rewritten.
        """
        plan = self.plan_purge(cutoff)
        result = PurgeResult(plan=plan)
        if not plan.expired:
            return result
        if confirm is not None and not confirm(plan):
            logger.info("Purge declined, nothing changed")
            result.aborted = True
            return result

        for path in plan.to_delete:
            if not is_within(path, self.trash_root) or os.path.normpath(path) == self.trash_root:
                logger.error("Refusing to delete {} outside trash root", path)
                result.failed.append((path, "outside trash root"))
                continue
            if not os.path.lexists(path):
                # Removed along with an enclosing entry earlier in this purge.
                result.deleted.append(path)
                continue
            try:
                remove_path(path)
            except OSError as ex:
                logger.warning("Failed to delete {}: {}", path, ex)
                result.failed.append((path, ex.strerror or str(ex)))
                continue
            prune_empty_parents(path, self.trash_root)
            logger.info("Purged {}", path)
            result.deleted.append(path)

        undeleted = {path for path, _ in result.failed}
        self.log.compact(_unpurged(plan, undeleted) + plan.retained)
        return result

    # ---------------- Internal ----------------
    def _record(self, result: BatchResult) -> None:
        if not result.moved:
            return
        sources = [s for s, _ in result.moved]
        destinations = [d for _, d in result.moved]
        record = OperationRecord(
            sources=sources, destinations=destinations, kind=result.kind, timestamp=self._clock()
        )
        self.log.append(record)
        result.record = record


def _is_empty_dir(path: str) -> bool:
    try:
        with os.scandir(path) as it:
            return next(it, None) is None
    except OSError:
        # Left to os.walk, which reports unreadable directories.
        return False


def _expired(record: OperationRecord, cutoff: datetime | None) -> bool:
    return cutoff is None or record.timestamp < cutoff


def _live_owners(records: Iterable[OperationRecord]) -> dict[str, OperationRecord]:
    """Map each trash path to the TRASH record that last filled it.

    Paths moved out again by a later RESTORE are absent.
    """
    owners: dict[str, OperationRecord] = {}
    for record in records:
        if record.kind is OperationKind.TRASH:
            for destination in record.destinations:
                owners[destination] = record
        else:
            for trash_path in record.sources:
                owners.pop(trash_path, None)
    return owners


def _unpurged(plan: PurgePlan, undeleted: set[str]) -> list[OperationRecord]:
    """Expired TRASH records cut down to the entries purge failed to delete."""
    kept: list[OperationRecord] = []
    for record in plan.expired:
        pairs = [
            (source, destination)
            for source, destination in record.pairs
            if destination in undeleted and plan.owners.get(destination) is record
        ]
        if pairs:
            kept.append(
                OperationRecord(
                    sources=[s for s, _ in pairs],
                    destinations=[d for _, d in pairs],
                    kind=record.kind,
                    timestamp=record.timestamp,
                )
            )
    return kept
