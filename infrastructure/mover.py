"""Physical relocation and removal of files and directory trees.

`relocate` tries an atomic rename first. Only a cross-device failure triggers
the copy-then-delete fallback; every other rename error is reported as is.
"""

from __future__ import annotations

import errno
import os
import shutil

from loguru import logger

from core.errors import MoveError


def _copy_then_delete(source: str, destination: str) -> None:
    if os.path.islink(source):
        os.symlink(os.readlink(source), destination)
        os.unlink(source)
    elif os.path.isdir(source):
        shutil.copytree(source, destination, symlinks=True)
        shutil.rmtree(source)
    else:
        shutil.copy2(source, destination)
        os.remove(source)


def relocate(source: str, destination: str) -> None:
    """Move `source` to `destination`, creating the destination's parents.

    Ancestor directories created here are left in place if the move fails.

    Raises:
        MoveError: If the rename fails for a reason other than a device
            boundary, or if the fallback copy/delete fails.
    """
    try:
        os.makedirs(os.path.dirname(destination), exist_ok=True)
    except OSError as ex:
        raise MoveError(source, destination, f"cannot create parent: {ex}") from ex

    try:
        os.rename(source, destination)
        return
    except OSError as ex:
        if ex.errno != errno.EXDEV:
            raise MoveError(source, destination, ex.strerror or str(ex)) from ex
        logger.debug("Cross-device rename {} -> {}, copying instead", source, destination)

    try:
        _copy_then_delete(source, destination)
    except (OSError, shutil.Error) as ex:
        raise MoveError(source, destination, f"copy fallback failed: {ex}") from ex


def remove_path(path: str) -> None:
    """Permanently delete a file, symlink or directory tree."""
    if os.path.isdir(path) and not os.path.islink(path):
        shutil.rmtree(path)
    else:
        os.remove(path)


def prune_empty_parents(path: str, stop_at: str) -> list[str]:
    """Remove empty ancestors of `path` up to, but never including, `stop_at`.

    Stops at the first ancestor that is missing or not empty.

    Returns:
        The directories removed, deepest first.
    """
    removed: list[str] = []
    stop = os.path.normpath(stop_at)
    current = os.path.dirname(os.path.normpath(path))
    while current != stop and current.startswith(stop + os.sep):
        try:
            os.rmdir(current)
        except OSError:
            break
        removed.append(current)
        current = os.path.dirname(current)
    return removed
