"""Mapping between original absolute paths and their mirror inside the trash root.

A file at `/a/b/c` lands at `<trash_root>/a/b/c`. When that name is already
taken the basename gets a `_N` suffix, with `N` found by an exponential probe
followed by a binary search so that heavily collided names need only
O(log N) existence checks.

All functions work on plain `str` paths and never touch the filesystem except
through the `exists` callable they are given (defaults to `os.path.lexists`).
"""

from __future__ import annotations

from collections.abc import Callable
import os
from pathlib import Path

from core.errors import PathError, PathOutsideRootError

ExistsFn = Callable[[str], bool]


def _norm(path: str) -> str:
    return os.path.normpath(path)


def is_within(path: str, root: str) -> bool:
    """Return True if `path` equals `root` or lies below it (lexically)."""
    path, root = _norm(path), _norm(root)
    try:
        return os.path.commonpath([path, root]) == root
    except ValueError:
        return False


def mirror(original: str, trash_root: str) -> str:
    """Map absolute `original` to its location inside `trash_root`.

    Only the leading root separator is stripped; the rest of the path is kept.
    """
    if not os.path.isabs(original):
        raise PathError(original, "expected an absolute path")
    relative = _norm(original).lstrip(os.sep)
    if not relative:
        return _norm(trash_root)
    return os.path.join(_norm(trash_root), relative)


def unmirror(trashed: str, trash_root: str) -> str:
    """Inverse of `mirror` by path arithmetic.

    Collision suffixes are not undone here; only the operation log knows the
    original name of a suffixed entry.

    Raises:
        PathOutsideRootError: If `trashed` is not strictly below `trash_root`.
    """
    trashed_n, root_n = _norm(trashed), _norm(trash_root)
    if trashed_n == root_n or not is_within(trashed_n, root_n):
        raise PathOutsideRootError(trashed, trash_root)
    return os.sep + os.path.relpath(trashed_n, root_n)


def suffixed_name(name: str, n: int) -> str:
    return f"{name}_{n}"


def find_free_suffix(parent: str, name: str, exists: ExistsFn = os.path.lexists) -> int:
    """Return the smallest `N >= 1` such that `<name>_N` is free in `parent`.

    Assumes taken suffixes form a contiguous run starting at 1, which is what
    repeated trashing of the same name produces.
    """
    lo, hi = 1, 1
    while exists(os.path.join(parent, suffixed_name(name, hi))):
        lo = hi
        hi *= 2

    while lo < hi:
        mid = (lo + hi) // 2
        if exists(os.path.join(parent, suffixed_name(name, mid))):
            lo = mid + 1
        else:
            hi = mid
    return hi


def resolve_destination(
    original: str, trash_root: str, exists: ExistsFn = os.path.lexists
) -> str:
    """Return a free trash destination for `original`, suffixing on collision."""
    destination = mirror(original, trash_root)
    if not exists(destination):
        return destination
    parent, name = os.path.split(destination)
    n = find_free_suffix(parent, name, exists)
    return os.path.join(parent, suffixed_name(name, n))


def canonicalize(path: str, cwd: str | None = None, strict: bool = True) -> str:
    """Return an absolute, normalized form of `path`.

    The parent directory is resolved through symlinks but the final component
    is kept as given, so a symlink names the link and not its target.

    Args:
        path: Absolute or relative path.
        cwd: Base for relative paths (defaults to the process cwd).
        strict: If True, the path must exist and its parent must resolve.
            If False, fall back to the lexical absolute path when the parent
            cannot be resolved (used for paths that are currently trashed).

    Raises:
        PathError: In strict mode, when the path or its parent is missing.
    """
    base = cwd if cwd is not None else os.getcwd()
    absolute = _norm(os.path.join(base, os.path.expanduser(path)))
    parent, name = os.path.split(absolute)
    if not name:
        return absolute
    try:
        resolved = os.path.join(str(Path(parent).resolve(strict=True)), name)
    except (OSError, RuntimeError) as ex:
        if strict:
            raise PathError(path, str(ex)) from ex
        return absolute
    if strict and not os.path.lexists(resolved):
        raise PathError(path, "no such file or directory")
    return resolved
