"""Settings access helpers and resolution of the trash configuration."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import json
import os
from pathlib import Path
from typing import Any

from loguru import logger

DEFAULT_TRASH_ROOT = "/var/tmp/trm_files"
HISTORY_FILE_NAME = "history"
SETTINGS_ENV = "TRM_SETTINGS"


class JsonSettings:
    """Lightweight JSON settings reader with dotted-key access.

    A missing file yields empty settings; a file that exists but is not a
    JSON object is an error.
    """

    def __init__(self, settings_path: str | Path | None = None) -> None:
        self._path = Path(settings_path) if settings_path else None
        self._data: dict[str, Any] = {}
        if self._path is None or not self._path.exists():
            return
        with self._path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"settings must be a JSON object: {self._path}")
        self._data = data

    def get(self, key: str, default: Any | None = None) -> Any:
        """Return value for dotted `key`, or `default` if not present."""
        parts = key.split(".")
        node: Any = self._data
        for part in parts:
            if isinstance(node, dict) and part in node:
                node = node[part]
            else:
                return default
        return node


def default_settings_path(environ: Mapping[str, str] | None = None) -> Path:
    """Return `$TRM_SETTINGS` or `~/.config/trm/settings.json`."""
    env = os.environ if environ is None else environ
    if env.get(SETTINGS_ENV):
        return Path(env[SETTINGS_ENV]).expanduser()
    return Path.home() / ".config" / "trm" / "settings.json"


@dataclass(frozen=True)
class TrashConfig:
    """Resolved locations passed explicitly to the engine.

    Attributes:
        trash_root: Absolute, canonical mirror root.
        log_file: Operation log (JSONL) path.
        log_dir: Directory for diagnostic log files.
    """

    trash_root: str
    log_file: str
    log_dir: str


def _pick_trash_root(
    dir_override: str | None, settings: JsonSettings, env: Mapping[str, str]
) -> str:
    if dir_override and dir_override != DEFAULT_TRASH_ROOT:
        return dir_override
    if env.get("XDG_DATA_HOME"):
        return env["XDG_DATA_HOME"]
    configured = settings.get("trash.root")
    if isinstance(configured, str) and configured:
        return configured
    return DEFAULT_TRASH_ROOT


def _pick_log_file(settings: JsonSettings, env: Mapping[str, str]) -> str:
    configured = settings.get("history.file")
    if isinstance(configured, str) and configured:
        return configured
    if env.get("XDG_STATE_HOME"):
        return os.path.join(env["XDG_STATE_HOME"], "trm", HISTORY_FILE_NAME)
    return str(Path.home() / ".local" / "state" / "trm" / HISTORY_FILE_NAME)


def resolve_config(
    dir_override: str | None = None,
    settings: JsonSettings | None = None,
    environ: Mapping[str, str] | None = None,
    create: bool = True,
) -> TrashConfig:
    """Resolve trash root, operation log and log directory.

    Trash root precedence: explicit `dir_override`, `$XDG_DATA_HOME`, the
    `trash.root` setting, then `/var/tmp/trm_files`. The root is created when
    `create` is True and returned in canonical form.
    """
    env = os.environ if environ is None else environ
    settings = settings or JsonSettings(None)

    root = Path(_pick_trash_root(dir_override, settings, env)).expanduser()
    if create:
        root.mkdir(parents=True, exist_ok=True)
    trash_root = str(root.resolve())

    log_file = str(Path(_pick_log_file(settings, env)).expanduser().absolute())
    configured_dir = settings.get("logging.dir")
    if isinstance(configured_dir, str) and configured_dir:
        log_dir = str(Path(configured_dir).expanduser().absolute())
    else:
        log_dir = str(Path(log_file).parent / "logs")

    logger.debug("Trash root: {} | history: {} | logs: {}", trash_root, log_file, log_dir)
    return TrashConfig(trash_root=trash_root, log_file=log_file, log_dir=log_dir)
