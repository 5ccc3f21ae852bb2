from __future__ import annotations

import json
from pathlib import Path

import pytest

from infrastructure.settings import (
    DEFAULT_TRASH_ROOT,
    JsonSettings,
    default_settings_path,
    resolve_config,
)


def _settings(root: Path, data: dict) -> JsonSettings:
    path = root / "settings.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return JsonSettings(path)


def test_missing_settings_file_is_empty(root: Path):
    settings = JsonSettings(root / "absent.json")
    assert settings.get("trash.root") is None
    assert settings.get("trash.root", "x") == "x"


def test_dotted_get(root: Path):
    settings = _settings(root, {"trash": {"root": "/r"}, "flat": 1})
    assert settings.get("trash.root") == "/r"
    assert settings.get("flat") == 1
    assert settings.get("flat.deeper", 5) == 5


def test_non_object_settings_rejected(root: Path):
    path = root / "settings.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        JsonSettings(path)


def test_explicit_dir_wins_and_is_created(root: Path):
    config = resolve_config(
        str(root / "explicit"),
        _settings(root, {"trash": {"root": str(root / "configured")}}),
        environ={"XDG_DATA_HOME": str(root / "xdg"), "XDG_STATE_HOME": str(root / "state")},
    )
    assert config.trash_root == str(root / "explicit")
    assert (root / "explicit").is_dir()


def test_xdg_data_home_beats_settings_and_default(root: Path):
    config = resolve_config(
        DEFAULT_TRASH_ROOT,
        _settings(root, {"trash": {"root": str(root / "configured")}}),
        environ={"XDG_DATA_HOME": str(root / "xdg"), "XDG_STATE_HOME": str(root / "state")},
    )
    assert config.trash_root == str(root / "xdg")


def test_settings_root_used_without_env(root: Path):
    config = resolve_config(
        None,
        _settings(root, {"trash": {"root": str(root / "configured")}}),
        environ={"XDG_STATE_HOME": str(root / "state")},
    )
    assert config.trash_root == str(root / "configured")


def test_log_locations(root: Path):
    config = resolve_config(
        str(root / "t"), JsonSettings(None), environ={"XDG_STATE_HOME": str(root / "state")}
    )
    assert config.log_file == str(root / "state" / "trm" / "history")
    assert config.log_dir == str(root / "state" / "trm" / "logs")

    configured = resolve_config(
        str(root / "t"),
        _settings(root, {"history": {"file": str(root / "h.jsonl")}, "logging": {"dir": "/l"}}),
        environ={},
    )
    assert configured.log_file == str(root / "h.jsonl")
    assert configured.log_dir == "/l"


def test_default_settings_path_env_override(root: Path):
    assert default_settings_path({"TRM_SETTINGS": str(root / "s.json")}) == root / "s.json"
    assert default_settings_path({}).name == "settings.json"
