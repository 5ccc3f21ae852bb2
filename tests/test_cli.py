"""Tests for the trm command line."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from app.cli import app

from conftest import make_file

runner = CliRunner()


@pytest.fixture
def invoke(root: Path, trash_root: Path):
    env = {
        "XDG_STATE_HOME": str(root / "state"),
        "XDG_DATA_HOME": None,
        "TRM_SETTINGS": str(root / "no-settings.json"),
    }

    def _invoke(*args: str, input: str | None = None):  # pylint: disable=redefined-builtin
        return runner.invoke(app, ["--dir", str(trash_root), *args], env=env, input=input)

    return _invoke


def test_trash_list_and_restore(invoke, host: Path):
    f = make_file(host / "a.txt", "hi")

    trashed = invoke("trash", str(f))
    listed = invoke("list", str(host))
    restored = invoke("restore", str(f))

    assert trashed.exit_code == 0, trashed.output
    assert "a.txt" in listed.output
    assert restored.exit_code == 0, restored.output
    assert f.read_text() == "hi"


def test_verbose_reports_moves(invoke, host: Path):
    f = make_file(host / "v.txt")

    result = invoke("--verbose", "trash", str(f))

    assert result.output.count("Trashed") == 1


def test_restore_from_trash_paths(invoke, host: Path, trash_root: Path):
    f = make_file(host / "b.txt")
    invoke("trash", str(f))
    trashed = str(trash_root) + str(f)

    result = invoke("restore", "--from-trash", trashed)

    assert result.exit_code == 0, result.output
    assert f.exists()


def test_restore_list_restores_everything_under_directory(invoke, host: Path):
    make_file(host / "d" / "one.txt")
    make_file(host / "d" / "two.txt")
    invoke("trash", str(host / "d" / "one.txt"), str(host / "d" / "two.txt"))

    result = invoke("restore", "--list", str(host / "d"))

    assert result.exit_code == 0, result.output
    assert (host / "d" / "one.txt").exists()
    assert (host / "d" / "two.txt").exists()


def test_history_all_shows_operations(invoke, host: Path):
    f = make_file(host / "h.txt")
    invoke("trash", str(f))
    invoke("restore", str(f))

    result = invoke("history", "--all")

    assert result.exit_code == 0, result.output
    assert "TRASH" in result.output
    assert "RESTORE" in result.output


def test_history_before_rejects_bad_duration(invoke):
    result = invoke("history", "--before", "soon")
    assert result.exit_code == 2


def test_out_of_range_duration_is_usage_error(invoke):
    assert invoke("history", "--before", "1000000d").exit_code == 2
    assert invoke("purge", "--before", "1000000d", "--quiet").exit_code == 2


def test_trash_missing_file_exits_non_zero(invoke, host: Path):
    result = invoke("trash", str(host / "missing.txt"))

    assert result.exit_code == 1
    assert "Error" in result.output


def test_restore_without_targets_is_usage_error(invoke):
    assert invoke("restore").exit_code == 2


def test_purge_requires_scope(invoke):
    assert invoke("purge").exit_code == 2


def test_purge_confirmation(invoke, host: Path, trash_root: Path):
    f = make_file(host / "p.txt")
    invoke("trash", str(f))
    trashed = Path(str(trash_root) + str(f))

    declined = invoke("purge", "--all", input="n\n")
    assert "cancelled" in declined.output
    assert trashed.exists()

    accepted = invoke("purge", "--all", input="y\n")
    assert accepted.exit_code == 0, accepted.output
    assert not trashed.exists()


def test_purge_quiet_skips_prompt(invoke, host: Path, trash_root: Path):
    f = make_file(host / "q.txt")
    invoke("trash", str(f))

    result = invoke("purge", "--all", "--quiet")

    assert result.exit_code == 0, result.output
    assert "Purged 1 item(s)." in result.output
    assert not Path(str(trash_root) + str(f)).exists()
    assert "TRASH" not in invoke("history", "--all").output
