from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from infrastructure.operation_log import OperationLog
from infrastructure.trash_engine import TrashEngine

T0 = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


class StepClock:
    """Deterministic clock advancing one minute per call."""

    def __init__(self, start: datetime = T0, step: timedelta = timedelta(minutes=1)) -> None:
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current += self.step
        return value


@pytest.fixture
def root(tmp_path: Path) -> Path:
    return tmp_path.resolve()


@pytest.fixture
def host(root: Path) -> Path:
    """Directory standing in for the live filesystem."""
    path = root / "host"
    path.mkdir()
    return path


@pytest.fixture
def trash_root(root: Path) -> Path:
    path = root / "trash"
    path.mkdir()
    return path


@pytest.fixture
def op_log(root: Path) -> OperationLog:
    return OperationLog(root / "state" / "history")


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def engine(trash_root: Path, op_log: OperationLog, clock: StepClock) -> TrashEngine:
    return TrashEngine(str(trash_root), op_log, clock=clock)


def make_file(path: Path, content: str = "data") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path
