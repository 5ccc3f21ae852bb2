"""Logging initialization utilities using loguru."""

from __future__ import annotations

from pathlib import Path
import sys

from loguru import logger


def get_log_directory() -> str:
    """Default diagnostic log directory when none is configured."""
    return str(Path.home() / ".local" / "state" / "trm" / "logs")


def init_logging(
    log_dir: str | None = None, level: str = "INFO", console_level: str | None = None
) -> None:
    """Initialize rotating file logging and an optional stderr sink.

    Args:
        log_dir: Directory for `trm_YYYYMMDD.log` files.
        level: Minimum level written to the file sink.
        console_level: If given, also log to stderr from this level up.
    """
    if log_dir is None:
        log_dir = get_log_directory()
    log_path = Path(log_dir)

    logger.remove()
    if console_level:
        logger.add(sys.stderr, level=console_level, format="<level>{level: <8}</level> {message}")
    try:
        log_path.mkdir(parents=True, exist_ok=True)
    except OSError as ex:
        logger.warning("File logging disabled, cannot create {}: {}", log_path, ex)
        return
    logger.add(
        str(log_path / "trm_{time:YYYYMMDD}.log"),
        rotation="10 MB",
        retention="10 days",
        compression="zip",
        backtrace=False,
        diagnose=False,
        level=level,
    )
