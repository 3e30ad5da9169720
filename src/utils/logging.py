"""Logging configuration utilities."""

import sys
from pathlib import Path

from loguru import logger

from src.core.config import get_settings


def setup_logging(
    level: str | None = None,
    log_file: str | Path | None = None,
    rotation: str = "10 MB",
    retention: str = "1 week",
) -> None:
    """Configure loguru for an application embedding the engine.

    Args:
        level: Minimum log level to display (defaults to the configured CHESS_LOG_LEVEL).
        log_file: Optional path to a log file.
        rotation: When to rotate the log file.
        retention: How long to keep old log files.
    """
    level = level or get_settings().log_level
    logger.remove()

    logger.add(
        sys.stderr,
        level=level,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>"
        ),
        colorize=True,
    )

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path,
            level=level,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}",
            rotation=rotation,
            retention=retention,
            compression="gz",
        )

    logger.info(f"Logging configured at level: {level}")
