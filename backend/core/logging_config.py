"""
Loguru logging configuration.

- Colourised console output in development
- JSON lines on stderr everywhere else
- Rotating file sink under ``logs/`` (skipped for the test environment)
- Correlation ID injected into every record
"""

import sys
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from core.correlation import get_correlation_id

if TYPE_CHECKING:
    from loguru import Record

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[correlation_id]}</cyan> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


def correlation_filter(record: "Record") -> bool:
    """Stamp the record with the current correlation ID. Never drops records."""
    record["extra"]["correlation_id"] = get_correlation_id() or "-"
    return True


def configure_logging(environment: str = "development", log_dir: str = "logs") -> None:
    """
    Configure Loguru sinks for the given environment.

    Args:
        environment: "development", "test", "staging" or "production".
        log_dir: Directory for the rotating file sink.
    """
    logger.remove()

    if environment == "development":
        logger.add(
            sys.stderr,
            format=LOG_FORMAT,
            level="DEBUG",
            filter=correlation_filter,
            colorize=True,
        )
    elif environment == "test":
        # Quiet test runs; warnings still surface in pytest output
        logger.add(
            sys.stderr,
            format=LOG_FORMAT,
            level="WARNING",
            filter=correlation_filter,
        )
        return
    else:
        logger.add(
            sys.stderr,
            format="{message}",
            level="INFO",
            filter=correlation_filter,
            serialize=True,
        )

    logs_path = Path(log_dir)
    logs_path.mkdir(parents=True, exist_ok=True)

    logger.add(
        str(logs_path / "app.log"),
        format=LOG_FORMAT if environment == "development" else "{message}",
        level="INFO",
        filter=correlation_filter,
        rotation="10 MB",
        retention="7 days",
        serialize=(environment != "development"),
    )
