"""Loguru setup: colorized console sink plus an optional rotating file sink."""

import sys
from pathlib import Path

from loguru import logger

from docassets.config import LoggingConfig

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>[{extra[module]}]</cyan> <cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | [{extra[module]}] {function}:{line} - {message}"


def setup_logging(
    level: str = "INFO",
    log_to_file: bool = True,
    log_dir: str = "logs",
    file_rotation: str = "10 MB",
    file_retention: str = "7 days",
    compression: str = "zip",
    serialize: bool = True,
) -> None:
    """
    Replace all sinks with the docassets console and file sinks.

    Records are tagged with the emitting component (`reconciler`,
    `garbage_collector`, ...); records logged without a bound component are
    tagged `docassets`.
    """
    logger.remove()
    logger.configure(extra={"module": "docassets"})

    logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT, colorize=True)

    if log_to_file:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        # Sweep summaries and per-asset failures end up here as JSON when serialize is on
        logger.add(
            log_path / "docassets_{time:YYYY-MM-DD}.log",
            level=level,
            format=FILE_FORMAT,
            rotation=file_rotation,
            retention=file_retention,
            compression=compression,
            serialize=serialize,
            enqueue=True,
        )


def configure_logging(config: LoggingConfig) -> None:
    """Apply the logging section of the configuration."""
    setup_logging(**config.model_dump())


def get_logger(name: str):
    """Get a logger tagged with the short component name of a module."""
    return logger.bind(module=name.rsplit(".", 1)[-1])
