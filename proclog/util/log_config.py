"""
Logging configuration for the process logger.

Provides centralized logging setup with clean, concise terminal output.
Handlers are attached to the package logger only; module loggers propagate to it.
"""
import logging
import sys
from pathlib import Path
from typing import Optional

PACKAGE_LOGGER = "proclog"


def setup_logger(
    name: str,
    level: Optional[int] = None,
    log_file: Optional[Path] = None
) -> logging.Logger:
    """
    Return a logger for `name`, making sure the package logger is configured.

    Args:
        name: Logger name (typically __name__)
        level: Logging level; configures the package logger when given
        log_file: Optional file path for log output

    Returns:
        Logger instance
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if level is not None or log_file is not None or not package_logger.handlers:
        configure_logging(level if level is not None else logging.INFO, log_file)
    return logging.getLogger(name)


def configure_logging(level: int = logging.INFO, log_file: Optional[Path] = None) -> logging.Logger:
    """
    (Re)configure the package logger with consistent formatting.

    Args:
        level: Logging level (default: INFO)
        log_file: Optional file path for log output

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    # Console handler with clean formatting
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)

    # Clean format: [LEVEL] message
    console_formatter = logging.Formatter(
        fmt='[%(levelname)s] %(message)s'
    )
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    # Optional file handler with more detailed format
    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)

        file_formatter = logging.Formatter(
            fmt='%(asctime)s [%(levelname)s] %(name)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    # Prevent propagation to root logger
    logger.propagate = False

    return logger


def parse_level(name: str) -> int:
    """Translate a level name such as 'debug' into a logging constant."""
    level = logging.getLevelName(str(name).upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {name}")
    return level
