"""Logging configuration for smartshift."""

import logging
import sys
from pathlib import Path
from typing import Optional


def setup_logging(
    log_level: str = "WARNING",
    log_file: Optional[str] = None,
    app_name: str = "smartshift",
) -> logging.Logger:
    """Set up logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        log_file: Optional path to a log file.
        app_name: Name of the logger to configure.

    Returns:
        Configured logger.
    """
    logger = logging.getLogger(app_name)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # Clear existing handlers
    logger.handlers.clear()

    # Console handler; stdout is reserved for command output
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG)
    console_handler.setFormatter(
        logging.Formatter(
            "[%(asctime)s] %(levelname)s %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, mode="a")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s"
            )
        )
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str = "smartshift") -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name)
