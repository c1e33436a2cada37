"""Structured JSON logging configuration."""

import logging
import sys
from pythonjsonlogger.json import JsonFormatter


def setup_logger(name: str = "gpfs_exporter", level: str = "INFO") -> logging.Logger:
    """
    Configure structured JSON logging on stderr.

    Stdout is left to the metrics text written by ``--run-once``.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        logging.Logger: Configured logger instance

    Raises:
        ValueError: If *level* is not a known level name
    """
    level_name = level.upper()
    if not isinstance(logging.getLevelName(level_name), int):
        raise ValueError(f"Unknown log level: {level}")

    logger = logging.getLogger(name)
    logger.setLevel(level_name)
    logger.handlers = []

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter(
        '%(asctime)s %(name)s %(levelname)s %(message)s',
        rename_fields={"levelname": "level"},
        timestamp=True
    ))
    logger.addHandler(handler)
    logger.propagate = False

    return logger
