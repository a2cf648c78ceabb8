from __future__ import annotations

import logging
import sys
from pathlib import Path

LOGGER_NAME = "storage_validator"

CONSOLE_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
CONSOLE_DATEFMT = "%H:%M:%S"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Marks handlers installed here so repeated setup calls replace them.
_HANDLER_ATTR = "_storage_validator_handler"


def setup_logging(log_file: Path | None = None, verbose: bool = False) -> logging.Logger:
    """Configure the package logger for console (stdout) and optional file output."""

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_ATTR, False):
            logger.removeHandler(handler)
            handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=CONSOLE_DATEFMT))
    setattr(console_handler, _HANDLER_ATTR, True)
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=FILE_DATEFMT))
        setattr(file_handler, _HANDLER_ATTR, True)
        logger.addHandler(file_handler)
        # The file handler wants DEBUG even when the console stays at INFO.
        logger.setLevel(logging.DEBUG)

    return logger


__all__ = ["LOGGER_NAME", "setup_logging"]
