#!/usr/bin/env python3
"""
NessusLens - Logging Setup
Copyright (C) 2026  Dorin Badea
GPLv3 License

Rotating file log under the config home plus a quiet console handler.
"""

import logging
import os
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from typing import Optional

from nessuslens.utils.config import get_config_paths

LOGGER_NAME = "NessusLens"


class _NoTracebackFormatter(logging.Formatter):
    """Console formatter that keeps tracebacks out of the terminal (they go to the file log)."""

    def format(self, record: logging.LogRecord) -> str:
        exc_info = record.exc_info
        stack_info = record.stack_info
        record.exc_info = None
        record.stack_info = None
        try:
            return super().format(record)
        finally:
            record.exc_info = exc_info
            record.stack_info = stack_info


def setup_logging(
    log_dir: Optional[str] = None, console_level: int = logging.ERROR
) -> logging.Logger:
    """
    Configure the NessusLens logger with rotation.

    Safe to call more than once; handlers are attached once and later calls
    only update the console level.

    Args:
        log_dir: Directory for log files (default: <config home>/logs)
        console_level: Minimum level echoed to stderr

    Returns:
        The configured logger
    """
    if log_dir is None:
        config_dir, _ = get_config_paths()
        log_dir = os.path.join(config_dir, "logs")

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    file_handler = None
    try:
        os.makedirs(log_dir, exist_ok=True)
        log_file = os.path.join(log_dir, f"nessuslens_{datetime.now().strftime('%Y%m%d')}.log")
        fmt = logging.Formatter(
            "%(asctime)s - [%(levelname)s] - %(funcName)s:%(lineno)d - %(message)s"
        )
        file_handler = RotatingFileHandler(log_file, maxBytes=10 * 1024 * 1024, backupCount=5)
        file_handler.setFormatter(fmt)
        file_handler.setLevel(logging.DEBUG)
    except OSError:
        file_handler = None

    ch = logging.StreamHandler(stream=sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(_NoTracebackFormatter("%(levelname)s: %(message)s"))

    if not logger.handlers:
        if file_handler:
            logger.addHandler(file_handler)
        logger.addHandler(ch)
    else:
        # File handlers subclass StreamHandler; match the console handler exactly.
        consoles = [h for h in logger.handlers if type(h) is logging.StreamHandler]
        for handler in consoles:
            handler.setLevel(console_level)
        if not consoles:
            logger.addHandler(ch)
        has_file = any(isinstance(h, RotatingFileHandler) for h in logger.handlers)
        if file_handler and not has_file:
            logger.addHandler(file_handler)
        elif file_handler:
            file_handler.close()

    if file_handler is None:
        logger.warning("File logging disabled (permission or path issue)")
    return logger
