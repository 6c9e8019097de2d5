"""Logging setup for programs driving repoman."""

import os
import sys
import logging
from datetime import datetime
from typing import Optional

LOGGER_NAME = 'repoman'
LOG_FORMAT = '%(asctime)s - %(levelname)s - %(threadName)s - %(message)s'


def setup_logging(
    operation: str,
    log_dir: Optional[str] = None,
    level: int = logging.INFO
) -> logging.Logger:
    """Send the ``repoman`` logger to stderr and optionally a log file.

    Only the package logger is touched; the root logger and other libraries
    keep whatever configuration the program gave them. Calling this again
    replaces the handlers installed by the previous call.

    Args:
        operation: Operation name used in the log file name
        log_dir: Directory for ``repoman_<operation>_<timestamp>.log``
            (None = console only)
        level: Logging level

    Returns:
        The configured ``repoman`` logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)
    handlers = [logging.StreamHandler(sys.stderr)]

    log_file = None
    if log_dir is not None:
        os.makedirs(log_dir, exist_ok=True)
        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        log_file = os.path.join(log_dir, f'repoman_{operation}_{timestamp}.log')
        handlers.append(logging.FileHandler(log_file))

    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False

    logger.info(f"Starting repoman {operation}")
    if log_file:
        logger.info(f"Log file: {log_file}")
    return logger
