"""
Package-wide logger for BranchMirror.
"""

import logging
import sys


LOGGER_NAME = "BranchMirror"

# Chattier than DEBUG; used for expected per-file misses
VERBOSE = 5
logging.addLevelName(VERBOSE, "VERBOSE")


def get_logger(name: str = LOGGER_NAME, level: int = logging.INFO) -> logging.Logger:
    """Return the package logger, attaching a stderr handler once."""

    log = logging.getLogger(name)
    if not log.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        )
        log.addHandler(handler)
        log.setLevel(level)
    return log


logger = get_logger()


def log_verbose(message: str) -> None:
    logger.log(VERBOSE, message)


__all__ = ["LOGGER_NAME", "VERBOSE", "get_logger", "logger", "log_verbose"]
