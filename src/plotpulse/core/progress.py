from __future__ import annotations

import logging
import sys

LOGGER_NAME = "plotpulse"
LOG_FORMAT = "[%(asctime)s] %(message)s"


class _StderrHandler(logging.StreamHandler):
    """Stream handler bound to whatever ``sys.stderr`` is at emit time."""

    def emit(self, record: logging.LogRecord) -> None:
        self.stream = sys.stderr
        super().emit(record)


def get_logger() -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    if not any(isinstance(handler, _StderrHandler) for handler in logger.handlers):
        handler = _StderrHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    return logger


class ProgressLog:
    """Timestamped progress lines on stderr, silenced when ``verbose`` is off."""

    def __init__(self, verbose: bool = True, logger: logging.Logger | None = None) -> None:
        self.verbose = bool(verbose)
        self.logger = logger or get_logger()

    def __call__(self, message: str) -> None:
        if self.verbose:
            self.logger.info(message)

    def error(self, message: str) -> None:
        if self.verbose:
            self.logger.error(message)
