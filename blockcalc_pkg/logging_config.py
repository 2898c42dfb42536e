"""Structured logging for blockcalc.

Log records go to stderr (and optionally a file), never to the channel
results are printed on. Each record is stamped with the kind of calculator
that produced it, so logs from ``int``, ``memo`` and ``matrix`` sessions can
be told apart when they share a log file.
"""

import logging
import sys
from datetime import datetime
from typing import Optional, TextIO

ROOT_LOGGER = "blockcalc"


class StructuredFormatter(logging.Formatter):
    """Formats records as ``<timestamp> [LEVEL] name (kind): message``."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).isoformat()
        kind = getattr(record, "calculator_kind", None)
        origin = f"{record.name} ({kind})" if kind else record.name
        text = f"{timestamp} [{record.levelname}] {origin}: {record.getMessage()}"
        if record.exc_info:
            text += "\n" + self.formatException(record.exc_info)
        return text


class CalculatorKindFilter(logging.Filter):
    """Stamps every record with the calculator kind of the session."""

    def __init__(self, kind: Optional[str] = None):
        super().__init__()
        self.kind = kind

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "calculator_kind"):
            record.calculator_kind = self.kind
        return True


def setup_logging(
    level: str = "WARNING",
    log_file: Optional[str] = None,
    kind: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """Configure the ``blockcalc`` logger hierarchy.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional file that receives the same records
        kind: Calculator kind stamped on every record
        stream: Console stream (default: stderr)

    Returns:
        The ``blockcalc`` logger
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    logger.handlers.clear()

    kind_filter = CalculatorKindFilter(kind)
    handlers: list[logging.Handler] = [logging.StreamHandler(stream or sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(StructuredFormatter())
        handler.addFilter(kind_filter)
        logger.addHandler(handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger for one module, e.g. ``get_logger("matrix")`` -> ``blockcalc.matrix``."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
