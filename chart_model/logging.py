"""
Logging configuration for plotly-live.

Two destinations:
  - File: always DEBUG level, one file per session in <data_dir>/logs/
  - Console: DEBUG if verbose, WARNING+ otherwise
  - Format: "timestamp | level | name | chart_id | message"
  - Config console_format options:
    - "full"   - same structured format as the file handler
    - "simple" - (default) bare messages for DEBUG/INFO, [LEVEL] prefix for WARNING+
    - "clean"  - no console output at all (file logging still active)

Chart models receive a logger at construction; by default a child of the
package logger so records flow through these handlers.
"""

import logging
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Optional

import config

LOGGER_NAME = "plotly-live"

# Module-level state (shared across re-inits)
_chart_filter: Optional["_ChartFilter"] = None
_current_log_file: Optional[Path] = None


def tagged(tag: str) -> dict:
    """Return ``extra`` dict for logger calls: ``logger.debug("...", extra=tagged("x"))``."""
    return {"log_tag": tag}


class _ChartFilter(logging.Filter):
    """Injects chart_id into every log record."""

    def __init__(self) -> None:
        super().__init__()
        self.chart_id = ""

    def filter(self, record: logging.LogRecord) -> bool:
        record.chart_id = self.chart_id or "-"
        if not hasattr(record, "log_tag"):
            record.log_tag = ""
        return True


def get_log_dir() -> Path:
    """Directory holding the per-session log files."""
    return config.get_data_dir() / "logs"


class _ConsoleFormatter(logging.Formatter):
    """Console formatter: shows [LEVEL] prefix only for WARNING and above."""

    def format(self, record: logging.LogRecord) -> str:
        if record.levelno >= logging.WARNING:
            return f"  [{record.levelname}] {record.getMessage()}"
        return f"  {record.getMessage()}"


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Configure logging for the package.

    Args:
        verbose: If True, show DEBUG level on console; otherwise WARNING+ only

    Returns:
        Configured logger instance
    """
    global _chart_filter, _current_log_file
    log_dir = get_log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)  # Capture everything, filter at handler level

    # Clear existing handlers (in case of re-init)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    if _chart_filter is None:
        _chart_filter = _ChartFilter()

    session_timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    log_file = log_dir / f"chart_{session_timestamp}.log"
    _current_log_file = log_file
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    # On the handlers, so records from child loggers are stamped too
    file_handler.addFilter(_chart_filter)
    file_format = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(chart_id)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    file_handler.setFormatter(file_format)
    logger.addHandler(file_handler)

    console_format = config.get("console_format", "simple")

    if console_format != "clean":
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
        console_handler.addFilter(_chart_filter)
        if console_format == "full":
            console_handler.setFormatter(file_format)
        else:
            console_handler.setFormatter(_ConsoleFormatter())
        logger.addHandler(console_handler)
    # "clean" - no console handler at all (file logging still active)

    logger.debug(f"Logging started, log file: {log_file}")
    return logger


def get_logger() -> logging.Logger:
    """Get the package logger instance.

    Returns:
        The plotly-live logger (creates with defaults if not configured)
    """
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        return setup_logging(verbose=False)
    return logger


def set_chart_id(chart_id: str) -> None:
    """Set the chart ID that will be included in all subsequent log lines.

    Args:
        chart_id: Identifier of the chart whose model is logging (e.g. a panel name)
    """
    global _chart_filter
    if _chart_filter is None:
        # Logger not set up yet; the filter is picked up by setup_logging
        _chart_filter = _ChartFilter()
    _chart_filter.chart_id = chart_id


def log_error(
    message: str,
    exc: Optional[BaseException] = None,
    context: Optional[dict] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """Log an error with full details including stack trace.

    Args:
        message: Error description
        exc: Optional exception to include stack trace from
        context: Optional dict of additional context (table, column, path, etc.)
        logger: Logger to write to; defaults to the package logger
    """
    logger = logger or get_logger()

    lines = [message]

    if context:
        lines.append("Context:")
        for key, value in context.items():
            lines.append(f"  {key}: {value}")

    if exc is not None:
        lines.append(f"Exception type: {type(exc).__name__}")
        lines.append(f"Exception message: {exc}")
        if exc.__traceback__ is not None:
            lines.append("Stack trace:")
            lines.append("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))

    logger.error("\n".join(lines), extra=tagged("error"))


def get_current_log_path() -> Optional[Path]:
    """Return the path to the current session's log file (or None)."""
    return _current_log_file
