"""Structured logging utilities for excel-template.

This module provides:
- Document/sheet tracking using contextvars so every log line emitted during
  an extraction call names the workbook and sheet being read
- Structured logging with consistent ``message | key=value`` format
- Timing helpers for extraction calls

Usage:
    from excel_template.utils.logging import get_logger, LogContext

    logger = get_logger(__name__)

    with LogContext(document="report.xlsx", sheet="Tests"):
        logger.info("Reading sheet", rows=12)

    with timed_operation(logger, "read_maps") as metrics:
        metrics.rows_processed += 1
"""

import logging
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from excel_template.config import settings as default_settings

_document_var: ContextVar[str | None] = ContextVar("document", default=None)
_sheet_var: ContextVar[str | None] = ContextVar("sheet", default=None)
_extra_context_var: ContextVar[dict[str, Any] | None] = ContextVar(
    "extra_context", default=None
)


def get_document() -> str | None:
    """Get the document currently being read, if any."""
    return _document_var.get()


def set_document(document: str | None) -> None:
    """Set the document in context.

    Args:
        document: Document description, or None to clear.
    """
    _document_var.set(document)


def get_sheet() -> str | None:
    """Get the sheet currently being read, if any."""
    return _sheet_var.get()


def set_sheet(sheet: str | None) -> None:
    """Set the sheet in context.

    Args:
        sheet: Sheet name, or None to clear.
    """
    _sheet_var.set(sheet)


def get_extra_context() -> dict[str, Any]:
    """Get additional context from context vars.

    Returns:
        Dictionary of extra context values.
    """
    ctx = _extra_context_var.get()
    return ctx if ctx is not None else {}


def set_extra_context(context: dict[str, Any]) -> None:
    """Set additional context in context vars."""
    _extra_context_var.set(context)


def clear_context() -> None:
    """Clear all context variables."""
    _document_var.set(None)
    _sheet_var.set(None)
    _extra_context_var.set(None)


@dataclass
class ExtractionMetrics:
    """Counters collected while one extraction call runs.

    Attributes:
        operation: Name of the operation being measured.
        start_time: When the operation started.
        end_time: When the operation ended.
        duration_seconds: Duration in seconds.
        rows_processed: Number of rows handed to a projection or callback.
        cells_processed: Number of cells coerced or handed to a callback.
        custom_metrics: Additional custom metrics.
    """

    operation: str
    start_time: datetime = field(default_factory=lambda: datetime.now(UTC))
    end_time: datetime | None = None
    duration_seconds: float = 0.0
    rows_processed: int = 0
    cells_processed: int = 0
    custom_metrics: dict[str, Any] = field(default_factory=dict)

    def finish(self) -> None:
        """Mark the operation as complete and calculate duration."""
        self.end_time = datetime.now(UTC)
        self.duration_seconds = (self.end_time - self.start_time).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result: dict[str, Any] = {
            "operation": self.operation,
            "duration_seconds": f"{self.duration_seconds:.3f}",
        }
        if self.rows_processed > 0:
            result["rows_processed"] = self.rows_processed
        if self.cells_processed > 0:
            result["cells_processed"] = self.cells_processed
        if self.custom_metrics:
            result["custom_metrics"] = self.custom_metrics
        return result


class StructuredLogFormatter(logging.Formatter):
    """Log formatter that prefixes records with the current document/sheet."""

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with context information.

        Args:
            record: The log record to format.

        Returns:
            Formatted log message string.
        """
        prefix_parts = []
        document = get_document()
        sheet = get_sheet()
        if document:
            prefix_parts.append(f"document={document}")
        if sheet:
            prefix_parts.append(f"sheet={sheet}")
        for key, value in get_extra_context().items():
            prefix_parts.append(f"{key}={value}")

        prefix = f"[{' '.join(prefix_parts)}] " if prefix_parts else ""

        original_msg = record.msg
        record.msg = f"{prefix}{original_msg}"
        result = super().format(record)
        record.msg = original_msg

        return result


class StructuredLogger:
    """Logger wrapper that renders keyword arguments as ``key=value`` pairs."""

    def __init__(self, name: str) -> None:
        self._logger = logging.getLogger(name)
        self._name = name

    @property
    def logger(self) -> logging.Logger:
        """Access the underlying Python logger."""
        return self._logger

    def _build_message(self, message: str, **kwargs: Any) -> str:
        if not kwargs:
            return message

        parts = [f"{k}={v}" for k, v in kwargs.items()]
        return f"{message} | {', '.join(parts)}"

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log a debug message."""
        if self._logger.isEnabledFor(logging.DEBUG):
            self._logger.debug(self._build_message(message, **kwargs))

    def info(self, message: str, **kwargs: Any) -> None:
        """Log an info message."""
        self._logger.info(self._build_message(message, **kwargs))

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log a warning message."""
        self._logger.warning(self._build_message(message, **kwargs))

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        """Log an error message.

        Args:
            message: Log message.
            exc_info: Whether to include exception info.
            **kwargs: Additional structured data.
        """
        self._logger.error(self._build_message(message, **kwargs), exc_info=exc_info)

    def log_metrics(self, metrics: ExtractionMetrics) -> None:
        """Log the counters of a finished extraction call."""
        self.info(f"Completed: {metrics.operation}", **metrics.to_dict())


class LogContext:
    """Context manager for adding temporary context to logs.

    Usage:
        with LogContext(document="book.xls", sheet="Tests"):
            logger.info("Reading...")  # includes document and sheet
    """

    def __init__(self, **kwargs: Any) -> None:
        self._new_context = dict(kwargs)
        self._old_context: dict[str, Any] = {}
        self._old_document: str | None = None
        self._old_sheet: str | None = None

    def __enter__(self) -> "LogContext":
        """Enter the context, saving old values and setting new ones."""
        self._old_context = get_extra_context().copy()
        self._old_document = get_document()
        self._old_sheet = get_sheet()

        new_context = dict(self._new_context)
        document = new_context.pop("document", None)
        sheet = new_context.pop("sheet", None)

        if document is not None:
            set_document(str(document))
        if sheet is not None:
            set_sheet(str(sheet))

        merged = self._old_context.copy()
        merged.update(new_context)
        set_extra_context(merged)

        return self

    def __exit__(self, *args: Any) -> None:
        """Exit the context, restoring old values."""
        set_extra_context(self._old_context)
        set_document(self._old_document)
        set_sheet(self._old_sheet)


@contextmanager
def timed_operation(
    logger: StructuredLogger,
    operation: str,
) -> Generator[ExtractionMetrics, None, None]:
    """Context manager for timing an extraction call.

    The metrics are logged whether the operation succeeds or fails.

    Args:
        logger: Logger to use for output.
        operation: Name of the operation.

    Yields:
        ExtractionMetrics instance for tracking.
    """
    metrics = ExtractionMetrics(operation=operation)
    try:
        yield metrics
    finally:
        metrics.finish()
        logger.log_metrics(metrics)


def configure_logging(
    level: int | str | None = None,
    format_string: str | None = None,
    use_structured_formatter: bool = True,
) -> None:
    """Configure root logging for applications embedding the library.

    Args:
        level: Log level (int or string like "INFO"). Defaults to the
            configured log level, or DEBUG when debug mode is on.
        format_string: Custom format string (uses default if None).
        use_structured_formatter: Whether to use the structured formatter.
    """
    if level is None:
        level = logging.DEBUG if default_settings.debug else default_settings.log_level_int
    elif isinstance(level, str):
        level = getattr(logging, level.upper())

    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setLevel(level)

    formatter: logging.Formatter
    if use_structured_formatter:
        formatter = StructuredLogFormatter(format_string)
    else:
        formatter = logging.Formatter(format_string)

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger for a module.

    Args:
        name: Logger name (typically __name__).

    Returns:
        StructuredLogger instance.

    Example:
        logger = get_logger(__name__)
        logger.info("Reading sheet", sheet="Tests", rows=10)
    """
    return StructuredLogger(name)
