"""Utilities package for excel-template.

This package provides:
- Centralized exception classes (exceptions.py)
- Structured logging utilities (logging.py)
"""

from excel_template.utils.exceptions import (
    BeanPopulationError,
    CleanupFailureError,
    CoercionError,
    DataAccessError,
    ErrorCode,
    ExcelTemplateError,
    SourceUnavailableError,
)
from excel_template.utils.logging import (
    LogContext,
    StructuredLogger,
    get_logger,
    timed_operation,
)

__all__ = [
    # Exceptions
    "BeanPopulationError",
    "CleanupFailureError",
    "CoercionError",
    "DataAccessError",
    "ErrorCode",
    "ExcelTemplateError",
    "SourceUnavailableError",
    # Logging
    "LogContext",
    "StructuredLogger",
    "get_logger",
    "timed_operation",
]
