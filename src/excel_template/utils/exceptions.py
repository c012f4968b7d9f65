"""Centralized exception classes for excel-template.

This module provides a small hierarchy of exceptions with error codes and
structured details so that a failed extraction call always surfaces as a
single, descriptive error.

Exception Hierarchy:
    ExcelTemplateError (base)
    ├── DataAccessError
    │   ├── SourceUnavailableError
    │   └── CleanupFailureError
    ├── CoercionError
    └── BeanPopulationError

Error Codes:
    All errors have a unique error code (e.g., "E1001") that can be used
    for programmatic error handling and documentation.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Enumeration of all error codes used by the library.

    Error codes are grouped by category:
    - E1xxx: Document source errors
    - E2xxx: Cell coercion errors
    - E3xxx: Bean population errors
    - E9xxx: Internal/unexpected errors
    """

    # Source errors (E1xxx)
    SOURCE_NOT_CONFIGURED = "E1001"
    SOURCE_NOT_FOUND = "E1002"
    SOURCE_READ_ERROR = "E1003"
    UNSUPPORTED_CONTAINER = "E1004"
    CLEANUP_FAILED = "E1005"

    # Coercion errors (E2xxx)
    COERCION_FAILED = "E2001"
    UNSUPPORTED_TARGET = "E2002"

    # Bean errors (E3xxx)
    BEAN_CREATION_FAILED = "E3001"
    PROPERTY_CONVERSION_FAILED = "E3002"

    # Internal errors (E9xxx)
    INTERNAL_ERROR = "E9001"


class ExcelTemplateError(Exception):
    """Base exception for all excel-template errors.

    Attributes:
        message: Human-readable error message.
        error_code: Unique error code from ErrorCode enum.
        details: Optional dictionary with additional error details.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Error code from ErrorCode enum.
            details: Optional additional details about the error.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert the exception to a dictionary.

        Returns:
            Dictionary with error information.
        """
        result: dict[str, Any] = {
            "error_code": self.error_code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code.value}] {self.message}"


# =============================================================================
# Data Access Errors (E1xxx)
# =============================================================================


class DataAccessError(ExcelTemplateError):
    """Base class for failures touching the underlying document."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.SOURCE_READ_ERROR,
        resource: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with resource information.

        Args:
            message: Error message.
            error_code: Error code.
            resource: Description of the document source.
            details: Additional details.
        """
        details = details or {}
        if resource:
            details["resource"] = resource
        super().__init__(message, error_code, details)
        self.resource = resource


class SourceUnavailableError(DataAccessError):
    """Raised when the document cannot be opened or parsed.

    Covers missing files, corrupt containers and a template that was never
    given a resource.
    """


class CleanupFailureError(DataAccessError):
    """Raised when closing the document stream fails."""

    def __init__(
        self,
        message: str = "Problem closing file",
        resource: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=ErrorCode.CLEANUP_FAILED,
            resource=resource,
            details=details,
        )


# =============================================================================
# Coercion Errors (E2xxx)
# =============================================================================


class CoercionError(ExcelTemplateError):
    """Raised when a cell value cannot be converted to the requested kind."""

    def __init__(
        self,
        message: str,
        cell_type: str | None = None,
        target: str | None = None,
        row: int | None = None,
        column: int | None = None,
        error_code: ErrorCode = ErrorCode.COERCION_FAILED,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the offending cell variant and position.

        Args:
            message: Error message.
            cell_type: Storage variant of the cell.
            target: Requested target kind.
            row: Row index of the cell, when known.
            column: Column index of the cell, when known.
            error_code: Error code.
            details: Additional details.
        """
        details = details or {}
        if cell_type is not None:
            details["cell_type"] = cell_type
        if target is not None:
            details["target"] = target
        if row is not None:
            details["row"] = row
        if column is not None:
            details["column"] = column
        super().__init__(message, error_code, details)
        self.cell_type = cell_type
        self.target = target
        self.row = row
        self.column = column

    def at(self, row: int, column: int) -> "CoercionError":
        """Return a copy of this error pinned to a cell position."""
        return CoercionError(
            f"{self.message} at row {row}, column {column}",
            cell_type=self.cell_type,
            target=self.target,
            row=row,
            column=column,
            error_code=self.error_code,
            details={
                k: v for k, v in self.details.items() if k not in ("row", "column")
            },
        )


# =============================================================================
# Bean Errors (E3xxx)
# =============================================================================


class BeanPopulationError(ExcelTemplateError):
    """Raised when a target object cannot be created or populated."""

    def __init__(
        self,
        message: str,
        bean_class: str | None = None,
        property_name: str | None = None,
        error_code: ErrorCode = ErrorCode.BEAN_CREATION_FAILED,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if bean_class:
            details["bean_class"] = bean_class
        if property_name:
            details["property_name"] = property_name
        super().__init__(message, error_code, details)
        self.bean_class = bean_class
        self.property_name = property_name
