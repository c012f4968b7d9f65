"""Configuration management for excel-template.

This module provides centralized configuration using pydantic-settings.
All configuration options can be set via environment variables with the
EXCEL_TEMPLATE_ prefix, or via a .env file in the working directory.

Environment Variables:
    EXCEL_TEMPLATE_TRUE_LITERAL: Text rendered for TRUE booleans (default: VRAI)
    EXCEL_TEMPLATE_FALSE_LITERAL: Text rendered for FALSE booleans (default: FAUX)
    EXCEL_TEMPLATE_DATE_FORMAT: strftime pattern for date cells (default: %d/%m/%Y)
    EXCEL_TEMPLATE_ERROR_FORMAT: Template for error cells (default: Error<{code}>)
    EXCEL_TEMPLATE_INFER_DATE_FORMATS: Treat unlisted date-like number
        formats as dates (default: true)
    EXCEL_TEMPLATE_LOG_LEVEL: Logging level (default: INFO)
    EXCEL_TEMPLATE_DEBUG: Enable debug mode (default: false)
"""

import logging
from datetime import datetime
from typing import Any

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Library settings loaded from environment variables.

    Example .env file:
        EXCEL_TEMPLATE_TRUE_LITERAL=TRUE
        EXCEL_TEMPLATE_FALSE_LITERAL=FALSE
        EXCEL_TEMPLATE_DATE_FORMAT=%Y-%m-%d
    """

    model_config = SettingsConfigDict(
        env_prefix="EXCEL_TEMPLATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # =========================================================================
    # Text Rendering Settings
    # =========================================================================

    true_literal: str = "VRAI"
    """Localized word rendered for boolean cells holding TRUE."""

    false_literal: str = "FAUX"
    """Localized word rendered for boolean cells holding FALSE."""

    date_format: str = "%d/%m/%Y"
    """strftime pattern used for cells carrying a date number format."""

    error_format: str = "Error<{code}>"
    """Template for error cells; ``{code}`` receives the error code."""

    infer_date_formats: bool = True
    """Classify date-like format strings missing from the static table as dates."""

    # =========================================================================
    # Logging Settings
    # =========================================================================

    log_level: str = "INFO"
    """Logging level: DEBUG, INFO, WARNING, ERROR, or CRITICAL."""

    debug: bool = False
    """Force DEBUG logging when configure_logging is called without a level."""

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("true_literal", "false_literal")
    @classmethod
    def validate_literal(cls, v: str) -> str:
        """Validate boolean literals are non-empty."""
        if not v.strip():
            raise ValueError("Boolean literals must be non-empty strings")
        return v

    @field_validator("date_format")
    @classmethod
    def validate_date_format(cls, v: str) -> str:
        """Validate the date pattern renders something."""
        if not datetime(2007, 1, 31).strftime(v).strip():
            raise ValueError(f"date_format renders an empty string: {v!r}")
        return v

    @field_validator("error_format")
    @classmethod
    def validate_error_format(cls, v: str) -> str:
        """Validate the error template embeds the error code."""
        if "{code}" not in v:
            raise ValueError(f"error_format must contain '{{code}}', got {v!r}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid Python logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of: {', '.join(valid_levels)}"
            )
        return upper_v

    @model_validator(mode="after")
    def validate_distinct_literals(self) -> "Settings":
        """Validate TRUE and FALSE render differently."""
        if self.true_literal == self.false_literal:
            raise ValueError(
                f"true_literal and false_literal must differ, "
                f"both are {self.true_literal!r}"
            )
        return self

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def log_level_int(self) -> int:
        """Get log level as integer for logging module."""
        level: int = getattr(logging, self.log_level)
        return level

    def boolean_literal(self, value: bool) -> str:
        """Return the configured literal for a boolean."""
        return self.true_literal if value else self.false_literal

    def to_dict(self) -> dict[str, Any]:
        """Convert settings to a plain dictionary."""
        return {
            "true_literal": self.true_literal,
            "false_literal": self.false_literal,
            "date_format": self.date_format,
            "error_format": self.error_format,
            "infer_date_formats": self.infer_date_formats,
            "log_level": self.log_level,
            "debug": self.debug,
        }


# Create the global settings instance
settings = Settings()
