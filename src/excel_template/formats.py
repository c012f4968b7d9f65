"""Lookup tables that give meaning to numeric format codes and error codes.

Spreadsheets store dates, integers typed as text and plain floats as the
same underlying double; only the display format tells them apart. The
tables below are the single place where format codes are interpreted.
"""

from __future__ import annotations

from enum import Enum

from openpyxl.styles.numbers import BUILTIN_FORMATS_REVERSE, is_date_format


class FormatKind(str, Enum):
    """Semantic meaning of a numeric display format."""

    GENERAL = "general"
    TEXT = "text"
    DATE = "date"


TEXT_CELL_FORMAT = 49
OPENOFFICE_TEXT_CELL_FORMAT = 165
OPENOFFICE_DATE_CELL_FORMAT = 167

FORMAT_ID_KINDS: dict[int, FormatKind] = {
    14: FormatKind.DATE,  # mm-dd-yy
    15: FormatKind.DATE,  # d-mmm-yy
    16: FormatKind.DATE,  # d-mmm
    17: FormatKind.DATE,  # mmm-yy
    22: FormatKind.DATE,  # m/d/yy h:mm
    TEXT_CELL_FORMAT: FormatKind.TEXT,
    OPENOFFICE_TEXT_CELL_FORMAT: FormatKind.TEXT,
    OPENOFFICE_DATE_CELL_FORMAT: FormatKind.DATE,
}

FORMAT_STRING_KINDS: dict[str, FormatKind] = {
    "@": FormatKind.TEXT,
}

# BIFF error codes keyed by the literal Excel displays.
ERROR_CODES: dict[str, int] = {
    "#NULL!": 0x00,
    "#DIV/0!": 0x07,
    "#VALUE!": 0x0F,
    "#REF!": 0x17,
    "#NAME?": 0x1D,
    "#NUM!": 0x24,
    "#N/A": 0x2A,
}


def builtin_format_id(number_format: str | None) -> int | None:
    """Return the built-in format id for a format string, if it has one."""
    if number_format is None:
        return None
    return BUILTIN_FORMATS_REVERSE.get(number_format)


def classify_format(
    format_id: int | None,
    number_format: str | None,
    infer_dates: bool = True,
) -> FormatKind:
    """Classify a cell's display format.

    The id table wins, then the format-string table. When ``infer_dates`` is
    set, remaining format strings that contain day or year tokens are dates;
    pure time formats never are.
    """
    if format_id is not None and format_id in FORMAT_ID_KINDS:
        return FORMAT_ID_KINDS[format_id]
    if number_format is None:
        return FormatKind.GENERAL
    if number_format in FORMAT_STRING_KINDS:
        return FORMAT_STRING_KINDS[number_format]
    if infer_dates and _looks_like_date(number_format):
        return FormatKind.DATE
    return FormatKind.GENERAL


def error_code_for(value: int | str) -> int | str:
    """Normalise an error payload to its numeric code where one is known."""
    if isinstance(value, int):
        return value
    return ERROR_CODES.get(value, value)


def _looks_like_date(number_format: str) -> bool:
    if not is_date_format(number_format):
        return False
    section = number_format.split(";")[0].lower()
    return "d" in section or "y" in section
