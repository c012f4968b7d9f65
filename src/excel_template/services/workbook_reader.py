"""Adapters turning spreadsheet containers into ``Sheet`` objects.

``.xlsx`` documents are read with openpyxl, legacy ``.xls`` documents with
xlrd. Either way the result is a freshly built ``Sheet`` that keeps no
reference to the library objects it came from.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from io import BytesIO
from typing import Any
from zipfile import BadZipFile

import xlrd
from openpyxl import load_workbook
from openpyxl.cell.cell import TYPE_ERROR, TYPE_FORMULA
from openpyxl.utils.datetime import MAC_EPOCH, WINDOWS_EPOCH, to_excel
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.worksheet.worksheet import Worksheet
from xlrd.biffh import (
    XL_CELL_BLANK,
    XL_CELL_BOOLEAN,
    XL_CELL_DATE,
    XL_CELL_EMPTY,
    XL_CELL_ERROR,
    XL_CELL_NUMBER,
    XL_CELL_TEXT,
)
from xlrd.compdoc import CompDocError

from excel_template.formats import builtin_format_id, error_code_for
from excel_template.sheet_document import Cell, CellType, Row, Sheet
from excel_template.utils.exceptions import ErrorCode, SourceUnavailableError
from excel_template.utils.logging import get_logger

logger = get_logger(__name__)

OLE2_SIGNATURE = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"
ZIP_SIGNATURE = b"PK\x03\x04"

SheetKey = str | int

_DATE_TYPES = (datetime, date, time, timedelta)


class WorkbookReader:
    """Base class for container adapters."""

    backend: str = ""

    def sheet_names(self) -> list[str]:
        raise NotImplementedError

    def load_sheet(self, key: SheetKey) -> Sheet | None:
        """Build the sheet addressed by name (case-sensitive) or index.

        Returns None when no such sheet exists.
        """
        names = self.sheet_names()
        if isinstance(key, int):
            if not 0 <= key < len(names):
                return None
            name = names[key]
        elif key in names:
            name = key
        else:
            return None
        sheet = self._build_sheet(name)
        logger.debug(
            "Loaded sheet", backend=self.backend, sheet=name, rows=sheet.row_count
        )
        return sheet

    def _build_sheet(self, name: str) -> Sheet:
        raise NotImplementedError

    def close(self) -> None:
        """Release resources held by the underlying library."""


class OpenpyxlWorkbookReader(WorkbookReader):
    """Read ``.xlsx`` workbooks with openpyxl."""

    backend = "openpyxl"

    def __init__(self, data: bytes) -> None:
        try:
            # Load twice: once to capture formulas, once for cached results
            self._workbook = load_workbook(filename=BytesIO(data), data_only=False)
            self._computed = load_workbook(filename=BytesIO(data), data_only=True)
        except (InvalidFileException, BadZipFile, KeyError, OSError, ValueError) as exc:
            raise SourceUnavailableError(
                f"Problem reading file: {exc}",
                details={"backend": self.backend},
            ) from exc
        self._epoch = getattr(self._workbook, "epoch", WINDOWS_EPOCH)

    def sheet_names(self) -> list[str]:
        return list(self._workbook.sheetnames)

    def _build_sheet(self, name: str) -> Sheet:
        worksheet: Worksheet = self._workbook[name]
        computed: Worksheet = self._computed[name]
        sheet = Sheet(name=name)

        for cells in worksheet.iter_rows():
            for source in cells:
                cell = self._build_cell(source, computed)
                if cell is None:
                    continue
                row_index = source.row - 1
                row = sheet.rows.get(row_index)
                if row is None:
                    row = sheet.rows[row_index] = Row(index=row_index)
                row.cells[source.column - 1] = cell
        return sheet

    def _build_cell(self, source: Any, computed: Worksheet) -> Cell | None:
        value = source.value
        if value is None:
            if source.has_style:
                return Cell.blank(number_format=source.number_format)
            return None

        number_format = source.number_format
        format_id = builtin_format_id(number_format)
        date1904 = self._epoch == MAC_EPOCH
        data_type = source.data_type

        if data_type == TYPE_FORMULA:
            cached = computed.cell(row=source.row, column=source.column)
            cached_type, cached_value = self._cached_result(cached)
            return Cell(
                CellType.FORMULA,
                cached_value,
                format_id=format_id,
                number_format=number_format,
                formula=str(getattr(value, "text", value)),
                cached_type=cached_type,
                date1904=date1904,
            )
        if data_type == TYPE_ERROR:
            return Cell.error(error_code_for(value))
        if isinstance(value, bool):
            return Cell.boolean(value)
        if isinstance(value, _DATE_TYPES):
            return Cell(
                CellType.NUMBER,
                float(to_excel(value, self._epoch)),
                format_id=format_id,
                number_format=number_format,
                date1904=date1904,
            )
        if isinstance(value, (int, float)):
            return Cell(
                CellType.NUMBER,
                float(value),
                format_id=format_id,
                number_format=number_format,
                date1904=date1904,
            )
        return Cell.text(str(value), number_format=number_format)

    def _cached_result(self, cached: Any) -> tuple[CellType | None, Any]:
        value = cached.value
        if value is None:
            return None, None
        if cached.data_type == TYPE_ERROR:
            return CellType.ERROR, error_code_for(value)
        if isinstance(value, bool):
            return CellType.BOOLEAN, value
        if isinstance(value, _DATE_TYPES):
            return CellType.NUMBER, float(to_excel(value, self._epoch))
        if isinstance(value, (int, float)):
            return CellType.NUMBER, float(value)
        return CellType.TEXT, str(value)

    def close(self) -> None:
        self._workbook.close()
        self._computed.close()


class XlrdWorkbookReader(WorkbookReader):
    """Read legacy ``.xls`` workbooks with xlrd.

    xlrd exposes formula results as plain values, so formula cells arrive
    as their cached variant.
    """

    backend = "xlrd"

    def __init__(self, data: bytes) -> None:
        try:
            self._book = xlrd.open_workbook(file_contents=data, formatting_info=True)
        except (xlrd.XLRDError, CompDocError, OSError, ValueError) as exc:
            raise SourceUnavailableError(
                f"Problem reading file: {exc}",
                details={"backend": self.backend},
            ) from exc
        self._date1904 = self._book.datemode == 1

    def sheet_names(self) -> list[str]:
        return list(self._book.sheet_names())

    def _build_sheet(self, name: str) -> Sheet:
        xl_sheet = self._book.sheet_by_name(name)
        sheet = Sheet(name=name)
        for row_index in range(xl_sheet.nrows):
            row = Row(index=row_index)
            for column_index, xl_cell in enumerate(xl_sheet.row(row_index)):
                cell = self._build_cell(xl_cell)
                if cell is not None:
                    row.cells[column_index] = cell
            if row.cells:
                sheet.rows[row_index] = row
        return sheet

    def _build_cell(self, xl_cell: Any) -> Cell | None:
        ctype = xl_cell.ctype
        if ctype == XL_CELL_EMPTY:
            return None

        format_id, number_format = self._format_of(xl_cell)
        if ctype == XL_CELL_BLANK:
            return Cell(CellType.BLANK, None, format_id, number_format)
        if ctype == XL_CELL_TEXT:
            return Cell(CellType.TEXT, xl_cell.value, format_id, number_format)
        if ctype in (XL_CELL_NUMBER, XL_CELL_DATE):
            return Cell(
                CellType.NUMBER,
                float(xl_cell.value),
                format_id,
                number_format,
                date1904=self._date1904,
            )
        if ctype == XL_CELL_BOOLEAN:
            return Cell.boolean(bool(xl_cell.value))
        if ctype == XL_CELL_ERROR:
            return Cell.error(int(xl_cell.value))
        return Cell(CellType.TEXT, str(xl_cell.value), format_id, number_format)

    def _format_of(self, xl_cell: Any) -> tuple[int | None, str]:
        xf_index = getattr(xl_cell, "xf_index", None)
        if xf_index is None or xf_index >= len(self._book.xf_list):
            return None, "General"
        format_key = self._book.xf_list[xf_index].format_key
        fmt = self._book.format_map.get(format_key)
        return format_key, fmt.format_str if fmt is not None else "General"

    def close(self) -> None:
        self._book.release_resources()


def open_workbook_reader(data: bytes) -> WorkbookReader:
    """Pick the reader matching the container signature of ``data``.

    Raises:
        SourceUnavailableError: If the bytes are not a known container.
    """
    if data.startswith(OLE2_SIGNATURE):
        return XlrdWorkbookReader(data)
    if data.startswith(ZIP_SIGNATURE):
        return OpenpyxlWorkbookReader(data)
    raise SourceUnavailableError(
        "Unrecognised spreadsheet container",
        error_code=ErrorCode.UNSUPPORTED_CONTAINER,
        details={"signature": data[:8].hex()},
    )
