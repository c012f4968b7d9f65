"""Tests for the openpyxl and xlrd container readers."""

from __future__ import annotations

from io import BytesIO
from types import SimpleNamespace
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
import xlrd
from openpyxl import Workbook
from xlrd.biffh import (
    XL_CELL_BLANK,
    XL_CELL_BOOLEAN,
    XL_CELL_DATE,
    XL_CELL_EMPTY,
    XL_CELL_ERROR,
    XL_CELL_NUMBER,
    XL_CELL_TEXT,
)

from excel_template.core.template import ExcelTemplate
from excel_template.services.workbook_reader import (
    OLE2_SIGNATURE,
    OpenpyxlWorkbookReader,
    XlrdWorkbookReader,
    open_workbook_reader,
)
from excel_template.sheet_document import Cell, CellType
from excel_template.utils.exceptions import ErrorCode, SourceUnavailableError


def _xlsx_bytes(build: Any) -> bytes:
    wb = Workbook()
    build(wb)
    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def _xl_cell(ctype: int, value: Any = "", xf_index: int = 0) -> SimpleNamespace:
    return SimpleNamespace(ctype=ctype, value=value, xf_index=xf_index)


@pytest.fixture
def xls_book() -> MagicMock:
    """Stand-in for an xlrd Book with one sheet of mixed cells."""
    rows = [
        [_xl_cell(XL_CELL_TEXT, "KEY1")],
        [
            _xl_cell(XL_CELL_DATE, 39113.0, xf_index=1),
            _xl_cell(XL_CELL_NUMBER, 1.0, xf_index=2),
            _xl_cell(XL_CELL_BOOLEAN, 1),
            _xl_cell(XL_CELL_ERROR, 7),
            _xl_cell(XL_CELL_EMPTY),
            _xl_cell(XL_CELL_BLANK),
        ],
    ]
    sheet = SimpleNamespace(nrows=len(rows), row=lambda index: rows[index])

    book = MagicMock()
    book.datemode = 0
    book.sheet_names.return_value = ["Tests"]
    book.sheet_by_name.return_value = sheet
    book.xf_list = [
        SimpleNamespace(format_key=0),
        SimpleNamespace(format_key=14),
        SimpleNamespace(format_key=49),
    ]
    book.format_map = {
        0: SimpleNamespace(format_str="General"),
        14: SimpleNamespace(format_str="m/d/yy"),
        49: SimpleNamespace(format_str="@"),
    }
    return book


class TestOpenpyxlWorkbookReader:
    """Tests for OpenpyxlWorkbookReader."""

    def test_sheet_lookup(self) -> None:
        def build(wb: Workbook) -> None:
            wb.active.title = "First"
            wb.create_sheet("Second")

        reader = OpenpyxlWorkbookReader(_xlsx_bytes(build))

        assert reader.sheet_names() == ["First", "Second"]
        assert reader.load_sheet("Second").name == "Second"
        assert reader.load_sheet(0).name == "First"
        assert reader.load_sheet("second") is None
        assert reader.load_sheet(5) is None
        assert reader.load_sheet(-1) is None

    def test_sparse_rows(self) -> None:
        def build(wb: Workbook) -> None:
            ws = wb.active
            ws["A1"] = "x"
            ws["C3"] = "y"

        sheet = OpenpyxlWorkbookReader(_xlsx_bytes(build)).load_sheet(0)

        assert sorted(sheet.rows) == [0, 2]
        assert sheet.get_row(2).first_column_index == 2

    def test_cell_variants(self) -> None:
        def build(wb: Workbook) -> None:
            ws = wb.active
            ws["A1"] = "text"
            ws["B1"] = 2
            ws["C1"] = False
            ws["D1"] = "=B1*2"
            ws["E1"] = "#N/A"
            ws["F1"].number_format = "0.00"

        row = OpenpyxlWorkbookReader(_xlsx_bytes(build)).load_sheet(0).get_row(0)

        assert row.get_cell(0).cell_type is CellType.TEXT
        assert row.get_cell(1).cell_type is CellType.NUMBER
        assert row.get_cell(1).value == 2.0
        assert row.get_cell(2).value is False
        formula = row.get_cell(3)
        assert formula.cell_type is CellType.FORMULA
        assert formula.formula == "=B1*2"
        assert formula.cached_type is None
        assert row.get_cell(4).value == 42
        assert row.get_cell(5).cell_type is CellType.BLANK

    def test_error_literals_become_codes(self) -> None:
        def build(wb: Workbook) -> None:
            ws = wb.active
            ws["A1"] = "#DIV/0!"
            ws["B1"] = "#REF!"
            ws["C1"] = "=1/0"

        row = OpenpyxlWorkbookReader(_xlsx_bytes(build)).load_sheet(0).get_row(0)

        assert row.get_cell(0) == Cell.error(7)
        assert row.get_cell(1) == Cell.error(23)
        assert row.get_cell(2).cell_type is CellType.FORMULA

    def test_builtin_format_id_recorded(self) -> None:
        def build(wb: Workbook) -> None:
            ws = wb.active
            ws["A1"] = 5
            ws["A1"].number_format = "@"

        cell = OpenpyxlWorkbookReader(_xlsx_bytes(build)).load_sheet(0).get_row(0).get_cell(0)
        assert cell.format_id == 49
        assert cell.number_format == "@"

    def test_invalid_archive(self) -> None:
        with pytest.raises(SourceUnavailableError) as exc_info:
            OpenpyxlWorkbookReader(b"PK\x03\x04 broken")
        assert exc_info.value.details["backend"] == "openpyxl"


class TestXlrdWorkbookReader:
    """Tests for XlrdWorkbookReader with a stubbed xlrd book."""

    def test_cells_built_from_ctypes(self, xls_book: MagicMock) -> None:
        with patch.object(xlrd, "open_workbook", return_value=xls_book):
            reader = XlrdWorkbookReader(b"ignored")

        sheet = reader.load_sheet("Tests")
        row = sheet.get_row(1)

        date_cell = row.get_cell(0)
        assert date_cell.cell_type is CellType.NUMBER
        assert date_cell.format_id == 14
        assert date_cell.number_format == "m/d/yy"
        assert row.get_cell(1).format_id == 49
        assert row.get_cell(2).value is True
        assert row.get_cell(3).value == 7
        assert row.get_cell(4) is None
        assert row.get_cell(5).cell_type is CellType.BLANK

    def test_opened_with_formatting_info(self, xls_book: MagicMock) -> None:
        with patch.object(xlrd, "open_workbook", return_value=xls_book) as mock_open:
            XlrdWorkbookReader(b"data")
        mock_open.assert_called_once_with(file_contents=b"data", formatting_info=True)

    def test_close_releases_resources(self, xls_book: MagicMock) -> None:
        with patch.object(xlrd, "open_workbook", return_value=xls_book):
            reader = XlrdWorkbookReader(b"ignored")
        reader.close()
        xls_book.release_resources.assert_called_once()

    def test_xlrd_errors_wrapped(self) -> None:
        with patch.object(xlrd, "open_workbook", side_effect=xlrd.XLRDError("bad")):
            with pytest.raises(SourceUnavailableError) as exc_info:
                XlrdWorkbookReader(b"ignored")
        assert exc_info.value.details["backend"] == "xlrd"

    def test_template_reads_xls(self, xls_book: MagicMock) -> None:
        with patch.object(xlrd, "open_workbook", return_value=xls_book):
            rows = ExcelTemplate(OLE2_SIGNATURE + b"\x00" * 8).read("Tests")

        assert rows == [
            ["KEY1", "", "", "", "", ""],
            ["31/01/2007", "1", "VRAI", "Error<7>", "", ""],
        ]
        xls_book.release_resources.assert_called_once()


class TestOpenWorkbookReader:
    """Tests for container sniffing."""

    def test_zip_uses_openpyxl(self) -> None:
        reader = open_workbook_reader(_xlsx_bytes(lambda wb: None))
        assert isinstance(reader, OpenpyxlWorkbookReader)

    def test_ole2_uses_xlrd(self, xls_book: MagicMock) -> None:
        with patch.object(xlrd, "open_workbook", return_value=xls_book):
            reader = open_workbook_reader(OLE2_SIGNATURE)
        assert isinstance(reader, XlrdWorkbookReader)

    def test_unknown_signature(self) -> None:
        with pytest.raises(SourceUnavailableError) as exc_info:
            open_workbook_reader(b"%PDF-1.7")
        assert exc_info.value.error_code == ErrorCode.UNSUPPORTED_CONTAINER
        assert exc_info.value.details["signature"] == b"%PDF-1.7".hex()
