from __future__ import annotations

from collections.abc import Callable
from datetime import date
from pathlib import Path

import pytest
from openpyxl import Workbook

from excel_template.config import Settings
from excel_template.core.cell_mappers import CellValueCoercer
from excel_template.sheet_document import Sheet

WorkbookBuilder = Callable[[Callable[[Workbook], None]], Path]


@pytest.fixture
def settings() -> Settings:
    """Default settings, isolated from the environment's .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def coercer(settings: Settings) -> CellValueCoercer:
    return CellValueCoercer(settings)


@pytest.fixture
def make_xlsx(tmp_path: Path) -> WorkbookBuilder:
    """Save a workbook populated by ``build`` and return its path."""
    counter = iter(range(1000))

    def _make(build: Callable[[Workbook], None]) -> Path:
        wb = Workbook()
        build(wb)
        path = tmp_path / f"book{next(counter)}.xlsx"
        wb.save(path)
        return path

    return _make


@pytest.fixture
def simple_xlsx(make_xlsx: WorkbookBuilder) -> Path:
    """Header row of keys followed by two value rows, on sheet "Tests"."""

    def build(wb: Workbook) -> None:
        ws = wb.active
        ws.title = "Tests"
        ws.append(["KEY1", "KEY2", "KEY3"])
        ws.append(["Value1", "Value2", "Value3"])
        ws.append(["Value10", "Value20", "Value30"])
        wb.create_sheet("Other")["A1"] = "elsewhere"

    return make_xlsx(build)


@pytest.fixture
def indexed_lines_xlsx(make_xlsx: WorkbookBuilder) -> Path:
    """Ragged rows: a header, a row holding only its index, a full row."""

    def build(wb: Workbook) -> None:
        ws = wb.active
        ws.title = "Tests"
        ws.append(["INDEX", "KEY1", "KEY2", "KEY3"])
        ws.append([1])
        ws.append([2, "A", "B", "C"])
        ws["A2"].number_format = "@"
        ws["A3"].number_format = "@"

    return make_xlsx(build)


@pytest.fixture
def cell_format_xlsx(make_xlsx: WorkbookBuilder) -> Path:
    """One row exercising every cell variant and the special formats."""

    def build(wb: Workbook) -> None:
        ws = wb.active
        ws.title = "Tests"
        ws["A1"] = 1
        ws["B1"] = "A"
        ws["C1"] = 3
        ws["D1"] = 1.5
        ws["E1"] = 1
        ws["E1"].number_format = "@"
        ws["F1"] = True
        ws["G1"] = False
        ws["H1"] = "#DIV/0!"
        ws["I1"] = date(2007, 1, 31)
        ws["I1"].number_format = "mm-dd-yy"

    return make_xlsx(build)


@pytest.fixture
def people_xlsx(make_xlsx: WorkbookBuilder) -> Path:
    """Bean rows with an extra column no property matches."""

    def build(wb: Workbook) -> None:
        ws = wb.active
        ws.title = "People"
        ws.append(["lastName", "AGE", "unknown"])
        ws.append(["Smith", 35, "ignored"])
        ws.append(["Johns", 25, "ignored"])

    return make_xlsx(build)


@pytest.fixture
def ragged_sheet() -> Sheet:
    """In-memory sheet with a gap row and rows of different widths."""
    return Sheet.from_values(
        "Ragged",
        [
            ["a", "b", "c"],
            None,
            ["d"],
            [None, "e"],
        ],
    )
