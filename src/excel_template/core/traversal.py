"""Ordered walks over the rows and cells of a sheet.

Ragged rows, gaps between rows and rows reporting a zero or negative width
are normal sheet shapes here, not errors.
"""

from __future__ import annotations

from collections.abc import Iterator

from excel_template.sheet_document import Cell, Row, Sheet
from excel_template.utils.logging import get_logger

logger = get_logger(__name__)


def iter_rows(sheet: Sheet | None) -> Iterator[tuple[int, Row]]:
    """Yield ``(row_index, row)`` for each stored row, first to last.

    Indices in ``[first_row_index, last_row_index]`` with no stored row are
    skipped. A missing sheet behaves as an empty one.
    """
    if sheet is None:
        return
    for row_index in range(sheet.first_row_index, sheet.last_row_index + 1):
        row = sheet.get_row(row_index)
        if row is not None:
            yield row_index, row


def iter_cells(row: Row) -> Iterator[tuple[int, Cell | None]]:
    """Yield ``(column_index, cell)`` over the row's populated column range.

    The range is ``[first_column_index, last_column_index)``; positions
    inside it with no stored cell yield None.
    """
    for column_index in range(row.first_column_index, row.last_column_index):
        yield column_index, row.get_cell(column_index)


def row_width(row: Row) -> int:
    """Number of slots a projected row has, counted from column 0.

    A zero or negative reported width is treated as an empty row.
    """
    width = row.last_column_index
    if width <= 0:
        logger.debug("Row reports no populated columns", row=row.index, width=width)
        return 0
    return width


def iter_row_slots(row: Row) -> Iterator[tuple[int, Cell | None]]:
    """Yield ``(column_index, cell)`` for columns ``0 .. row_width(row) - 1``."""
    for column_index in range(row_width(row)):
        yield column_index, row.get_cell(column_index)
