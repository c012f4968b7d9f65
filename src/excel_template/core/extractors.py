"""Sheet extractors: drivers that traverse a whole sheet and assemble results.

An extractor receives the sheet for the duration of one call only; results
it returns never reference the sheet's storage.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, Generic, Protocol, TypeVar

import pandas as pd

from excel_template.core.cell_mappers import StringCellMapper
from excel_template.core.row_mappers import (
    AnyCellMapper,
    ArrayRowMapper,
    CaseInsensitiveDict,
    ColumnMapRowMapper,
    RowMapper,
    map_row,
)
from excel_template.core.traversal import iter_cells, iter_rows
from excel_template.sheet_document import Cell, Row, Sheet
from excel_template.utils.logging import ExtractionMetrics

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class SheetExtractor(Protocol[T_co]):
    """Strategy processing all rows of a sheet into one result.

    ``sheet`` is None when the requested sheet does not exist; extractors
    treat that as an empty sheet.
    """

    def extract_data(self, sheet: Sheet | None) -> T_co: ...


class RowCallbackHandler(Protocol):
    """Stateful handler invoked once per stored row."""

    def process_row(self, row: Row, row_num: int) -> None: ...


class CellCallbackHandler(Protocol):
    """Stateful handler invoked once per visited cell position."""

    def process_cell(self, cell: Cell | None, row_num: int, column_num: int) -> None: ...


class CountingExtractor:
    """Base for extractors whose row and cell counts can be recorded."""

    metrics: ExtractionMetrics | None = None

    def _count_row(self, cells: int = 0) -> None:
        if self.metrics is not None:
            self.metrics.rows_processed += 1
            self.metrics.cells_processed += cells


class MatrixSheetExtractor(CountingExtractor, Generic[T]):
    """Extract a rectangular matrix with one list per stored row.

    Every row is widened to the widest row seen, trailing slots holding
    ``fill_value``.
    """

    def __init__(self, cell_mapper: AnyCellMapper, fill_value: Any = None) -> None:
        self.row_mapper: ArrayRowMapper[T] = ArrayRowMapper(cell_mapper)
        self.fill_value = fill_value

    def extract_data(self, sheet: Sheet | None) -> list[list[T]]:
        rows: list[list[T]] = []
        max_width = 0

        for row_index, row in iter_rows(sheet):
            values = self.row_mapper.map_row(row, row_index)
            self._count_row(len(values))
            max_width = max(max_width, len(values))
            rows.append(values)

        for values in rows:
            values.extend([self.fill_value] * (max_width - len(values)))
        return rows


class RowMapperSheetExtractor(CountingExtractor, Generic[T]):
    """Adapter running a RowMapper over every stored row.

    One entry per row is collected; rows the mapper maps to None are left
    out.
    """

    def __init__(self, row_mapper: RowMapper[T] | Callable[[Row, int], T]) -> None:
        self.row_mapper = row_mapper

    def extract_data(self, sheet: Sheet | None) -> list[T]:
        results: list[T] = []
        for row_index, row in iter_rows(sheet):
            self._count_row()
            value = map_row(self.row_mapper, row, row_index)
            if value is not None:
                results.append(value)
        return results


class MapListRowCallbackHandler(Generic[T]):
    """RowCallbackHandler collecting one case-insensitive map per row.

    Unless keys are declared up front, the first row handed in supplies
    them (read as text) and produces no map.
    """

    def __init__(
        self,
        cell_mapper: AnyCellMapper,
        keys: Iterable[str] | None = None,
        header_mapper: AnyCellMapper | None = None,
    ) -> None:
        self.cell_mapper = cell_mapper
        self.header_mapper = header_mapper or StringCellMapper()
        self.values: list[CaseInsensitiveDict[T]] = []
        self._row_mapper: ColumnMapRowMapper[T] | None = (
            ColumnMapRowMapper(keys, cell_mapper) if keys is not None else None
        )

    @property
    def keys(self) -> list[str] | None:
        return self._row_mapper.keys if self._row_mapper is not None else None

    def process_row(self, row: Row, row_num: int) -> None:
        if self._row_mapper is None:
            header: ArrayRowMapper[str] = ArrayRowMapper(self.header_mapper)
            keys = header.map_row(row, row_num)
            self._row_mapper = ColumnMapRowMapper(keys, self.cell_mapper)
            return
        self.values.append(self._row_mapper.map_row(row, row_num))


class RowCallbackHandlerSheetExtractor(CountingExtractor):
    """Adapter feeding every stored row to a RowCallbackHandler."""

    def __init__(
        self, handler: RowCallbackHandler | Callable[[Row, int], None]
    ) -> None:
        self.handler = handler

    def extract_data(self, sheet: Sheet | None) -> None:
        process = getattr(self.handler, "process_row", self.handler)
        for row_index, row in iter_rows(sheet):
            self._count_row(len(row))
            process(row, row_index)


class CellCallbackHandlerSheetExtractor(CountingExtractor):
    """Adapter feeding every visited cell position to a CellCallbackHandler.

    Positions inside a row's populated range with no stored cell are
    passed as None.
    """

    def __init__(
        self,
        handler: CellCallbackHandler | Callable[[Cell | None, int, int], None],
    ) -> None:
        self.handler = handler

    def extract_data(self, sheet: Sheet | None) -> None:
        process = getattr(self.handler, "process_cell", self.handler)
        for row_index, row in iter_rows(sheet):
            visited = 0
            for column_index, cell in iter_cells(row):
                process(cell, row_index, column_index)
                visited += 1
            self._count_row(visited)


class DataFrameSheetExtractor(CountingExtractor):
    """Extract a sheet into a pandas DataFrame.

    The first stored row supplies the column labels; later rows supply the
    data, columns beyond the header being dropped.
    """

    def __init__(
        self,
        cell_mapper: AnyCellMapper | None = None,
        header_mapper: AnyCellMapper | None = None,
    ) -> None:
        self.cell_mapper = cell_mapper or StringCellMapper()
        self.header_mapper = header_mapper or StringCellMapper()

    def extract_data(self, sheet: Sheet | None) -> pd.DataFrame:
        handler: MapListRowCallbackHandler[Any] = MapListRowCallbackHandler(
            self.cell_mapper, header_mapper=self.header_mapper
        )
        for row_index, row in iter_rows(sheet):
            self._count_row()
            handler.process_row(row, row_index)

        columns = handler.keys or []
        records = [[values.get(key) for key in columns] for values in handler.values]
        return pd.DataFrame(records, columns=columns)
