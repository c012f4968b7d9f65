"""Dataclasses representing a sheet read out of a spreadsheet document."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class CellType(str, Enum):
    """Storage variant of a physical cell."""

    BLANK = "blank"
    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    FORMULA = "formula"
    ERROR = "error"


@dataclass(frozen=True)
class Cell:
    """A single stored cell.

    ``value`` holds the payload matching ``cell_type``: a string for TEXT,
    a float for NUMBER, a bool for BOOLEAN, the error code for ERROR and
    the last computed result for FORMULA (whose variant is ``cached_type``).
    """

    cell_type: CellType
    value: Any = None
    format_id: int | None = None
    number_format: str = "General"
    formula: str | None = None
    cached_type: CellType | None = None
    date1904: bool = False

    @classmethod
    def blank(cls, number_format: str = "General") -> Cell:
        return cls(CellType.BLANK, None, number_format=number_format)

    @classmethod
    def text(cls, value: str, number_format: str = "General") -> Cell:
        return cls(CellType.TEXT, value, number_format=number_format)

    @classmethod
    def number(
        cls,
        value: float,
        format_id: int | None = None,
        number_format: str = "General",
    ) -> Cell:
        return cls(
            CellType.NUMBER,
            float(value),
            format_id=format_id,
            number_format=number_format,
        )

    @classmethod
    def boolean(cls, value: bool) -> Cell:
        return cls(CellType.BOOLEAN, bool(value))

    @classmethod
    def error(cls, code: int | str) -> Cell:
        return cls(CellType.ERROR, code)

    @classmethod
    def formula_result(
        cls,
        formula: str,
        cached_value: Any,
        cached_type: CellType | None,
        format_id: int | None = None,
        number_format: str = "General",
    ) -> Cell:
        """Build a formula cell from its text and last computed result."""
        return cls(
            CellType.FORMULA,
            cached_value,
            format_id=format_id,
            number_format=number_format,
            formula=formula,
            cached_type=cached_type,
        )


@dataclass
class Row:
    """An ordered, possibly sparse, run of cells within a sheet."""

    index: int
    cells: dict[int, Cell] = field(default_factory=dict)

    @property
    def first_column_index(self) -> int:
        """Lowest stored column, or -1 when the row stores no cell."""
        return min(self.cells) if self.cells else -1

    @property
    def last_column_index(self) -> int:
        """One past the highest stored column, or -1 when the row is empty."""
        return max(self.cells) + 1 if self.cells else -1

    def get_cell(self, column: int) -> Cell | None:
        """Return the stored cell, or None when the position is absent."""
        return self.cells.get(column)

    def __len__(self) -> int:
        return len(self.cells)


@dataclass
class Sheet:
    """An ordered, possibly sparse, collection of rows."""

    name: str
    rows: dict[int, Row] = field(default_factory=dict)

    @property
    def first_row_index(self) -> int:
        return min(self.rows) if self.rows else 0

    @property
    def last_row_index(self) -> int:
        """Highest stored row index, or -1 for an empty sheet."""
        return max(self.rows) if self.rows else -1

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def get_row(self, index: int) -> Row | None:
        return self.rows.get(index)

    @classmethod
    def from_values(
        cls,
        name: str,
        rows: Sequence[Sequence[Any] | None] | Mapping[int, Sequence[Any]],
    ) -> Sheet:
        """Build a sheet from plain Python values.

        ``rows`` is either a sequence (``None`` entries leave a gap) or a
        mapping of row index to values. Within a row, ``None`` leaves the
        position absent, ``Cell`` instances are kept as-is and other values
        are wrapped according to their Python type.
        """
        items: Iterable[tuple[int, Sequence[Any] | None]]
        if isinstance(rows, Mapping):
            items = rows.items()
        else:
            items = enumerate(rows)

        sheet = cls(name=name)
        for row_index, values in items:
            if values is None:
                continue
            row = Row(index=row_index)
            for column_index, value in enumerate(values):
                cell = _to_cell(value)
                if cell is not None:
                    row.cells[column_index] = cell
            if row.cells:
                sheet.rows[row_index] = row
        return sheet


def _to_cell(value: Any) -> Cell | None:
    if value is None or isinstance(value, Cell):
        return value
    if isinstance(value, bool):
        return Cell.boolean(value)
    if isinstance(value, (int, float)):
        return Cell.number(value)
    return Cell.text(str(value))
