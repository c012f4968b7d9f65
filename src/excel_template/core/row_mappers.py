"""Row projections: turning one traversed row into one structured value."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping, MutableMapping
from enum import Enum
from typing import Any, Generic, Protocol, TypeVar

from excel_template.core.cell_mappers import CellMapper, map_cell
from excel_template.core.traversal import iter_row_slots
from excel_template.sheet_document import Cell, Row

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)

AnyCellMapper = CellMapper[Any] | Callable[[Cell | None, int, int], Any]


class Projection(str, Enum):
    """Shape each row takes in an extraction result."""

    ARRAY = "array"
    MAP = "map"
    OBJECT = "object"


class RowMapper(Protocol[T_co]):
    """Strategy mapping one row of a sheet to a value."""

    def map_row(self, row: Row, row_num: int) -> T_co: ...


class CaseInsensitiveDict(MutableMapping[str, T]):
    """Ordered mapping whose string keys compare case-insensitively.

    Iteration yields keys in insertion order, spelled as last stored.
    """

    def __init__(
        self, data: Mapping[str, T] | Iterable[tuple[str, T]] | None = None
    ) -> None:
        self._store: dict[str, tuple[str, T]] = {}
        if data is not None:
            self.update(data)

    def __setitem__(self, key: str, value: T) -> None:
        self._store[key.lower()] = (key, value)

    def __getitem__(self, key: str) -> T:
        return self._store[key.lower()][1]

    def __delitem__(self, key: str) -> None:
        del self._store[key.lower()]

    def __iter__(self) -> Iterator[str]:
        return (original for original, _ in self._store.values())

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._store

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Mapping):
            other = CaseInsensitiveDict(other)
            return dict(self._lower_items()) == dict(other._lower_items())
        return NotImplemented

    def _lower_items(self) -> Iterator[tuple[str, T]]:
        return ((lower, item[1]) for lower, item in self._store.items())

    def copy(self) -> CaseInsensitiveDict[T]:
        return CaseInsensitiveDict(self._store.values())

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict(self.items())!r})"


class ArrayRowMapper(Generic[T]):
    """RowMapper creating a list with one value per column.

    The list covers columns ``0 .. width - 1`` of this row only; padding to
    a common width is left to the matrix assembly.
    """

    def __init__(self, cell_mapper: AnyCellMapper) -> None:
        self.cell_mapper = cell_mapper

    def map_row(self, row: Row, row_num: int) -> list[T]:
        return [
            map_cell(self.cell_mapper, cell, row_num, column_num)
            for column_num, cell in iter_row_slots(row)
        ]


class ColumnMapRowMapper(Generic[T]):
    """RowMapper creating a case-insensitive map for each row.

    Column ``i`` is stored under ``keys[i]``; columns beyond the declared
    keys are dropped.
    """

    def __init__(self, keys: Iterable[str], cell_mapper: AnyCellMapper) -> None:
        self.keys = list(keys)
        self.cell_mapper = cell_mapper

    def map_row(self, row: Row, row_num: int) -> CaseInsensitiveDict[T]:
        values = self.create_column_map()
        for column_num, cell in iter_row_slots(row):
            if column_num >= len(self.keys):
                break
            values[self.keys[column_num]] = map_cell(
                self.cell_mapper, cell, row_num, column_num
            )
        return values

    def create_column_map(self) -> CaseInsensitiveDict[T]:
        """Create the mapping used for a row; override for another type."""
        return CaseInsensitiveDict()


def map_row(
    row_mapper: RowMapper[Any] | Callable[[Row, int], Any], row: Row, row_num: int
) -> Any:
    """Apply a RowMapper object or a bare ``(row, row_num)`` callable."""
    mapper = getattr(row_mapper, "map_row", None)
    if mapper is not None:
        return mapper(row, row_num)
    return row_mapper(row, row_num)  # type: ignore[operator]
