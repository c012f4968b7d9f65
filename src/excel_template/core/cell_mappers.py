"""Cell value coercion and the CellMapper strategies built on it.

A ``CellMapper`` turns one cell (or an absent position) into one value. The
stock mappers delegate to ``CellValueCoercer``, which owns the rules that
reconcile the loosely typed cell model with a requested output kind.
"""

from __future__ import annotations

import math
from datetime import datetime, time, timedelta
from collections.abc import Callable
from enum import Enum
from typing import Any, Protocol, TypeVar

from openpyxl.utils.datetime import MAC_EPOCH, WINDOWS_EPOCH, from_excel

from excel_template.config import Settings
from excel_template.config import settings as default_settings
from excel_template.formats import FormatKind, classify_format, error_code_for
from excel_template.sheet_document import Cell, CellType
from excel_template.utils.exceptions import CoercionError, ErrorCode

T_co = TypeVar("T_co", covariant=True)

NEUTRAL_NUMBER = 0.0


class TargetKind(str, Enum):
    """Output kinds a cell can be coerced into."""

    TEXT = "text"
    NUMBER = "number"


class CellMapper(Protocol[T_co]):
    """Strategy mapping one cell of a sheet to a value.

    ``cell`` is None when no cell is stored at the position.
    """

    def map_cell(self, cell: Cell | None, row_num: int, column_num: int) -> T_co: ...


class CellValueCoercer:
    """Classify a cell's storage variant and convert it to a target kind."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or default_settings

    @property
    def settings(self) -> Settings:
        return self._settings

    def coerce(self, cell: Cell | None, target: TargetKind) -> str | float:
        """Coerce ``cell`` into ``target``.

        Raises:
            CoercionError: If the (variant, target) pair is unsupported.
        """
        if target is TargetKind.TEXT:
            return self.to_text(cell)
        if target is TargetKind.NUMBER:
            return self.to_number(cell)
        raise CoercionError(
            f"Unsupported target kind: {target!r}",
            cell_type=cell.cell_type.value if cell is not None else None,
            target=str(target),
            error_code=ErrorCode.UNSUPPORTED_TARGET,
        )

    # ------------------------------------------------------------------ #
    # Text target
    # ------------------------------------------------------------------ #

    def to_text(self, cell: Cell | None) -> str:
        if cell is None:
            return ""

        cell_type = cell.cell_type
        if cell_type is CellType.BLANK:
            return ""
        if cell_type is CellType.TEXT:
            return "" if cell.value is None else str(cell.value)
        if cell_type is CellType.ERROR:
            return self._error_to_text(cell.value)
        if cell_type is CellType.BOOLEAN:
            return self._settings.boolean_literal(bool(cell.value))
        if cell_type is CellType.NUMBER:
            return self._number_to_text(cell, cell.value)
        if cell_type is CellType.FORMULA:
            return self._formula_to_text(cell)
        raise _unsupported(cell, TargetKind.TEXT)

    def _error_to_text(self, value: Any) -> str:
        return self._settings.error_format.format(code=error_code_for(value))

    def _number_to_text(self, cell: Cell, value: Any) -> str:
        number = float(value)
        if math.isnan(number):
            return ""

        kind = self._format_kind(cell)
        if kind is FormatKind.DATE:
            moment = _serial_to_datetime(number, cell.date1904)
            if moment is not None:
                return moment.strftime(self._settings.date_format)
            # Excel shows "####" for serials it cannot place on a calendar.
            return repr(number)

        # Text-formatted cells still hold doubles; integral content is
        # rendered without a fraction.
        if kind is FormatKind.TEXT and number.is_integer():
            return str(int(number))

        return repr(number)

    def _formula_to_text(self, cell: Cell) -> str:
        cached_type = cell.cached_type
        value = cell.value

        if cached_type is None or value is None:
            return ""
        if cached_type is CellType.TEXT:
            return str(value)
        if cached_type is CellType.BOOLEAN:
            return self._settings.boolean_literal(bool(value))
        if cached_type is CellType.ERROR:
            return self._error_to_text(value)
        if cached_type is CellType.NUMBER:
            return self._number_to_text(cell, value)
        raise _unsupported(cell, TargetKind.TEXT)

    # ------------------------------------------------------------------ #
    # Number target
    # ------------------------------------------------------------------ #

    def to_number(self, cell: Cell | None) -> float:
        if cell is None:
            return NEUTRAL_NUMBER

        cell_type = cell.cell_type
        if cell_type is CellType.FORMULA:
            cell_type = cell.cached_type or CellType.BLANK

        if cell_type is CellType.BLANK or cell.value is None:
            return NEUTRAL_NUMBER
        if cell_type is CellType.BOOLEAN:
            return 1.0 if cell.value else 0.0
        if cell_type is CellType.NUMBER:
            number = float(cell.value)
            return NEUTRAL_NUMBER if math.isnan(number) else number
        raise _unsupported(cell, TargetKind.NUMBER)

    # ------------------------------------------------------------------ #
    # Generic target
    # ------------------------------------------------------------------ #

    def to_object(self, cell: Cell | None) -> Any:
        """Return the cell's natural Python value.

        Numbers (including numeric formula results) stay floats, booleans
        stay bools, absent and blank cells give None, everything else is
        rendered as text.
        """
        if cell is None:
            return None

        cell_type = cell.cell_type
        if cell_type is CellType.FORMULA and cell.cached_type in (
            CellType.NUMBER,
            CellType.BOOLEAN,
        ):
            cell_type = cell.cached_type

        if cell_type is CellType.BLANK:
            return None
        if cell_type is CellType.BOOLEAN:
            return bool(cell.value)
        if cell_type is CellType.NUMBER:
            number = float(cell.value)
            return None if math.isnan(number) else number
        return self.to_text(cell)

    def _format_kind(self, cell: Cell) -> FormatKind:
        return classify_format(
            cell.format_id,
            cell.number_format,
            infer_dates=self._settings.infer_date_formats,
        )


def _serial_to_datetime(number: float, date1904: bool) -> datetime | None:
    """Convert a date serial, or return None when it is off the calendar."""
    epoch = MAC_EPOCH if date1904 else WINDOWS_EPOCH
    try:
        moment = from_excel(number, epoch)
    except (OverflowError, ValueError):
        return None
    if isinstance(moment, time):
        # Fractions of day zero: 31/12/1899 in the 1900 system, the epoch
        # itself in the 1904 system.
        day_zero = epoch if date1904 else epoch + timedelta(days=1)
        return datetime.combine(day_zero.date(), moment)
    return moment


def _unsupported(cell: Cell, target: TargetKind) -> CoercionError:
    variant = cell.cell_type
    if variant is CellType.FORMULA and cell.cached_type is not None:
        variant = cell.cached_type
    return CoercionError(
        f"Cannot coerce {variant.value} cell to {target.value}",
        cell_type=variant.value,
        target=target.value,
    )


class _CoercingCellMapper:
    """Base for mappers that pin coercion errors to the cell position."""

    def __init__(self, coercer: CellValueCoercer | None = None) -> None:
        self.coercer = coercer or CellValueCoercer()

    def map_cell(self, cell: Cell | None, row_num: int, column_num: int) -> Any:
        try:
            return self._convert(cell)
        except CoercionError as exc:
            if exc.row is not None:
                raise
            raise exc.at(row_num, column_num) from exc

    def _convert(self, cell: Cell | None) -> Any:
        raise NotImplementedError


class StringCellMapper(_CoercingCellMapper):
    """CellMapper producing a ``str`` for each cell."""

    def _convert(self, cell: Cell | None) -> str:
        return self.coercer.to_text(cell)


class NumberCellMapper(_CoercingCellMapper):
    """CellMapper producing a ``float`` for each cell."""

    def _convert(self, cell: Cell | None) -> float:
        return self.coercer.to_number(cell)


class ObjectCellMapper(_CoercingCellMapper):
    """CellMapper producing floats for numeric cells and text otherwise."""

    def _convert(self, cell: Cell | None) -> Any:
        return self.coercer.to_object(cell)


def map_cell(
    cell_mapper: CellMapper[Any] | Callable[[Cell | None, int, int], Any],
    cell: Cell | None,
    row_num: int,
    column_num: int,
) -> Any:
    """Apply a CellMapper object or a bare ``(cell, row, column)`` callable."""
    mapper = getattr(cell_mapper, "map_cell", None)
    if mapper is not None:
        return mapper(cell, row_num, column_num)
    return cell_mapper(cell, row_num, column_num)  # type: ignore[operator]


def cell_mapper_for(
    target: TargetKind, coercer: CellValueCoercer | None = None
) -> StringCellMapper | NumberCellMapper:
    """Return the stock mapper producing ``target`` values."""
    if target is TargetKind.TEXT:
        return StringCellMapper(coercer)
    if target is TargetKind.NUMBER:
        return NumberCellMapper(coercer)
    raise CoercionError(
        f"Unsupported target kind: {target!r}",
        target=str(target),
        error_code=ErrorCode.UNSUPPORTED_TARGET,
    )
