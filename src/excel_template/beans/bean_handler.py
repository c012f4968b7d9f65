"""Cell callback creating one object per data row."""

from __future__ import annotations

from typing import Generic, TypeVar

from excel_template.beans.bean_setter import AttributeBeanSetter, BeanSetter
from excel_template.core.cell_mappers import ObjectCellMapper, StringCellMapper, map_cell
from excel_template.core.row_mappers import AnyCellMapper
from excel_template.sheet_document import Cell
from excel_template.utils.exceptions import BeanPopulationError
from excel_template.utils.logging import get_logger

logger = get_logger(__name__)

B = TypeVar("B")


class BeanCellCallbackHandler(Generic[B]):
    """CellCallbackHandler building a ``bean_class`` instance per row.

    Row 0 holds property names. Each later row gets its own object, created
    on the first cell visited in that row; every cell value is handed to
    the BeanSetter under the property name of its column. Columns without a
    property name are coerced and then discarded.
    """

    def __init__(
        self,
        bean_class: type[B],
        bean_setter: BeanSetter | None = None,
        cell_mapper: AnyCellMapper | None = None,
        header_mapper: AnyCellMapper | None = None,
    ) -> None:
        self.bean_class = bean_class
        self.bean_setter = bean_setter or AttributeBeanSetter()
        self.cell_mapper = cell_mapper or ObjectCellMapper()
        self.header_mapper = header_mapper or StringCellMapper()
        self.property_names: dict[int, str] = {}
        self._beans: dict[int, B] = {}

    @property
    def beans(self) -> list[B]:
        """Populated objects in row order."""
        return list(self._beans.values())

    def process_cell(self, cell: Cell | None, row_num: int, column_num: int) -> None:
        if row_num == 0:
            self.property_names[column_num] = map_cell(
                self.header_mapper, cell, row_num, column_num
            )
            return

        value = map_cell(self.cell_mapper, cell, row_num, column_num)
        bean = self._bean_for_row(row_num)

        property_name = self.property_names.get(column_num)
        if property_name is None:
            return
        self.bean_setter.set_property(bean, property_name, value)

    def _bean_for_row(self, row_num: int) -> B:
        bean = self._beans.get(row_num)
        if bean is None:
            bean = self.create_bean(self.bean_class)
            self._beans[row_num] = bean
        return bean

    def create_bean(self, bean_class: type[B]) -> B:
        """Create an empty object by calling the class without arguments.

        Override for a different creation strategy.

        Raises:
            BeanPopulationError: If the class cannot be instantiated.
        """
        try:
            return bean_class()
        except Exception as exc:
            name = getattr(bean_class, "__name__", repr(bean_class))
            logger.debug("Bean instantiation failed", bean_class=name)
            raise BeanPopulationError(
                "Impossible to create bean",
                bean_class=name,
                details={"reason": str(exc)},
            ) from exc

    def reset(self) -> None:
        """Forget headers and objects collected so far."""
        self.property_names.clear()
        self._beans.clear()

