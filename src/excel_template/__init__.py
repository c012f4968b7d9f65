"""excel-template - callback-driven extraction of spreadsheet sheets."""

from excel_template.config import Settings, settings
from excel_template.core import (
    CaseInsensitiveDict,
    CellValueCoercer,
    ExcelTemplate,
    NumberCellMapper,
    ObjectCellMapper,
    Projection,
    StringCellMapper,
    TargetKind,
)
from excel_template.beans import AttributeBeanSetter, BeanCellCallbackHandler
from excel_template.sheet_document import Cell, CellType, Row, Sheet
from excel_template.utils.exceptions import (
    BeanPopulationError,
    CleanupFailureError,
    CoercionError,
    DataAccessError,
    ExcelTemplateError,
    SourceUnavailableError,
)

__all__ = [
    "AttributeBeanSetter",
    "BeanCellCallbackHandler",
    "BeanPopulationError",
    "CaseInsensitiveDict",
    "Cell",
    "CellType",
    "CellValueCoercer",
    "CleanupFailureError",
    "CoercionError",
    "DataAccessError",
    "ExcelTemplate",
    "ExcelTemplateError",
    "NumberCellMapper",
    "ObjectCellMapper",
    "Projection",
    "Row",
    "Settings",
    "Sheet",
    "SourceUnavailableError",
    "StringCellMapper",
    "TargetKind",
    "settings",
]
__version__ = "0.1.0"
