"""Core extraction machinery: cell coercion, row projections, extractors."""

from excel_template.core.cell_mappers import (
    CellMapper,
    CellValueCoercer,
    NumberCellMapper,
    ObjectCellMapper,
    StringCellMapper,
    TargetKind,
)
from excel_template.core.extractors import (
    CellCallbackHandlerSheetExtractor,
    DataFrameSheetExtractor,
    MapListRowCallbackHandler,
    MatrixSheetExtractor,
    RowCallbackHandlerSheetExtractor,
    RowMapperSheetExtractor,
)
from excel_template.core.row_mappers import (
    ArrayRowMapper,
    CaseInsensitiveDict,
    ColumnMapRowMapper,
    Projection,
)
from excel_template.core.template import ExcelTemplate

__all__ = [
    "ArrayRowMapper",
    "CaseInsensitiveDict",
    "CellCallbackHandlerSheetExtractor",
    "CellMapper",
    "CellValueCoercer",
    "ColumnMapRowMapper",
    "DataFrameSheetExtractor",
    "ExcelTemplate",
    "MapListRowCallbackHandler",
    "MatrixSheetExtractor",
    "NumberCellMapper",
    "ObjectCellMapper",
    "Projection",
    "RowCallbackHandlerSheetExtractor",
    "RowMapperSheetExtractor",
    "StringCellMapper",
    "TargetKind",
]
