"""Container readers for excel-template."""

from excel_template.services.workbook_reader import (
    OpenpyxlWorkbookReader,
    WorkbookReader,
    XlrdWorkbookReader,
    open_workbook_reader,
)

__all__ = [
    "OpenpyxlWorkbookReader",
    "WorkbookReader",
    "XlrdWorkbookReader",
    "open_workbook_reader",
]
