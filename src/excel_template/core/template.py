"""ExcelTemplate: the central entry point of excel-template.

The template owns the document lifecycle so that callers only supply
callbacks: every read opens the document stream, parses the container,
hands the requested sheet to an extractor and closes the stream again,
whatever happens in between.

Example:
    template = ExcelTemplate("people.xlsx")
    rows = template.read("Tests")              # list[list[str]]
    people = template.read_maps("Tests")       # list of case-insensitive maps
    beans = template.read_beans("Tests", Person)
"""

from __future__ import annotations

import os
from collections.abc import Callable, Iterable
from io import BytesIO
from pathlib import Path
from typing import IO, Any, TypeVar

import pandas as pd

from excel_template.beans.bean_handler import BeanCellCallbackHandler
from excel_template.beans.bean_setter import BeanSetter
from excel_template.config import Settings
from excel_template.config import settings as default_settings
from excel_template.core.cell_mappers import (
    NEUTRAL_NUMBER,
    CellValueCoercer,
    ObjectCellMapper,
    StringCellMapper,
    TargetKind,
    cell_mapper_for,
)
from excel_template.core.extractors import (
    CellCallbackHandler,
    CellCallbackHandlerSheetExtractor,
    CountingExtractor,
    DataFrameSheetExtractor,
    MapListRowCallbackHandler,
    MatrixSheetExtractor,
    RowCallbackHandler,
    RowCallbackHandlerSheetExtractor,
    RowMapperSheetExtractor,
    SheetExtractor,
)
from excel_template.core.row_mappers import (
    AnyCellMapper,
    CaseInsensitiveDict,
    Projection,
    RowMapper,
)
from excel_template.services.workbook_reader import (
    SheetKey,
    WorkbookReader,
    open_workbook_reader,
)
from excel_template.sheet_document import Cell, Row
from excel_template.utils.exceptions import (
    CleanupFailureError,
    ErrorCode,
    SourceUnavailableError,
)
from excel_template.utils.logging import LogContext, get_logger, timed_operation

logger = get_logger(__name__)

T = TypeVar("T")
B = TypeVar("B")

Resource = str | os.PathLike[str] | bytes | Callable[[], IO[bytes]]


class ExcelTemplate:
    """Run extraction callbacks against one spreadsheet document.

    Args:
        resource: Where to read the document from: a filesystem path, the
            raw bytes of the document, or a zero-argument callable returning
            a fresh binary stream on every call.
        settings: Rendering settings; the global settings by default.

    A template may be created without a resource and given one later
    through the ``resource`` attribute. Concurrent reads on one instance are
    not supported.
    """

    def __init__(
        self,
        resource: Resource | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.resource = resource
        self.settings = settings or default_settings
        self.coercer = CellValueCoercer(self.settings)

    # ------------------------------------------------------------------ #
    # Configuration
    # ------------------------------------------------------------------ #

    def validate(self) -> None:
        """Check the template is ready for reading.

        Raises:
            SourceUnavailableError: If no resource is configured.
        """
        if self.resource is None:
            raise SourceUnavailableError(
                "resource is required",
                error_code=ErrorCode.SOURCE_NOT_CONFIGURED,
            )

    def describe_resource(self) -> str:
        resource = self.resource
        if resource is None:
            return "(not set)"
        if isinstance(resource, (bytes, bytearray)):
            return f"<{len(resource)} bytes>"
        if callable(resource):
            return getattr(resource, "__name__", repr(resource))
        return os.fspath(resource)

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def get_sheet_names(self) -> list[str]:
        """Read the sheet names of the document, in workbook order."""
        with timed_operation(logger, "get_sheet_names"):
            return self._read(lambda reader: reader.sheet_names())

    def read_sheet(
        self,
        sheet_name: SheetKey,
        extractor: SheetExtractor[T] | Callable[..., T],
    ) -> T:
        """Run ``extractor`` over one sheet and return its result.

        Args:
            sheet_name: Case-sensitive sheet name, or sheet index. A sheet
                that does not exist is handed to the extractor as None.
            extractor: SheetExtractor, or a callable taking the sheet.
        """
        if sheet_name is None:
            raise ValueError("sheet_name must not be None")
        if extractor is None:
            raise ValueError("extractor must not be None")

        extract = getattr(extractor, "extract_data", extractor)
        operation = type(extractor).__name__

        with (
            LogContext(document=self.describe_resource(), sheet=sheet_name),
            timed_operation(logger, operation) as metrics,
        ):
            if isinstance(extractor, CountingExtractor):
                extractor.metrics = metrics

            def transform(reader: WorkbookReader) -> T:
                sheet = reader.load_sheet(sheet_name)
                if sheet is None:
                    logger.warning("Sheet not found, reading it as empty")
                return extract(sheet)

            return self._read(transform)

    def read(self, sheet_name: SheetKey) -> list[list[str]]:
        """Read a sheet as a rectangular matrix of strings.

        Short rows are padded with empty strings.
        """
        return self.read_matrix(sheet_name, StringCellMapper(self.coercer), "")

    def read_matrix(
        self,
        sheet_name: SheetKey,
        cell_mapper: AnyCellMapper,
        fill_value: Any = None,
    ) -> list[list[Any]]:
        """Read a sheet as a rectangular matrix built by ``cell_mapper``."""
        return self.read_sheet(sheet_name, MatrixSheetExtractor(cell_mapper, fill_value))

    def read_typed(
        self,
        sheet_name: SheetKey,
        target: TargetKind,
        fill_value: Any = None,
    ) -> list[list[Any]]:
        """Read a sheet as a matrix of ``target`` values.

        Short rows are padded with ``fill_value``, or with the target's
        neutral value ("" or 0.0) when it is None.
        """
        if fill_value is None:
            fill_value = "" if target is TargetKind.TEXT else NEUTRAL_NUMBER
        return self.read_matrix(
            sheet_name, cell_mapper_for(target, self.coercer), fill_value
        )

    def read_list(
        self,
        sheet_name: SheetKey,
        row_mapper: RowMapper[T] | Callable[[Row, int], T],
    ) -> list[T]:
        """Map every stored row with ``row_mapper``."""
        return self.read_sheet(sheet_name, RowMapperSheetExtractor(row_mapper))

    def read_maps(
        self,
        sheet_name: SheetKey,
        cell_mapper: AnyCellMapper | None = None,
        keys: Iterable[str] | None = None,
    ) -> list[CaseInsensitiveDict[Any]]:
        """Read each row as a case-insensitive map.

        Without ``keys`` the first stored row is the header supplying them.
        Values are strings unless another ``cell_mapper`` is given.
        """
        handler: MapListRowCallbackHandler[Any] = MapListRowCallbackHandler(
            cell_mapper or StringCellMapper(self.coercer),
            keys=keys,
            header_mapper=StringCellMapper(self.coercer),
        )
        self.process_rows(sheet_name, handler)
        return handler.values

    def process_rows(
        self,
        sheet_name: SheetKey,
        handler: RowCallbackHandler | Callable[[Row, int], None],
    ) -> None:
        """Call ``handler`` once per stored row, in order."""
        self.read_sheet(sheet_name, RowCallbackHandlerSheetExtractor(handler))

    def process_cells(
        self,
        sheet_name: SheetKey,
        handler: CellCallbackHandler | Callable[[Cell | None, int, int], None],
    ) -> None:
        """Call ``handler`` once per visited cell position, in order."""
        self.read_sheet(sheet_name, CellCallbackHandlerSheetExtractor(handler))

    def read_beans(
        self,
        sheet_name: SheetKey,
        bean_class: type[B],
        bean_setter: BeanSetter | None = None,
    ) -> list[B]:
        """Create one ``bean_class`` instance per data row.

        Row 0 names the properties; matching ignores case and unknown
        columns are skipped.
        """
        handler: BeanCellCallbackHandler[B] = BeanCellCallbackHandler(
            bean_class,
            bean_setter=bean_setter,
            cell_mapper=ObjectCellMapper(self.coercer),
            header_mapper=StringCellMapper(self.coercer),
        )
        self.process_cells(sheet_name, handler)
        return handler.beans

    def read_dataframe(
        self,
        sheet_name: SheetKey,
        cell_mapper: AnyCellMapper | None = None,
    ) -> pd.DataFrame:
        """Read a sheet into a DataFrame labelled by its header row."""
        return self.read_sheet(
            sheet_name,
            DataFrameSheetExtractor(
                cell_mapper or StringCellMapper(self.coercer),
                header_mapper=StringCellMapper(self.coercer),
            ),
        )

    def extract(
        self,
        sheet_name: SheetKey,
        projection: Projection,
        *,
        cell_mapper: AnyCellMapper | None = None,
        keys: Iterable[str] | None = None,
        bean_class: type[Any] | None = None,
        fill_value: Any = None,
    ) -> list[Any]:
        """Read a sheet with the row shape selected by ``projection``.

        ARRAY gives a padded matrix, MAP a list of case-insensitive maps
        and OBJECT a list of ``bean_class`` instances.
        """
        if projection is Projection.ARRAY:
            return self.read_matrix(
                sheet_name, cell_mapper or StringCellMapper(self.coercer), fill_value
            )
        if projection is Projection.MAP:
            return self.read_maps(sheet_name, cell_mapper, keys)
        if projection is Projection.OBJECT:
            if bean_class is None:
                raise ValueError("bean_class is required for the OBJECT projection")
            return self.read_beans(sheet_name, bean_class)
        raise ValueError(f"Unknown projection: {projection!r}")

    # ------------------------------------------------------------------ #
    # Document lifecycle
    # ------------------------------------------------------------------ #

    def _read(self, transform: Callable[[WorkbookReader], T]) -> T:
        stream = self._open_stream()
        try:
            try:
                data = stream.read()
            except OSError as exc:
                raise SourceUnavailableError(
                    "Problem reading file",
                    resource=self.describe_resource(),
                ) from exc

            reader = open_workbook_reader(data)
            try:
                return transform(reader)
            finally:
                reader.close()
        finally:
            self._close_stream(stream)

    def _open_stream(self) -> IO[bytes]:
        self.validate()
        resource = self.resource
        try:
            if isinstance(resource, (bytes, bytearray)):
                return BytesIO(resource)
            if callable(resource):
                return resource()
            return Path(resource).open("rb")
        except FileNotFoundError as exc:
            raise SourceUnavailableError(
                "Problem reading file: file not found",
                error_code=ErrorCode.SOURCE_NOT_FOUND,
                resource=self.describe_resource(),
            ) from exc
        except OSError as exc:
            raise SourceUnavailableError(
                f"Problem reading file: {exc}",
                resource=self.describe_resource(),
            ) from exc

    def _close_stream(self, stream: IO[bytes]) -> None:
        try:
            stream.close()
        except OSError as exc:
            # A pending read failure stays reachable as __context__.
            raise CleanupFailureError(resource=self.describe_resource()) from exc
