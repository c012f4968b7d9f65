"""Tests for BeanCellCallbackHandler."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pytest

from excel_template.beans.bean_handler import BeanCellCallbackHandler
from excel_template.core.extractors import CellCallbackHandlerSheetExtractor
from excel_template.sheet_document import Sheet
from excel_template.utils.exceptions import BeanPopulationError, ErrorCode


@dataclass
class Person:
    lastname: str = ""
    age: int = 0


class NeedsArguments:
    def __init__(self, name: str) -> None:
        self.name = name


class RefusesCreation:
    def __init__(self) -> None:
        raise RuntimeError("not available")


class RecordingSetter:
    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []

    def set_property(self, bean: Any, property_name: str, value: Any) -> None:
        self.calls.append((property_name, value))


@pytest.fixture
def people_sheet() -> Sheet:
    return Sheet.from_values(
        "People",
        [
            ["lastName", "AGE", "unknown"],
            ["Smith", 35, "ignored"],
            ["Johns", 25, "ignored"],
        ],
    )


def _run(handler: BeanCellCallbackHandler[Any], sheet: Sheet) -> None:
    CellCallbackHandlerSheetExtractor(handler).extract_data(sheet)


class TestBeanCellCallbackHandler:
    """Tests for bean creation from cell callbacks."""

    def test_one_bean_per_data_row(self, people_sheet: Sheet) -> None:
        handler = BeanCellCallbackHandler(Person)
        _run(handler, people_sheet)

        assert handler.beans == [Person("Smith", 35), Person("Johns", 25)]

    def test_header_row_recorded(self, people_sheet: Sheet) -> None:
        handler = BeanCellCallbackHandler(Person)
        _run(handler, people_sheet)

        assert handler.property_names == {0: "lastName", 1: "AGE", 2: "unknown"}

    def test_header_only_sheet(self) -> None:
        handler = BeanCellCallbackHandler(Person)
        _run(handler, Sheet.from_values("People", [["lastName", "age"]]))
        assert handler.beans == []

    def test_columns_without_header_skipped(self) -> None:
        sheet = Sheet.from_values("People", [["lastName"], ["Smith", 40]])
        handler = BeanCellCallbackHandler(Person)
        _run(handler, sheet)
        assert handler.beans == [Person("Smith", 0)]

    def test_custom_setter_receives_values(self, people_sheet: Sheet) -> None:
        setter = RecordingSetter()
        handler = BeanCellCallbackHandler(Person, bean_setter=setter)
        _run(handler, people_sheet)

        assert setter.calls[:3] == [
            ("lastName", "Smith"),
            ("AGE", 35.0),
            ("unknown", "ignored"),
        ]

    def test_class_requiring_arguments(self, people_sheet: Sheet) -> None:
        handler = BeanCellCallbackHandler(NeedsArguments)
        with pytest.raises(BeanPopulationError) as exc_info:
            _run(handler, people_sheet)

        error = exc_info.value
        assert error.message == "Impossible to create bean"
        assert error.error_code == ErrorCode.BEAN_CREATION_FAILED
        assert error.bean_class == "NeedsArguments"

    def test_constructor_failure(self, people_sheet: Sheet) -> None:
        handler = BeanCellCallbackHandler(RefusesCreation)
        with pytest.raises(BeanPopulationError, match="Impossible to create bean"):
            _run(handler, people_sheet)

    def test_create_bean_override(self, people_sheet: Sheet) -> None:
        class Factory(BeanCellCallbackHandler[NeedsArguments]):
            def create_bean(self, bean_class: type[NeedsArguments]) -> NeedsArguments:
                return bean_class("created")

        handler = Factory(NeedsArguments)
        _run(handler, people_sheet)
        assert [bean.name for bean in handler.beans] == ["created", "created"]

    def test_reset(self, people_sheet: Sheet) -> None:
        handler = BeanCellCallbackHandler(Person)
        _run(handler, people_sheet)

        handler.reset()

        assert handler.beans == []
        assert handler.property_names == {}
