"""Tests for AttributeBeanSetter and property discovery."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar

import pytest
from pydantic import BaseModel

from excel_template.beans.bean_setter import (
    AttributeBeanSetter,
    convert_value,
    describe_properties,
)
from excel_template.utils.exceptions import BeanPopulationError, ErrorCode


class NameAndAge:
    lastname: str | None = None
    age: int | None = None
    registry: ClassVar[list[str]] = []
    _secret: str = ""


@dataclass
class Measurement:
    label: str = ""
    value: float = 0.0


class Employee(BaseModel):
    name: str = ""
    salary: float = 0.0
    active: bool = False


class WithProperty:
    def __init__(self) -> None:
        self._code = ""

    @property
    def code(self) -> str:
        return self._code

    @code.setter
    def code(self, value: str) -> None:
        self._code = value.upper()

    @property
    def read_only(self) -> str:
        return "fixed"


class Untyped:
    def __init__(self) -> None:
        self.city = None


class TestDescribeProperties:
    """Tests for describe_properties."""

    def test_annotated_class(self) -> None:
        properties = describe_properties(NameAndAge())
        assert set(properties) == {"lastname", "age"}
        assert properties["age"] == int | None

    def test_dataclass(self) -> None:
        assert describe_properties(Measurement()) == {"label": str, "value": float}

    def test_pydantic_model(self) -> None:
        assert describe_properties(Employee()) == {
            "name": str,
            "salary": float,
            "active": bool,
        }

    def test_property_with_setter(self) -> None:
        properties = describe_properties(WithProperty())
        assert properties == {"code": str}

    def test_instance_attributes(self) -> None:
        assert describe_properties(Untyped()) == {"city": Any}


class TestAttributeBeanSetter:
    """Tests for AttributeBeanSetter.set_property."""

    def setup_method(self) -> None:
        self.setter = AttributeBeanSetter()

    def test_name_matching_ignores_case(self) -> None:
        bean = NameAndAge()
        self.setter.set_property(bean, "LastName", "Smith")
        assert bean.lastname == "Smith"

    def test_converts_to_declared_type(self) -> None:
        bean = NameAndAge()
        self.setter.set_property(bean, "age", 35.0)
        assert bean.age == 35
        assert isinstance(bean.age, int)

    def test_number_to_text_property(self) -> None:
        bean = Measurement()
        self.setter.set_property(bean, "label", 12.0)
        assert bean.label == "12.0"

    def test_unknown_property_ignored(self) -> None:
        bean = NameAndAge()
        self.setter.set_property(bean, "unknown", "x")
        assert not hasattr(bean, "unknown")

    def test_empty_name_ignored(self) -> None:
        bean = NameAndAge()
        self.setter.set_property(bean, "", "x")
        assert bean.lastname is None

    def test_missing_values_skipped(self) -> None:
        bean = NameAndAge()
        self.setter.set_property(bean, "age", None)
        self.setter.set_property(bean, "age", "")
        assert bean.age is None

    def test_empty_string_kept_for_text(self) -> None:
        bean = Measurement(label="before")
        self.setter.set_property(bean, "label", "")
        assert bean.label == ""

    def test_pydantic_model(self) -> None:
        bean = Employee()
        self.setter.set_property(bean, "SALARY", 1200.5)
        self.setter.set_property(bean, "active", True)
        assert bean.salary == 1200.5
        assert bean.active is True

    def test_property_setter_used(self) -> None:
        bean = WithProperty()
        self.setter.set_property(bean, "code", "abc")
        assert bean.code == "ABC"

    def test_untyped_attribute_keeps_value(self) -> None:
        bean = Untyped()
        self.setter.set_property(bean, "CITY", 75.0)
        assert bean.city == 75.0

    def test_conversion_failure(self) -> None:
        bean = NameAndAge()
        with pytest.raises(BeanPopulationError) as exc_info:
            self.setter.set_property(bean, "age", "thirty")

        error = exc_info.value
        assert error.error_code == ErrorCode.PROPERTY_CONVERSION_FAILED
        assert error.property_name == "age"
        assert error.bean_class == "NameAndAge"

    def test_property_table_follows_target(self) -> None:
        first = NameAndAge()
        second = Measurement()
        self.setter.set_property(first, "age", 1.0)
        self.setter.set_property(second, "value", 2.0)
        self.setter.set_property(first, "lastname", "Johns")
        assert (first.age, first.lastname, second.value) == (1, "Johns", 2.0)


class TestConvertValue:
    """Tests for convert_value."""

    def test_any_passes_through(self) -> None:
        marker = object()
        assert convert_value(Any, marker) is marker

    def test_optional_int(self) -> None:
        assert convert_value(int | None, 25.0) == 25

    def test_fractional_float_to_int_fails(self) -> None:
        with pytest.raises(ValueError):
            convert_value(int, 2.5)
