"""Populate attributes of arbitrary objects from spreadsheet values.

``AttributeBeanSetter`` discovers the writable properties of an object's
class, matches spreadsheet headers against them ignoring case, and converts
each value to the property's declared type with pydantic.
"""

from __future__ import annotations

import dataclasses
import inspect
import types
from functools import lru_cache
from typing import Any, ClassVar, Protocol, Union, get_args, get_origin, get_type_hints

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from excel_template.utils.exceptions import BeanPopulationError, ErrorCode
from excel_template.utils.logging import get_logger

logger = get_logger(__name__)


class BeanSetter(Protocol):
    """Sets a named property on a target object."""

    def set_property(self, bean: Any, property_name: str, value: Any) -> None: ...


class AttributeBeanSetter:
    """BeanSetter assigning attributes, converted to their declared types.

    The property table of the most recently populated object is cached and
    rebuilt whenever a different object is targeted. Instances are not
    thread-safe.
    """

    def __init__(self) -> None:
        self._current_bean: Any = None
        self._current_properties: dict[str, tuple[str, Any]] = {}

    def properties_of(self, bean: Any) -> dict[str, tuple[str, Any]]:
        """Return ``{lowercase name: (name, annotation)}`` for ``bean``."""
        if bean is not self._current_bean:
            self._current_bean = bean
            self._current_properties = {
                name.lower(): (name, annotation)
                for name, annotation in describe_properties(bean).items()
            }
        return self._current_properties

    def set_property(self, bean: Any, property_name: str, value: Any) -> None:
        """Set ``property_name`` (case-insensitive) on ``bean``.

        Unknown properties are ignored, as are missing values (None, or an
        empty string for a non-text property).

        Raises:
            BeanPopulationError: If the value cannot be converted or assigned.
        """
        if not property_name:
            return

        match = self.properties_of(bean).get(property_name.lower())
        if match is None:
            return

        name, annotation = match
        if value is None or (value == "" and not _accepts_text(annotation)):
            return

        try:
            converted = convert_value(annotation, value)
            setattr(bean, name, converted)
        except (PydanticValidationError, AttributeError, TypeError, ValueError) as exc:
            raise BeanPopulationError(
                f"Cannot set property '{name}' to {value!r}",
                bean_class=type(bean).__name__,
                property_name=name,
                error_code=ErrorCode.PROPERTY_CONVERSION_FAILED,
                details={"reason": str(exc)},
            ) from exc


def describe_properties(bean: Any) -> dict[str, Any]:
    """Map each writable property of ``bean`` to its declared annotation.

    Pydantic models and dataclasses expose their fields; other classes
    expose annotated class attributes, properties with a setter and public
    instance attributes. Properties without an annotation map to ``Any``.
    """
    cls = type(bean)

    if isinstance(bean, BaseModel):
        return {name: info.annotation for name, info in cls.model_fields.items()}

    hints = _type_hints(cls)
    if dataclasses.is_dataclass(cls):
        return {f.name: hints.get(f.name, Any) for f in dataclasses.fields(cls)}

    properties: dict[str, Any] = {
        name: hint
        for name, hint in hints.items()
        if not name.startswith("_") and get_origin(hint) is not ClassVar
    }
    for name, member in inspect.getmembers(cls, lambda m: isinstance(m, property)):
        if member.fset is not None and not name.startswith("_"):
            properties.setdefault(name, _type_hints(member.fget).get("return", Any))
    for name in getattr(bean, "__dict__", {}):
        if not name.startswith("_"):
            properties.setdefault(name, Any)
    return properties


def convert_value(annotation: Any, value: Any) -> Any:
    """Convert ``value`` to ``annotation`` using pydantic's lax rules."""
    if annotation is Any or annotation is None:
        return value
    if _accepts_text(annotation) and not isinstance(value, str):
        value = str(value)
    try:
        adapter = _type_adapter(annotation)
    except TypeError:
        adapter = TypeAdapter(annotation)
    return adapter.validate_python(value)


@lru_cache(maxsize=256)
def _type_adapter(annotation: Any) -> TypeAdapter[Any]:
    return TypeAdapter(annotation)


def _accepts_text(annotation: Any) -> bool:
    if annotation is str:
        return True
    if get_origin(annotation) in (Union, types.UnionType):
        return str in get_args(annotation)
    return False


def _type_hints(obj: Any) -> dict[str, Any]:
    try:
        return get_type_hints(obj)
    except (NameError, TypeError):
        logger.debug("Unresolvable annotations, treating as untyped", target=obj)
        return {}
