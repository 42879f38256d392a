"""Build record types at run time from a list of field definitions."""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

_TAG_KEY = "tag"


@dataclass
class FieldConfig:
    """Definition of one field: its name, an example value and a tag."""

    name: str
    typ: Any = None
    tag: str = ""

    def set_type(self, typ: Any) -> FieldConfig:
        """Change the example value that fixes the field's type."""
        self.typ = typ
        return self

    def set_tag(self, tag: str) -> FieldConfig:
        """Change the field's tag."""
        self.tag = tag
        return self


def _zero_factory(example: Any) -> Callable[[], Any]:
    """Return a factory producing the zero value of ``example``'s type."""
    if example is None:
        return lambda: None
    kind = type(example)
    try:
        kind()
    except Exception:
        return lambda: None
    return kind


class DynamicStruct:
    """A built record type that creates fresh instances of itself."""

    def __init__(self, definition: type) -> None:
        self._definition = definition

    @property
    def definition(self) -> type:
        """The generated dataclass."""
        return self._definition

    def new(self) -> Any:
        """Return a new instance with every field at its zero value."""
        return self._definition()

    def new_slice_of_structs(self) -> list[Any]:
        """Return a new, empty list meant to hold instances."""
        return []

    def new_map_of_structs(self, key: Any) -> dict[Any, Any]:
        """Return a new, empty map keyed on values of ``key``'s type."""
        try:
            hash(key)
        except TypeError as exc:
            raise TypeError(
                f"values of type {type(key).__name__} cannot be map keys"
            ) from exc
        return {}


class Builder:
    """Collects field definitions and builds a record type from them."""

    def __init__(self) -> None:
        self._fields: list[FieldConfig] = []

    @property
    def fields(self) -> list[FieldConfig]:
        """The field definitions, in order."""
        return list(self._fields)

    def add_field(self, name: str, typ: Any, tag: str) -> Builder:
        """Append a field defined by a name, an example value and a tag."""
        self._fields.append(FieldConfig(name=name, typ=typ, tag=tag))
        return self

    def remove_field(self, name: str) -> Builder:
        """Remove the first field called ``name``, if any."""
        for index, config in enumerate(self._fields):
            if config.name == name:
                del self._fields[index]
                break
        return self

    def has_field(self, name: str) -> bool:
        """Report whether a field called ``name`` is defined."""
        return any(config.name == name for config in self._fields)

    def get_field(self, name: str) -> FieldConfig | None:
        """Return the definition of the field called ``name``, or None."""
        return next(
            (config for config in self._fields if config.name == name), None
        )

    def build(self) -> DynamicStruct:
        """Build the record type; duplicate or invalid names raise TypeError."""
        specs = [
            (
                config.name,
                Any if config.typ is None else type(config.typ),
                dataclasses.field(
                    default_factory=_zero_factory(config.typ),
                    metadata={_TAG_KEY: config.tag},
                ),
            )
            for config in self._fields
        ]
        return DynamicStruct(dataclasses.make_dataclass("Struct", specs))


def new_struct() -> Builder:
    """Return an empty builder."""
    return Builder()


def extend_struct(value: Any) -> Builder:
    """Return a builder seeded with the fields of one dataclass instance."""
    return merge_structs(value)


def merge_structs(*args: Any) -> Builder:
    """Return a builder seeded with the fields of several dataclass instances."""
    builder = new_struct()
    for value in args:
        if isinstance(value, type):
            value = value()
        if not dataclasses.is_dataclass(value):
            raise TypeError(f"expected a dataclass, got {type(value).__name__}")
        for spec in dataclasses.fields(value):
            builder.add_field(
                spec.name,
                getattr(value, spec.name),
                spec.metadata.get(_TAG_KEY, ""),
            )
    return builder