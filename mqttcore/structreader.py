"""Read the fields of record instances by name, with typed accessors."""

from __future__ import annotations

import dataclasses
import math
import struct
import types
import typing
from dataclasses import dataclass
from datetime import datetime
from typing import Any

_FLOAT32 = struct.Struct("<f")


def _wrap_signed(value: int, bits: int) -> int:
    span = 1 << bits
    half = span >> 1
    return ((value + half) % span) - half


def _wrap_unsigned(value: int, bits: int) -> int:
    return value & ((1 << bits) - 1)


def _to_float32(value: float) -> float:
    try:
        return _FLOAT32.unpack(_FLOAT32.pack(value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def _is_record(value: Any) -> bool:
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def _declared_types(record: Any) -> dict[str, Any]:
    return {spec.name: spec.type for spec in dataclasses.fields(record)}


def _normalise_origin(origin: Any) -> Any:
    if origin is types.UnionType:
        return typing.Union
    return origin


def have_same_types(first: Any, second: Any) -> bool:
    """Report whether two declared types are structurally the same.

    Plain classes must be the same class; generic types must share their
    origin and have pairwise matching arguments.
    """
    first_origin = _normalise_origin(typing.get_origin(first))
    second_origin = _normalise_origin(typing.get_origin(second))
    if first_origin is None and second_origin is None:
        if first is second:
            return True
        if isinstance(first, type) and isinstance(second, type):
            return (
                first.__module__ == second.__module__
                and first.__qualname__ == second.__qualname__
            )
        return first == second
    if first_origin is not second_origin:
        return False
    first_args = typing.get_args(first)
    second_args = typing.get_args(second)
    if len(first_args) != len(second_args):
        return False
    return all(have_same_types(a, b) for a, b in zip(first_args, second_args))


@dataclass(frozen=True)
class Field:
    """One field of a record: its name, its value and its declared type.

    Every accessor returns None when the value is None; otherwise it raises
    TypeError when the value is not of a suitable kind.
    """

    name: str
    value: Any
    declared_type: Any = Any

    def _integer(self) -> int | None:
        if self.value is None:
            return None
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f'field "{self.name}" is not an integer')
        return self.value

    def _signed(self, bits: int) -> int | None:
        value = self._integer()
        return None if value is None else _wrap_signed(value, bits)

    def _unsigned(self, bits: int) -> int | None:
        value = self._integer()
        return None if value is None else _wrap_unsigned(value, bits)

    def _real(self) -> float | None:
        if self.value is None:
            return None
        if isinstance(self.value, bool) or not isinstance(self.value, (int, float)):
            raise TypeError(f'field "{self.name}" is not a number')
        return float(self.value)

    def int(self) -> int | None:
        """The value as a 64 bit signed integer."""
        return self._signed(64)

    def int8(self) -> int | None:
        """The value truncated to 8 bit signed."""
        return self._signed(8)

    def int16(self) -> int | None:
        """The value truncated to 16 bit signed."""
        return self._signed(16)

    def int32(self) -> int | None:
        """The value truncated to 32 bit signed."""
        return self._signed(32)

    def int64(self) -> int | None:
        """The value truncated to 64 bit signed."""
        return self._signed(64)

    def uint(self) -> int | None:
        """The value as a 64 bit unsigned integer."""
        return self._unsigned(64)

    def uint8(self) -> int | None:
        """The value truncated to 8 bit unsigned."""
        return self._unsigned(8)

    def uint16(self) -> int | None:
        """The value truncated to 16 bit unsigned."""
        return self._unsigned(16)

    def uint32(self) -> int | None:
        """The value truncated to 32 bit unsigned."""
        return self._unsigned(32)

    def uint64(self) -> int | None:
        """The value truncated to 64 bit unsigned."""
        return self._unsigned(64)

    def float32(self) -> float | None:
        """The value rounded to single precision."""
        value = self._real()
        return None if value is None else _to_float32(value)

    def float64(self) -> float | None:
        """The value as a double precision float."""
        return self._real()

    def string(self) -> str | None:
        """The value if it is a string, else a description of its type."""
        if self.value is None or isinstance(self.value, str):
            return self.value
        return f"<{type(self.value).__name__} Value>"

    def bool(self) -> bool | None:
        """The value as a boolean."""
        if self.value is None:
            return None
        if not isinstance(self.value, bool):
            raise TypeError(f'field "{self.name}" is not a bool')
        return self.value

    def time(self) -> datetime | None:
        """The value as a datetime."""
        if self.value is None:
            return None
        if not isinstance(self.value, datetime):
            raise TypeError(f'field "{self.name}" is not an instance of datetime')
        return self.value

    def interface(self) -> Any:
        """The raw value."""
        return self.value


class Reader:
    """Gives access by name to the fields of a record instance."""

    def __init__(self, value: Any) -> None:
        self._value = value
        self._fields: dict[str, Field] = {}
        if _is_record(value):
            declared = _declared_types(value)
            for spec in dataclasses.fields(value):
                self._fields[spec.name] = Field(
                    name=spec.name,
                    value=getattr(value, spec.name),
                    declared_type=declared.get(spec.name, Any),
                )

    def has_field(self, name: str) -> bool:
        """Report whether the record has a field called ``name``."""
        return name in self._fields

    def get_field(self, name: str) -> Field | None:
        """Return the field called ``name``, or None."""
        return self._fields.get(name)

    def get_all_fields(self) -> list[Field]:
        """Return every field of the record."""
        return list(self._fields.values())

    def to_struct(self, target: Any) -> Any:
        """Copy values into same-named, same-typed fields of ``target``.

        ``target`` must be a mutable dataclass instance; it is returned.
        """
        if not _is_record(target):
            raise TypeError("to_struct: expected a dataclass instance as an argument")
        if type(target).__dataclass_params__.frozen:
            raise TypeError("to_struct: expected a mutable dataclass instance")
        declared = _declared_types(target)
        for spec in dataclasses.fields(target):
            original = self._fields.get(spec.name)
            if original is None:
                continue
            if have_same_types(original.declared_type, declared.get(spec.name, Any)):
                setattr(target, spec.name, original.value)
        return target

    def to_slice_of_readers(self) -> list[Reader] | None:
        """Return a reader per element if the value is a list or tuple."""
        if not isinstance(self._value, (list, tuple)):
            return None
        return [new_reader(item) for item in self._value]

    def to_map_of_readers(self) -> dict[Any, Reader] | None:
        """Return a reader per entry if the value is a dict."""
        if not isinstance(self._value, dict):
            return None
        return {key: new_reader(item) for key, item in self._value.items()}

    def get_value(self) -> Any:
        """Return the value the reader was created with."""
        return self._value


def new_reader(value: Any) -> Reader:
    """Return a reader over ``value``."""
    return Reader(value)