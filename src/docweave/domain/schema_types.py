"""Static types declared by schema documents.

Types check plain Python values (the output of
:func:`~docweave.domain.documents.to_python`) and report violations as
human-readable strings prefixed with the offending key path.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from docweave.domain.documents import Position

_SCALAR_KINDS: dict[type, str] = {
    str: "string",
    int: "integer",
    float: "float",
    bool: "boolean",
}


def _kind_of(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, dict):
        return "map"
    if isinstance(value, list):
        return "array"
    return _SCALAR_KINDS.get(type(value), type(value).__name__)


@dataclass(kw_only=True)
class Type:
    """Base class for schema types."""

    position: Position = field(default_factory=Position.unknown)

    name = "type"

    def check(self, value: Any, path: str = "") -> list[str]:
        raise NotImplementedError

    def default_value(self) -> Any:
        raise NotImplementedError

    def _mismatch(self, value: Any, path: str) -> list[str]:
        where = path or "(document)"
        return [f"{where}: expected {self.name}, found {_kind_of(value)} ({self.position})"]


@dataclass(kw_only=True)
class AnyType(Type):
    """Accepts any value."""

    default: Any = None

    name = "any"

    def check(self, value: Any, path: str = "") -> list[str]:
        return []

    def default_value(self) -> Any:
        return self.default


@dataclass(kw_only=True)
class NullType(Type):
    """Accepts null or whatever *wrapped* accepts; defaults to null."""

    wrapped: Type

    @property
    def name(self) -> str:  # type: ignore[override]
        return f"null or {self.wrapped.name}"

    def check(self, value: Any, path: str = "") -> list[str]:
        if value is None:
            return []
        return self.wrapped.check(value, path)

    def default_value(self) -> Any:
        return None


@dataclass(kw_only=True)
class ScalarType(Type):
    kind: str
    default: Any = None

    @property
    def name(self) -> str:  # type: ignore[override]
        return self.kind

    def check(self, value: Any, path: str = "") -> list[str]:
        found = _kind_of(value)
        if found == self.kind:
            return []
        # integers are acceptable floats
        if self.kind == "float" and found == "integer":
            return []
        return self._mismatch(value, path)

    def default_value(self) -> Any:
        return self.default


@dataclass(kw_only=True)
class MapType(Type):
    items: dict[Any, Type] = field(default_factory=dict)

    name = "map"

    def check(self, value: Any, path: str = "") -> list[str]:
        if not isinstance(value, dict):
            return self._mismatch(value, path)
        violations: list[str] = []
        for key, item_value in value.items():
            item_path = f"{path}.{key}" if path else str(key)
            item_type = self.items.get(key)
            if item_type is None:
                violations.append(f"{item_path}: key is not declared in schema ({self.position})")
                continue
            violations.extend(item_type.check(item_value, item_path))
        return violations

    def default_value(self) -> Any:
        return {key: item_type.default_value() for key, item_type in self.items.items()}


@dataclass(kw_only=True)
class ArrayType(Type):
    item_type: Type

    name = "array"

    def check(self, value: Any, path: str = "") -> list[str]:
        if not isinstance(value, list):
            return self._mismatch(value, path)
        violations: list[str] = []
        for i, item_value in enumerate(value):
            violations.extend(self.item_type.check(item_value, f"{path}[{i}]"))
        return violations

    def default_value(self) -> Any:
        # arrays default to empty; the declared item only describes shape
        return []


def scalar_kind(value: Any) -> str | None:
    """Schema kind for a scalar default, or None if *value* is not a scalar."""
    return _SCALAR_KINDS.get(type(value))
