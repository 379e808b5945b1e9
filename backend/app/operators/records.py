"""Typed record and schema model used on the operator ports."""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from .errors import RecordError

SUPPORTED_TYPES: dict[str, type] = {
    "str": str,
    "int": int,
    "float": float,
    "bool": bool,
}


@dataclass(frozen=True)
class Attribute:
    """A named, typed field of a stream schema."""

    name: str
    type: type

    @property
    def type_name(self) -> str:
        return self.type.__name__


def _accepts(attr_type: type, value: object) -> bool:
    # bool is a subclass of int; keep the two apart.
    if attr_type is int:
        return isinstance(value, int) and not isinstance(value, bool)
    if attr_type is float:
        return isinstance(value, float)
    return isinstance(value, attr_type)


class StreamSchema:
    """Ordered set of attributes describing the records on a port."""

    def __init__(self, attributes: Iterable[Attribute]):
        self._attributes = tuple(attributes)
        self._by_name: dict[str, Attribute] = {}
        for attribute in self._attributes:
            if attribute.type not in SUPPORTED_TYPES.values():
                raise RecordError(f"unsupported type for {attribute.name!r}")
            if attribute.name in self._by_name:
                raise RecordError(f"duplicate attribute {attribute.name!r}")
            self._by_name[attribute.name] = attribute

    @classmethod
    def from_spec(cls, spec: str) -> StreamSchema:
        """Parse a ``name:type,name:type`` declaration."""

        attributes: list[Attribute] = []
        for chunk in spec.split(","):
            chunk = chunk.strip()
            if not chunk:
                continue
            name, _, type_name = chunk.partition(":")
            name = name.strip()
            attr_type = SUPPORTED_TYPES.get(type_name.strip())
            if not name or attr_type is None:
                raise RecordError(f"invalid attribute declaration {chunk!r}")
            attributes.append(Attribute(name, attr_type))
        return cls(attributes)

    @property
    def names(self) -> list[str]:
        return [attribute.name for attribute in self._attributes]

    def attribute(self, index: int) -> Attribute:
        return self._attributes[index]

    def get(self, name: str) -> Attribute | None:
        return self._by_name.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self):
        return iter(self._attributes)

    def __len__(self) -> int:
        return len(self._attributes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StreamSchema):
            return NotImplemented
        return self._attributes == other._attributes

    def __repr__(self) -> str:
        body = ",".join(f"{a.name}:{a.type_name}" for a in self._attributes)
        return f"<StreamSchema {body}>"


class Record:
    """One unit of data flowing through the pipeline."""

    def __init__(self, schema: StreamSchema, values: Mapping[str, Any] | None = None):
        self.schema = schema
        self._values: dict[str, Any] = {}
        for name, value in (values or {}).items():
            self.set(name, value)

    def set(self, name: str, value: Any) -> None:
        attribute = self.schema.get(name)
        if attribute is None:
            raise RecordError(f"schema has no attribute {name!r}")
        if not _accepts(attribute.type, value):
            raise RecordError(
                f"attribute {name!r} expects {attribute.type_name}, "
                f"got {type(value).__name__}"
            )
        self._values[name] = value

    def get(self, name: str) -> Any:
        if name not in self.schema:
            raise RecordError(f"schema has no attribute {name!r}")
        return self._values.get(name)

    def get_string(self, name: str) -> str:
        attribute = self.schema.get(name)
        if attribute is None or attribute.type is not str:
            raise RecordError(f"attribute {name!r} is not string typed")
        return self._values.get(name) or ""

    def first(self) -> tuple[Attribute, Any]:
        """Return the first attribute of the schema with its value."""

        if not len(self.schema):
            raise RecordError("record has no attributes")
        attribute = self.schema.attribute(0)
        return attribute, self._values.get(attribute.name)

    def assign(self, other: Record) -> None:
        """Copy every field of ``other`` whose name and type match this schema."""

        for attribute in other.schema:
            target = self.schema.get(attribute.name)
            if target is None or target.type is not attribute.type:
                continue
            if attribute.name in other._values:
                self._values[attribute.name] = other._values[attribute.name]

    def as_dict(self) -> dict[str, Any]:
        return {name: self._values.get(name) for name in self.schema.names}

    def __repr__(self) -> str:  # pragma: no cover - repr not critical for tests
        return f"<Record {self.as_dict()!r}>"


def _infer_type(value: object) -> type:
    if isinstance(value, bool):
        return bool
    if isinstance(value, int):
        return int
    if isinstance(value, float):
        return float
    if isinstance(value, str):
        return str
    raise RecordError(f"unsupported value type {type(value).__name__}")


def record_from_mapping(mapping: Mapping[str, Any]) -> Record:
    """Build a record whose schema follows the mapping's key order."""

    schema = StreamSchema(Attribute(str(name), _infer_type(value)) for name, value in mapping.items())
    return Record(schema, {str(name): value for name, value in mapping.items()})
