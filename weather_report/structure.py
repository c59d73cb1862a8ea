"""Turn loosely-typed nested data into attribute-addressable records.

`transform` walks a tree of mappings, sequences and scalars:

- mappings become `Record` instances whose keys are readable as attributes,
- lists and tuples become tuples of transformed elements, order preserved,
- everything else is returned unchanged.

Input is assumed to be tree-shaped (YAML/JSON documents); cycles are not
detected.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Iterator, Tuple, Union

Scalar = Union[str, bytes, int, float, bool, None]
StructureNode = Union["Record", Tuple["StructureNode", ...], Any]


class Record(Mapping):
    """Immutable mapping whose string keys are also exposed as attributes.

    Keys that collide with mapping methods (``keys``, ``items``, ``get``...)
    are still reachable with item access: ``record["items"]``.
    """

    __slots__ = ("_fields",)

    def __init__(self, fields: Mapping[Any, Any] | None = None) -> None:
        object.__setattr__(self, "_fields", dict(fields or {}))

    def __getattr__(self, name: str) -> Any:
        if name == "_fields" or name.startswith("__"):
            raise AttributeError(name)
        try:
            return self._fields[name]
        except KeyError:
            raise AttributeError(f"Record has no field '{name}'") from None

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("Record fields are read-only")

    def __delattr__(self, name: str) -> None:
        raise AttributeError("Record fields are read-only")

    def __getitem__(self, key: Any) -> Any:
        return self._fields[key]

    def __iter__(self) -> Iterator[Any]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        inner = ", ".join(f"{k}={v!r}" for k, v in self._fields.items())
        return f"Record({inner})"

    def __getstate__(self) -> dict:
        return self._fields

    def __setstate__(self, state: dict) -> None:
        object.__setattr__(self, "_fields", dict(state))

    def to_dict(self) -> dict:
        """Project the record (recursively) back into plain dicts and lists."""
        return {key: _plain(value) for key, value in self._fields.items()}


def _plain(node: Any) -> Any:
    """Inverse of transform for records and tuples."""
    if isinstance(node, Record):
        return node.to_dict()
    if isinstance(node, tuple):
        return [_plain(item) for item in node]
    return node


def transform(node: Any) -> StructureNode:
    """Recursively convert mappings to Records and sequences to tuples."""
    if isinstance(node, Mapping):
        return Record({key: transform(value) for key, value in node.items()})
    if isinstance(node, (list, tuple)):
        return tuple(transform(item) for item in node)
    return node
