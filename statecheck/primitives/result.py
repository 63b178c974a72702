"""
StateCheck — Decoded Call Results

A ResultTuple is what a multi-output call or a struct output decodes to:
an ordered tuple that also remembers the ABI names of its fields, so it
can be compared either as a sequence or as a mapping.
"""

from __future__ import annotations

from typing import Any


class ResultTuple(tuple):
    """Tuple of decoded values carrying their ABI field names."""

    names: tuple[str, ...]

    def __new__(cls, values: Any = (), names: Any = ()) -> ResultTuple:
        obj = super().__new__(cls, values)
        obj.names = tuple(names)
        return obj

    def to_dict(self) -> dict[str, Any]:
        """Field name → value. Unnamed fields are keyed by their position."""
        out: dict[str, Any] = {}
        for i, value in enumerate(self):
            name = self.names[i] if i < len(self.names) and self.names[i] else str(i)
            out[name] = value
        return out

    def to_list(self) -> list[Any]:
        """Plain list, nested ResultTuples converted recursively."""
        return [to_plain_list(v) for v in self]

    def __repr__(self) -> str:
        fields = ", ".join(f"{k}={v!r}" for k, v in self.to_dict().items())
        return f"ResultTuple({fields})"


def to_plain_list(value: Any) -> Any:
    """Convert ResultTuples (at any depth inside lists) to plain lists."""
    if isinstance(value, ResultTuple):
        return value.to_list()
    if isinstance(value, list):
        return [to_plain_list(v) for v in value]
    return value
