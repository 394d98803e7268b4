"""Ordered field container for one annotated log line."""

import json


class OrderedRecord:
    """String-keyed fields kept in insertion order.

    Re-setting an existing key updates its value without moving it, so the
    keys set first (timestamp, level, message) always lead the JSON output.
    """

    __slots__ = ("_fields",)

    def __init__(self):
        self._fields: dict[str, str] = {}

    def set(self, key: str, value: str) -> None:
        self._fields[key] = value

    def get(self, key: str, default: str | None = None) -> str | None:
        return self._fields.get(key, default)

    def keys(self):
        return self._fields.keys()

    def items(self):
        return self._fields.items()

    def __contains__(self, key) -> bool:
        return key in self._fields

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"OrderedRecord({self._fields!r})"

    def to_dict(self) -> dict[str, str]:
        return dict(self._fields)

    def to_json(self) -> str:
        """Compact JSON object, fields in insertion order."""
        return json.dumps(self._fields, ensure_ascii=False, separators=(",", ":"))
