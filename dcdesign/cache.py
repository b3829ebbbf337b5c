"""
dcdesign/cache.py
=================
Canonical serialisation and the per-calculator result cache.

``canonical_key`` turns a (possibly nested) dataclass / mapping / sequence into
a deterministic JSON string: keys sorted, tuples and lists treated alike,
integers written as floats, no whitespace. It is the cache key for calculators and the equality test the
layout history uses for change detection.
"""

from __future__ import annotations

import dataclasses
import json
from typing import Any, Generic, TypeVar

V = TypeVar("V")


def _plain(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: _plain(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, dict):
        return {str(k): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    # 1 and 1.0 compare equal, so they must share a key; bool stays bool
    if isinstance(value, int) and not isinstance(value, bool):
        return float(value)
    return value


def canonical_key(value: Any) -> str:
    """Deterministic JSON serialisation of ``value``.

    Example:
        >>> canonical_key({"b": 1, "a": (1.0, 2)})
        '{"a":[1.0,2.0],"b":1.0}'
    """
    return json.dumps(_plain(value), sort_keys=True, separators=(",", ":"), allow_nan=True)


class ResultCache(Generic[V]):
    """Unbounded map from canonical input key to result.

    Entries live until :meth:`clear`; there is no per-entry expiry. Hit and
    miss counters are kept for instrumentation and tests.
    """

    def __init__(self) -> None:
        self._entries: dict[str, V] = {}
        self.hits: int = 0
        self.misses: int = 0

    def get(self, key: str) -> V | None:
        value = self._entries.get(key)
        if value is None:
            self.misses += 1
        else:
            self.hits += 1
        return value

    def put(self, key: str, value: V) -> None:
        self._entries[key] = value

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
