"""Lifetime-scoped key/value memo store used by the client."""

from __future__ import annotations

from typing import Final, Generic, TypeVar

V = TypeVar("V")


class _Missing:
    """Type of the ``MISSING`` sentinel returned for absent cache keys."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Final = _Missing()


class Cache(Generic[V]):
    """String-keyed cache with no eviction and no expiry.

    ``get`` returns ``MISSING`` for keys that were never set, so a cached
    ``None`` or empty string is distinguishable from "not cached". Not safe
    for concurrent mutation from several threads.
    """

    def __init__(self) -> None:
        self._entries: dict[str, V] = {}

    def get(self, key: str) -> V | _Missing:
        return self._entries.get(key, MISSING)

    def set(self, key: str, value: V) -> None:
        self._entries[key] = value

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
