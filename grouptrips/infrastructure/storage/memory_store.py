"""Process-local key-value store; everything is gone once the process exits."""

from __future__ import annotations

from typing import Dict


class InMemoryKeyValueStore:
    def __init__(self) -> None:
        self._values: Dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        return self._values.get(key)

    async def set(self, key: str, value: str) -> None:
        self._values[key] = value

    async def delete(self, key: str) -> None:
        self._values.pop(key, None)

    def snapshot(self) -> Dict[str, str]:
        return dict(self._values)
