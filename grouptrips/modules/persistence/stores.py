"""Key-value store protocol backing the client-side intent tiers."""

from __future__ import annotations

from typing import Protocol


class KeyValueStore(Protocol):
    async def get(self, key: str) -> str | None:
        ...

    async def set(self, key: str, value: str) -> None:
        ...

    async def delete(self, key: str) -> None:
        ...
