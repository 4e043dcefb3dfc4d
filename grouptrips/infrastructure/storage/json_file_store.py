"""Durable key-value store keeping one JSON document per key on local disk."""

from __future__ import annotations

import asyncio
import hashlib
import json
from pathlib import Path
from typing import Any, Dict


class KeyValueStoreError(RuntimeError):
    """Raised when a stored document cannot be read or written."""


class JsonFileKeyValueStore:
    """Survives a process restart, unlike :class:`InMemoryKeyValueStore`."""

    def __init__(self, storage_dir: Path):
        self._storage_dir = storage_dir

    @property
    def storage_dir(self) -> Path:
        return self._storage_dir

    def _path_for(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self._storage_dir / f"{digest}.json"

    def _read(self, key: str) -> str | None:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            payload: Dict[str, Any] = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise KeyValueStoreError(f"cannot read stored value for {key!r}") from exc
        if not isinstance(payload, dict) or payload.get("key") != key:
            raise KeyValueStoreError(f"stored document for {key!r} is invalid")
        value = payload.get("value")
        return value if isinstance(value, str) else None

    def _write(self, key: str, value: str) -> None:
        path = self._path_for(key)
        tmp_path = path.with_suffix(".tmp")
        document = json.dumps({"key": key, "value": value}, ensure_ascii=False)
        try:
            self._storage_dir.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(document, encoding="utf-8")
            tmp_path.replace(path)
        except OSError as exc:
            raise KeyValueStoreError(f"cannot write stored value for {key!r}") from exc

    def _delete(self, key: str) -> None:
        try:
            self._path_for(key).unlink(missing_ok=True)
        except OSError as exc:
            raise KeyValueStoreError(f"cannot delete stored value for {key!r}") from exc

    async def get(self, key: str) -> str | None:
        return await asyncio.to_thread(self._read, key)

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._write, key, value)

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self._delete, key)
