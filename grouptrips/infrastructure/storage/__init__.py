"""Key-value stores used by the client-side intent tiers."""

from .json_file_store import JsonFileKeyValueStore, KeyValueStoreError
from .memory_store import InMemoryKeyValueStore

__all__ = ["InMemoryKeyValueStore", "JsonFileKeyValueStore", "KeyValueStoreError"]
