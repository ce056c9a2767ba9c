"""
Pluggable key-value storage backends.

    from messaging_toolkit.kv_store import InMemoryKeyValueStore, SQLKeyValueStore, create_store
"""

from messaging_toolkit.kv_store.base import KeyValueStore
from messaging_toolkit.kv_store.in_memory import InMemoryKeyValueStore
from messaging_toolkit.kv_store.sql import SQLKeyValueStore


def create_store(url: str | None) -> KeyValueStore:
    """Return a SQL store for 'url', or an in-memory store when no URL is configured."""
    if url:
        return SQLKeyValueStore(url=url)
    return InMemoryKeyValueStore()


__all__ = [
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "SQLKeyValueStore",
    "create_store",
]
