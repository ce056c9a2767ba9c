"""
Key-value store abstraction.

'KeyValueStore' is the only persistence primitive the messaging core relies on:
a flat, string-keyed map of JSON objects with get, set, delete and prefix-scan.
It offers no transactions, no secondary indices and no optimistic-concurrency
tokens, so every multi-key update built on top of it is a sequence of
independent read-modify-write calls (last write wins).

Concrete implementations: 'InMemoryKeyValueStore', 'SQLKeyValueStore'.
"""

from abc import ABC, abstractmethod
from typing import Any


class KeyValueStore(ABC):
    """Abstract async key-value store holding JSON-compatible dict values."""

    async def initialize(self) -> None:
        """Prepare the backing storage (create tables, open pools). No-op by default."""

    async def close(self) -> None:
        """Release any resources held by the store. No-op by default."""

    @abstractmethod
    async def get(self, key: str) -> dict[str, Any] | None:
        """Return the value stored under 'key', or None when absent."""
        pass

    @abstractmethod
    async def set(self, key: str, value: dict[str, Any]) -> None:
        """Insert or overwrite the value stored under 'key'."""
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Remove 'key'. Returns False when the key did not exist."""
        pass

    @abstractmethod
    async def get_by_prefix(self, prefix: str) -> list[dict[str, Any]]:
        """Return the values of every key starting with 'prefix'.

        Order follows the scan order of the backend and must not be relied upon.
        """
        pass
