import copy
from typing import Any

from messaging_toolkit.kv_store.base import KeyValueStore


class InMemoryKeyValueStore(KeyValueStore):
    """
    Dict-backed store for tests and single-process development.

    Values are deep-copied on the way in and out, so a caller mutating a value
    it read never changes what is stored until it calls 'set' again, which is
    the same contract a remote store gives.
    """

    def __init__(self, initial: dict[str, dict[str, Any]] | None = None) -> None:
        self._data: dict[str, dict[str, Any]] = copy.deepcopy(initial) if initial else {}

    async def get(self, key: str) -> dict[str, Any] | None:
        value = self._data.get(key)
        return copy.deepcopy(value) if value is not None else None

    async def set(self, key: str, value: dict[str, Any]) -> None:
        self._data[key] = copy.deepcopy(value)

    async def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    async def get_by_prefix(self, prefix: str) -> list[dict[str, Any]]:
        return [copy.deepcopy(value) for key, value in self._data.items() if key.startswith(prefix)]
