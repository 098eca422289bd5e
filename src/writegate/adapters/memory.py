"""In-memory cache adapter."""

from typing import Any

from writegate.adapters._overlay import Layer, LayeredCache


class MemoryCache(LayeredCache):
    """In-process cache with transactional batching and optimistic overlays."""

    def __init__(self) -> None:
        super().__init__()
        self._data: dict[str, Any] = {}
        self._local: dict[str, Any] = {}

    def _load(self, key: str) -> tuple[bool, Any]:
        if key not in self._data:
            return False, None
        return True, self._data[key]

    def _load_local(self) -> dict[str, Any]:
        return dict(self._local)

    def _commit(self, layer: Layer) -> None:
        self._data.update(layer.writes)
        self._local.update(layer.local)

    def _clear(self) -> None:
        self._data.clear()
        self._local.clear()

    def _snapshot(self) -> dict[str, Any]:
        return dict(self._data)
