"""Redis cache adapter."""

from __future__ import annotations

import asyncio
import json
from typing import Any

from writegate.adapters._overlay import Layer, LayeredCache


def _decode(data: bytes | str) -> Any:
    """Deserialize a stored JSON value."""
    if isinstance(data, bytes):
        data = data.decode("utf-8")
    return json.loads(data)


class RedisCache(LayeredCache):
    """Cache whose committed state lives in Redis.

    Each layer is applied in a single MULTI/EXEC pipeline. Optimistic overlays
    are speculative and stay in-process.
    """

    def __init__(
        self,
        client: Any,  # redis.Redis
        *,
        prefix: str = "writegate",
    ) -> None:
        super().__init__()
        self._client = client
        self._prefix = prefix

    def _data_key(self, key: str) -> str:
        """Generate full Redis key for a stored write."""
        return f"{self._prefix}:data:{key}"

    def _local_key(self) -> str:
        """Generate the Redis hash key holding local fields."""
        return f"{self._prefix}:local"

    def _encode(self, value: Any) -> Any:
        """Round trip through JSON so overlays hold what Redis would return.

        Values that cannot be stored fail here, at write time.
        """
        return json.loads(json.dumps(value))

    def _scan(self, pattern: str) -> list[bytes | str]:
        keys: list[bytes | str] = []
        cursor = 0
        while True:
            cursor, batch = self._client.scan(cursor, match=pattern, count=100)
            keys.extend(batch)
            if cursor == 0:
                break
        return keys

    def _load(self, key: str) -> tuple[bool, Any]:
        data = self._client.get(self._data_key(key))
        if data is None:
            return False, None
        return True, _decode(data)

    def _load_local(self) -> dict[str, Any]:
        raw = self._client.hgetall(self._local_key())
        return {
            (k.decode("utf-8") if isinstance(k, bytes) else k): _decode(v)
            for k, v in raw.items()
        }

    def _commit(self, layer: Layer) -> None:
        if not layer.writes and not layer.local:
            return
        pipe = self._client.pipeline(transaction=True)
        for key, value in layer.writes.items():
            pipe.set(self._data_key(key), json.dumps(value))
        if layer.local:
            pipe.hset(
                self._local_key(),
                mapping={k: json.dumps(v) for k, v in layer.local.items()},
            )
        pipe.execute()

    def _clear(self) -> None:
        keys = self._scan(f"{self._prefix}:*")
        if keys:
            self._client.delete(*keys)

    def _snapshot(self) -> dict[str, Any]:
        offset = len(self._data_key(""))
        snapshot: dict[str, Any] = {}
        for raw_key in self._scan(self._data_key("*")):
            key = raw_key.decode("utf-8") if isinstance(raw_key, bytes) else raw_key
            data = self._client.get(raw_key)
            if data is not None:
                snapshot[key[offset:]] = _decode(data)
        return snapshot

    async def reset(self) -> None:
        """Clear overlays and delete every key under the prefix."""
        self._optimistic.clear()
        await asyncio.to_thread(self._clear)

    def disconnect(self) -> None:
        """Close the Redis connection."""
        self._client.close()
