"""Layered write engine shared by the bundled cache adapters.

Every mutation of state goes through a :class:`Layer`. Plain writes and
transactions commit their layer into base storage once the callback returns;
optimistic transactions keep their layer on a stack that optimistic reads see
through until it is removed by id.
"""

from __future__ import annotations

import copy
import hashlib
import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from writegate.adapters.base import OptimisticFn, TransactionFn
from writegate.exceptions import CacheTransactionError
from writegate.types import (
    ROOT_MUTATION,
    ROOT_QUERY,
    ROOT_SUBSCRIPTION,
    DataWrite,
    DiffOptions,
    DiffResult,
    Document,
    Variables,
)

_logger = logging.getLogger(__name__)

_ROOTS = {
    "query": ROOT_QUERY,
    "mutation": ROOT_MUTATION,
    "subscription": ROOT_SUBSCRIPTION,
}


def make_write_key(root_id: str, document: Document, variables: Variables) -> str:
    """Generate a storage key from root id, document and variables."""
    payload = json.dumps([document.source, dict(variables)], sort_keys=True, default=str)
    args_hash = hashlib.sha256(payload.encode()).hexdigest()[:16]
    return f"{root_id}:{document.operation_name or '_'}:{args_hash}"


def diff_key(options: DiffOptions) -> str:
    """Storage key a diff reads, rooted by the document's operation type."""
    root_id = _ROOTS.get(options.document.operation_type, ROOT_QUERY)
    return make_write_key(root_id, options.document, options.variables)


@dataclass
class Layer:
    """Writes and local fields buffered by one transaction."""

    optimistic_id: str | None = None
    writes: dict[str, Any] = field(default_factory=dict)
    local: dict[str, Any] = field(default_factory=dict)


class LayerProxy:
    """DataProxy that buffers into a layer and reads through to its cache."""

    def __init__(self, cache: LayeredCache, layer: Layer) -> None:
        self._cache = cache
        self.layer = layer

    def write(self, write: DataWrite) -> None:
        key = make_write_key(write.root_id, write.document, write.variables)
        self.layer.writes[key] = self._cache._encode(write.result)

    def diff(self, options: DiffOptions) -> DiffResult[Any]:
        key = diff_key(options)
        if key in self.layer.writes:
            return DiffResult(
                result=copy.deepcopy(self.layer.writes[key]), complete=True
            )
        return self._cache.diff(options)

    def write_data(self, data: Mapping[str, Any]) -> None:
        self.layer.local.update({k: self._cache._encode(v) for k, v in data.items()})

    def read_data(self) -> dict[str, Any]:
        return {**self._cache.read_data(), **copy.deepcopy(self.layer.local)}

    def perform_transaction(self, fn: TransactionFn) -> None:
        """Buffer ``fn`` in a child layer and fold it into this one on success."""
        child = _ChildProxy(self)
        try:
            fn(child)
        except Exception as e:
            raise CacheTransactionError(
                "Transaction callback failed", optimistic_id=self.layer.optimistic_id
            ) from e
        self.layer.writes.update(child.layer.writes)
        self.layer.local.update(child.layer.local)


class _ChildProxy(LayerProxy):
    """Nested transaction proxy reading through its parent's layer."""

    def __init__(self, parent: LayerProxy) -> None:
        super().__init__(parent._cache, Layer(optimistic_id=parent.layer.optimistic_id))
        self._parent = parent

    def diff(self, options: DiffOptions) -> DiffResult[Any]:
        key = diff_key(options)
        if key in self.layer.writes:
            return DiffResult(
                result=copy.deepcopy(self.layer.writes[key]), complete=True
            )
        return self._parent.diff(options)

    def read_data(self) -> dict[str, Any]:
        return {**self._parent.read_data(), **copy.deepcopy(self.layer.local)}


class LayeredCache(ABC):
    """Base class for caches built on committed layers plus optimistic overlays.

    Subclasses provide base storage through ``_load``, ``_load_local``,
    ``_commit``, ``_clear`` and ``_snapshot``.
    """

    def __init__(self) -> None:
        self._optimistic: list[Layer] = []

    @abstractmethod
    def _load(self, key: str) -> tuple[bool, Any]:
        """Return ``(found, value)`` for a base storage key."""

    @abstractmethod
    def _load_local(self) -> dict[str, Any]:
        """Return the committed local fields."""

    @abstractmethod
    def _commit(self, layer: Layer) -> None:
        """Apply a layer's writes to base storage atomically."""

    @abstractmethod
    def _clear(self) -> None:
        """Drop all base storage."""

    @abstractmethod
    def _snapshot(self) -> dict[str, Any]:
        """Return all committed writes by key."""

    def _encode(self, value: Any) -> Any:
        """Detach a value from the caller before it enters a layer."""
        return copy.deepcopy(value)

    def write(self, write: DataWrite) -> None:
        """Upsert data rooted at ``write.root_id``."""
        layer = Layer()
        LayerProxy(self, layer).write(write)
        self._commit(layer)

    def diff(self, options: DiffOptions) -> DiffResult[Any]:
        """Read the current value of a query."""
        key = diff_key(options)
        if options.optimistic:
            for layer in reversed(self._optimistic):
                if key in layer.writes:
                    return DiffResult(
                        result=copy.deepcopy(layer.writes[key]), complete=True
                    )
        found, value = self._load(key)
        if not found:
            return DiffResult(result=None, complete=False)
        return DiffResult(result=copy.deepcopy(value), complete=True)

    def write_data(self, data: Mapping[str, Any]) -> None:
        """Write top-level local fields."""
        layer = Layer()
        LayerProxy(self, layer).write_data(data)
        self._commit(layer)

    def read_data(self) -> dict[str, Any]:
        """Read local fields, including those of active overlays."""
        data = self._load_local()
        for layer in self._optimistic:
            data.update(layer.local)
        return copy.deepcopy(data)

    def perform_transaction(self, fn: TransactionFn) -> None:
        """Run ``fn`` against a buffered proxy and commit only if it returns."""
        proxy = LayerProxy(self, Layer())
        try:
            fn(proxy)
        except Exception as e:
            raise CacheTransactionError("Transaction callback failed") from e
        self._commit(proxy.layer)

    def record_optimistic_transaction(
        self, fn: OptimisticFn, optimistic_id: str
    ) -> None:
        """Run ``fn`` against a new overlay and push it onto the overlay stack."""
        proxy = LayerProxy(self, Layer(optimistic_id=optimistic_id))
        try:
            fn(proxy)
        except Exception as e:
            raise CacheTransactionError(
                "Optimistic transaction callback failed", optimistic_id=optimistic_id
            ) from e
        self._optimistic.append(proxy.layer)
        _logger.debug(
            "Recorded overlay %s with %d writes", optimistic_id, len(proxy.layer.writes)
        )

    def remove_optimistic(self, optimistic_id: str) -> None:
        """Discard every overlay recorded under ``optimistic_id``."""
        self._optimistic = [
            layer for layer in self._optimistic if layer.optimistic_id != optimistic_id
        ]
        _logger.debug("Removed overlay %s", optimistic_id)

    def optimistic_ids(self) -> list[str]:
        """Ids of the active overlays, oldest first."""
        return [
            layer.optimistic_id
            for layer in self._optimistic
            if layer.optimistic_id is not None
        ]

    def extract(self, *, optimistic: bool = False) -> dict[str, Any]:
        """Snapshot of stored writes by key."""
        data = self._snapshot()
        if optimistic:
            for layer in self._optimistic:
                data.update(layer.writes)
        return copy.deepcopy(data)

    async def reset(self) -> None:
        """Clear all stored state and overlays."""
        self._optimistic.clear()
        self._clear()
