"""Base protocols for cache backends."""

from collections.abc import Callable, Mapping
from typing import Any, Protocol, runtime_checkable

from writegate.types import DataWrite, DiffOptions, DiffResult


@runtime_checkable
class DataProxy(Protocol):
    """Handle passed to transaction callbacks and mutation ``update`` functions."""

    def write(self, write: DataWrite) -> None:
        """Upsert data rooted at ``write.root_id``."""
        ...

    def diff(self, options: DiffOptions) -> DiffResult[Any]:
        """Read the current value of a query."""
        ...

    def write_data(self, data: Mapping[str, Any]) -> None:
        """Write top-level local fields, bypassing document keying."""
        ...

    def read_data(self) -> dict[str, Any]:
        """Read top-level local fields."""
        ...


TransactionFn = Callable[[DataProxy], None]


@runtime_checkable
class TransactionalProxy(DataProxy, Protocol):
    """DataProxy that can batch further writes into a transaction."""

    def perform_transaction(self, fn: TransactionFn) -> None:
        """Run ``fn`` as one atomic batch."""
        ...


OptimisticFn = Callable[[TransactionalProxy], None]


@runtime_checkable
class Cache(TransactionalProxy, Protocol):
    """Cache collaborator interface."""

    def record_optimistic_transaction(
        self, fn: OptimisticFn, optimistic_id: str
    ) -> None:
        """Run ``fn`` against a named overlay that leaves base state untouched."""
        ...

    def remove_optimistic(self, optimistic_id: str) -> None:
        """Discard the overlay recorded under ``optimistic_id``."""
        ...

    async def reset(self) -> None:
        """Clear all stored state."""
        ...
