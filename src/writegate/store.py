"""DataStore - the write-coordination façade.

Provides:
- Query, subscription and mutation result handling over one owned cache
- Optimistic mutation overlays
- One-shot local field initializers
- reset(): clears the initializer registry and the cache
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from writegate.adapters.base import Cache
from writegate.guard import ErrorSink
from writegate.initializers import InitializerRegistry
from writegate.mutations import MutationLifecycle
from writegate.types import (
    Document,
    ExecutionResult,
    Initializers,
    MutationRecord,
    Variables,
)
from writegate.writer import ResultWriter

# Default initializer context; stands for the store itself
_STORE: Any = object()


class DataStore:
    """Decides what gets written into a cache, and when.

    Example:
        store = DataStore(MemoryCache())
        store.mark_query_result(
            ExecutionResult(data={"user": {"id": "1"}}),
            Document("query GetUser { user { id } }"),
            {},
        )

    Only one optimistic transaction may be in flight per store at a time;
    callers must not interleave ``mark_mutation_init`` calls so that their
    overlays are recorded concurrently.
    """

    def __init__(
        self,
        cache: Cache,
        *,
        registry: InitializerRegistry | None = None,
        error_sink: ErrorSink | None = None,
    ) -> None:
        self._cache = cache
        self._registry = registry or InitializerRegistry()
        self._writer = ResultWriter(cache)
        self._mutations = MutationLifecycle(cache, error_sink=error_sink)

    @property
    def cache(self) -> Cache:
        return self._cache

    def get_cache(self) -> Cache:
        return self._cache

    @property
    def registry(self) -> InitializerRegistry:
        return self._registry

    def mark_query_result(
        self,
        result: ExecutionResult,
        document: Document,
        variables: Variables | None,
        fetch_more_for_query_id: str | None = None,
        ignore_errors: bool = False,
    ) -> None:
        self._writer.mark_query_result(
            result, document, variables, fetch_more_for_query_id, ignore_errors
        )

    def mark_subscription_result(
        self,
        result: ExecutionResult,
        document: Document,
        variables: Variables | None,
    ) -> None:
        self._writer.mark_subscription_result(result, document, variables)

    def mark_update_query_result(
        self,
        document: Document,
        variables: Variables | None,
        new_result: Any,
    ) -> None:
        self._writer.mark_update_query_result(document, variables, new_result)

    def mark_mutation_init(self, mutation: MutationRecord) -> None:
        self._mutations.init(mutation)

    def mark_mutation_result(
        self, mutation: MutationRecord, result: ExecutionResult
    ) -> None:
        self._mutations.result(mutation, result)

    def mark_mutation_complete(
        self, mutation_id: str, optimistic_response: Any = None
    ) -> None:
        self._mutations.complete(mutation_id, optimistic_response)

    async def initialize(
        self,
        initializers: Initializers | Sequence[Initializers] | None,
        context: Any = _STORE,
    ) -> None:
        """Run initializers asynchronously.

        Initializers receive ``context`` (the store itself when omitted) and
        may return a value, an awaitable, or None to skip the write.
        """
        await self._registry.initialize(
            initializers, self if context is _STORE else context, self._cache
        )

    def initialize_sync(
        self,
        initializers: Initializers | Sequence[Initializers] | None,
        context: Any = _STORE,
    ) -> None:
        """Run initializers that return their value immediately."""
        self._registry.initialize_sync(
            initializers, self if context is _STORE else context, self._cache
        )

    async def reset(self) -> None:
        """Allow initializers to fire again and clear the cache."""
        self._registry.reset()
        await self._cache.reset()
