"""Mutation lifecycle: optimistic apply, commit, cleanup.

A mutation moves through ``init`` -> ``result`` -> ``complete``. When it has an
optimistic response, ``init`` runs the same commit logic as ``result`` inside a
named optimistic transaction. The overlay handle is passed down explicitly, so
the lifecycle never swaps its own cache reference.
"""

from __future__ import annotations

import logging
from typing import Any

from writegate.adapters.base import Cache, DataProxy, TransactionalProxy
from writegate.guard import ErrorSink, call_guarded, log_failure
from writegate.types import (
    ROOT_MUTATION,
    ROOT_QUERY,
    DataWrite,
    DiffOptions,
    ExecutionResult,
    MutationRecord,
    UpdaterContext,
    has_errors,
)

_logger = logging.getLogger(__name__)


class MutationLifecycle:
    """Orchestrates the cache writes of individual mutations."""

    def __init__(self, cache: Cache, *, error_sink: ErrorSink | None = None) -> None:
        self._cache = cache
        self._error_sink = error_sink or log_failure

    def init(self, mutation: MutationRecord) -> None:
        """Record the optimistic overlay for ``mutation``, if it has one."""
        if mutation.optimistic_response is None:
            return

        optimistic = mutation.optimistic_response.resolve(mutation.variables)
        _logger.debug(
            "Applying optimistic response for mutation %s", mutation.mutation_id
        )

        def apply(overlay: TransactionalProxy) -> None:
            self._commit(mutation, ExecutionResult(data=optimistic), overlay)

        self._cache.record_optimistic_transaction(apply, mutation.mutation_id)

    def result(self, mutation: MutationRecord, result: ExecutionResult) -> None:
        """Commit the server result of ``mutation``."""
        self._commit(mutation, result, self._cache)

    def complete(self, mutation_id: str, optimistic_response: Any = None) -> None:
        """Drop the optimistic overlay; committed writes stay."""
        if optimistic_response is None:
            return
        self._cache.remove_optimistic(mutation_id)

    def _commit(
        self,
        mutation: MutationRecord,
        result: ExecutionResult,
        cache: TransactionalProxy,
    ) -> None:
        if has_errors(result):
            _logger.debug(
                "Mutation %s returned errors; nothing written", mutation.mutation_id
            )
            return

        writes = [
            DataWrite.at(
                ROOT_MUTATION, result.data, mutation.document, mutation.variables
            )
        ]
        writes.extend(self._run_updaters(mutation, result, cache))

        def apply_writes(proxy: DataProxy) -> None:
            for write in writes:
                proxy.write(write)

        cache.perform_transaction(apply_writes)

        update = mutation.update
        if update is not None:

            def apply_update(proxy: DataProxy) -> None:
                call_guarded(
                    update,
                    proxy,
                    result,
                    label=f"update for mutation {mutation.mutation_id}",
                    sink=self._error_sink,
                )

            cache.perform_transaction(apply_update)

    def _run_updaters(
        self,
        mutation: MutationRecord,
        result: ExecutionResult,
        cache: DataProxy,
    ) -> list[DataWrite]:
        writes: list[DataWrite] = []
        for query_id, entry in mutation.update_queries.items():
            if entry is None:
                continue

            current = cache.diff(
                DiffOptions(
                    document=entry.document,
                    variables=entry.variables,
                    return_partial_data=True,
                    optimistic=False,
                )
            )
            # Reducers never run over partial data
            if not current.complete:
                _logger.debug("Skipped updater for %s: incomplete data", query_id)
                continue

            outcome = call_guarded(
                entry.updater,
                current.result,
                UpdaterContext(
                    mutation_result=result,
                    query_name=entry.document.operation_name,
                    query_variables=entry.variables,
                ),
                label=f"updater for query {query_id}",
                sink=self._error_sink,
            )
            if outcome.value is not None:
                writes.append(
                    DataWrite.at(
                        ROOT_QUERY, outcome.value, entry.document, entry.variables
                    )
                )
        return writes

