"""Query and subscription result writes."""

from __future__ import annotations

import logging
from typing import Any

from writegate.adapters.base import DataProxy
from writegate.types import (
    ROOT_QUERY,
    ROOT_SUBSCRIPTION,
    DataWrite,
    Document,
    ExecutionResult,
    Variables,
    has_errors,
)

_logger = logging.getLogger(__name__)


class ResultWriter:
    """Decides whether an incoming result is committed to the cache.

    Each call issues at most one ``write``. Results that fail the error policy
    are skipped without raising.
    """

    def __init__(self, cache: DataProxy) -> None:
        self._cache = cache

    def mark_query_result(
        self,
        result: ExecutionResult,
        document: Document,
        variables: Variables | None,
        fetch_more_for_query_id: str | None = None,
        ignore_errors: bool = False,
    ) -> None:
        """Write a query result under ``ROOT_QUERY``.

        Results with errors are only written when ``ignore_errors`` is set and
        the result still carries data. Fetch-more results are never written
        here; the caller merges them through ``mark_update_query_result``.
        """
        errored = has_errors(result)
        should_write = not errored or (ignore_errors and result.data is not None)
        if fetch_more_for_query_id or not should_write:
            _logger.debug(
                "Skipped query write for %s (errors=%s, fetch_more=%s)",
                document.operation_name,
                errored,
                fetch_more_for_query_id,
            )
            return
        self._cache.write(DataWrite.at(ROOT_QUERY, result.data, document, variables))

    def mark_subscription_result(
        self,
        result: ExecutionResult,
        document: Document,
        variables: Variables | None,
    ) -> None:
        """Write a subscription result under ``ROOT_SUBSCRIPTION`` unless it errored."""
        if has_errors(result):
            _logger.debug(
                "Skipped subscription write for %s", document.operation_name
            )
            return
        self._cache.write(
            DataWrite.at(ROOT_SUBSCRIPTION, result.data, document, variables)
        )

    def mark_update_query_result(
        self,
        document: Document,
        variables: Variables | None,
        new_result: Any,
    ) -> None:
        """Write an already computed result under ``ROOT_QUERY`` without checks."""
        self._cache.write(DataWrite.at(ROOT_QUERY, new_result, document, variables))
