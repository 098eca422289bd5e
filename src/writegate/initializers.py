"""One-shot initializers for synthetic local fields.

Each initializer is keyed by the field it seeds. A field fires at most once
between registry resets, and it is marked as fired as soon as its initializer
is scheduled, so a failed initializer is not retried until :meth:`reset`.

Initializers do not check whether the cache already holds the field; an
initializer that fires overwrites whatever is there.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any

from writegate.adapters.base import DataProxy
from writegate.exceptions import InitializerConfigError
from writegate.types import Initializer, Initializers

_logger = logging.getLogger(__name__)

InitializerSink = Callable[[str, Initializer], None]


class InitializerRegistry:
    """Tracks which initializer fields have fired."""

    def __init__(self) -> None:
        self._fired: set[str] = set()

    @property
    def fired(self) -> frozenset[str]:
        return frozenset(self._fired)

    def is_fired(self, field_name: str) -> bool:
        return field_name in self._fired

    @staticmethod
    def merge(
        initializers: Initializers | Sequence[Initializers] | None,
    ) -> dict[str, Initializer]:
        """Flatten initializer groups left to right; later groups win."""
        if initializers is None:
            raise InitializerConfigError("Invalid/missing initializers")
        if isinstance(initializers, Mapping):
            return dict(initializers)
        merged: dict[str, Initializer] = {}
        for group in initializers:
            if not isinstance(group, Mapping):
                raise InitializerConfigError(
                    f"Expected a mapping of initializers, got {type(group).__name__}"
                )
            merged.update(group)
        return merged

    def run(self, merged: Mapping[str, Initializer], sink: InitializerSink) -> None:
        """Hand every unfired initializer to ``sink`` and mark it fired."""
        for field_name, initializer in merged.items():
            if field_name in self._fired:
                continue
            try:
                sink(field_name, initializer)
            finally:
                self._fired.add(field_name)
            _logger.debug("Fired initializer for %s", field_name)

    async def initialize(
        self,
        initializers: Initializers | Sequence[Initializers] | None,
        context: Any,
        cache: DataProxy,
    ) -> None:
        """Run initializers that may return awaitables, then wait for all of them.

        The first failure propagates once every initializer has settled.
        """
        merged = self.merge(initializers)
        pending: list[Awaitable[None]] = []

        async def settle(field_name: str, initializer: Initializer) -> None:
            value = initializer(context)
            if inspect.isawaitable(value):
                value = await value
            if value is not None:
                cache.write_data({field_name: value})

        self.run(
            merged,
            lambda field_name, initializer: pending.append(
                settle(field_name, initializer)
            ),
        )
        results = await asyncio.gather(*pending, return_exceptions=True)
        for result in results:
            if isinstance(result, BaseException):
                raise result

    def initialize_sync(
        self,
        initializers: Initializers | Sequence[Initializers] | None,
        context: Any,
        cache: DataProxy,
    ) -> None:
        """Run initializers that return their value immediately."""
        merged = self.merge(initializers)

        def fire(field_name: str, initializer: Initializer) -> None:
            value = initializer(context)
            if value is not None:
                cache.write_data({field_name: value})

        self.run(merged, fire)

    def reset(self) -> None:
        """Allow every initializer to fire again."""
        self._fired.clear()
