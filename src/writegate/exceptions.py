"""Exception hierarchy for writegate."""

from __future__ import annotations


class WritegateError(Exception):
    """Base exception for all writegate errors."""


class InitializerConfigError(WritegateError, ValueError):
    """Initializers were missing or not a mapping."""


class CacheTransactionError(WritegateError):
    """A transaction callback failed and its buffered writes were discarded."""

    def __init__(self, message: str, *, optimistic_id: str | None = None) -> None:
        self.optimistic_id = optimistic_id
        super().__init__(message)
