"""Guarded invocation of user callbacks.

Updaters and ``update`` functions belong to the embedding application. A
failure in one of them must not abort the transaction that called it, so they
run through :func:`call_guarded`, which turns the failure into an
:class:`Outcome` and hands it to an :data:`ErrorSink`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")

_logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CallbackFailure:
    """A user callback raised."""

    label: str
    error: Exception


ErrorSink = Callable[[CallbackFailure], None]


@dataclass(frozen=True, slots=True)
class Outcome(Generic[T]):
    """Either the callback's return value or the error it raised."""

    value: T | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def log_failure(failure: CallbackFailure) -> None:
    """Default sink: log the failure with its traceback."""
    _logger.error(
        "%s failed: %s",
        failure.label,
        failure.error,
        exc_info=(type(failure.error), failure.error, failure.error.__traceback__),
    )


def call_guarded(
    fn: Callable[..., T],
    *args: Any,
    label: str,
    sink: ErrorSink = log_failure,
) -> Outcome[T]:
    """Call ``fn(*args)``; report an exception to ``sink`` instead of raising."""
    try:
        return Outcome(value=fn(*args))
    except Exception as e:
        sink(CallbackFailure(label=label, error=e))
        return Outcome(error=e)
