"""Core types for writegate."""

import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

T = TypeVar("T")

ROOT_QUERY = "ROOT_QUERY"
ROOT_MUTATION = "ROOT_MUTATION"
ROOT_SUBSCRIPTION = "ROOT_SUBSCRIPTION"

_OPERATION_HEADER = re.compile(
    r"^\s*(query|mutation|subscription)\b\s*([_A-Za-z][_0-9A-Za-z]*)?"
)

Variables = Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class Document:
    """An opaque query document. Only the operation header is inspected."""

    source: str

    @property
    def operation_type(self) -> str:
        match = _OPERATION_HEADER.match(self.source)
        if not match:
            # Shorthand `{ ... }` documents are queries
            return "query"
        return match.group(1)

    @property
    def operation_name(self) -> str | None:
        match = _OPERATION_HEADER.match(self.source)
        if not match:
            return None
        return match.group(2)


@dataclass(frozen=True, slots=True)
class ExecutionResult:
    """A result delivered for a query, subscription or mutation."""

    data: Any = None
    errors: Sequence[Any] = ()


def has_errors(result: ExecutionResult) -> bool:
    """Check if a result carries one or more errors."""
    return bool(result.errors)


@dataclass(frozen=True, slots=True)
class DataWrite:
    """One write intent, anchored at a root id."""

    root_id: str
    result: Any
    document: Document
    variables: Variables = field(default_factory=dict)
    operation_name: str | None = None

    @classmethod
    def at(
        cls, root_id: str, result: Any, document: Document, variables: Variables | None
    ) -> "DataWrite":
        return cls(
            root_id=root_id,
            result=result,
            document=document,
            variables=variables or {},
            operation_name=document.operation_name,
        )


@dataclass(frozen=True, slots=True)
class DiffOptions:
    """Read request for the current value of a query."""

    document: Document
    variables: Variables = field(default_factory=dict)
    return_partial_data: bool = True
    optimistic: bool = False


@dataclass(frozen=True, slots=True)
class DiffResult(Generic[T]):
    """Materialized value of a query and whether it was fully available."""

    result: T | None
    complete: bool


@dataclass(frozen=True, slots=True)
class UpdaterContext:
    """Second argument handed to a query updater."""

    mutation_result: ExecutionResult
    query_name: str | None
    query_variables: Variables


Updater = Callable[[Any, UpdaterContext], Any]


@dataclass(frozen=True, slots=True)
class QueryWithUpdater:
    """A previously issued query paired with its reducer."""

    document: Document
    updater: Updater
    variables: Variables = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class StaticResponse:
    """Optimistic payload known up front."""

    value: Any

    def resolve(self, variables: Variables) -> Any:
        return self.value


@dataclass(frozen=True, slots=True)
class ComputedResponse:
    """Optimistic payload computed from the mutation variables."""

    fn: Callable[[Variables], Any]

    def resolve(self, variables: Variables) -> Any:
        return self.fn(variables)


OptimisticResponse = StaticResponse | ComputedResponse


def as_optimistic_response(value: Any) -> OptimisticResponse | None:
    """Coerce a raw value or callable into an optimistic response variant."""
    if value is None or isinstance(value, (StaticResponse, ComputedResponse)):
        return value
    if callable(value):
        return ComputedResponse(value)
    return StaticResponse(value)


# `update` callbacks receive the transaction-bound proxy and the raw result
UpdateFn = Callable[[Any, ExecutionResult], None]


@dataclass(frozen=True, slots=True)
class MutationRecord:
    """Everything needed to carry one mutation from init to complete."""

    mutation_id: str
    document: Document
    variables: Variables = field(default_factory=dict)
    update_queries: Mapping[str, QueryWithUpdater | None] = field(
        default_factory=dict
    )
    update: UpdateFn | None = None
    optimistic_response: OptimisticResponse | None = None

    def __post_init__(self) -> None:
        # Accept a bare payload or callable, like the raw client API does
        object.__setattr__(
            self,
            "optimistic_response",
            as_optimistic_response(self.optimistic_response),
        )


# Initializers return a value, an awaitable of one, or None to skip the write
Initializer = Callable[[Any], Any]
Initializers = Mapping[str, Initializer]
