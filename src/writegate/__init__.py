"""writegate - write coordination for transactional caches."""

# Adapters
from writegate.adapters import (
    Cache,
    DataProxy,
    LayeredCache,
    MemoryCache,
    RedisCache,
)

# Errors
from writegate.exceptions import (
    CacheTransactionError,
    InitializerConfigError,
    WritegateError,
)
from writegate.guard import CallbackFailure, ErrorSink, Outcome, call_guarded

# Components
from writegate.initializers import InitializerRegistry
from writegate.mutations import MutationLifecycle
from writegate.store import DataStore

# Core types
from writegate.types import (
    ROOT_MUTATION,
    ROOT_QUERY,
    ROOT_SUBSCRIPTION,
    ComputedResponse,
    DataWrite,
    DiffOptions,
    DiffResult,
    Document,
    ExecutionResult,
    Initializers,
    MutationRecord,
    OptimisticResponse,
    QueryWithUpdater,
    StaticResponse,
    UpdaterContext,
    as_optimistic_response,
    has_errors,
)
from writegate.writer import ResultWriter

__version__ = "0.1.0"

__all__ = [
    "ROOT_MUTATION",
    "ROOT_QUERY",
    "ROOT_SUBSCRIPTION",
    "Cache",
    "CacheTransactionError",
    "CallbackFailure",
    "ComputedResponse",
    "DataProxy",
    "DataStore",
    "DataWrite",
    "DiffOptions",
    "DiffResult",
    "Document",
    "ErrorSink",
    "ExecutionResult",
    "InitializerConfigError",
    "InitializerRegistry",
    "Initializers",
    "LayeredCache",
    "MemoryCache",
    "MutationLifecycle",
    "MutationRecord",
    "OptimisticResponse",
    "Outcome",
    "QueryWithUpdater",
    "RedisCache",
    "ResultWriter",
    "StaticResponse",
    "UpdaterContext",
    "WritegateError",
    "as_optimistic_response",
    "call_guarded",
    "has_errors",
]
