"""Shared pytest fixtures."""

import pytest

from writegate import DataStore, DataWrite, Document, MemoryCache


class SpyCache(MemoryCache):
    """MemoryCache that records direct writes and transaction counts."""

    def __init__(self) -> None:
        super().__init__()
        self.writes: list[DataWrite] = []
        self.transactions = 0
        self.removed: list[str] = []

    def write(self, write: DataWrite) -> None:
        self.writes.append(write)
        super().write(write)

    def perform_transaction(self, fn) -> None:
        self.transactions += 1
        super().perform_transaction(fn)

    def remove_optimistic(self, optimistic_id: str) -> None:
        self.removed.append(optimistic_id)
        super().remove_optimistic(optimistic_id)


@pytest.fixture
def cache() -> SpyCache:
    """Create a fresh SpyCache for each test."""
    return SpyCache()


@pytest.fixture
def store(cache: SpyCache) -> DataStore:
    """Create a DataStore over the spy cache."""
    return DataStore(cache)


@pytest.fixture
def docs() -> dict[str, Document]:
    """Common documents for tests."""
    return {
        "feed": Document("query Feed($first: Int) { posts(first: $first) { id } }"),
        "user": Document("query GetUser($id: ID!) { user(id: $id) { id name } }"),
        "like": Document("mutation LikePost($id: ID!) { like(id: $id) { likes } }"),
        "on_post": Document("subscription OnPost { postAdded { id } }"),
    }
