"""Tests for query and subscription result writes."""

import pytest

from writegate import (
    ROOT_QUERY,
    ROOT_SUBSCRIPTION,
    DiffOptions,
    Document,
    ExecutionResult,
    ResultWriter,
)
from tests.conftest import SpyCache


@pytest.fixture
def writer(cache: SpyCache) -> ResultWriter:
    """Create a ResultWriter over the spy cache."""
    return ResultWriter(cache)


class TestMarkQueryResult:
    """Tests for the query write policy."""

    def test_clean_result_writes_once(
        self, writer: ResultWriter, cache: SpyCache, docs: dict[str, Document]
    ) -> None:
        """Test that a result without errors is written to ROOT_QUERY."""
        data = {"posts": [{"id": "p1"}]}
        writer.mark_query_result(ExecutionResult(data=data), docs["feed"], {"first": 1})

        assert len(cache.writes) == 1
        write = cache.writes[0]
        assert write.root_id == ROOT_QUERY
        assert write.result == data
        assert write.document == docs["feed"]
        assert write.variables == {"first": 1}
        assert write.operation_name == "Feed"

    def test_written_result_is_readable(
        self, writer: ResultWriter, cache: SpyCache, docs: dict[str, Document]
    ) -> None:
        """Test that the written payload is what a diff reads back."""
        data = {"posts": []}
        writer.mark_query_result(ExecutionResult(data=data), docs["feed"], {"first": 1})

        diff = cache.diff(DiffOptions(document=docs["feed"], variables={"first": 1}))
        assert diff.complete
        assert diff.result == data

    def test_errors_skip_write(
        self, writer: ResultWriter, cache: SpyCache, docs: dict[str, Document]
    ) -> None:
        """Test that errored results are dropped by default."""
        result = ExecutionResult(data={"posts": []}, errors=[{"message": "boom"}])
        writer.mark_query_result(result, docs["feed"], {})
        assert cache.writes == []

    def test_ignore_errors_writes_partial_data(
        self, writer: ResultWriter, cache: SpyCache, docs: dict[str, Document]
    ) -> None:
        """Test that ignore_errors keeps errored results that carry data."""
        result = ExecutionResult(data={"posts": []}, errors=[{"message": "boom"}])
        writer.mark_query_result(result, docs["feed"], {}, ignore_errors=True)
        assert len(cache.writes) == 1
        assert cache.writes[0].result == {"posts": []}

    def test_ignore_errors_without_data_skips(
        self, writer: ResultWriter, cache: SpyCache, docs: dict[str, Document]
    ) -> None:
        """Test that ignore_errors does not write a result with no data."""
        result = ExecutionResult(data=None, errors=[{"message": "boom"}])
        writer.mark_query_result(result, docs["feed"], {}, ignore_errors=True)
        assert cache.writes == []

    def test_fetch_more_skips_write(
        self, writer: ResultWriter, cache: SpyCache, docs: dict[str, Document]
    ) -> None:
        """Test that fetch-more results are never written here."""
        writer.mark_query_result(
            ExecutionResult(data={"posts": []}), docs["feed"], {}, "query-1"
        )
        assert cache.writes == []

    def test_none_variables_become_empty(
        self, writer: ResultWriter, cache: SpyCache, docs: dict[str, Document]
    ) -> None:
        """Test that missing variables are written as an empty mapping."""
        writer.mark_query_result(ExecutionResult(data={"a": 1}), docs["feed"], None)
        assert cache.writes[0].variables == {}


class TestMarkSubscriptionResult:
    """Tests for subscription writes."""

    def test_clean_result_writes_to_subscription_root(
        self, writer: ResultWriter, cache: SpyCache, docs: dict[str, Document]
    ) -> None:
        """Test that subscription data lands under ROOT_SUBSCRIPTION."""
        data = {"postAdded": {"id": "p9"}}
        writer.mark_subscription_result(ExecutionResult(data=data), docs["on_post"], {})

        assert len(cache.writes) == 1
        assert cache.writes[0].root_id == ROOT_SUBSCRIPTION
        diff = cache.diff(DiffOptions(document=docs["on_post"]))
        assert diff.result == data

    def test_errors_skip_write(
        self, writer: ResultWriter, cache: SpyCache, docs: dict[str, Document]
    ) -> None:
        """Test that errored subscription messages are dropped."""
        writer.mark_subscription_result(
            ExecutionResult(data={"postAdded": None}, errors=["nope"]),
            docs["on_post"],
            {},
        )
        assert cache.writes == []


class TestMarkUpdateQueryResult:
    """Tests for trusted local query updates."""

    def test_writes_unconditionally(
        self, writer: ResultWriter, cache: SpyCache, docs: dict[str, Document]
    ) -> None:
        """Test that the supplied result is written as-is."""
        writer.mark_update_query_result(docs["user"], {"id": "1"}, {"user": None})

        assert len(cache.writes) == 1
        assert cache.writes[0].root_id == ROOT_QUERY
        diff = cache.diff(DiffOptions(document=docs["user"], variables={"id": "1"}))
        assert diff.complete
        assert diff.result == {"user": None}
