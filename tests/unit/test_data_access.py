"""DataAccess reads/writes and MutationRunner invalidation."""

import pytest

from app.application.services.data_access import DataAccess, MutationRunner
from app.domain.enums import ErrorKind
from app.domain.exceptions import NotFoundException, UpstreamFailureException
from app.domain.value_objects import QueryDescriptor, QueryFilter
from app.infrastructure.cache import query_key

AVAILABLE = QueryDescriptor(table="properties", filters=[QueryFilter("status", "eq", "available")])


async def test_mutation_invalidates_after_successful_write(cache) -> None:
    async def loader():
        return ["cached"]

    await cache.fetch(AVAILABLE, loader)
    runner = MutationRunner(cache)

    async def write():
        assert cache.entry(query_key(AVAILABLE)) is not None
        return "written"

    assert await runner.mutate(write, ["properties"]) == "written"
    assert cache.entry(query_key(AVAILABLE)) is None


async def test_failed_write_invalidates_nothing(cache) -> None:
    async def loader():
        return ["cached"]

    await cache.fetch(AVAILABLE, loader)

    async def write():
        raise UpstreamFailureException("data_api", "conflict", 409)

    with pytest.raises(UpstreamFailureException):
        await MutationRunner(cache).mutate(write, ["properties"])
    assert cache.entry(query_key(AVAILABLE)) is not None


async def test_empty_pattern_rejected_before_write(cache) -> None:
    calls = []

    async def write():
        calls.append(1)

    with pytest.raises(ValueError):
        await MutationRunner(cache).mutate(write, ["properties", ""])
    assert calls == []


async def test_fetch_returns_success_and_caches(data_access: DataAccess, data_api) -> None:
    first = await data_access.fetch(AVAILABLE)
    second = await data_access.fetch(AVAILABLE)
    assert first.ok and second.ok
    assert {row["id"] for row in first.value} == {"p1", "p2"}
    assert data_api.calls.count(("select", "properties")) == 1


async def test_refetch_bypasses_fresh_value(data_access: DataAccess, data_api) -> None:
    await data_access.fetch(AVAILABLE)
    await data_access.refetch(AVAILABLE)
    assert data_api.calls.count(("select", "properties")) == 2


async def test_missing_single_row_is_not_found(data_access: DataAccess) -> None:
    result = await data_access.fetch(
        QueryDescriptor(table="properties", filters=[QueryFilter("id", "eq", "nope")], single=True)
    )
    assert not result.ok
    assert result.kind == ErrorKind.NOT_FOUND
    with pytest.raises(NotFoundException):
        result.unwrap()


async def test_unexpected_error_becomes_upstream_failure(data_access: DataAccess, data_api) -> None:
    data_api.fail_with = ConnectionResetError("peer reset")
    errors = []
    result = await data_access.fetch(AVAILABLE, on_error=errors.append)
    assert result.kind == ErrorKind.UPSTREAM_FAILURE
    assert "peer reset" in result.error.message
    assert len(errors) == 1


async def test_mutate_reports_failure_through_callback(data_access: DataAccess, data_api) -> None:
    data_api.fail_with = UpstreamFailureException("data_api", "read only", 503)
    errors = []
    result = await data_access.mutate(
        lambda: data_api.insert("properties", {"title": "x"}),
        ["properties"],
        on_error=errors.append,
    )
    assert not result.ok
    assert errors and errors[0] is result.error


async def test_write_then_read_sees_new_row(data_access: DataAccess, data_api) -> None:
    before = (await data_access.fetch(AVAILABLE)).unwrap()
    await data_access.mutate(
        lambda: data_api.insert("properties", {"title": "New", "status": "available"}),
        ["properties"],
    )
    after = (await data_access.fetch(AVAILABLE)).unwrap()
    assert len(after) == len(before) + 1
