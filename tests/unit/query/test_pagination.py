"""Unit tests for pagination options and page navigation."""

import math

import pytest

from tabula.client.core.exceptions import PaginationError
from tabula.client.query import (
    PAGINATION_DEFAULT_SIZE,
    PAGINATION_MAX_OFFSET,
    PAGINATION_MAX_SIZE,
    PaginationOptions,
)


class TestPaginationOptions:
    """Bounds and cursor rules."""

    def test_defaults(self):
        assert PAGINATION_MAX_SIZE == 200
        assert PAGINATION_DEFAULT_SIZE == 20
        assert PAGINATION_MAX_OFFSET == 800

    @pytest.mark.parametrize(
        ("options", "limit_name"),
        [
            ({"size": 201}, "size"),
            ({"size": 0}, "size"),
            ({"offset": 801}, "offset"),
            ({"offset": -1}, "offset"),
            ({"size": "10"}, "size"),
            ({"size": True}, "size"),
            ({"offset": 1.5}, "offset"),
            ({"first": "a", "after": "b"}, "cursor"),
        ],
    )
    def test_validate_names_violated_limit(self, options, limit_name):
        with pytest.raises(PaginationError) as exc_info:
            PaginationOptions.coerce(options).validate()
        assert exc_info.value.limit_name == limit_name

    def test_non_integer_size_names_the_field(self):
        with pytest.raises(PaginationError, match="page size must be an integer, got str"):
            PaginationOptions.coerce({"size": "10"}).validate()

    def test_boundaries_are_accepted(self):
        PaginationOptions(size=200, offset=800).validate()

    def test_coerce_rejects_unknown_keys(self):
        with pytest.raises(PaginationError, match="unknown pagination options"):
            PaginationOptions.coerce({"limit": 10})

    def test_end_sentinel_is_not_a_cursor(self):
        assert not PaginationOptions(before="end").has_cursor
        assert PaginationOptions(after="abc").has_cursor


def _seed_users(server, count):
    server.seed("users", *({"full_name": f"user {i:02d}", "age": i} for i in range(count)))


class TestPageNavigation:
    """Navigation always issues a fresh request through the query."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(("total", "size"), [(10, 3), (9, 3), (1, 5)])
    async def test_exhaustion(self, client, server, total, size):
        _seed_users(server, total)
        users = client.db.users.sort("age")

        page = await users.get_paginated(page={"size": size})
        seen = list(page.records)
        requests = 1
        while page.has_next_page():
            page = await page.next_page()
            seen.extend(page.records)
            requests += 1

        assert requests == math.ceil(total / size)
        assert [r.age for r in seen] == list(range(total))
        assert len({r.id for r in seen}) == total

    @pytest.mark.asyncio
    async def test_default_size_is_left_to_the_service(self, client, server):
        _seed_users(server, PAGINATION_DEFAULT_SIZE + 5)
        page = await client.db.users.get_paginated()

        (_, _, body) = server.calls_to("POST", "/query")[0]
        assert "page" not in body
        assert len(page) == PAGINATION_DEFAULT_SIZE
        assert page.has_next_page() is True

    @pytest.mark.asyncio
    async def test_next_page_reuses_original_size(self, client, server):
        _seed_users(server, 10)
        page = await client.db.users.sort("age").get_paginated(page={"size": 4})
        following = await page.next_page()
        assert [r.age for r in following] == [4, 5, 6, 7]
        assert following.query.options.page.size == 4

    @pytest.mark.asyncio
    async def test_next_page_size_override(self, client, server):
        _seed_users(server, 10)
        page = await client.db.users.sort("age").get_paginated(page={"size": 4})
        following = await page.next_page(size=2)
        assert [r.age for r in following] == [4, 5]

    @pytest.mark.asyncio
    async def test_previous_first_and_last_page(self, client, server):
        _seed_users(server, 10)
        first = await client.db.users.sort("age").get_paginated(page={"size": 3})
        second = await first.next_page()

        assert [r.age for r in await second.previous_page()] == [0, 1, 2]
        assert [r.age for r in await second.first_page()] == [0, 1, 2]
        assert [r.age for r in await second.last_page()] == [7, 8, 9]

    @pytest.mark.asyncio
    async def test_has_next_page_is_a_snapshot(self, client, server):
        _seed_users(server, 2)
        page = await client.db.users.get_paginated(page={"size": 2})
        assert page.has_next_page() is False

        _seed_users(server, 5)
        assert page.has_next_page() is False

    @pytest.mark.asyncio
    async def test_cursor_request_omits_filter_and_sort(self, client, server):
        _seed_users(server, 6)
        page = await client.db.users.filter("age", {"$ge": 1}).sort("age").get_paginated(
            page={"size": 2}
        )
        server.reset_calls()
        following = await page.next_page()

        (_, _, body) = server.calls_to("POST", "/query")[0]
        assert "filter" not in body
        assert "sort" not in body
        assert body["page"] == {"size": 2, "after": page.cursor}
        assert [r.age for r in following] == [3, 4]

    @pytest.mark.asyncio
    async def test_sort_on_cursor_page_is_rejected(self, client, server):
        _seed_users(server, 4)
        first = await client.db.users.sort("age").get_paginated(page={"size": 1})
        second = await first.next_page()
        server.reset_calls()

        with pytest.raises(PaginationError) as exc_info:
            await second.query.get_paginated(sort={"age": "desc"})
        assert exc_info.value.limit_name == "cursor"
        assert server.calls_to("POST", "/query") == []

    @pytest.mark.asyncio
    async def test_query_last_page(self, client, server):
        _seed_users(server, 7)
        page = await client.db.users.sort("age").last_page(size=2)
        assert [r.age for r in page] == [5, 6]


class TestIteration:
    """Batch and per-record iteration."""

    @pytest.mark.asyncio
    async def test_get_iterator_yields_batches(self, client, server):
        _seed_users(server, 7)
        batches = [b async for b in client.db.users.sort("age").get_iterator(batch_size=3)]
        assert [len(b) for b in batches] == [3, 3, 1]

    @pytest.mark.asyncio
    async def test_get_all_spans_pages(self, client, server):
        _seed_users(server, 25)
        records = await client.db.users.sort("age").get_all(batch_size=10)
        assert [r.age for r in records] == list(range(25))

    @pytest.mark.asyncio
    async def test_async_for_is_restartable(self, client, server):
        _seed_users(server, 5)
        users = client.db.users.sort("age")

        first = [r.age async for r in users]
        second = [r.age async for r in users]
        assert first == second == [0, 1, 2, 3, 4]

    @pytest.mark.asyncio
    async def test_iterator_rejects_oversized_batch(self, client):
        with pytest.raises(PaginationError):
            await client.db.users.get_all(batch_size=500)
