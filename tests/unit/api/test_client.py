"""Unit tests for the client facade."""

from unittest.mock import AsyncMock

import pytest

from tabula.client import Repository, RESTTransport, TabulaClient
from tabula.client.models import Schema, Table


class TestDatabaseRegistry:
    """Repositories are created lazily and memoized per table."""

    def test_attribute_and_item_access_share_repository(self, client):
        assert client.db.teams is client.db["teams"]
        assert isinstance(client.db.teams, Repository)
        assert client.db.teams.table == "teams"

    def test_private_names_are_not_tables(self, client):
        with pytest.raises(AttributeError):
            client.db._hidden

    def test_invalid_table_name(self, client):
        with pytest.raises(KeyError):
            client.db[""]

    @pytest.mark.asyncio
    async def test_links_resolve_through_registry(self, client, server):
        server.seed("users", {"id": "u1", "team": {"id": "t1", "name": "Team fruits"}})
        user = await client.db.users.read("u1")
        assert user.team.handle.repository is client.db.teams


class TestSchemaLoading:
    """Schema injection, lazy fetch and refresh."""

    @pytest.mark.asyncio
    async def test_schema_is_fetched_once(self, options, server):
        client = TabulaClient(options, transport=server)
        server.seed("teams", {"id": "t1", "name": "a"})

        await client.db.teams.read("t1")
        await client.db.teams.get_many()

        assert len(server.calls_to("GET", "/db/shop:main")) == 1

    @pytest.mark.asyncio
    async def test_missing_table_triggers_single_refresh(self, options, server):
        partial = Schema(tables=(Table(name="teams"),))
        client = TabulaClient(options, transport=server, schema=partial)
        server.seed("users", {"id": "u1", "created_at": "2024-01-01T00:00:00Z"})

        user = await client.db.users.read("u1")

        assert user.created_at.year == 2024
        assert len(server.calls_to("GET", "/db/shop:main")) == 1

    @pytest.mark.asyncio
    async def test_unknown_table_refreshes_only_once(self, client, server):
        server.seed("ghosts", {"id": "g1"}, {"id": "g2"})

        await client.db.ghosts.read("g1")
        await client.db.ghosts.read("g2")

        assert len(server.calls_to("GET", "/db/shop:main")) == 1


class TestLifecycle:
    """Context manager closes only the transport the client created."""

    @pytest.mark.asyncio
    async def test_owned_transport_is_closed(self, options, monkeypatch):
        close = AsyncMock()
        monkeypatch.setattr(RESTTransport, "close", close)

        async with TabulaClient(options) as client:
            assert isinstance(client.runner.transport, RESTTransport)

        close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_injected_transport_is_left_open(self, options):
        transport = AsyncMock()
        async with TabulaClient(options, transport=transport):
            pass
        transport.close.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self, options, monkeypatch):
        close = AsyncMock()
        monkeypatch.setattr(RESTTransport, "close", close)
        client = TabulaClient(options)
        await client.close()
        await client.close()
        close.assert_awaited_once()

    def test_options_from_env(self, monkeypatch):
        monkeypatch.setenv("TABULA_DATABASE_URL", "https://acme.example.com/db/shop")
        monkeypatch.setenv("TABULA_API_KEY", "secret")
        monkeypatch.setenv("TABULA_BRANCH", "feature")
        client = TabulaClient()
        assert client.options.db_branch == "shop:feature"
