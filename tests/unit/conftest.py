"""Shared fixtures for unit tests.

``FakeServer`` is an in-memory stand-in for the database service that
satisfies the ``Transport`` protocol. It implements the endpoints the
client uses, a subset of the filter language (equality, ``$contains``,
``$any``, comparisons, ``$not``/``$none``), sorting, and offset/cursor
pagination, and records every call for assertions.
"""

from __future__ import annotations

import copy
import itertools
from typing import Any
from urllib.parse import unquote, urlsplit

import pytest

from tabula.client import ClientOptions, TabulaClient
from tabula.client.core.enums import ColumnType
from tabula.client.core.exceptions import ApiError
from tabula.client.models import Column, LinkTarget, Schema, Table


class FakeServer:
    """In-memory database service."""

    def __init__(self, schema: dict[str, Any] | None = None) -> None:
        self.schema = schema or {"tables": []}
        self.tables: dict[str, dict[str, dict[str, Any]]] = {}
        self.calls: list[tuple[str, str, Any]] = []
        self.drop_bulk_ids = 0
        self.lose_writes = False
        self._ids = itertools.count(1)
        self._cursors: dict[str, dict[str, Any]] = {}
        self._cursor_ids = itertools.count(1)

    # -- helpers used by tests --------------------------------------------

    def seed(self, table: str, *rows: dict[str, Any]) -> list[str]:
        ids = []
        for row in rows:
            row = copy.deepcopy(row)
            record_id = row.pop("id", None) or self._new_id()
            self._store(table)[record_id] = {"id": record_id, **row, "_meta": {"version": 0}}
            ids.append(record_id)
        return ids

    def calls_to(self, method: str, suffix: str = "") -> list[tuple[str, str, Any]]:
        return [c for c in self.calls if c[0] == method and urlsplit(c[1]).path.endswith(suffix)]

    def reset_calls(self) -> None:
        self.calls.clear()

    # -- Transport protocol -------------------------------------------------

    async def execute(self, method: str, path: str, body: Any = None) -> Any:
        self.calls.append((method, path, copy.deepcopy(body)))
        url = urlsplit(path)
        parts = [unquote(p) for p in url.path.strip("/").split("/")]

        if parts[0] != "db":
            raise ApiError("Not found", status_code=404)
        if len(parts) == 2 and method == "GET":
            return {"schema": copy.deepcopy(self.schema)}
        if len(parts) == 3 and parts[2] == "search":
            return self._search_branch(body)

        table = parts[3]
        action = parts[4]
        if action == "query":
            return self._query(table, body or {})
        if action == "search":
            return self._search_table(table, body)
        if action == "bulk":
            return self._bulk(table, body)
        if action == "data" and len(parts) == 5:
            return self._insert(table, self._new_id(), body)
        return self._record_op(method, table, parts[5], url.query, body)

    # -- endpoint handlers --------------------------------------------------

    def _new_id(self) -> str:
        return f"rec_{next(self._ids)}"

    def _store(self, table: str) -> dict[str, dict[str, Any]]:
        return self.tables.setdefault(table, {})

    def _insert(self, table: str, record_id: str, body: dict[str, Any]) -> dict[str, Any]:
        if not self.lose_writes:
            self._store(table)[record_id] = {"id": record_id, **body, "_meta": {"version": 0}}
        return {"id": record_id, "_meta": {"version": 0}}

    def _record_op(
        self, method: str, table: str, record_id: str, query: str, body: Any
    ) -> Any:
        store = self._store(table)
        if method == "GET":
            if record_id not in store:
                raise ApiError("Record not found", status_code=404)
            return copy.deepcopy(store[record_id])
        if method == "DELETE":
            store.pop(record_id, None)
            return None
        if method == "PUT":
            if "createOnly=true" in query and record_id in store:
                raise ApiError("Record already exists", status_code=422)
            return self._insert(table, record_id, body)
        if method == "PATCH":
            if record_id not in store:
                raise ApiError("Record not found", status_code=404)
            current = store[record_id]
            version = current["_meta"]["version"] + 1
            current.update(body)
            current["_meta"] = {"version": version}
            return {"id": record_id, "_meta": {"version": version}}
        if method == "POST":
            version = store[record_id]["_meta"]["version"] + 1 if record_id in store else 0
            if not self.lose_writes:
                store[record_id] = {"id": record_id, **body, "_meta": {"version": version}}
            return {"id": record_id, "_meta": {"version": version}}
        raise ApiError("Method not allowed", status_code=405)

    def _bulk(self, table: str, body: dict[str, Any]) -> dict[str, Any]:
        ids = []
        for row in body["records"]:
            row = dict(row)
            record_id = row.pop("id", None) or self._new_id()
            self._insert(table, record_id, row)
            ids.append(record_id)
        if self.drop_bulk_ids:
            ids = ids[: -self.drop_bulk_ids]
        return {"recordIDs": ids}

    def _rows(self, table: str, flt: Any, sort: Any) -> list[dict[str, Any]]:
        rows = [r for r in self._store(table).values() if _matches(r, flt)]
        for item in reversed(sort or []):
            ((column, direction),) = item.items()
            rows.sort(
                key=lambda r: (r.get(column) is None, r.get(column)),
                reverse=direction == "desc",
            )
        return rows

    def _query(self, table: str, body: dict[str, Any]) -> dict[str, Any]:
        page = dict(body.get("page") or {})
        size = page.get("size") or 20
        offset = page.get("offset") or 0

        cursor_name = next(
            (n for n in ("after", "before", "first", "last") if page.get(n) not in (None, "end")),
            None,
        )
        if cursor_name is not None:
            state = self._cursors[page[cursor_name]]
            flt, sort = state["filter"], state["sort"]
        else:
            flt, sort = body.get("filter"), body.get("sort")
        rows = self._rows(table, flt, sort)

        if cursor_name == "after":
            start = state["end"] + offset
        elif cursor_name == "before":
            start = max(0, state["start"] - size)
        elif cursor_name == "last" or page.get("before") == "end":
            start = max(0, len(rows) - size)
        elif cursor_name == "first":
            start = 0
        else:
            start = offset
        end = min(len(rows), start + size)
        if cursor_name == "before":
            end = state["start"]

        token = f"cursor_{next(self._cursor_ids)}"
        self._cursors[token] = {"filter": flt, "sort": sort, "start": start, "end": end}
        return {
            "meta": {"page": {"cursor": token, "more": end < len(rows)}},
            "records": copy.deepcopy(rows[start:end]),
        }

    def _search_table(self, table: str, body: dict[str, Any]) -> dict[str, Any]:
        needle = body["query"].lower()
        rows = [
            r
            for r in self._rows(table, body.get("filter"), None)
            if any(needle in str(v).lower() for k, v in r.items() if k not in ("id", "_meta"))
        ]
        return {"records": copy.deepcopy(rows)}

    def _search_branch(self, body: dict[str, Any]) -> dict[str, Any]:
        wanted = body.get("tables")
        names = [t if isinstance(t, str) else t["table"] for t in wanted] if wanted else None
        records = []
        for table in self.tables:
            if names is not None and table not in names:
                continue
            for row in self._search_table(table, {"query": body["query"]})["records"]:
                row["_meta"] = {**row["_meta"], "table": table}
                records.append(row)
        return {"records": records}


def _matches(row: dict[str, Any], flt: Any) -> bool:
    if not flt:
        return True
    for key, value in flt.items():
        if key == "$all":
            if not all(_matches(row, term) for term in value):
                return False
        elif key == "$any":
            if not any(_matches(row, term) for term in value):
                return False
        elif key == "$not":
            if all(_matches(row, term) for term in value):
                return False
        elif key == "$none":
            if any(_matches(row, term) for term in value):
                return False
        elif not _match_value(row.get(key), value):
            return False
    return True


def _match_value(actual: Any, condition: Any) -> bool:
    if isinstance(actual, dict) and "id" in actual and not isinstance(condition, dict):
        actual = actual["id"]
    if isinstance(condition, dict) and condition:
        operators = [key for key in condition if key.startswith("$")]
        if not operators:
            return isinstance(actual, dict) and all(
                _match_value(actual.get(k), v) for k, v in condition.items()
            )
        return all(_match_operator(actual, op, condition[op]) for op in operators)
    return actual == condition


def _match_operator(actual: Any, operator: str, expected: Any) -> bool:
    if operator == "$any":
        return actual in expected
    if operator == "$contains":
        return isinstance(actual, str) and expected in actual
    if operator == "$startsWith":
        return isinstance(actual, str) and actual.startswith(expected)
    if operator == "$endsWith":
        return isinstance(actual, str) and actual.endswith(expected)
    if operator == "$is":
        return actual == expected
    if operator == "$isNot":
        return actual != expected
    if operator == "$includes":
        return isinstance(actual, list) and expected in actual
    if actual is None:
        return False
    if operator == "$gt":
        return actual > expected
    if operator == "$ge":
        return actual >= expected
    if operator == "$lt":
        return actual < expected
    if operator == "$le":
        return actual <= expected
    raise ApiError(f"Unsupported operator {operator}", status_code=400)


@pytest.fixture
def schema() -> Schema:
    return Schema(
        tables=(
            Table(
                name="teams",
                columns=(
                    Column(name="name", type=ColumnType.STRING),
                    Column(name="labels", type=ColumnType.MULTIPLE),
                    Column(name="owner", type=ColumnType.LINK, link=LinkTarget(table="users")),
                    Column(
                        name="config",
                        type=ColumnType.OBJECT,
                        columns=(
                            Column(name="color", type=ColumnType.STRING),
                            Column(name="created_at", type=ColumnType.DATETIME),
                        ),
                    ),
                ),
            ),
            Table(
                name="users",
                columns=(
                    Column(name="email", type=ColumnType.EMAIL),
                    Column(name="full_name", type=ColumnType.STRING),
                    Column(name="age", type=ColumnType.INT),
                    Column(name="created_at", type=ColumnType.DATETIME),
                    Column(name="team", type=ColumnType.LINK, link=LinkTarget(table="teams")),
                ),
            ),
        )
    )


@pytest.fixture
def server(schema: Schema) -> FakeServer:
    return FakeServer(schema=schema.model_dump(mode="json"))


@pytest.fixture
def options() -> ClientOptions:
    return ClientOptions(database_url="https://acme.example.com/db/shop", api_key="test-key")


@pytest.fixture
def client(server: FakeServer, options: ClientOptions, schema: Schema) -> TabulaClient:
    return TabulaClient(options, transport=server, schema=schema)


@pytest.fixture
def teams(server: FakeServer) -> FakeServer:
    """Server seeded with the three teams of the fruit/animal scenario."""
    server.seed(
        "teams",
        {"id": "team_1", "name": "Team fruits", "labels": ["apple", "banana", "orange"]},
        {"id": "team_2", "name": "Team animals", "labels": ["monkey", "lion"]},
        {"id": "team_3", "name": "Mixed team fruits & animals", "labels": ["kiwi", "lion"]},
    )
    return server
