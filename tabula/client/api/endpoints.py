"""Endpoint declarations for the database service."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from ..runtime.rest import EndpointSpec


def _segment(value: Any) -> str:
    return quote(str(value), safe=":")


def _branch_path(params: dict[str, Any]) -> str:
    return f"/db/{_segment(params['db_branch'])}"


def _table_path(params: dict[str, Any]) -> str:
    return f"{_branch_path(params)}/tables/{_segment(params['table'])}"


def _record_path(params: dict[str, Any]) -> str:
    return f"{_table_path(params)}/data/{quote(str(params['id']), safe='')}"


GET_BRANCH_DETAILS = EndpointSpec(id="get_branch_details", method="GET", build_path=_branch_path)

INSERT_RECORD = EndpointSpec(
    id="insert_record",
    method="POST",
    build_path=lambda p: f"{_table_path(p)}/data",
)

INSERT_RECORD_WITH_ID = EndpointSpec(
    id="insert_record_with_id",
    method="PUT",
    build_path=lambda p: f"{_record_path(p)}?createOnly=true",
)

UPDATE_RECORD = EndpointSpec(id="update_record", method="PATCH", build_path=_record_path)

UPSERT_RECORD = EndpointSpec(id="upsert_record", method="POST", build_path=_record_path)

DELETE_RECORD = EndpointSpec(id="delete_record", method="DELETE", build_path=_record_path)

GET_RECORD = EndpointSpec(id="get_record", method="GET", build_path=_record_path)

BULK_INSERT = EndpointSpec(
    id="bulk_insert",
    method="POST",
    build_path=lambda p: f"{_table_path(p)}/bulk",
)

QUERY_TABLE = EndpointSpec(
    id="query_table",
    method="POST",
    build_path=lambda p: f"{_table_path(p)}/query",
)

SEARCH_TABLE = EndpointSpec(
    id="search_table",
    method="POST",
    build_path=lambda p: f"{_table_path(p)}/search",
)

SEARCH_BRANCH = EndpointSpec(
    id="search_branch",
    method="POST",
    build_path=lambda p: f"{_branch_path(p)}/search",
)
