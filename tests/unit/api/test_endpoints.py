"""Unit tests for endpoint path building."""

from tabula.client.api import endpoints

PARAMS = {"db_branch": "shop:main", "table": "teams", "id": "team_1"}


def test_record_paths():
    assert endpoints.GET_RECORD.build_path(PARAMS) == "/db/shop:main/tables/teams/data/team_1"
    assert endpoints.UPDATE_RECORD.method == "PATCH"
    assert endpoints.UPSERT_RECORD.method == "POST"
    assert endpoints.DELETE_RECORD.method == "DELETE"


def test_insert_with_id_is_create_only():
    assert endpoints.INSERT_RECORD_WITH_ID.method == "PUT"
    assert endpoints.INSERT_RECORD_WITH_ID.build_path(PARAMS).endswith(
        "/data/team_1?createOnly=true"
    )


def test_table_paths():
    assert endpoints.INSERT_RECORD.build_path(PARAMS) == "/db/shop:main/tables/teams/data"
    assert endpoints.BULK_INSERT.build_path(PARAMS) == "/db/shop:main/tables/teams/bulk"
    assert endpoints.QUERY_TABLE.build_path(PARAMS) == "/db/shop:main/tables/teams/query"
    assert endpoints.SEARCH_TABLE.build_path(PARAMS) == "/db/shop:main/tables/teams/search"


def test_branch_paths():
    assert endpoints.GET_BRANCH_DETAILS.build_path(PARAMS) == "/db/shop:main"
    assert endpoints.SEARCH_BRANCH.build_path(PARAMS) == "/db/shop:main/search"


def test_ids_are_escaped():
    path = endpoints.GET_RECORD.build_path({**PARAMS, "id": "a/b c"})
    assert path == "/db/shop:main/tables/teams/data/a%2Fb%20c"
