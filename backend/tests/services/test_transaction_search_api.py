"""Transaction Search API — end-to-end search, caching, auth and validation.

Invariants:
    - Results are scoped to the caller and ordered as requested
    - An identical request (any key order) is served from cache with cached=True
    - A write after a cached search makes the next search fresh
    - Bad pagination or unknown filter fields are rejected with 400
    - Missing or invalid identity is rejected with 401

Design Decisions:
    - Service-level tests call search_transactions directly for the
      post-filter mode and store-failure path
"""

from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

from app.core.errors import SearchExecutionError
from app.schemas.search import SearchRequest
from app.services.search_cache import SearchResultCache
from app.services.transaction_search import search_transactions

from tests.services.auth_tokens import make_token

SEARCH = "/api/v1/transactions/search"

DEEP_LEARNING = {
    "page": 1,
    "pageSize": 20,
    "filters": [{"field": "title", "operator": "contains", "value": "deep learning"}],
    "sortBy": "srNo",
    "sortOrder": "asc",
}


async def test_deep_learning_scenario(client, catalog, auth_a):
    res = await client.post(SEARCH, json=DEEP_LEARNING, headers=auth_a)
    assert res.status_code == 200
    data = res.json()
    assert [t["title"] for t in data["transactions"]] == [
        "Deep Learning basics", "Learning deep structures",
    ]
    assert [t["srNo"] for t in data["transactions"]] == [4, 5]
    assert data["pagination"] == {
        "page": 1, "pageSize": 20, "totalCount": 2, "totalPages": 1,
        "hasNext": False, "hasPrev": False,
    }
    assert "cached" not in data


async def test_result_items_carry_relations(client, catalog, auth_a):
    body = {"filters": [{"field": "title", "value": "heat energy transfer"}]}
    res = await client.post(SEARCH, json=body, headers=auth_a)
    item = res.json()["transactions"][0]
    assert item["book"]["bookName"] == "Physics Notes"
    assert item["book"]["editors"][0]["name"] == "R. Feynman"
    assert item["user"]["email"] == "a@example.com"
    assert [s["name"] for s in item["genericSubjects"]] == ["Physics"]
    assert [t["name"] for t in item["specificTags"]] == ["Thermodynamics"]
    assert item["relevantParagraph"]["english"] == "Heat flows from hot to cold"


async def test_pagination_metadata(client, catalog, auth_a):
    body = {"filters": [{"field": "title", "value": "learning"}], "page": 2, "pageSize": 1}
    data = (await client.post(SEARCH, json=body, headers=auth_a)).json()
    assert [t["title"] for t in data["transactions"]] == ["Learning deep structures"]
    assert data["pagination"]["totalCount"] == 3
    assert data["pagination"]["totalPages"] == 3
    assert data["pagination"]["hasNext"] is True
    assert data["pagination"]["hasPrev"] is True


async def test_reordered_body_served_from_cache(client, catalog, auth_a):
    first = await client.post(SEARCH, json=DEEP_LEARNING, headers=auth_a)
    reordered = {
        "sortOrder": "asc",
        "filters": [{"value": "deep learning", "operator": "contains", "field": "title"}],
        "sortBy": "srNo",
        "pageSize": 20,
        "page": 1,
    }
    second = await client.post(SEARCH, json=reordered, headers=auth_a)
    assert second.json()["cached"] is True
    assert second.json()["transactions"] == first.json()["transactions"]


async def test_cache_is_per_user(client, catalog, auth_a, auth_b):
    await client.post(SEARCH, json=DEEP_LEARNING, headers=auth_a)
    res = await client.post(SEARCH, json=DEEP_LEARNING, headers=auth_b)
    data = res.json()
    assert "cached" not in data
    assert [t["title"] for t in data["transactions"]] == ["Deep learning for B"]


async def test_mutation_after_cached_search_returns_fresh_results(client, catalog, auth_a):
    await client.post(SEARCH, json=DEEP_LEARNING, headers=auth_a)
    cached = await client.post(SEARCH, json=DEEP_LEARNING, headers=auth_a)
    assert cached.json()["cached"] is True

    created = await client.post("/api/v1/transactions", json={
        "bookId": str(catalog["books"]["book2"].id),
        "srNo": 2,
        "title": "Deep learning revisited",
    }, headers=auth_a)
    assert created.status_code == 201

    fresh = (await client.post(SEARCH, json=DEEP_LEARNING, headers=auth_a)).json()
    assert "cached" not in fresh
    assert fresh["pagination"]["totalCount"] == 3


async def test_clear_cache_endpoint_empties_cache(client, catalog, auth_a, search_cache):
    await client.post(SEARCH, json=DEEP_LEARNING, headers=auth_a)
    res = await client.post("/api/v1/transactions/clear-cache", headers=auth_a)
    assert res.status_code == 200
    assert res.json()["removed"] == 1
    again = await client.post(SEARCH, json=DEEP_LEARNING, headers=auth_a)
    assert "cached" not in again.json()


async def test_token_from_cookie_accepted(client, catalog, user_a):
    client.cookies.set("token", make_token(user_a.id))
    res = await client.post(SEARCH, json=DEEP_LEARNING)
    assert res.status_code == 200


@pytest.mark.parametrize("headers", [
    {},
    {"Authorization": "Bearer not-a-jwt"},
    {"Authorization": "Basic abc"},
])
async def test_missing_or_invalid_token_is_401(client, catalog, headers):
    res = await client.post(SEARCH, json=DEEP_LEARNING, headers=headers)
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "AUTHENTICATION_REQUIRED"


async def test_expired_token_is_401(client, catalog, user_a):
    token = make_token(user_a.id, expires_in=timedelta(seconds=-5))
    res = await client.post(
        SEARCH, json=DEEP_LEARNING, headers={"Authorization": f"Bearer {token}"},
    )
    assert res.status_code == 401


@pytest.mark.parametrize("patch", [
    {"page": 0},
    {"pageSize": 0},
    {"pageSize": 101},
    {"filters": [{"field": "summary", "value": "x"}]},
    {"filters": [{"field": "title", "operator": "like", "value": "x"}]},
    {"filters": [{"field": "title", "operator": "notEquals", "value": "deep"}]},
    {"filters": [{"field": "remark", "operator": "equals", "value": "core concept"}]},
])
async def test_invalid_request_is_400(client, catalog, auth_a, patch):
    res = await client.post(SEARCH, json={**DEEP_LEARNING, **patch}, headers=auth_a)
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_filter_options(client, catalog, auth_a):
    res = await client.get(SEARCH, headers=auth_a)
    assert res.status_code == 200
    data = res.json()
    assert [b["bookName"] for b in data["books"]] == ["Chemistry Book", "Physics Notes"]
    assert [s["name"] for s in data["genericSubjects"]] == ["Chemistry", "Physics"]
    assert [t["name"] for t in data["tags"]] == [
        "Mechanics", "Neural Networks", "Thermodynamics",
    ]
    assert data["tags"][0]["category"] == "Physics"


# ─── Service level ──────────────────────────────────────────────

async def test_post_filter_mode_paginates_in_memory(test_db, catalog, user_a):
    cache = SearchResultCache()
    request = SearchRequest.model_validate({
        "filters": [{"field": "relevantParagraph", "value": "heat"}],
        "pageSize": 1,
        "page": 2,
    })
    result = await search_transactions(test_db, cache, request, user_a.id, json_pushdown=False)
    assert [t["title"] for t in result["transactions"]] == ["Heat only"]
    assert result["pagination"]["totalCount"] == 2
    assert result["pagination"]["hasPrev"] is True


class _FailingSession:
    async def scalar(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("database is down"))

    async def execute(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("database is down"))


async def test_store_failure_raises_search_error_and_caches_nothing(user_a):
    cache = SearchResultCache()
    with pytest.raises(SearchExecutionError) as exc_info:
        await search_transactions(_FailingSession(), cache, SearchRequest(), user_a.id)
    assert exc_info.value.http_status == 500
    assert "database is down" in exc_info.value.message
    assert cache.stats()["entries"] == 0
