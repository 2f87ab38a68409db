"""
Regression tests for issues found during code review.

1. Listing must cost a fixed number of queries, however many articles are
   on the page (viewer flags are resolved per page, not per article).
2. The ``favorited`` filter restricts by favorited article, not by author.
3. CORS must not set allow_credentials=true with allow_origins=*.
"""
import pytest
from httpx import AsyncClient

from conftest import as_user


async def _register(client: AsyncClient, username: str) -> int:
    resp = await client.post("/api/users", json={
        "user": {"username": username, "email": f"{username}@example.com"},
    })
    return resp.json()["user"]["id"]


async def _publish(client: AsyncClient, user_id: int, title: str) -> str:
    resp = await client.post("/api/articles", headers=as_user(user_id), json={
        "article": {"title": title, "body": "b"},
    })
    return resp.json()["article"]["slug"]


# ---------------------------------------------------------------------------
# 1. Query count is independent of page size
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_query_count_anonymous_list(async_client: AsyncClient):
    """Anonymous listing issues COUNT + SELECT(joinedload author) = 2 queries."""
    author = await _register(async_client, "qc_anon")
    for i in range(3):
        await _publish(async_client, author, f"Anon {i}")

    resp = await async_client.get("/api/articles")
    count = int(resp.headers["x-query-count"])
    assert count == 2, f"Expected exactly 2 queries for anonymous list, got {count}"


@pytest.mark.asyncio
async def test_query_count_viewer_list(async_client: AsyncClient):
    """
    With a viewer: viewer lookup + COUNT + SELECT + favorites flags +
    follows flags = 5 queries, for one article or for many.
    """
    author = await _register(async_client, "qc_author")
    viewer = await _register(async_client, "qc_viewer")
    await _publish(async_client, author, "First")

    resp = await async_client.get("/api/articles", headers=as_user(viewer))
    assert int(resp.headers["x-query-count"]) == 5

    for i in range(4):
        await _publish(async_client, author, f"More {i}")
    resp = await async_client.get("/api/articles", headers=as_user(viewer))
    assert len(resp.json()["articles"]) == 5
    assert int(resp.headers["x-query-count"]) == 5


# ---------------------------------------------------------------------------
# 2. favorited filter matches articles, not authors
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_favorited_filter_does_not_match_by_author(async_client: AsyncClient):
    author = await _register(async_client, "prolific")
    fan = await _register(async_client, "picky")
    liked = await _publish(async_client, author, "Liked One")
    await _publish(async_client, author, "Other One")
    await async_client.post(f"/api/articles/{liked}/favorite", headers=as_user(fan))

    data = (await async_client.get("/api/articles?favorited=picky")).json()
    assert [a["slug"] for a in data["articles"]] == [liked]
    assert data["articlesCount"] == 1


# ---------------------------------------------------------------------------
# 3. CORS headers
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_cors_no_credentials_with_wildcard(async_client: AsyncClient):
    resp = await async_client.options(
        "/api/articles",
        headers={"Origin": "http://example.com", "Access-Control-Request-Method": "GET"},
    )
    assert resp.headers.get("access-control-allow-origin") == "*"
    assert resp.headers.get("access-control-allow-credentials") != "true"
