"""Tests for the FastAPI host app."""

from unittest.mock import AsyncMock, Mock

import pytest
from fastapi.testclient import TestClient

from cache_store import ResponseCache
from catalog_types import CatalogError, ErrorKind, ListPage, MovieCategory
from gateway import CatalogGateway
from http_client import HttpClient
from main import create_app

from conftest import make_page, make_response


@pytest.fixture
def gateway():
    gateway = Mock()
    gateway.list_movies = AsyncMock(return_value=make_page(1, count=2, total_pages=3))
    gateway.movie_details = AsyncMock(return_value={"id": 550, "title": "Fight Club"})
    gateway.search_movies = AsyncMock(return_value=ListPage.empty())
    gateway.stats.return_value = {"size": 0, "upstream_calls": 0}
    gateway.invalidate_category.return_value = 2
    return gateway


@pytest.fixture
def http(gateway):
    with TestClient(create_app(gateway=gateway, admin_token="admin")) as client:
        yield client


def test_health(http):
    assert http.get("/").json()["status"] == "ok"
    assert http.get("/health").json() == {"status": "ok", "service": "movie-catalog"}


def test_list_movies(http, gateway):
    resp = http.get("/movies/top_rated", params={"page": 1})

    assert resp.status_code == 200
    body = resp.json()
    assert body["category"] == "top_rated"
    assert body["total_pages"] == 3
    assert len(body["results"]) == 2
    gateway.list_movies.assert_awaited_once_with(MovieCategory.TOP_RATED, 1)


def test_unknown_category_rejected(http):
    assert http.get("/movies/trending").status_code == 422


def test_movie_detail(http):
    assert http.get("/movie/550").json()["title"] == "Fight Club"


@pytest.mark.parametrize(
    "kind, status_code",
    [
        (ErrorKind.NOT_FOUND, 404),
        (ErrorKind.RATE_LIMITED, 429),
        (ErrorKind.TIMEOUT, 504),
        (ErrorKind.SERVER_ERROR, 502),
        (ErrorKind.UNAUTHORIZED, 502),
    ],
)
def test_upstream_errors_mapped(http, gateway, kind, status_code):
    gateway.movie_details.side_effect = CatalogError(kind)

    resp = http.get("/movie/1")

    assert resp.status_code == status_code
    assert resp.json()["detail"]["kind"] == kind.value


def test_search(http, gateway):
    resp = http.get("/search", params={"query": " heat ", "page": 1})

    assert resp.status_code == 200
    assert resp.json()["query"] == "heat"
    gateway.search_movies.assert_awaited_once_with(" heat ", 1)


def test_admin_requires_token(http, gateway):
    assert http.post("/admin/cache/clear").status_code == 401
    assert http.post("/admin/cache/clear", headers={"X-Admin-Token": "wrong"}).status_code == 401
    gateway.invalidate_all.assert_not_called()


def test_admin_clear_and_stats(http, gateway):
    headers = {"X-Admin-Token": "admin"}

    assert http.post("/admin/cache/clear", headers=headers).json() == {"ok": True}
    gateway.invalidate_all.assert_called_once()

    assert http.get("/admin/cache/stats", headers=headers).json() == {"size": 0, "upstream_calls": 0}

    resp = http.post("/admin/cache/invalidate/upcoming", headers=headers)
    assert resp.json() == {"ok": True, "category": "upcoming", "removed": 2}


def test_admin_without_configured_token(gateway):
    with TestClient(create_app(gateway=gateway)) as client:
        assert client.get("/admin/cache/stats", headers={"X-Admin-Token": "x"}).status_code == 500


def test_admin_clear_resets_stats(session):
    session.get.return_value = make_response(200, {"page": 1, "results": [], "total_pages": 1, "total_results": 0})
    client = HttpClient("https://api.example.test/3", "secret-key-1234", session=session)
    gateway = CatalogGateway(client, ResponseCache())
    headers = {"X-Admin-Token": "admin"}

    with TestClient(create_app(gateway=gateway, admin_token="admin")) as http:
        http.get("/movies/popular")
        http.get("/movies/popular")
        before = http.get("/admin/cache/stats", headers=headers).json()
        http.post("/admin/cache/clear", headers=headers)
        after = http.get("/admin/cache/stats", headers=headers).json()

    assert (before["upstream_calls"], before["hits"], before["size"]) == (1, 1, 1)
    assert (after["upstream_calls"], after["hits"], after["misses"], after["size"]) == (0, 0, 0, 0)
