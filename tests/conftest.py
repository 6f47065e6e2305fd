"""Shared fixtures for catalog client tests."""

from unittest.mock import MagicMock

import pytest

from cache_store import ResponseCache
from catalog_types import ListPage
from gateway import CatalogGateway
from http_client import HttpClient


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_movies(page: int, count: int = 20):
    """Create `count` movie records whose ids encode the page."""
    return [{"id": page * 1000 + i, "title": f"Movie {page}-{i}"} for i in range(count)]


def make_page(page: int, count: int = 20, total_pages: int = 5) -> ListPage:
    return ListPage(
        page=page,
        results=make_movies(page, count),
        total_pages=total_pages,
        total_results=total_pages * count,
    )


def make_response(status_code: int = 200, payload=None):
    """Create a mock requests.Response."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.content = b"{}"
    if isinstance(payload, Exception):
        resp.json.side_effect = payload
    else:
        resp.json.return_value = payload if payload is not None else {}
    return resp


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return ResponseCache(ttl_seconds=300, clock=clock)


@pytest.fixture
def session():
    """Mock requests.Session; tests set session.get.return_value/side_effect."""
    return MagicMock()


@pytest.fixture
def client(session):
    return HttpClient("https://api.example.test/3", "secret-key-1234", timeout=1.0, session=session)


@pytest.fixture
def gateway(client, cache):
    return CatalogGateway(client, cache, image_base_url="https://img.example.test/t/p")
