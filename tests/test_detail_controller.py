"""Tests for MovieDetailController."""

import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from catalog_types import CatalogError, ErrorKind, RequestStatus
from controllers import MovieDetailController


@pytest.mark.asyncio
async def test_load_success():
    gateway = Mock()
    gateway.movie_details = AsyncMock(return_value={"id": 550, "title": "Fight Club"})
    controller = MovieDetailController(gateway)

    await controller.load(550)

    assert controller.status is RequestStatus.SUCCESS
    assert controller.movie == {"id": 550, "title": "Fight Club"}


@pytest.mark.asyncio
async def test_not_found_sets_error():
    gateway = Mock()
    gateway.movie_details = AsyncMock(side_effect=CatalogError(ErrorKind.NOT_FOUND, status_code=404))
    controller = MovieDetailController(gateway)

    await controller.load(1)

    assert controller.status is RequestStatus.ERROR
    assert controller.error_message == "Resource not found."
    assert controller.movie is None


@pytest.mark.asyncio
async def test_refetch_keeps_record_on_failure():
    gateway = Mock()
    gateway.movie_details = AsyncMock(side_effect=[{"id": 7}, CatalogError(ErrorKind.TIMEOUT)])
    controller = MovieDetailController(gateway)
    await controller.load(7)

    await controller.refetch()

    assert controller.status is RequestStatus.ERROR
    assert controller.movie == {"id": 7}


@pytest.mark.asyncio
async def test_switching_movies_discards_stale_detail():
    gate = asyncio.Event()

    async def movie_details(movie_id, cancellation_token=None):
        if movie_id == 1:
            await gate.wait()
        return {"id": movie_id}

    gateway = Mock()
    gateway.movie_details = movie_details
    controller = MovieDetailController(gateway)

    first = asyncio.ensure_future(controller.load(1))
    await asyncio.sleep(0)
    await controller.load(2)
    gate.set()
    await first

    assert controller.movie_id == 2
    assert controller.movie == {"id": 2}
    assert controller.status is RequestStatus.SUCCESS
