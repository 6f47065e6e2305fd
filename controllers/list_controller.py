from __future__ import annotations
import logging

from cancellation import InFlightRequestToken
from catalog_types import ListPage, MovieCategory
from gateway import CatalogGateway

from .base import PaginatedController

logger = logging.getLogger(__name__)


class PaginatedListController(PaginatedController):
    """Incremental loading for one movie category."""

    def __init__(self, gateway: CatalogGateway, category: MovieCategory = MovieCategory.NOW_PLAYING) -> None:
        super().__init__(gateway)
        self.category = MovieCategory(category)

    def _describe(self) -> str:
        return f"list[{self.category.value}]"

    async def _fetch_page(self, page: int, token: InFlightRequestToken) -> ListPage:
        return await self.gateway.list_movies(self.category, page, cancellation_token=token)

    async def set_category(self, category: MovieCategory) -> None:
        """Switch to another category; anything in flight for the old one is cancelled."""
        category = MovieCategory(category)
        logger.info("LIST SWITCH → %s -> %s", self.category.value, category.value)
        self.reset()
        self.category = category
        await self._load(1)
