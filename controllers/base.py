from __future__ import annotations
import logging
from typing import List, Optional

from cancellation import InFlightRequestToken, RequestSlot
from catalog_types import CatalogError, ListPage, PaginatedListState, RequestCancelled, RequestStatus
from catalog_types.pages import Movie
from gateway import CatalogGateway

logger = logging.getLogger(__name__)


class PaginatedController:
    """
    Shared "fetch page 1, then append page N" mechanics.

    Subclasses decide what a page request is (_fetch_page) and when the
    target changes. Every request goes through one RequestSlot, so a response
    for a superseded request is dropped instead of merged.
    """

    def __init__(self, gateway: CatalogGateway) -> None:
        self.gateway = gateway
        self.state = PaginatedListState()
        self.error_message: Optional[str] = None
        self._slot = RequestSlot()

    @property
    def items(self) -> List[Movie]:
        return self.state.items

    @property
    def status(self) -> RequestStatus:
        return self.state.status

    @property
    def current_page(self) -> int:
        return self.state.current_page

    @property
    def total_pages(self) -> int:
        return self.state.total_pages

    @property
    def has_more(self) -> bool:
        return self.state.has_more

    async def _fetch_page(self, page: int, token: InFlightRequestToken) -> ListPage:
        raise NotImplementedError

    def _describe(self) -> str:
        return type(self).__name__

    def reset(self) -> None:
        """Cancel anything in flight and go back to an empty, idle list."""
        self._slot.cancel()
        self.state.reset()
        self.error_message = None

    async def initialize(self) -> None:
        self.reset()
        await self._load(1)

    async def refetch(self) -> None:
        await self.initialize()

    async def load_more(self) -> None:
        if self.state.status is RequestStatus.LOADING or not self.state.has_more:
            return
        await self._load(self.state.current_page + 1)

    def close(self) -> None:
        self._slot.cancel()

    async def _load(self, page: int) -> None:
        token = self._slot.issue()
        self.state.status = RequestStatus.LOADING
        self.error_message = None
        try:
            try:
                result = await self._fetch_page(page, token)
            except RequestCancelled:
                logger.debug("%s page %s cancelled", self._describe(), page)
                return
            except CatalogError as e:
                if not self._slot.is_current(token):
                    logger.debug("%s page %s failed after being superseded", self._describe(), page)
                    return
                self.state.status = RequestStatus.ERROR
                self.error_message = e.message
                logger.warning("%s page %s failed: %s (%s)", self._describe(), page, e.message, e.kind.value)
                return

            if not self._slot.is_current(token):
                logger.debug("STALE RESPONSE → %s page %s discarded", self._describe(), page)
                return

            if page == 1:
                self.state.items = list(result.results)
            else:
                self.state.items.extend(result.results)
            self.state.current_page = page
            self.state.total_pages = result.total_pages
            self.state.status = RequestStatus.SUCCESS
        finally:
            self._slot.release(token)
