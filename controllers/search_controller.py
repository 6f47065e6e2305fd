from __future__ import annotations
import asyncio
import logging
from typing import Set

from cancellation import InFlightRequestToken
from catalog_types import ListPage
from debounce import Debouncer
from gateway import CatalogGateway

from .base import PaginatedController

logger = logging.getLogger(__name__)

DEFAULT_QUIET_PERIOD_SECONDS = 0.5


class DebouncedSearchController(PaginatedController):
    """
    Live search: raw keystrokes go through a Debouncer, and only a changed
    debounced query restarts the result list at page 1.

    `query` is what the user typed; `debounced_query` is what results are for.
    """

    def __init__(self, gateway: CatalogGateway, quiet_period: float = DEFAULT_QUIET_PERIOD_SECONDS) -> None:
        super().__init__(gateway)
        self.query = ""
        self.debounced_query = ""
        self._debouncer: Debouncer[str] = Debouncer(quiet_period, self._on_quiet)
        self._search_tasks: Set[asyncio.Task] = set()

    def _describe(self) -> str:
        return f"search[{self.debounced_query!r}]"

    async def _fetch_page(self, page: int, token: InFlightRequestToken) -> ListPage:
        return await self.gateway.search_movies(self.debounced_query, page, cancellation_token=token)

    def set_query(self, text: str) -> None:
        self.query = text or ""
        self._debouncer.push(self.query)

    def _on_quiet(self, text: str) -> None:
        query = text.strip()
        if query == self.debounced_query:
            return
        logger.info("SEARCH QUERY → %r -> %r", self.debounced_query, query)
        self.debounced_query = query
        if not query:
            self.reset()
            return
        # Superseded tasks keep running until their token-cancelled call returns.
        task = asyncio.get_running_loop().create_task(self.initialize())
        self._search_tasks.add(task)
        task.add_done_callback(self._search_tasks.discard)

    async def initialize(self) -> None:
        if not self.debounced_query:
            self.reset()
            return
        await super().initialize()

    def clear(self) -> None:
        """Drop the typed query, any pending timer, and the results."""
        self._debouncer.cancel()
        self.query = ""
        self.debounced_query = ""
        self.reset()

    async def settle(self) -> None:
        """Wait until no debounce timer or search task is outstanding."""
        while True:
            pending = [task for task in self._search_tasks if not task.done()]
            if self._debouncer.pending:
                pending.append(self._debouncer.task)
            if not pending:
                return
            await asyncio.wait(pending)

    def close(self) -> None:
        self._debouncer.cancel()
        super().close()
        for task in list(self._search_tasks):
            task.cancel()
