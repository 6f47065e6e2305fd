from __future__ import annotations
import logging
from typing import Any, Dict, Optional

from cancellation import RequestSlot
from catalog_types import CatalogError, RequestCancelled, RequestStatus
from gateway import CatalogGateway

logger = logging.getLogger(__name__)


class MovieDetailController:
    """Loads one movie's detail record; switching movies cancels the previous load."""

    def __init__(self, gateway: CatalogGateway) -> None:
        self.gateway = gateway
        self.movie_id: Optional[int] = None
        self.movie: Optional[Dict[str, Any]] = None
        self.status = RequestStatus.IDLE
        self.error_message: Optional[str] = None
        self._slot = RequestSlot()

    async def load(self, movie_id: int) -> None:
        if movie_id != self.movie_id:
            self.movie = None
        self.movie_id = movie_id
        token = self._slot.issue()
        self.status = RequestStatus.LOADING
        self.error_message = None
        try:
            movie = await self.gateway.movie_details(movie_id, cancellation_token=token)
        except RequestCancelled:
            return
        except CatalogError as e:
            if self._slot.is_current(token):
                self.status = RequestStatus.ERROR
                self.error_message = e.message
                logger.warning("detail[%s] failed: %s (%s)", movie_id, e.message, e.kind.value)
            return
        else:
            if not self._slot.is_current(token):
                logger.debug("STALE RESPONSE → detail[%s] discarded", movie_id)
                return
            self.movie = movie
            self.status = RequestStatus.SUCCESS
        finally:
            self._slot.release(token)

    async def refetch(self) -> None:
        if self.movie_id is not None:
            await self.load(self.movie_id)

    def close(self) -> None:
        self._slot.cancel()
