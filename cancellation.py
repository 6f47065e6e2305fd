"""
Cooperative cancellation handles for in-flight catalog requests.

A controller owns one RequestSlot. Every new request takes a fresh token from
the slot, which cancels whatever token was current before. When the old call
eventually completes, the owner checks `slot.is_current(token)` and drops the
result if it is not.
"""
from __future__ import annotations
import asyncio
import itertools
from typing import Optional

from catalog_types import RequestCancelled

_generation = itertools.count(1)


class InFlightRequestToken:
    """Cancellation handle tied to one outstanding call."""

    def __init__(self) -> None:
        self.generation = next(_generation)
        self._event: Optional[asyncio.Event] = None
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True
        if self._event is not None:
            self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise RequestCancelled()

    async def wait(self) -> None:
        """Return once the token is cancelled."""
        if self._cancelled:
            return
        if self._event is None:
            self._event = asyncio.Event()
        await self._event.wait()

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else "active"
        return f"<InFlightRequestToken #{self.generation} {state}>"


class RequestSlot:
    """Holds the single current token for one logical slot (a list, a search box)."""

    def __init__(self) -> None:
        self._current: Optional[InFlightRequestToken] = None

    def issue(self) -> InFlightRequestToken:
        self.cancel()
        self._current = InFlightRequestToken()
        return self._current

    def is_current(self, token: InFlightRequestToken) -> bool:
        return token is self._current and not token.cancelled

    def release(self, token: InFlightRequestToken) -> None:
        if token is self._current:
            self._current = None

    def cancel(self) -> None:
        if self._current is not None:
            self._current.cancel()
            self._current = None
