# http_client.py
import asyncio
import logging
from typing import Any, Mapping, Optional

import requests

from cancellation import InFlightRequestToken
from catalog_types import CatalogError, ConfigurationError, ErrorKind, RequestCancelled

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0
CREDENTIAL_PARAM = "api_key"

_STATUS_KINDS = {
    401: ErrorKind.UNAUTHORIZED,
    404: ErrorKind.NOT_FOUND,
    429: ErrorKind.RATE_LIMITED,
}


def _mask_token(token: Optional[str]) -> str:
    if not token:
        return "None"
    return f"{token[:4]}…{token[-4:]}" if len(token) > 8 else "****"


def error_for_status(status_code: int, body: Any = None) -> CatalogError:
    """Map a non-2xx HTTP status to the closed error taxonomy."""
    kind = _STATUS_KINDS.get(status_code)
    if kind is None and 500 <= status_code < 600:
        kind = ErrorKind.SERVER_ERROR
    if kind is not None:
        return CatalogError(kind, status_code=status_code)
    message = body.get("status_message") if isinstance(body, dict) else None
    return CatalogError(ErrorKind.UNKNOWN, message, status_code=status_code)


class HttpClient:
    """
    Pure transport for the catalog API.

    `requests` does the I/O in a worker thread; the awaiting coroutine is
    bounded by `timeout` and gives up early when its cancellation token fires.
    Failures always surface as CatalogError.
    """

    def __init__(
        self,
        base_url: Optional[str],
        api_key: Optional[str],
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not base_url or not base_url.strip():
            raise ConfigurationError("Catalog API base URL is not configured")
        if not api_key or not api_key.strip():
            raise ConfigurationError("Catalog API key is not configured")
        if timeout <= 0:
            raise ConfigurationError("Request timeout must be positive")
        self.base_url = base_url.strip().rstrip("/")
        self._api_key = api_key.strip()
        self.timeout = timeout
        self._session = session or requests.Session()

        logger.info(
            "HTTP CLIENT INIT → base_url=%s api_key=%s timeout=%ss",
            self.base_url, _mask_token(self._api_key), self.timeout,
        )

    def build_url(self, path: str, query_params: Optional[Mapping[str, Any]] = None) -> str:
        """
        Credential first, then the extra params in the order given.
        Booleans are serialized lowercase so the API reads them as flags.
        """
        params = [(CREDENTIAL_PARAM, self._api_key)]
        for name, value in (query_params or {}).items():
            if isinstance(value, bool):
                value = str(value).lower()
            params.append((name, value))
        if not path.startswith("/"):
            path = "/" + path
        prepared = requests.Request("GET", f"{self.base_url}{path}", params=params).prepare()
        return prepared.url

    def _masked(self, url: str) -> str:
        return url.replace(self._api_key, _mask_token(self._api_key))

    def _send(self, url: str) -> Any:
        """Blocking half of get(); runs in a worker thread."""
        try:
            resp = self._session.get(url, timeout=self.timeout)
        except requests.Timeout as e:
            raise CatalogError(ErrorKind.TIMEOUT) from e
        except requests.ConnectionError as e:
            raise CatalogError(ErrorKind.NETWORK_UNREACHABLE) from e
        except requests.RequestException as e:
            raise CatalogError(ErrorKind.UNKNOWN, str(e) or None) from e

        logger.info("UPSTREAM CALLED → url=%s status=%s bytes≈%s",
                    self._masked(url), resp.status_code, len(resp.content or b""))

        if 200 <= resp.status_code < 300:
            try:
                return resp.json()
            except ValueError as e:
                raise CatalogError(ErrorKind.UNKNOWN, "Malformed response from catalog API.",
                                   status_code=resp.status_code) from e

        try:
            body = resp.json()
        except ValueError:
            body = None
        raise error_for_status(resp.status_code, body)

    async def get(
        self,
        path: str,
        query_params: Optional[Mapping[str, Any]] = None,
        cancellation_token: Optional[InFlightRequestToken] = None,
    ) -> Any:
        """
        GET `path` and return the decoded JSON body.

        Raises CatalogError (TIMEOUT, NETWORK_UNREACHABLE, UNAUTHORIZED,
        NOT_FOUND, RATE_LIMITED, SERVER_ERROR, UNKNOWN) or RequestCancelled
        when `cancellation_token` fires first.
        """
        if cancellation_token is not None:
            cancellation_token.raise_if_cancelled()

        url = self.build_url(path, query_params)
        logger.debug("UPSTREAM CALL → url=%s", self._masked(url))

        transport = asyncio.ensure_future(asyncio.to_thread(self._send, url))
        waiters = {transport}
        cancel_waiter = None
        if cancellation_token is not None:
            cancel_waiter = asyncio.ensure_future(cancellation_token.wait())
            waiters.add(cancel_waiter)

        try:
            done, _ = await asyncio.wait(waiters, timeout=self.timeout, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            transport.cancel()
            raise
        finally:
            if cancel_waiter is not None:
                cancel_waiter.cancel()

        if transport in done:
            # A cancelled caller never sees the outcome, even if it arrived.
            if cancellation_token is not None and cancellation_token.cancelled:
                transport.exception()
                raise RequestCancelled()
            return transport.result()

        transport.cancel()
        if cancellation_token is not None and cancellation_token.cancelled:
            logger.debug("UPSTREAM CANCELLED → url=%s", self._masked(url))
            raise RequestCancelled()

        logger.warning("UPSTREAM TIMEOUT → url=%s after %ss", self._masked(url), self.timeout)
        raise CatalogError(ErrorKind.TIMEOUT)

    def close(self) -> None:
        self._session.close()
