"""Long-poll transport binding using an asynchronous httpx client.

One :class:`httpx.AsyncClient` serves every request issued by a connection;
its connection pool allows the long-poll select to stay open while xmit
requests come and go alongside it.
"""

import logging
from typing import Optional

import httpx

from .base import Polling, TransportConnectionError

logger = logging.getLogger(__name__)

# Applies to everything except select requests.
default_timeout = 30.0


class Binding(Polling):
    """Polling binding built on httpx.

    One client serves every request; a select with no *poll_timeout* is
    never bounded by the client. A preconfigured *client* (for example one
    using a mock transport) may be supplied, and is closed by :func:`close`.
    """

    def __init__(
        self,
        poll_timeout: Optional[float] = None,
        timeout: float = default_timeout,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._poll_timeout = poll_timeout
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def get(self, url: str, long_poll: bool = False) -> str:
        if long_poll:
            timeout = self._poll_timeout
        else:
            timeout = httpx.USE_CLIENT_DEFAULT

        return await self._request("GET", url, timeout=timeout)

    async def post(self, url: str, body: str) -> str:
        return await self._request(
            "POST",
            url,
            content=body.encode("utf-8"),
            headers={"Content-Type": "text/plain"},
        )

    async def _request(self, method: str, url: str, **kwargs) -> str:
        """Issue one request and return the body as text.

        Any network failure or HTTP error status raises
        :class:`TransportConnectionError`, tagged with the numeric HTTP status
        where there is one.
        """
        logger.debug("%s %s", method, url)

        try:
            response = await self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise TransportConnectionError(f"{method} {url} timed out", "timeout") from e
        except httpx.HTTPStatusError as e:
            code = e.response.status_code
            raise TransportConnectionError(f"{method} {url}: HTTP error {code}", str(code)) from e
        except httpx.RequestError as e:
            raise TransportConnectionError(f"{method} {url}: {e}", "error") from e

        return response.text

    async def close(self) -> None:
        await self._client.aclose()
