"""Transport interface.

This is the (small) contract that transport bindings should follow. It lives
outside :mod:`elko.protocol` so the protocol remains transport-agnostic, and
outside :mod:`elko.connection` so that a binding knows nothing about sequence
numbers or sessions: it moves text and reports failure, nothing more.

There are two capability sets. A polling binding issues independent
request/response exchanges, and must allow a long-poll GET and a POST to be
in flight at the same time. A duplex binding holds one persistent channel
over which frames travel in both directions, in order.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional


# Transport agnostic exceptions

class TransportError(Exception):
    """Base class for all transport-layer errors.

    The *status* is a short tag identifying the problem, suitable for
    passing along as the error identifier of a connection failure.
    """

    def __init__(self, message: str, status: str = "error"):
        super().__init__(message)
        self.status = status


class TransportConnectionError(TransportError):
    """The transport could not establish or maintain a connection."""


class TransportClosed(TransportError):
    """The remote end closed a duplex channel in an orderly fashion."""

    def __init__(self, message: str = "connection closed", status: str = "closed"):
        super().__init__(message, status)


class Polling(ABC):
    """Minimal contract for a request/response transport."""

    protocol = "http"

    @abstractmethod
    async def get(self, url: str, long_poll: bool = False) -> str:
        """Issue a GET and return the response body as text.

        *long_poll* marks a select request, which the server may hold open
        for an extended period.
        """

    @abstractmethod
    async def post(self, url: str, body: str) -> str:
        """Issue a POST with a text/plain *body*; return the response body."""

    async def close(self) -> None:
        """Release any pooled resources."""


class Duplex(ABC):
    """Minimal contract for a persistent, ordered, bidirectional channel."""

    protocol: Optional[str] = None

    @abstractmethod
    async def open(self) -> None:
        """Establish the underlying connection/socket."""

    @abstractmethod
    async def send(self, text: str) -> None:
        """Send one outbound frame."""

    @abstractmethod
    async def recv(self) -> str:
        """Receive the next inbound frame.

        Raises :class:`TransportClosed` once the channel has been closed,
        from either end.
        """

    @abstractmethod
    async def close(self) -> None:
        """Tear down the underlying connection/socket."""

    @property
    def is_open(self) -> bool:
        """Whether the transport is currently connected."""
        return False
