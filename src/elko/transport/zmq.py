"""ZeroMQ transport binding.

ZeroMQ traffic to and from an elko server is one-way per socket. The server
listens for messages on a PULL socket (or subscribes to a PUB socket), and
delivers messages of its own by connecting a PUSH socket to a listener (or
by publishing on a PUB socket). A client therefore needs two sockets:

- a PUSH socket connected to the server's PULL address, for everything the
  client sends;
- optionally, an inbound socket for what the server sends. It is named by an
  *inbound* address: ``SUB:host:port`` connects a SUB socket to the server's
  PUB address, and ``PULL:port`` binds a PULL socket locally for the server
  to push to. A bare address is taken as ``SUB:``, matching the server's
  own default.

Without an inbound address the binding is send-only, and :func:`Binding.recv`
waits until the binding is closed.

Framing follows the server's byte-stream framer: each message is terminated
by a blank line. An inbound blob may carry several messages, and may carry
trailing NUL padding; both are handled here so that :func:`Binding.recv`
always returns exactly one message text.
"""

from __future__ import annotations

import asyncio
import collections
import logging
from typing import Deque, Optional, Tuple

import zmq
import zmq.asyncio

from .base import Duplex, TransportClosed, TransportConnectionError

logger = logging.getLogger(__name__)

zmq_context = zmq.asyncio.Context.instance()

_TERMINATOR = "\n\n"


def frame(body: str) -> bytes:
    """Convert a newline-joined batch of message texts to ZeroMQ framing."""

    lines = [line for line in body.split("\n") if line.strip()]
    return "".join(line + _TERMINATOR for line in lines).encode("utf-8")


def unframe(blob: bytes) -> list:
    """Split one received blob into individual message texts."""

    text = blob.rstrip(b"\0").decode("utf-8")
    return [piece.strip() for piece in text.split(_TERMINATOR) if piece.strip()]


def inbound_address(inbound: str) -> Tuple[int, str]:
    """Return the socket type and endpoint for an *inbound* address.

    ``SUB:host:port`` (or a bare ``host:port``) connects a SUB socket to
    ``tcp://host:port``; ``PULL:port`` or ``PULL:host:port`` binds a PULL
    socket on ``tcp://*:port``.
    """

    if inbound.startswith("PULL:"):
        port = inbound[len("PULL:"):].rsplit(":", 1)[-1]
        if not port.isdigit():
            raise ValueError(f"PULL address needs a port: {inbound!r}")
        return zmq.PULL, f"tcp://*:{port}"

    if inbound.startswith("SUB:"):
        inbound = inbound[len("SUB:"):]

    if not inbound.startswith("tcp://"):
        inbound = "tcp://" + inbound

    return zmq.SUB, inbound


class Binding(Duplex):
    """Send to an elko server's ZeroMQ PULL listener via a PUSH socket, and
    optionally receive via a SUB or PULL socket named by *inbound*.
    """

    protocol = "zmq"

    def __init__(self, url: str, inbound: Optional[str] = None):
        if not url.startswith("tcp://"):
            url = "tcp://" + url
        self.url = url
        self.inbound = inbound
        self.push = None
        self.pull = None
        self._closed = asyncio.Event()
        self._pending: Deque[str] = collections.deque()

        if inbound is not None:
            # Reject a bad address now rather than at open time.
            inbound_address(inbound)

    @property
    def is_open(self) -> bool:
        return self.push is not None

    async def open(self) -> None:
        push = zmq_context.socket(zmq.PUSH)
        push.setsockopt(zmq.LINGER, 0)

        try:
            push.connect(self.url)
        except zmq.ZMQError as exc:
            push.close()
            raise TransportConnectionError(f"cannot connect to {self.url}: {exc}", "error") from exc

        pull = None

        if self.inbound is not None:
            kind, endpoint = inbound_address(self.inbound)
            pull = zmq_context.socket(kind)
            pull.setsockopt(zmq.LINGER, 0)

            try:
                if kind == zmq.SUB:
                    pull.setsockopt(zmq.SUBSCRIBE, b"")
                    pull.connect(endpoint)
                else:
                    pull.bind(endpoint)
            except zmq.ZMQError as exc:
                pull.close()
                push.close()
                raise TransportConnectionError(f"cannot listen on {endpoint}: {exc}", "error") from exc

            logger.debug("receiving ZeroMQ messages via %s", endpoint)

        self.push = push
        self.pull = pull

    async def send(self, text: str) -> None:
        if self.push is None:
            raise TransportConnectionError("ZeroMQ socket is not open", "closed")
        try:
            await self.push.send(frame(text))
        except zmq.ZMQError as exc:
            raise TransportConnectionError(f"ZeroMQ send failure: {exc}", "error") from exc

    async def recv(self) -> str:
        while not self._pending:
            socket = self.pull
            if socket is None:
                # Send-only: nothing will ever arrive.
                await self._closed.wait()
                raise TransportClosed()
            try:
                blob = await socket.recv()
            except zmq.ZMQError as exc:
                if self.pull is None:
                    raise TransportClosed() from exc
                raise TransportConnectionError(f"ZeroMQ receive failure: {exc}", "error") from exc
            self._pending.extend(unframe(blob))

        return self._pending.popleft()

    async def close(self) -> None:
        push, pull = self.push, self.pull
        self.push = None
        self.pull = None
        self._pending.clear()
        self._closed.set()
        for socket in (push, pull):
            if socket is not None:
                socket.close(linger=0)
