"""Duplex transport binding over a WebSocket, using :mod:`websockets`.

Each outbound frame is a batch of newline-joined message texts; each inbound
frame is expected to hold exactly one JSON message. The transport itself
guarantees order and delivery, so no sequence numbers are involved.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import websockets
from websockets.exceptions import ConnectionClosed, ConnectionClosedOK, WebSocketException

from .base import Duplex, TransportClosed, TransportConnectionError

logger = logging.getLogger(__name__)


def normalize(url: str) -> str:
    """Rewrite an http:// root, or a bare host:port, to a ws:// URL."""

    if url.startswith("http://"):
        return "ws://" + url[len("http://"):]
    if url.startswith("https://"):
        return "wss://" + url[len("https://"):]
    if url.startswith(("ws://", "wss://")):
        return url
    return "ws://" + url


class Binding(Duplex):
    """WebSocket client channel."""

    protocol = "ws"

    def __init__(self, url: str):
        self.url = normalize(url)
        self._socket = None

    @property
    def is_open(self) -> bool:
        return self._socket is not None

    async def open(self) -> None:
        logger.debug("opening WebSocket %s", self.url)
        try:
            self._socket = await websockets.connect(self.url)
        except (OSError, asyncio.TimeoutError, WebSocketException) as e:
            raise TransportConnectionError(f"WebSocket open failure: {e}", "error") from e

    async def send(self, text: str) -> None:
        if self._socket is None:
            raise TransportConnectionError("WebSocket is not open", "closed")
        try:
            await self._socket.send(text)
        except ConnectionClosed as e:
            raise TransportConnectionError(f"WebSocket send failure: {e}", "closed") from e

    async def recv(self) -> str:
        socket = self._socket
        if socket is None:
            raise TransportClosed()
        try:
            frame = await socket.recv()
        except ConnectionClosedOK as e:
            raise TransportClosed() from e
        except ConnectionClosed as e:
            raise TransportConnectionError(f"WebSocket error: {e}", "error") from e

        if isinstance(frame, bytes):
            frame = frame.decode("utf-8")
        return frame

    async def close(self) -> None:
        socket: Optional[object] = self._socket
        self._socket = None
        if socket is not None:
            await socket.close()
